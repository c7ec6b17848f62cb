from envsource.cli import main

raise SystemExit(main())
