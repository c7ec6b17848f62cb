"""Unit tests for envsource.shell.synthesis and envsource.shell.hooks."""

import os
import shlex
import tempfile
from unittest.mock import patch

import pytest

from envsource.models import ShellInfo, ShellKind
from envsource.shell.detection import CMD_SHELL, detect_user_shell
from envsource.shell.hooks import (
    render_aux_env_block,
    render_setup_script,
    render_toolchain_block,
    write_setup_script,
)
from envsource.shell.synthesis import build_setup_command


@pytest.fixture
def isolated_tempdir(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    return tmp_path


def posix_shell(path):
    return detect_user_shell(platform="linux", environ={"SHELL": path})


class TestPosixCommand:
    def test_bash_forces_login_shell(self):
        plan = build_setup_command("/opt/ros/setup.bash", posix_shell("/bin/bash"), "linux", "", [])
        assert plan.kind is ShellKind.BASH
        assert plan.cleanup_paths == []
        assert shlex.split(plan.command) == [
            "/bin/bash",
            "--login",
            "-c",
            "source /opt/ros/setup.bash && env",
        ]

    def test_sh_uses_dot(self):
        plan = build_setup_command("/tmp/env.sh", posix_shell("/bin/dash"), "linux", "", [])
        assert shlex.split(plan.command) == ["/bin/dash", "--login", "-c", ". /tmp/env.sh && env"]

    def test_zsh_forces_login_shell(self):
        plan = build_setup_command("/tmp/env.zsh", posix_shell("/bin/zsh"), "darwin", "", [])
        assert "--login" in shlex.split(plan.command)

    def test_fish_uses_and_env(self):
        plan = build_setup_command("/tmp/env.fish", posix_shell("/usr/bin/fish"), "linux", "", [])
        assert shlex.split(plan.command) == [
            "/usr/bin/fish",
            "-c",
            "source /tmp/env.fish; and env",
        ]

    def test_csh_has_no_login_flag(self):
        plan = build_setup_command("/tmp/env.csh", posix_shell("/bin/tcsh"), "linux", "", [])
        assert shlex.split(plan.command) == ["/bin/tcsh", "-c", "source /tmp/env.csh && env"]

    def test_quotes_paths_with_spaces_and_quotes(self):
        target = "/home/me/my ws/it's/setup.bash"
        plan = build_setup_command(target, posix_shell("/bin/bash"), "linux", "", [])
        inner = shlex.split(plan.command)[-1]
        assert shlex.split(inner)[:2] == ["source", target]

    def test_reports_command_to_sink(self):
        messages = []
        plan = build_setup_command(
            "/tmp/x.bash", posix_shell("/bin/bash"), "linux", "", [], on_output=messages.append
        )
        assert messages == [f"Sourcing Environment using bash: {plan.command}"]


class TestRenderBatch:
    def test_toolchain_block_short_circuits_on_first_match(self):
        lines = render_toolchain_block(["C:\\A\\vcvarsall.bat", "C:\\B\\vcvarsall.bat"])
        assert lines == [
            'if exist "C:\\A\\vcvarsall.bat" (',
            '    call "C:\\A\\vcvarsall.bat" x64',
            "    goto :toolchain_done",
            ")",
            'if exist "C:\\B\\vcvarsall.bat" (',
            '    call "C:\\B\\vcvarsall.bat" x64',
            "    goto :toolchain_done",
            ")",
            ":toolchain_done",
        ]

    def test_empty_toolchain_block_keeps_label(self):
        assert render_toolchain_block([]) == [":toolchain_done"]

    def test_aux_block_skipped_without_activator(self):
        lines = render_aux_env_block("c:\\pixi_ws", None, "C:\\tmp\\hook.bat")
        assert len(lines) == 1
        assert lines[0].startswith("REM ")

    def test_aux_block_writes_and_calls_hook(self):
        lines = render_aux_env_block("c:\\pixi_ws", "C:\\bin\\pixi.exe", "C:\\tmp\\hook.bat")
        assert 'cd /d "c:\\pixi_ws"' in lines
        assert '"C:\\bin\\pixi.exe" shell-hook > "C:\\tmp\\hook.bat" 2>nul' in lines
        assert '    call "C:\\tmp\\hook.bat"' in lines

    def test_setup_script_order_and_line_endings(self):
        content = render_setup_script(
            "C:\\ws\\install\\setup.bat",
            ["C:\\VS\\vcvarsall.bat"],
            "c:\\pixi_ws",
            "C:\\bin\\pixi.exe",
            "C:\\tmp\\hook.bat",
        )
        lines = content.split("\r\n")
        assert lines[0] == "@echo off"
        toolchain = lines.index(":toolchain_done")
        aux = lines.index('cd /d "c:\\pixi_ws"')
        target = lines.index('call "C:\\ws\\install\\setup.bat"')
        dump = lines.index("set")
        assert toolchain < aux < target < dump
        assert "\n" not in content.replace("\r\n", "")

    def test_write_refuses_existing_path(self, tmp_path):
        path = tmp_path / "taken.bat"
        path.write_text("x")
        with pytest.raises(FileExistsError):
            write_setup_script("@echo off\r\n", str(path))


class TestWindowsPlan:
    @patch("envsource.shell.synthesis.locate_aux_activator", return_value=None)
    def test_writes_temp_batch_and_lists_cleanup(self, _locate, isolated_tempdir):
        messages = []
        plan = build_setup_command(
            "C:\\ws\\setup.bat",
            CMD_SHELL,
            "win32",
            "c:\\pixi_ws",
            ["C:\\VS\\vcvarsall.bat"],
            on_output=messages.append,
        )
        script, hook = plan.cleanup_paths
        assert plan.kind is ShellKind.CMD
        assert plan.command == f'cmd /c "{script}"'
        assert os.path.dirname(script) == str(isolated_tempdir)
        assert os.path.basename(script).startswith("envsource_setup_")
        assert os.path.basename(hook).startswith("envsource_aux_")
        assert not os.path.exists(hook)

        with open(script, encoding="utf-8", newline="") as f:
            content = f.read()
        assert 'call "C:\\VS\\vcvarsall.bat" x64' in content
        assert 'call "C:\\ws\\setup.bat"\r\nset\r\n' in content
        assert any(m.startswith("Skipping pixi environment") for m in messages)
        assert f"Created temporary batch file: {script}" in messages

    @patch("envsource.shell.synthesis.locate_aux_activator", return_value="C:\\bin\\pixi.exe")
    def test_hook_path_is_embedded(self, _locate, isolated_tempdir):
        plan = build_setup_command("C:\\ws\\setup.bat", CMD_SHELL, "win32", "c:\\pixi_ws", [])
        script, hook = plan.cleanup_paths
        with open(script, encoding="utf-8") as f:
            content = f.read()
        assert f'shell-hook > "{hook}"' in content

    @patch("envsource.shell.synthesis.locate_aux_activator", return_value=None)
    def test_concurrent_calls_get_distinct_files(self, _locate, isolated_tempdir):
        first = build_setup_command("a.bat", CMD_SHELL, "win32", "c:\\pixi_ws", [])
        second = build_setup_command("a.bat", CMD_SHELL, "win32", "c:\\pixi_ws", [])
        assert first.cleanup_paths[0] != second.cleanup_paths[0]
        assert first.cleanup_paths[1] != second.cleanup_paths[1]

    @patch("envsource.shell.synthesis.locate_aux_activator", return_value=None)
    @patch("envsource.shell.synthesis.write_setup_script", side_effect=PermissionError("denied"))
    def test_write_failure_falls_back_to_simple_command(self, _write, _locate, isolated_tempdir):
        messages = []
        plan = build_setup_command(
            "C:\\ws\\setup.bat",
            CMD_SHELL,
            "win32",
            "c:\\pixi_ws",
            [],
            on_output=messages.append,
        )
        assert plan.command == 'cmd /c "call "C:\\ws\\setup.bat" && set"'
        assert plan.cleanup_paths == []
        assert any("Failed to create temporary batch file" in m for m in messages)

    def test_posix_shell_info_is_ignored_on_windows(self, isolated_tempdir):
        bash = ShellInfo(ShellKind.BASH, "/bin/bash", ".bash", "source")
        with patch("envsource.shell.synthesis.locate_aux_activator", return_value=None):
            plan = build_setup_command("setup.bat", bash, "win32", "c:\\pixi_ws", [])
        assert plan.kind is ShellKind.CMD
        assert plan.command.startswith("cmd /c ")

    @patch("envsource.shell.synthesis.locate_aux_activator", return_value=None)
    @patch("envsource.shell.synthesis.unique_stamp", return_value="1_2")
    def test_name_collision_leaves_other_file_alone(self, _stamp, _locate, isolated_tempdir):
        taken = isolated_tempdir / "envsource_setup_1_2.bat"
        taken.write_text("owned by another call")
        plan = build_setup_command("a.bat", CMD_SHELL, "win32", "c:\\pixi_ws", [])
        assert plan.command == 'cmd /c "call "a.bat" && set"'
        assert plan.cleanup_paths == []
        assert taken.read_text() == "owned by another call"

    @patch("envsource.shell.synthesis.locate_aux_activator", return_value=None)
    def test_unwritable_content_removes_own_partial_file(self, _locate, isolated_tempdir):
        messages = []
        plan = build_setup_command(
            "C:\\ws\\\udcff.bat",
            CMD_SHELL,
            "win32",
            "c:\\pixi_ws",
            [],
            on_output=messages.append,
        )
        assert plan.cleanup_paths == []
        assert list(isolated_tempdir.iterdir()) == []
        assert any("Failed to create temporary batch file" in m for m in messages)


class TestWriteSetupScript:
    def test_writes_content_verbatim(self, tmp_path):
        path = str(tmp_path / "setup.bat")
        assert write_setup_script("@echo off\r\nset\r\n", path) == path
        with open(path, encoding="utf-8", newline="") as f:
            assert f.read() == "@echo off\r\nset\r\n"

    def test_failed_write_removes_created_file(self, tmp_path):
        path = tmp_path / "setup.bat"
        with pytest.raises(UnicodeEncodeError):
            write_setup_script("call \udcff\r\n", str(path))
        assert not path.exists()
