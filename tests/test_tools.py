import os
import subprocess
import sys

import pytest

from appimagehelpers import tools


def make_tool(directory, name, script):
    path = directory / name
    path.write_text("#!/bin/sh\n" + script + "\n")
    path.chmod(0o755)
    return path


def test_run_cmd_transparently_runs_command(tmp_path):
    target = tmp_path / "out.txt"
    tools.run_cmd_transparently(["sh", "-c", f"printf done > '{target}'"])
    assert target.read_text() == "done"


def test_run_cmd_transparently_raises_on_failure():
    with pytest.raises(subprocess.CalledProcessError) as info:
        tools.run_cmd_transparently(["sh", "-c", "exit 3"])
    assert info.value.returncode == 3


def test_run_cmd_transparently_empty_command():
    with pytest.raises(ValueError):
        tools.run_cmd_transparently([])


def test_run_cmd_string_transparently(tmp_path):
    target = tmp_path / "created"
    tools.run_cmd_string_transparently(f"touch {target}")
    assert target.exists()


def test_here_holds_running_interpreter():
    result = tools.here()
    interpreter = os.path.realpath(sys.executable)
    assert os.path.isabs(result)
    assert os.path.join(result, os.path.basename(interpreter)) == interpreter


def test_here_args0_and_args0(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["/opt/app/bin/tool"])
    assert tools.here_args0() == "/opt/app/bin"
    assert tools.args0() == "/opt/app/bin/tool"


def test_add_dirs_to_path_prepends_in_turn(tmp_path, monkeypatch):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    make_tool(first, "tool-in-first", "exit 0")
    make_tool(second, "tool-in-second", "exit 0")
    monkeypatch.setenv("PATH", "/usr/bin")
    assert tools.is_command_available("tool-in-first") is False
    tools.add_dirs_to_path([str(first), str(second)])
    assert os.environ["PATH"] == f"{second}:{first}:/usr/bin"
    assert tools.is_command_available("tool-in-first") is True
    assert tools.is_command_available("tool-in-second") is True


def test_add_here_to_path(monkeypatch):
    monkeypatch.setenv("PATH", "/usr/bin")
    tools.add_here_to_path()
    assert os.environ["PATH"] == f"{tools.here()}:/usr/bin"


def test_is_command_available(tmp_path, monkeypatch):
    make_tool(tmp_path, "fake-helper", "exit 0")
    monkeypatch.setenv("PATH", str(tmp_path))
    assert tools.is_command_available("fake-helper") is True
    assert tools.is_command_available("no-such-helper-tool") is False


def test_check_for_needed_tools_raises_for_missing(tmp_path, monkeypatch):
    make_tool(tmp_path, "present-tool", "exit 0")
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(tools.ToolMissingError):
        tools.check_for_needed_tools(["present-tool", "absent-tool"])


def test_check_if_all_tools_are_present_exits(tmp_path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(SystemExit) as info:
        tools.check_if_all_tools_are_present(["absent-tool"])
    assert "absent-tool" in str(info.value.code)


@pytest.mark.parametrize(
    "output,expected",
    [
        ("mksquashfs version 4.5.1 (2022/03/17)", True),
        ("unsquashfs version 4.4-git (2019/08/29)", True),
        ("mksquashfs version 4.3-git (2014/06/09)", False),
        ("mksquashfs something else entirely", False),
    ],
)
def test_check_if_squashfs_version_sufficient(tmp_path, output, expected):
    tool = make_tool(tmp_path, "mksquashfs", f"echo '{output}'")
    assert tools.check_if_squashfs_version_sufficient(str(tool)) is expected


def test_check_if_squashfs_version_sufficient_missing_tool(tmp_path):
    assert tools.check_if_squashfs_version_sufficient(str(tmp_path / "missing")) is False


def test_validate_desktop_file_success(tmp_path, monkeypatch):
    make_tool(tmp_path, "desktop-file-validate", 'echo "checked $1"')
    monkeypatch.setenv("PATH", str(tmp_path))
    assert tools.validate_desktop_file("app.desktop") == "checked app.desktop\n"


def test_validate_desktop_file_failure(tmp_path, monkeypatch, capsys):
    make_tool(tmp_path, "desktop-file-validate", 'echo "bad key"; exit 1')
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(subprocess.CalledProcessError):
        tools.validate_desktop_file("app.desktop")
    captured = capsys.readouterr()
    assert "bad key" in captured.out
    assert "Desktop file contains errors" in captured.err


def test_validate_appstream_metainfo_file(tmp_path, monkeypatch):
    make_tool(tmp_path, "appstreamcli", 'echo "$1 $2"')
    monkeypatch.setenv("PATH", str(tmp_path))
    assert tools.validate_appstream_metainfo_file("AppDir") == "validate-tree AppDir\n"


def test_validate_appstream_metainfo_file_failure(tmp_path, monkeypatch):
    make_tool(tmp_path, "appstreamcli", "exit 2")
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(subprocess.CalledProcessError) as info:
        tools.validate_appstream_metainfo_file("AppDir")
    assert info.value.returncode == 2