"""Running external programs and checking for helper tools."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from typing import Iterable

from packaging.version import InvalidVersion, Version

from .fsutil import print_error

logger = logging.getLogger(__name__)

_MINIMUM_SQUASHFS_VERSION = Version("4.4")


class ToolMissingError(FileNotFoundError):
    """Raised when a required helper tool is not on the $PATH."""


def run_cmd_transparently(command: list[str]) -> None:
    """Run ``command`` with the inherited stdin, stdout and stderr; block until done.

    Raises :class:`subprocess.CalledProcessError` on a non-zero exit status.
    """
    if not command:
        raise ValueError("empty command")
    subprocess.run(command, check=True)


def run_cmd_string_transparently(command: str) -> None:
    """Like :func:`run_cmd_transparently`, with the command split on spaces."""
    run_cmd_transparently(command.split(" "))


def here() -> str:
    """Return the directory of the running executable, as seen by /proc/self/exe."""
    try:
        exe = os.readlink("/proc/self/exe")
    except OSError:
        exe = os.path.realpath(sys.executable)
    return os.path.dirname(exe) or "."


def here_args0() -> str:
    """Return the absolute directory of the program named by ``sys.argv[0]``."""
    return os.path.abspath(os.path.dirname(sys.argv[0]))


def args0() -> str:
    """Return the absolute path of the program named by ``sys.argv[0]``."""
    return os.path.abspath(sys.argv[0])


def _prepend_to_path(directory: str) -> None:
    os.environ["PATH"] = f"{directory}:{os.environ.get('PATH', '')}"


def add_dirs_to_path(dirs: Iterable[str]) -> None:
    """Prepend each directory to $PATH in turn (the last one ends up first)."""
    for directory in dirs:
        _prepend_to_path(directory)
    logger.info("PATH: %s", os.environ["PATH"])


def add_here_to_path() -> None:
    """Prepend the directory of the running executable to $PATH."""
    _prepend_to_path(here())


def _run_validator(command: list[str], context: str, message: str) -> str:
    result = subprocess.run(command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
    if result.returncode != 0:
        error = subprocess.CalledProcessError(result.returncode, command, output=result.stdout)
        print_error(context, error)
        sys.stdout.write(result.stdout)
        sys.stderr.write(message)
        raise error
    return result.stdout


def validate_desktop_file(desktopfile: str | os.PathLike) -> str:
    """Validate a desktop file with ``desktop-file-validate``; return its output.

    Raises :class:`subprocess.CalledProcessError` if validation fails.
    """
    return _run_validator(
        ["desktop-file-validate", os.fspath(desktopfile)],
        "desktop-file-validate",
        "ERROR: Desktop file contains errors. Please fix them. "
        "Please see the Desktop Entry Specification\n",
    )


def validate_appstream_metainfo_file(appdirpath: str | os.PathLike) -> str:
    """Validate AppStream metainfo below ``appdirpath`` with ``appstreamcli``; return its output.

    Raises :class:`subprocess.CalledProcessError` if validation fails.
    """
    return _run_validator(
        ["appstreamcli", "validate-tree", os.fspath(appdirpath)],
        "appstreamcli",
        "ERROR: AppStream metainfo file file contains errors. Please fix them. "
        "Please see the AppStream Quickstart guide for desktop applications\n",
    )


def check_if_squashfs_version_sufficient(toolname: str) -> bool:
    """Return True if ``toolname -version`` reports at least version 4.4."""
    try:
        result = subprocess.run(
            [toolname, "-version"], stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True
        )
    except OSError as e:
        print_error(toolname, e)
        return False
    out = result.stdout
    if "version" not in out:
        sys.stdout.write(out)
        return False
    parts = out.split(" ")
    if len(parts) < 3:
        print(f"{toolname}: cannot determine version from {out.strip()!r}")
        return False
    ver = parts[2].split("-")[0]
    try:
        found = Version(ver)
    except InvalidVersion:
        print(f"{toolname}: cannot parse version {ver!r}")
        return False
    if found < _MINIMUM_SQUASHFS_VERSION:
        print(f"{toolname} on the $PATH is version {found} but we need at least version 4.4, exiting")
        return False
    return True


def check_if_all_tools_are_present(tools: Iterable[str]) -> None:
    """Exit the program with status 1 if any of ``tools`` is not on the $PATH."""
    for tool in tools:
        if shutil.which(tool) is None:
            raise SystemExit(f"Required helper tool '{tool}' missing")


def check_for_needed_tools(tools: Iterable[str]) -> None:
    """Raise :class:`ToolMissingError` for the first of ``tools`` not on the $PATH."""
    for tool in tools:
        if shutil.which(tool) is None:
            logger.warning("Required helper tool %s missing", tool)
            raise ToolMissingError(f"Required helper tool {tool} missing")


def is_command_available(name: str) -> bool:
    """Return True if ``name`` is found on the $PATH."""
    return shutil.which(name) is not None