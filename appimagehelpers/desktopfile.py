"""Reading and checking freedesktop.org desktop entry files."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .fsutil import log_error

logger = logging.getLogger(__name__)

DESKTOP_ENTRY = "Desktop Entry"

# Key in desktop files written by the desktop integration that records where
# the AppImage itself lives, since Exec= may be rewritten to wrap it.
EXEC_LOCATION_KEY = "X-ExecLocation"

# Key in desktop files written by the desktop integration that holds the
# update information string of the AppImage.
UPDATE_INFORMATION_KEY = "X-AppImage-UpdateInformation"

_REQUIRED_KEYS = ("Categories", "Name", "Exec", "Type", "Icon")
_ICON_SUFFIXES = (".png", ".svg", ".svgz", ".xpm")


class DesktopFileError(ValueError):
    """Raised when a desktop file is malformed or lacks required entries."""


def applications_directory() -> Path:
    """Return the user's applications directory below $XDG_DATA_HOME."""
    data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(data_home) / "applications"


def load_desktop_file(path: str | os.PathLike) -> dict[str, dict[str, str]]:
    """Parse the desktop file at ``path`` into ``{section: {key: value}}``.

    Only whole lines starting with ``#`` or ``;`` are comments; a ``;`` inside
    a value is kept. Keys are case-sensitive; a later key replaces an earlier one.
    """
    sections: dict[str, dict[str, str]] = {}
    current: dict[str, str] | None = None
    with open(path, encoding="utf-8") as f:
        for lineno, raw in enumerate(f, 1):
            line = raw.strip()
            if not line or line[0] in "#;":
                continue
            if line.startswith("[") and line.endswith("]"):
                current = sections.setdefault(line[1:-1].strip(), {})
                continue
            key, sep, value = line.partition("=")
            if not sep:
                raise DesktopFileError(f"{os.fspath(path)}:{lineno}: key-value delimiter not found: {line}")
            if current is None:
                current = sections.setdefault("DEFAULT", {})
            current[key.strip()] = value.strip()
    return sections


def check_desktop_file(desktopfile: str | os.PathLike) -> None:
    """Raise :class:`DesktopFileError` unless the desktop file has the required keys
    and an Icon= entry without a path or file name suffix."""
    entry = load_desktop_file(desktopfile).get(DESKTOP_ENTRY, {})
    for key in _REQUIRED_KEYS:
        if key not in entry:
            raise DesktopFileError(f".desktop file is missing a '{key}'= key")

    icon_name = entry["Icon"]
    if "/" in icon_name:
        raise DesktopFileError("Desktop file contains Icon= entry with a path")
    if os.path.basename(icon_name).endswith(_ICON_SUFFIXES):
        raise DesktopFileError("Desktop file contains Icon= entry with a suffix, please remove the suffix")


def check_if_exec_file_exists(desktopfilepath: str | os.PathLike) -> bool:
    """Return True if the desktop file exists and its X-ExecLocation= target exists."""
    if not os.path.exists(desktopfilepath):
        return False
    try:
        entry = load_desktop_file(desktopfilepath).get(DESKTOP_ENTRY, {})
    except (OSError, UnicodeDecodeError, DesktopFileError) as e:
        log_error("desktop", e)
        return False
    target = entry.get(EXEC_LOCATION_KEY, "")
    if not target or not os.path.exists(target):
        logger.info("%s does not exist, it is mentioned in %s", target, os.fspath(desktopfilepath))
        return False
    return True


def _desktop_files(directory: Path) -> list[Path]:
    try:
        names = sorted(os.listdir(directory))
    except OSError as e:
        log_error("desktop", e)
        return []
    return [directory / name for name in names if name.endswith(".desktop")]


def delete_desktop_files_with_non_existing_targets(applications_dir: str | os.PathLike | None = None) -> list[Path]:
    """Delete ``appimagekit_*.desktop`` files whose AppImage no longer exists.

    Returns the paths that were deleted.
    """
    directory = Path(applications_dir) if applications_dir is not None else applications_directory()
    deleted: list[Path] = []
    for path in _desktop_files(directory):
        if not path.name.startswith("appimagekit_") or check_if_exec_file_exists(path):
            continue
        logger.info("Deleting %s", path)
        try:
            path.unlink()
        except OSError as e:
            log_error("desktop", e)
            continue
        deleted.append(path)
    return deleted


def get_values_for_all_desktop_files(key: str, applications_dir: str | os.PathLike | None = None) -> list[str]:
    """Return the non-empty values of ``key`` from all desktop files whose target exists."""
    directory = Path(applications_dir) if applications_dir is not None else applications_directory()
    results: list[str] = []
    for path in _desktop_files(directory):
        if not check_if_exec_file_exists(path):
            continue
        try:
            value = load_desktop_file(path).get(DESKTOP_ENTRY, {}).get(key, "")
        except (OSError, UnicodeDecodeError, DesktopFileError) as e:
            log_error("GetValuesForAllDesktopFiles", e)
            continue
        if value:
            results.append(value)
    return results