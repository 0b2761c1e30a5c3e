"""Locating and preparing an AppDir from its desktop file."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass

from .desktopfile import DESKTOP_ENTRY, check_desktop_file, load_desktop_file
from .fsutil import copy_file, exists, print_error

logger = logging.getLogger(__name__)

# Only the most common sizes, in the hope that they work on all target systems.
ICON_SIZES = (512, 256, 128, 48, 32, 24, 22, 16, 8)
ICON_PREFERENCE_ORDER = (128, 256, 512, 48, 32, 24, 22, 16, 8)


class AppDirError(Exception):
    """Raised when a directory cannot be used as an AppDir."""


def _icon_directory(root: str, size: int) -> str:
    return f"{root}/usr/share/icons/hicolor/{size}x{size}/apps"


def _first_word(value: str) -> str:
    return value.split(" ")[0]


@dataclass
class AppDir:
    """An AppDir: its root, its top-level desktop file and its main executable."""

    path: str
    desktop_file_path: str
    main_executable: str = ""

    @classmethod
    def from_desktop_file(cls, desktop_file_path: str | os.PathLike) -> "AppDir":
        """Set up the AppDir that holds ``usr/share/applications/<name>.desktop``.

        The desktop file and the main icon are copied to the AppDir root.
        Raises :class:`AppDirError`, or :class:`DesktopFileError` from the checks.
        """
        desktop = os.fspath(desktop_file_path)
        if not exists(desktop):
            raise AppDirError("Desktop file not found")

        root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(desktop))))
        bin_dir = root + "/usr/bin"
        if not exists(bin_dir):
            raise AppDirError(f"AppDir could not be identified: {bin_dir} does not exist")
        print("AppDir path:", root)

        copy_file(desktop, f"{root}/{os.path.basename(desktop)}")

        top_level = sorted(name for name in os.listdir(root) if name.endswith(".desktop"))
        if not top_level:
            raise AppDirError(f"No desktop file was found, please place one into {root}")
        if len(top_level) > 1:
            raise AppDirError(f"More than one desktop file was found in {root}")
        appdir = cls(path=root, desktop_file_path=f"{root}/{top_level[0]}")

        sections = load_desktop_file(appdir.desktop_file_path)
        if DESKTOP_ENTRY not in sections:
            raise AppDirError(f"section '{DESKTOP_ENTRY}' does not exist")
        entry = sections[DESKTOP_ENTRY]
        if "Exec" not in entry:
            raise AppDirError("'Desktop Entry' section has no Exec= key")

        check_desktop_file(appdir.desktop_file_path)

        executable = _first_word(entry["Exec"])
        print("Exec= key contains:", os.path.basename(executable))
        if executable != os.path.basename(executable):
            raise AppDirError("Exec= contains a path, please remove it")
        appdir.main_executable = f"{root}/usr/bin/{executable}"

        icon_name = entry["Icon"]
        icon_word = _first_word(icon_name)
        print("Icon= key contains:", os.path.basename(icon_word))
        if icon_word != os.path.basename(icon_word):
            raise AppDirError("Icon= contains a path, please remove it")

        appdir.copy_main_icon_to_root(icon_name)
        return appdir

    def get_elf_interpreter(self) -> str:
        """Return the ELF interpreter of the main executable as reported by patchelf."""
        command = ["patchelf", "--print-interpreter", self.main_executable]
        try:
            result = subprocess.run(command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
        except OSError as e:
            print_error("patchelf --print-interpreter " + self.main_executable, e)
            raise AppDirError(f"cannot run patchelf: {e}") from e
        if result.returncode != 0:
            error = AppDirError(
                f"patchelf --print-interpreter {self.main_executable} failed: {result.stdout.strip()}"
            )
            print_error("patchelf --print-interpreter " + self.main_executable, error)
            raise error
        return result.stdout.strip()

    def create_icon_directories(self) -> None:
        """Create ``usr/share/icons/hicolor/<size>x<size>/apps`` for the common sizes."""
        for size in ICON_SIZES:
            os.makedirs(_icon_directory(self.path, size), mode=0o755, exist_ok=True)

    def copy_main_icon_to_root(self, icon_name: str) -> None:
        """Copy the most suitable PNG for ``icon_name`` to the AppDir root, if none is there."""
        target = f"{self.path}/{icon_name}.png"
        if exists(target):
            logger.info("Top-level icon already exists, leaving untouched")
            return
        for size in ICON_PREFERENCE_ORDER:
            candidate = f"{_icon_directory(self.path, size)}/{icon_name}.png"
            if exists(candidate):
                copy_file(candidate, target)
                return