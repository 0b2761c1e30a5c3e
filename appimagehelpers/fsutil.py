"""File-system helpers: lookups, copies, in-place writes and magic checks."""

from __future__ import annotations

import os
import shutil
import stat
import sys
import time
from pathlib import Path
from typing import BinaryIO, Iterable


def print_error(context: str, e: BaseException | None) -> None:
    """Write ``e`` to stderr prefixed by ``context``; do nothing if ``e`` is None."""
    if e is not None:
        sys.stderr.write(f"ERROR {context}: {e}\n")


def log_error(context: str, e: BaseException | None) -> None:
    """Like :func:`print_error`, but with a date prefix as in a log line."""
    if e is not None:
        sys.stderr.write(f"{time.strftime('%Y/%m/%d')} ERROR {context}: {e}\n")


def files_with_suffix_in_directory_recursive(directory: str | os.PathLike, extension: str) -> list[str]:
    """Return all paths below ``directory`` (itself included) whose name ends with ``extension``.

    Symbolic links are not followed; entries are visited in lexical order.
    """
    root = os.fspath(directory)
    try:
        root_is_dir = stat.S_ISDIR(os.lstat(root).st_mode)
    except OSError:
        return []

    found: list[str] = []

    def visit(path: str, is_dir: bool) -> None:
        if os.path.basename(os.path.normpath(path)).endswith(extension):
            found.append(path)
        if not is_dir:
            return
        try:
            names = sorted(os.listdir(path))
        except OSError:
            return
        for name in names:
            child = os.path.join(path, name)
            try:
                child_is_dir = stat.S_ISDIR(os.lstat(child).st_mode)
            except OSError:
                continue
            visit(child, child_is_dir)

    visit(root, root_is_dir)
    return found


def _matching_entries(directory: str | os.PathLike, predicate) -> list[str]:
    base = os.fspath(directory)
    try:
        names = sorted(os.listdir(base))
    except OSError:
        return []
    return [f"{base}/{name}" for name in names if predicate(name)]


def files_with_suffix_in_directory(directory: str | os.PathLike, extension: str) -> list[str]:
    """Return the entries directly in ``directory`` whose name ends with ``extension``."""
    return _matching_entries(directory, lambda name: name.endswith(extension))


def files_with_prefix_in_directory(directory: str | os.PathLike, prefix: str) -> list[str]:
    """Return the entries directly in ``directory`` whose name starts with ``prefix``."""
    return _matching_entries(directory, lambda name: name.startswith(prefix))


def check_if_file_exists(path: str | os.PathLike) -> bool:
    """Return True if ``path`` can be stat'ed, False if it does not exist.

    Any other error while checking is raised.
    """
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def check_if_folder_exists(path: str | os.PathLike) -> bool:
    """Return True if ``path`` exists and is a directory."""
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return False
    return stat.S_ISDIR(st.st_mode)


def check_if_file_or_folder_exists(path: str | os.PathLike) -> bool:
    """Return False only if ``path`` definitely does not exist."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError:
        return True
    return True


def copy_file(src: str | os.PathLike, dst: str | os.PathLike) -> None:
    """Copy the contents of ``src`` (symlinks resolved) to ``dst``, creating parents.

    An existing ``dst`` is overwritten; file attributes are not copied.
    """
    resolved = Path(src).resolve(strict=True)
    destination = Path(dst)
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(resolved, destination)


def write_file_into_other_file_at_offset(
    inputfilepath: str | os.PathLike, outputfilepath: str | os.PathLike, offset: int
) -> None:
    """Write the contents of one file into an existing file at ``offset``, without truncating."""
    with open(inputfilepath, "rb") as src, open(outputfilepath, "r+b") as out:
        out.seek(offset)
        shutil.copyfileobj(src, out)


def write_string_into_other_file_at_offset(
    inputstring: str | bytes, outputfilepath: str | os.PathLike, offset: int
) -> None:
    """Write ``inputstring`` into an existing file at ``offset``, without truncating."""
    data = inputstring.encode() if isinstance(inputstring, str) else bytes(inputstring)
    with open(outputfilepath, "r+b") as out:
        out.seek(offset)
        out.write(data)


def append_if_missing(items: list[str], s: str) -> list[str]:
    """Return ``items`` with ``s`` appended unless it is already present."""
    if s in items:
        return items
    return [*items, s]


def slice_contains(items: Iterable[str], s: str) -> bool:
    """Return True if ``s`` is among ``items``."""
    return s in items


def replace_text_in_file(path: str | os.PathLike, search: str, replace: str) -> None:
    """Replace every occurrence of ``search`` by ``replace`` in the file at ``path``."""
    target = Path(path)
    data = target.read_bytes()
    target.write_bytes(data.replace(search.encode(), replace.encode()))


def find_most_recent_file(files: Iterable[str]) -> str | None:
    """Return the regular file with the newest mtime; the first one wins ties.

    Returns None if no regular file is given.
    """
    newest: str | None = None
    newest_mtime: int | None = None
    for path in files:
        st = os.stat(path)
        if not stat.S_ISREG(st.st_mode):
            continue
        if newest_mtime is None or st.st_mtime_ns > newest_mtime:
            newest, newest_mtime = path, st.st_mtime_ns
    return newest


def exists(name: str | os.PathLike) -> bool:
    """Return True if a file or directory exists at ``name``.

    Only a definite "does not exist" yields False.
    """
    return check_if_file_or_folder_exists(name)


def is_directory(path: str | os.PathLike) -> bool:
    """Return True if ``path`` is a directory; False on any error."""
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except OSError:
        return False


def check_magic_at_offset(f: BinaryIO, magic: str, offset: int) -> bool:
    """Return True if the hex string ``magic`` is found in ``f`` at ``offset``."""
    try:
        f.seek(offset)
        data = f.read(len(magic) // 2)
    except OSError as e:
        log_error(f"CheckMagicAtOffset: {getattr(f, 'name', f)}", e)
        return False
    return data.hex() == magic


def check_magic_at_offset_bytes(data: bytes, magic: str, offset: int) -> bool:
    """Return True if the hex string ``magic`` is found in ``data`` at ``offset``."""
    return data[offset:offset + len(magic) // 2].hex() == magic