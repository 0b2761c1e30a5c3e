"""Reading ELF headers and sections, and embedding strings into sections."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from typing import BinaryIO

from .fsutil import print_error, write_string_into_other_file_at_offset

ELF_MAGIC = b"\x7fELF"

_ELFCLASS32 = 1
_ELFCLASS64 = 2
_SHT_NOBITS = 8

_HEADER_FORMATS = {_ELFCLASS32: "HHIIIIIHHHHHH", _ELFCLASS64: "HHIQQQIHHHHHH"}
_SECTION_FORMATS = {_ELFCLASS32: "IIIIIIIIII", _ELFCLASS64: "IIQQQQIIQQ"}

_MACHINE_NAMES = {
    0: "EM_NONE",
    2: "EM_SPARC",
    3: "EM_386",
    4: "EM_68K",
    8: "EM_MIPS",
    20: "EM_PPC",
    21: "EM_PPC64",
    22: "EM_S390",
    40: "EM_ARM",
    43: "EM_SPARCV9",
    50: "EM_IA_64",
    62: "EM_X86_64",
    183: "EM_AARCH64",
    243: "EM_RISCV",
    258: "EM_LOONGARCH",
}

_ARCHITECTURE_NAMES = {
    "EM_X86_64": "x86_64",
    "EM_386": "i686",
    "EM_ARM": "armhf",
    "EM_AARCH64": "aarch64",
}


class ElfError(Exception):
    """Raised when a file is not a usable ELF file or a section cannot be used."""


@dataclass(frozen=True)
class _Section:
    name: str
    type: int
    offset: int
    size: int


@dataclass(frozen=True)
class _ElfHeader:
    elfclass: int
    byteorder: str
    machine: int
    shoff: int
    shentsize: int
    shnum: int
    sections: tuple[_Section, ...]

    def section(self, name: str) -> _Section | None:
        return next((s for s in self.sections if s.name == name), None)


def _read_exact(f: BinaryIO, offset: int, size: int) -> bytes:
    f.seek(offset)
    data = f.read(size)
    if len(data) != size:
        raise ElfError(f"unexpected end of file reading {size} bytes at offset {offset}")
    return data


def _parse(f: BinaryIO) -> _ElfHeader:
    ident = f.read(16)
    if len(ident) < 16 or ident[:4] != ELF_MAGIC:
        raise ElfError(f"bad magic number {list(ident[:4])}")
    elfclass, encoding = ident[4], ident[5]
    if encoding == 1:
        byteorder = "<"
    elif encoding == 2:
        byteorder = ">"
    else:
        raise ElfError(f"unknown ELF data encoding {encoding}")
    if elfclass not in _HEADER_FORMATS:
        raise ElfError("unsupported elf architecture")

    header_fmt = byteorder + _HEADER_FORMATS[elfclass]
    header = _read_exact(f, 16, struct.calcsize(header_fmt))
    (_, machine, _, _, _, shoff, _, _, _, _, shentsize, shnum, shstrndx) = struct.unpack(header_fmt, header)

    raw: list[tuple[int, int, int, int]] = []
    if shnum and shoff:
        section_fmt = byteorder + _SECTION_FORMATS[elfclass]
        if shentsize < struct.calcsize(section_fmt):
            raise ElfError(f"invalid section header entry size {shentsize}")
        table = _read_exact(f, shoff, shentsize * shnum)
        for start in range(0, len(table), shentsize):
            name_off, sh_type, _, _, offset, size, *_ = struct.unpack_from(section_fmt, table, start)
            raw.append((name_off, sh_type, offset, size))

    strtab = b""
    if 0 < shstrndx < len(raw):
        _, _, str_offset, str_size = raw[shstrndx]
        strtab = _read_exact(f, str_offset, str_size)

    def name_at(offset: int) -> str:
        if offset >= len(strtab):
            return ""
        end = strtab.find(b"\0", offset)
        return strtab[offset:end if end != -1 else len(strtab)].decode(errors="replace")

    sections = tuple(_Section(name_at(n), t, o, s) for n, t, o, s in raw)
    return _ElfHeader(elfclass, byteorder, machine, shoff, shentsize, shnum, sections)


def _parse_path(path: str | os.PathLike) -> _ElfHeader:
    with open(path, "rb") as f:
        return _parse(f)


def calculate_elf_size(path: str | os.PathLike) -> int:
    """Return the size of the ELF binary at ``path`` as given by its header.

    The size is the end of the section header table; 0 is returned on any error.
    """
    try:
        header = _parse_path(path)
    except (OSError, ElfError) as e:
        print_error("elfsize", e)
        return 0
    return header.shoff + header.shentsize * header.shnum


def get_section_data(path: str | os.PathLike, name: str) -> bytes | None:
    """Return the contents of the section ``name``, or None if there is none."""
    with open(path, "rb") as f:
        header = _parse(f)
        section = header.section(name)
        if section is None:
            return None
        if section.type == _SHT_NOBITS:
            raise ElfError(f"unexpected read from SHT_NOBITS section {name}")
        return _read_exact(f, section.offset, section.size)


def get_section_offset_and_length(path: str | os.PathLike, name: str) -> tuple[int, int]:
    """Return the file offset and size of section ``name``; (0, 0) if there is none."""
    section = _parse_path(path).section(name)
    if section is None:
        return 0, 0
    return section.offset, section.size


def get_elf_architecture(path: str | os.PathLike) -> str:
    """Return the architecture of the ELF file at ``path`` (e.g. ``x86_64``)."""
    machine = _parse_path(path).machine
    name = _MACHINE_NAMES.get(machine, f"elf.Machine({machine})")
    return _ARCHITECTURE_NAMES.get(name, name)


def embed_string_in_segment(path: str | os.PathLike, section: str, s: str | bytes) -> None:
    """Write ``s`` into the ELF section ``section`` of the file at ``path``."""
    data = s.encode() if isinstance(s, str) else bytes(s)
    current = get_section_data(path, section)
    if current is None:
        raise ElfError(f"Could not find section {section} in runtime")
    offset, length = get_section_offset_and_length(path, section)
    print(f"Embedded {section} section Offset: {offset}")
    print(f"Embedded {section} section Length: {length}")
    if len(data) > len(current):
        raise ElfError(f"does not fit into {section} section")
    print(f"Writing into {section} section... {length}")
    write_string_into_other_file_at_offset(data, path, offset)
    updated = get_section_data(path, section) or b""
    print(f"Embedded {section} section now contains:")
    print(updated.decode(errors="replace"))