"""Parsing and validating AppImage update information strings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlsplit

from .elf import ElfError, get_section_data

TRANSPORT_MECHANISMS = ("zsync", "bintray-zsync", "gh-releases-zsync")


class UpdateInformationError(ValueError):
    """Raised when update information is missing or malformed."""


@dataclass(frozen=True)
class UpdateInformation:
    """The parts of an update information string.

    A release name of ``latest`` means the latest non-prerelease; ``*`` in the
    file name is a wildcard.
    """

    transport_mechanism: str
    file_url: str = ""
    username: str = ""
    repository: str = ""
    release_name: str = ""
    filename: str = ""
    package_name: str = ""

    @classmethod
    def from_string(cls, updateinformation: str) -> "UpdateInformation":
        """Parse ``updateinformation``; raise :class:`UpdateInformationError` if it is invalid."""
        validate_update_information(updateinformation)
        parts = updateinformation.split("|")
        mechanism = parts[0]
        if mechanism == "zsync":
            return cls(mechanism, file_url=parts[1])
        if len(parts) < 5:
            raise UpdateInformationError("Too short")
        if mechanism == "gh-releases-zsync":
            return cls(mechanism, username=parts[1], repository=parts[2], release_name=parts[3], filename=parts[4])
        if mechanism == "bintray-zsync":
            return cls(mechanism, username=parts[1], repository=parts[2], package_name=parts[3], filename=parts[4])
        raise UpdateInformationError("This transport mechanism is not yet implemented")


def validate_update_information(updateinformation: str) -> None:
    """Raise :class:`UpdateInformationError` unless ``updateinformation`` is valid.

    The last field must name a ``.zsync`` file; a query string after it is allowed.
    """
    parts = updateinformation.split("|")
    if len(parts) < 2:
        raise UpdateInformationError("Too short")
    mechanism = parts[0]
    if mechanism not in TRANSPORT_MECHANISMS:
        raise UpdateInformationError("Invalid transport mechanism")
    try:
        url = urlsplit(parts[-1])
    except ValueError as e:
        raise UpdateInformationError("Cannot parse URL") from e
    if mechanism == "zsync" and not url.scheme:
        raise UpdateInformationError("Scheme is missing, zsync needs e.g. http:// or https://")
    if not url.path.endswith(".zsync"):
        raise UpdateInformationError(f"{updateinformation} does not end in .zsync")


def read_update_info(appimage_path: str | os.PathLike) -> str:
    """Return the update information string stored in the ``.upd_info`` ELF section."""
    try:
        data = get_section_data(appimage_path, ".upd_info")
    except (OSError, ElfError) as e:
        raise UpdateInformationError("file not found") from e
    if data is None:
        raise UpdateInformationError("ELF missing .upd_info section")
    end = data.find(b"\0")
    if end <= 0:
        raise UpdateInformationError("no update information found")
    return data[:end].decode(errors="replace")