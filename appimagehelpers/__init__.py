"""Helpers for inspecting ELF files, AppDirs, desktop files, digests and update information of AppImages."""

__version__ = "0.1.0"