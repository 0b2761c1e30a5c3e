[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "appimagehelpers"
version = "0.1.0"
description = "Helpers for building, inspecting and integrating AppImages and AppDirs"
requires-python = ">=3.10"
keywords = ["appimage", "appdir", "elf", "desktop-file", "zsync", "packaging"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]
dependencies = [
    "cryptography",
    "packaging",
    "requests",
    "paho-mqtt",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["appimagehelpers"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
