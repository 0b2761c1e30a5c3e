# appimagehelpers

A library of building blocks for tools that create, inspect and integrate
AppImages on Linux.

## Installation

```
pip install appimagehelpers
```

To run the test suite:

```
pip install "appimagehelpers[test]"
pytest
```

## Modules

| Module | Purpose |
| --- | --- |
| `appimagehelpers.fsutil` | File helpers: existence checks (`exists`, `is_directory`, `check_if_file_exists`, ...), `copy_file`, suffix and prefix search, writing a file or string into another file at an offset, `replace_text_in_file`, `find_most_recent_file`, and magic-byte checks (`check_magic_at_offset`, `check_magic_at_offset_bytes`) |
| `appimagehelpers.elf` | ELF inspection: `calculate_elf_size` (the end of the section header table), `get_section_data`, `get_section_offset_and_length`, `get_elf_architecture` (`x86_64`, `i686`, `armhf`, `aarch64`, ...), and `embed_string_in_segment` to write a string into an existing section. Errors raise `ElfError` |
| `appimagehelpers.tools` | Running external programs (`run_cmd_transparently`, `run_cmd_string_transparently`), `$PATH` handling (`add_dirs_to_path`, `add_here_to_path`), validation with `desktop-file-validate` and `appstreamcli`, checking that `mksquashfs`/`unsquashfs` are at least version 4.4, and checking that helper tools are present (`check_for_needed_tools` raises `ToolMissingError`; `check_if_all_tools_are_present` exits the program) |
| `appimagehelpers.desktopfile` | `load_desktop_file` (lines starting with `#` or `;` are comments, a `;` inside a value is kept), `check_desktop_file`, and cleaning up `appimagekit_*.desktop` files whose `X-ExecLocation=` target is gone, in `$XDG_DATA_HOME/applications` or a given directory |
| `appimagehelpers.appdir` | The `AppDir` class: `AppDir.from_desktop_file` finds the AppDir root from `usr/share/applications/<name>.desktop`, copies the desktop file and the main icon to the root and checks `Exec=` and `Icon=`; `get_elf_interpreter` asks `patchelf`; `create_icon_directories` |
| `appimagehelpers.digest` | `calculate_sha256_digest`: the SHA-256 digest of an AppImage with its `.sha256_sig` and `.sig_key` sections taken as zeros; `calculate_digest_skipping_ranges` with `ByteRange` for arbitrary ranges |
| `appimagehelpers.updateinformation` | `validate_update_information`, `UpdateInformation.from_string` for `zsync`, `gh-releases-zsync` and `bintray-zsync`, and `read_update_info` to read `.upd_info` from an AppImage |
| `appimagehelpers.ossl` | AES-256-CBC encryption in OpenSSL's `Salted__` format with an EVP_BytesToKey (MD5) key (`encrypt`, `decrypt`, their `_base64` and `_string` forms, `evp_bytes_to_key`) |
| `appimagehelpers.watchdog` | `Watchdog(interval_seconds, callback)`: calls the callback once after the delay; `kick()` restarts it, `stop()` cancels it |
| `appimagehelpers.github` | Release URLs and commit messages from the GitHub REST API (`get_release_url`, `get_commit_message_for_latest_commit`, `get_commit_message_for_this_commit_on_travis`) |
| `appimagehelpers.mqtt` | `mqtt_topic` and `publish_mqtt_message` to announce a version as a retained QoS 2 message; `PubSubData` with JSON (de)serialisation |

## Examples

Checking an update-information string:

```python
from appimagehelpers.updateinformation import (
    UpdateInformation,
    UpdateInformationError,
    validate_update_information,
)

validate_update_information(
    "gh-releases-zsync|user|project|latest|App*-x86_64.AppImage.zsync"
)

try:
    validate_update_information("zsync|https://foo.bar")
except UpdateInformationError as exc:
    print("rejected:", exc)

ui = UpdateInformation.from_string(
    "gh-releases-zsync|user|project|continuous|App*-x86_64.AppImage.zsync"
)
print(ui.username, ui.repository, ui.release_name, ui.filename)
```

Preparing an AppDir from its desktop file:

```python
from appimagehelpers.appdir import AppDir

appdir = AppDir.from_desktop_file(
    "MyApp.AppDir/usr/share/applications/myapp.desktop"
)
print(appdir.path, appdir.main_executable)
```

Getting the digest of an AppImage:

```python
from appimagehelpers.digest import calculate_sha256_digest

print(calculate_sha256_digest("MyApp-x86_64.AppImage"))
```

Encrypting and decrypting:

```python
from appimagehelpers.ossl import encrypt_string, decrypt_string

passphrase = "placeholder"
blob = encrypt_string(passphrase, "hello")
assert decrypt_string(passphrase, blob) == "hello"
```

Note that when the salt header plus the plaintext already fill whole
16-byte blocks, no padding is added.

## Errors

Failures raise exceptions: `ElfError`, `DesktopFileError`, `AppDirError`,
`UpdateInformationError`, `OpenSSLFormatError`, `GitHubError` and
`ToolMissingError`, together with `subprocess.CalledProcessError` for
failed external programs and the built-in `OSError` family for file-system
problems.

## What this package does not do

It is a library only: it has no command-line programs. It does not
build squashfs images or assemble AppImages, does not create keys or
sign AppImages, does not work with git repositories and does not run a
desktop-integration daemon. It provides the pieces such tools are built
from.