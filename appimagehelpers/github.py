"""Looking up releases and commit messages on GitHub."""

from __future__ import annotations

import os
from typing import Any

import requests

from .updateinformation import UpdateInformation

API_URL = "https://api.github.com"
_TIMEOUT = 30


class GitHubError(Exception):
    """Raised when GitHub cannot be asked or does not answer as expected."""


def _get(path: str) -> dict[str, Any]:
    try:
        response = requests.get(
            f"{API_URL}{path}",
            headers={"Accept": "application/vnd.github+json"},
            timeout=_TIMEOUT,
        )
    except requests.RequestException as e:
        raise GitHubError(f"GET {path}: {e}") from e
    if response.status_code != 200:
        try:
            message = response.json().get("message", "")
        except ValueError:
            message = response.text
        raise GitHubError(f"GET {path}: {response.status_code} {message}".rstrip())
    try:
        return response.json()
    except ValueError as e:
        raise GitHubError(f"GET {path}: invalid JSON in response") from e


def _release_by_tag(owner: str, repo: str, tag: str) -> dict[str, Any]:
    return _get(f"/repos/{owner}/{repo}/releases/tags/{tag}")


def _commit_message(owner: str, repo: str, sha: str) -> str:
    return _get(f"/repos/{owner}/{repo}/git/commits/{sha}").get("message") or ""


def get_commit_message_for_latest_commit(ui: UpdateInformation) -> str:
    """Return the message of the commit that the release named in ``ui`` points to.

    Only ``gh-releases-zsync`` update information is supported.
    """
    if ui.transport_mechanism != "gh-releases-zsync":
        raise GitHubError("Not yet implemented for this transport mechanism")
    release = _release_by_tag(ui.username, ui.repository, ui.release_name)
    commitish = release.get("target_commitish") or ""
    return _commit_message(ui.username, ui.repository, commitish)


def get_release_url(ui: UpdateInformation) -> str:
    """Return the web URL of the release named in ``ui``."""
    if ui.transport_mechanism != "gh-releases-zsync":
        raise GitHubError("GetReleaseURL: Could not get URL")
    return _release_by_tag(ui.username, ui.repository, ui.release_name).get("html_url") or ""


def get_commit_message_for_this_commit_on_travis() -> str:
    """Return the message of the commit in $TRAVIS_COMMIT of $TRAVIS_REPO_SLUG."""
    commit = os.environ.get("TRAVIS_COMMIT", "")
    if not commit:
        raise GitHubError("TRAVIS_COMMIT environment variable missing. Not running on Travis CI?")
    slug = os.environ.get("TRAVIS_REPO_SLUG", "")
    if not slug:
        raise GitHubError("TRAVIS_REPO_SLUG environment variable missing. Not running on Travis CI?")
    parts = slug.split("/")
    if len(parts) < 2:
        raise GitHubError("Cannot split repo_slug")
    return _commit_message(parts[0], parts[1], commit)