"""Version and build date of the current checkout."""

from __future__ import annotations

import argparse
import os
import re
import subprocess
import sys
from datetime import datetime
from typing import Optional, Sequence, Tuple

from semver import Version

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_NUMERIC = re.compile(r"[0-9]+")
_ALPHANUMERIC = re.compile(r"[0-9A-Za-z-]+")
_INTEGER = re.compile(r"[+-]?[0-9]+")
UNKNOWN_VERSION = "0.0.0-unknown"


def _is_prerelease_identifier(text: str) -> bool:
    if _NUMERIC.fullmatch(text):
        return text == "0" or not text.startswith("0")
    return _ALPHANUMERIC.fullmatch(text) is not None


def split_describe(output: str) -> Tuple[str, Optional[str]]:
    """Split ``git describe`` output into the tag and the commits ahead of it.

    Output that does not have the ``tag-count-hash`` shape comes back whole,
    with None for the count.
    """
    parts = output.split("-")
    if len(parts) == 3 and _is_prerelease_identifier(parts[1]):
        return parts[0], parts[1]
    if len(parts) == 4 and _is_prerelease_identifier(parts[2]):
        return f"{parts[0]}-{parts[1]}", parts[2]
    return output, None


def _parse_tolerant(text: str) -> Version:
    text = text.strip().removeprefix("v")
    parts = text.split(".", 2)
    if len(parts) < 3:
        if any(c in parts[-1] for c in "+-"):
            raise ValueError("short version cannot contain pre-release or build data")
        parts += ["0"] * (3 - len(parts))
        text = ".".join(parts)
    return Version.parse(text)


def compute_version(version_tag: str, ahead: Optional[str], exact_tag: str) -> str:
    """Work out the version string from the last version tag.

    ``ahead`` is how many commits the checkout is past that tag and
    ``exact_tag`` the tag of the current commit, '' if it has none.
    """
    try:
        version = _parse_tolerant(version_tag)
    except ValueError:
        return UNKNOWN_VERSION
    if exact_tag == version_tag:
        return str(version)

    tag = exact_tag
    if tag == "" or tag.startswith("nightly"):
        tag = "dev"
    if "rc" not in str(version):
        version = version.replace(patch=version.patch + 1)

    prerelease = [version.prerelease] if version.prerelease else []
    if _is_prerelease_identifier(tag):
        prerelease.append(tag)
    if ahead is not None:
        prerelease.append(ahead)
    if prerelease:
        version = version.replace(prerelease=".".join(prerelease))
    return str(version)


def _git(*args: str) -> Optional[str]:
    try:
        result = subprocess.run(
            ["git", *args], capture_output=True, text=True, check=True
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return result.stdout


def _describe(*args: str) -> Tuple[str, Optional[str]]:
    output = _git("describe", "--tags", *args)
    if output is None:
        return "", None
    return split_describe(output)


def git_version() -> str:
    """Version of the git checkout in the current directory."""
    if not _git("tag"):
        _git("fetch", "--tags")
    version_tag, ahead = _describe("--match", "v*")
    exact_tag, _ = _describe("--exact-match")
    return compute_version(version_tag, ahead, exact_tag)


def build_date(epoch: Optional[str]) -> str:
    """Format the build date as 'Month DD, YYYY'.

    ``epoch`` is a count of seconds since the Unix epoch; when it is empty or
    None the current local time is used.
    """
    if epoch:
        if not _INTEGER.fullmatch(epoch):
            raise ValueError("SOURCE_DATE_EPOCH is not a valid integer")
        try:
            moment = datetime.fromtimestamp(int(epoch))
        except (OverflowError, OSError) as exc:
            raise ValueError("SOURCE_DATE_EPOCH is out of range") from exc
    else:
        moment = datetime.now()
    return f"{_MONTHS[moment.month - 1]} {moment.day:02d}, {moment.year}"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print the version or the build date."""
    parser = argparse.ArgumentParser(prog="microed-buildinfo", description="Build information.")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("version", help="print the version of the git checkout")
    commands.add_parser("date", help="print the build date (honours SOURCE_DATE_EPOCH)")
    args = parser.parse_args(argv)

    if args.command == "version":
        print(git_version())
        return 0
    try:
        print(build_date(os.environ.get("SOURCE_DATE_EPOCH")))
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0