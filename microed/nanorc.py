"""Conversion of nanorc syntax files to yaml, and header extraction from yaml syntax files."""

from __future__ import annotations

import argparse
import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

import yaml

from microed.syntax import SyntaxDefinitionError

_log = logging.getLogger(__name__)

_SYNTAX = re.compile(r'syntax "(.*?)"\s+"(.*)"+', re.ASCII)
_HEADER = re.compile(r'header "(.*)"', re.ASCII)
_RULE = re.compile(r'color (.*?)\s+(?:\((.+?)?\)\s+)?"(.*)"', re.ASCII)
_START_END = re.compile(
    r'color (.*?)\s+(?:\((.+?)?\)\s+)?start="(.*)"\s+end="(.*)"', re.ASCII
)


@dataclass(frozen=True)
class SingleRule:
    """A rule colouring every match of one expression."""

    color: str
    regex: str


@dataclass(frozen=True)
class MultiRule:
    """A rule colouring everything from a start match to an end match."""

    color: str
    start: str
    end: str


Rule = Union[SingleRule, MultiRule]


def join_rule(rule: str) -> str:
    """Join the quoted expressions of a nanorc rule into one alternation."""
    return "|".join(rule.split('" "'))


def parse_nanorc(text: str, filename: str = "") -> Tuple[str, str, str, List[Rule]]:
    """Parse nanorc syntax source.

    Returns the filetype, the file name expression, the header expression and
    the colouring rules. Invalid statements are logged and skipped.
    """
    filetype = syntax = header = ""
    rules: List[Rule] = []
    for number, raw in enumerate(text.split("\n")):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("syntax"):
            match = _SYNTAX.search(line)
            if match is None:
                _log.warning("%s %d Syntax statement is not valid: %s", filename, number, line)
                continue
            filetype = match.group(1)
            syntax = join_rule(match.group(2))
        if line.startswith("header"):
            match = _HEADER.search(line)
            if match is None:
                _log.warning("%s %d Header statement is not valid: %s", filename, number, line)
                continue
            header = join_rule(match.group(1))

        match = _RULE.search(line)
        if match is not None:
            color, flags, expr = match.groups()
            regex = join_rule(expr)
            if flags:
                regex = f"(?{flags}){regex}"
            rules.append(SingleRule(color, regex))
            continue
        match = _START_END.search(line)
        if match is not None:
            rules.append(MultiRule(match.group(1), match.group(3), match.group(4)))
    return filetype, syntax, header, rules


def _quote(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def generate_yaml(filetype: str, syntax: str, header: str, rules: Iterable[Rule]) -> str:
    """Render a yaml syntax file from parsed nanorc parts."""
    parts = [
        f"filetype: {filetype}\n\n",
        f'detect: \n    filename: "{_quote(syntax)}"\n',
    ]
    if header:
        parts.append(f'    signature: "{_quote(header)}"\n')
    parts.append("\nrules:\n")
    for rule in rules:
        if isinstance(rule, SingleRule):
            parts.append(f'    - {rule.color}: "{_quote(rule.regex)}"\n')
        elif isinstance(rule, MultiRule):
            parts.append(f"    - {rule.color}:\n")
            parts.append(f'        start: "{_quote(rule.start)}"\n')
            parts.append(f'        end: "{_quote(rule.end)}"\n')
            parts.append("        rules: []\n\n")
        else:
            raise TypeError(f"not a syntax rule: {rule!r}")
    return "".join(parts)


def _field(value: Any, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SyntaxDefinitionError(f"{key!r} must be a string")
    return value


def encode_header(data: Union[str, bytes]) -> str:
    """Turn a yaml syntax file into its three-line header form."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    try:
        doc = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise SyntaxDefinitionError(f"invalid yaml: {exc}") from exc
    if doc is None:
        doc = {}
    if not isinstance(doc, dict):
        raise SyntaxDefinitionError("syntax file must be a mapping")
    detect = doc.get("detect") or {}
    if not isinstance(detect, dict):
        raise SyntaxDefinitionError("'detect' must be a mapping")
    filetype = _field(doc.get("filetype"), "filetype")
    filename = _field(detect.get("filename"), "filename")
    signature = _field(detect.get("signature"), "signature")
    return f"{filetype}\n{filename}\n{signature}\n"


def write_headers(directory: Union[str, Path]) -> List[Path]:
    """Write a ``.hdr`` file next to every ``.yaml`` file in ``directory``.

    Returns the paths written, in name order.
    """
    written = []
    for source in sorted(Path(directory).iterdir()):
        if not source.name.endswith(".yaml"):
            continue
        target = source.with_name(source.name[: -len(".yaml")] + ".hdr")
        target.write_text(encode_header(source.read_bytes()), encoding="utf-8", newline="")
        written.append(target)
    return written


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Convert a nanorc file to yaml, or write header files for a syntax directory."""
    parser = argparse.ArgumentParser(
        prog="microed-syntax", description="Syntax file conversion tools."
    )
    commands = parser.add_subparsers(dest="command", required=True)
    convert = commands.add_parser("convert", help="print a nanorc file as yaml")
    convert.add_argument("file")
    headers = commands.add_parser("headers", help="write .hdr files for .yaml files")
    headers.add_argument("directory", nargs="?", default=".")
    args = parser.parse_args(argv)

    if args.command == "convert":
        try:
            text = Path(args.file).read_text(encoding="utf-8")
        except OSError as exc:
            print(exc, file=sys.stderr)
            return 1
        sys.stdout.write(generate_yaml(*parse_nanorc(text, args.file)))
        return 0

    try:
        write_headers(args.directory)
    except (OSError, SyntaxDefinitionError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0