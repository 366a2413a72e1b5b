"""Syntax definition files: headers, rules, regions and includes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import yaml

_MAX_GROUP = 255


class SyntaxDefinitionError(ValueError):
    """Raised when a syntax file or header cannot be parsed."""


class GroupRegistry:
    """Maps syntax group names to small integer ids.

    Ids are handed out from 1 upwards; 0 means "no group".
    """

    def __init__(self) -> None:
        self._groups: dict[str, int] = {}

    def get(self, name: str) -> int:
        """Return the id of ``name``, registering it if it is new."""
        group = self._groups.get(name)
        if group is None:
            group = len(self._groups) + 1
            if group > _MAX_GROUP:
                raise SyntaxDefinitionError(f"too many syntax groups, cannot add {name!r}")
            self._groups[name] = group
        return group

    def name_of(self, group: int) -> str:
        """Return the name registered for ``group``, or '' if there is none."""
        for name, value in self._groups.items():
            if value == group:
                return name
        return ""

    def __contains__(self, name: object) -> bool:
        return name in self._groups

    def __len__(self) -> int:
        return len(self._groups)


GROUPS = GroupRegistry()


def _compile(expr: Any) -> re.Pattern[str]:
    if not isinstance(expr, str):
        raise SyntaxDefinitionError(f"expected a regular expression string, got {expr!r}")
    try:
        return re.compile(expr)
    except re.error as exc:
        raise SyntaxDefinitionError(f"invalid regular expression {expr!r}: {exc}") from exc


def _as_text(data: str | bytes) -> str:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8")
    return data


def _load_yaml(data: str | bytes) -> Any:
    try:
        return yaml.safe_load(_as_text(data))
    except yaml.YAMLError as exc:
        raise SyntaxDefinitionError(f"invalid yaml: {exc}") from exc


@dataclass
class Header:
    """Filetype name and the expressions used to detect the filetype."""

    file_type: str = ""
    file_name_regex: re.Pattern[str] | None = None
    signature_regex: re.Pattern[str] | None = None

    def match_file_name(self, filename: str) -> bool:
        """True if the file name expression matches ``filename``."""
        if self.file_name_regex is None:
            return False
        return self.file_name_regex.search(filename) is not None

    def has_file_signature(self) -> bool:
        """True if a signature expression is stored."""
        return self.signature_regex is not None

    def match_file_signature(self, line: str | bytes) -> bool:
        """True if the signature expression matches ``line``."""
        if self.signature_regex is None:
            return False
        text = bytes(line).decode("utf-8", errors="replace") if isinstance(line, (bytes, bytearray)) else line
        return self.signature_regex.search(text) is not None


def _build_header(file_type: str, fname_expr: str, signature_expr: str) -> Header:
    header = Header(file_type=file_type)
    if fname_expr:
        header.file_name_regex = _compile(fname_expr)
    if signature_expr:
        header.signature_regex = _compile(signature_expr)
    return header


def make_header(data: str | bytes) -> Header:
    """Parse a three-line header file: filetype, file name regex, signature regex."""
    lines = _as_text(data).split("\n")
    if len(lines) < 3:
        raise SyntaxDefinitionError("Header file has incorrect format")
    return _build_header(lines[0], lines[1], lines[2])


def make_header_yaml(data: str | bytes) -> Header:
    """Read only the header part of a yaml syntax file."""
    doc = _load_yaml(data)
    if doc is None:
        doc = {}
    if not isinstance(doc, dict):
        raise SyntaxDefinitionError("syntax file must be a mapping")
    detect = doc.get("detect") or {}
    if not isinstance(detect, dict):
        raise SyntaxDefinitionError("'detect' must be a mapping")

    def text(value: Any, key: str) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise SyntaxDefinitionError(f"{key!r} must be a string")
        return value

    return _build_header(
        text(doc.get("filetype"), "filetype"),
        text(detect.get("filename"), "filename"),
        text(detect.get("signature"), "signature"),
    )


@dataclass(eq=False)
class Pattern:
    """A single-line rule: text matching ``regex`` belongs to ``group``."""

    group: int
    regex: re.Pattern[str]


@dataclass(eq=False)
class Rules:
    """The regions, patterns and included filetypes of a definition or region."""

    regions: list[Region] = field(default_factory=list)
    patterns: list[Pattern] = field(default_factory=list)
    includes: list[str] = field(default_factory=list)


@dataclass(eq=False)
class Region:
    """A highlighted stretch such as a string or a comment.

    It runs from a match of ``start`` to a match of ``end`` and has rules of
    its own that apply only inside it.
    """

    group: int
    limit_group: int
    start: re.Pattern[str]
    end: re.Pattern[str]
    skip: re.Pattern[str] | None = None
    parent: Region | None = field(default=None, repr=False)
    rules: Rules = field(default_factory=Rules)


@dataclass
class SyntaxFile:
    """A parsed yaml syntax file whose rules have not been built yet."""

    file_type: str
    source: dict[Any, Any]


@dataclass(eq=False)
class Definition:
    """A complete syntax definition: its header and its rules."""

    header: Header | None
    rules: Rules = field(default_factory=Rules)


def parse_file(data: str | bytes) -> SyntaxFile:
    """Parse yaml syntax source, keeping the filetype and the raw document."""
    doc = _load_yaml(data)
    if doc is None:
        doc = {}
    if not isinstance(doc, dict):
        raise SyntaxDefinitionError("syntax file must be a mapping")
    file_type = doc.get("filetype", "")
    if not isinstance(file_type, str):
        raise SyntaxDefinitionError("'filetype' must be a string")
    return SyntaxFile(file_type=file_type, source=doc)


def parse_def(syntax_file: SyntaxFile, header: Header | None) -> Definition:
    """Build the highlighting rules of ``syntax_file``."""
    definition = Definition(header=header)
    if "rules" in syntax_file.source:
        definition.rules = _parse_rules(syntax_file.source["rules"], None)
    return definition


def _parse_rules(items: Any, current: Region | None) -> Rules:
    if not isinstance(items, list):
        raise SyntaxDefinitionError(f"rules must be a list, got {type(items).__name__}")
    rules = Rules()
    for item in items:
        if not isinstance(item, dict):
            raise SyntaxDefinitionError(f"a rule must be a mapping, got {item!r}")
        for key, value in item.items():
            if isinstance(value, str):
                if key == "include":
                    rules.includes.append(value)
                    continue
                regex = _compile(value)
                rules.patterns.append(Pattern(_group_of(key), regex))
            elif isinstance(value, dict):
                rules.regions.append(_parse_region(_group_name(key), value, current))
            else:
                raise SyntaxDefinitionError(f"Bad type {type(value).__name__}")
    return rules


def _group_name(key: Any) -> str:
    if not isinstance(key, str):
        raise SyntaxDefinitionError(f"group name must be a string, got {key!r}")
    return key


def _group_of(key: Any) -> int:
    return GROUPS.get(_group_name(key))


def _parse_region(group: str, info: dict[Any, Any], parent: Region | None) -> Region:
    group_id = GROUPS.get(group)
    if "start" not in info or "end" not in info:
        raise SyntaxDefinitionError(f"region {group!r} needs both 'start' and 'end'")
    start = _compile(info["start"])
    end = _compile(info["end"])
    skip = _compile(info["skip"]) if "skip" in info else None
    if "limit-group" in info:
        limit_group = _group_of(info["limit-group"])
    else:
        limit_group = group_id
    region = Region(
        group=group_id,
        limit_group=limit_group,
        start=start,
        end=end,
        skip=skip,
        parent=parent,
    )
    if "rules" not in info:
        raise SyntaxDefinitionError(f"region {group!r} needs a 'rules' list")
    region.rules = _parse_rules(info["rules"], region)
    return region


def _region_includes(region: Region) -> list[str]:
    includes = list(region.rules.includes)
    for sub in region.rules.regions:
        includes.extend(_region_includes(sub))
    return includes


def has_includes(definition: Definition) -> bool:
    """True if the definition or any of its regions includes another filetype."""
    return bool(get_includes(definition))


def get_includes(definition: Definition) -> list[str]:
    """The filetypes included anywhere in the definition."""
    includes = list(definition.rules.includes)
    for region in definition.rules.regions:
        includes.extend(_region_includes(region))
    return includes


def _merge_included(rules: Rules, files: list[SyntaxFile]) -> None:
    for lang in rules.includes:
        for candidate in files:
            if candidate.file_type == lang:
                included = parse_def(candidate, None)
                rules.patterns.extend(included.rules.patterns)
                rules.regions.extend(included.rules.regions)


def _resolve_in_region(files: list[SyntaxFile], region: Region) -> None:
    _merge_included(region.rules, files)
    for sub in region.rules.regions:
        _resolve_in_region(files, sub)
        sub.parent = region


def resolve_includes(definition: Definition, files: list[SyntaxFile]) -> None:
    """Pull the rules of included filetypes into ``definition`` in place."""
    _merge_included(definition.rules, files)
    for region in definition.rules.regions:
        _resolve_in_region(files, region)
        region.parent = None