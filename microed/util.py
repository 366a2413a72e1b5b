"""Text, path and option helpers used throughout the editor."""

from __future__ import annotations

import os
import re
import unicodedata
import zipfile
from datetime import datetime
from itertools import takewhile

from wcwidth import wcwidth

from microed.chars import character_count, iter_characters

_GO_EXTRA_NON_SPACE = frozenset("\x1c\x1d\x1e\x1f")
_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True", "on"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False", "off"})
_PATH_POSITION = re.compile(r"([\s\S]+?)(?::(\d+))(?::(\d+))?$")


def _char_offset(text: str, index: int) -> int:
    """Code point offset of the character with the given character index."""
    offset = 0
    for count, cluster in enumerate(iter_characters(text)):
        if count >= index:
            break
        offset += len(cluster)
    return offset


def _rune_width(c: str, width: int, tabsize: int) -> int:
    if c == "\t":
        return tabsize - (width % tabsize)
    return max(wcwidth(c), 0)


def slice_end(text: str, index: int) -> str:
    """Drop the first ``index`` characters of ``text``."""
    return text[_char_offset(text, index):]


def slice_start(text: str, index: int) -> str:
    """Keep only the first ``index`` characters of ``text``."""
    return text[:_char_offset(text, index)]


def slice_visual_end(text: str, n: int, tabsize: int) -> tuple[str, int, int]:
    """Cut ``text`` at visual column ``n``.

    Returns the remaining text, how many columns into its first character the
    cut lies, and the character position of that first character.
    """
    width = 0
    pos = 0
    chars = 0
    for cluster in iter_characters(text):
        w = _rune_width(cluster[0], width, tabsize)
        if width + w > n:
            return text[pos:], n - width, chars
        width += w
        pos += len(cluster)
        chars += 1
    return text[pos:], n - width, chars


def string_width(text: str, n: int, tabsize: int) -> int:
    """Visual width of the first ``n`` characters of ``text``."""
    if n <= 0:
        return 0
    width = 0
    for count, cluster in enumerate(iter_characters(text), start=1):
        width += _rune_width(cluster[0], width, tabsize)
        if count == n:
            break
    return width


def get_char_pos_in_line(text: str, visual_pos: int, tabsize: int) -> int:
    """Character position at visual column ``visual_pos``."""
    pos = 0
    width = 0
    for cluster in iter_characters(text):
        width += _rune_width(cluster[0], width, tabsize)
        if width >= visual_pos:
            if width == visual_pos:
                pos += 1
            break
        pos += 1
    return pos


def rune_pos(data: bytes | str, index: int) -> int:
    """Character index of the UTF-8 byte offset ``index`` in ``data``."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return character_count(bytes(data[:index]))


def rune_at(text: str, index: int) -> str:
    """The base code point of the character at ``index``, or '' if absent."""
    for count, cluster in enumerate(iter_characters(text)):
        if count == index:
            return cluster[0]
    return ""


def is_word_char(c: str) -> bool:
    """True if the first code point of ``c`` is a letter, a number or '_'."""
    if not c:
        return False
    c = c[0]
    return c == "_" or unicodedata.category(c)[0] in "LN"


def is_non_alpha_numeric(c: str) -> bool:
    """True if ``c`` is neither a letter, a number nor '_'."""
    return not is_word_char(c)


def is_autocomplete(c: str) -> bool:
    """True if ``c`` should begin an autocompletion."""
    return c == "." or is_word_char(c)


def is_whitespace(c: str) -> bool:
    """True if the code point ``c`` is Unicode white space."""
    return len(c) == 1 and c.isspace() and c not in _GO_EXTRA_NON_SPACE


def is_spaces(text: str) -> bool:
    """True if ``text`` holds only spaces."""
    return all(c == " " for c in text)


def is_spaces_or_tabs(text: str) -> bool:
    """True if ``text`` holds only spaces and tabs."""
    return all(c in " \t" for c in text)


def is_all_whitespace(text: str) -> bool:
    """True if every code point of ``text`` is white space."""
    return all(is_whitespace(c) for c in text)


def spaces(n: int) -> str:
    """A string of ``n`` spaces."""
    return " " * n


def get_leading_whitespace(text: str) -> str:
    """The spaces and tabs at the start of ``text``."""
    bases = (cluster[0] for cluster in iter_characters(text))
    return "".join(takewhile(lambda c: c in " \t", bases))


def get_trailing_whitespace(text: str) -> str:
    """The white space at the end of ``text``."""
    end = len(text)
    for c in reversed(text):
        if not is_whitespace(c):
            break
        end -= 1
    return text[end:]


def has_trailing_whitespace(text: str) -> bool:
    """True if ``text`` ends with white space."""
    return bool(text) and is_whitespace(text[-1])


def make_relative(path: str, base: str) -> str:
    """Express ``path`` relative to ``base``; an empty path is returned as is."""
    if not path:
        return path
    if os.path.isabs(path) != os.path.isabs(base):
        raise ValueError(f"cannot make {path} relative to {base}")
    return os.path.relpath(path, base)


def replace_home(path: str) -> str:
    """Replace a leading ``~`` or ``~user`` with that user's home directory."""
    if not path.startswith("~"):
        return path
    home_string = path.split("/")[0]
    home = os.path.expanduser(home_string)
    if home == home_string:
        raise ValueError(f"Could not find user: {home_string[1:] or 'current user'}")
    return path.replace(home_string, home, 1)


def get_path_and_cursor_position(path: str) -> tuple[str, list[str] | None]:
    """Split ``file:line[:column]`` into the path and its cursor position.

    Without a line the position is None; without a column it defaults to "0".
    """
    match = _PATH_POSITION.search(path)
    if match is None:
        return path, None
    name, line, column = match.groups()
    return name, [line, column if column else "0"]


def get_mod_time(path: str | os.PathLike[str]) -> datetime:
    """Last modification time of the file at ``path``."""
    return datetime.fromtimestamp(os.stat(path).st_mtime)


def escape_path(path: str) -> str:
    """Replace every path separator in ``path`` with '%'."""
    if os.sep != "/":
        path = path.replace(os.sep, "/")
        if os.name == "nt":
            path = path.replace(":", "%")
    return path.replace("/", "%")


def parse_bool(text: str) -> bool:
    """Parse a boolean option; 'on' and 'off' are accepted too."""
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f"invalid boolean: {text!r}")


def clamp(value: int, low: int, high: int) -> int:
    """Clamp ``value`` into ``[low, high]``."""
    if value < low:
        return low
    if value > high:
        return high
    return value


def parse_special(text: str) -> str:
    """Turn every escaped ``\\t`` into a tab."""
    return text.replace("\\t", "\t")


def unzip(src: str | os.PathLike[str], dest: str | os.PathLike[str]) -> None:
    """Extract the zip archive ``src`` into ``dest``, refusing paths that escape it."""
    dest = os.fspath(dest)
    with zipfile.ZipFile(src) as archive:
        os.makedirs(dest, exist_ok=True)
        prefix = os.path.normpath(dest) + os.sep
        for info in archive.infolist():
            path = os.path.normpath(os.path.join(dest, info.filename))
            if not path.startswith(prefix):
                raise ValueError(f"illegal file path: {path}")
            mode = (info.external_attr >> 16) & 0o777
            if info.is_dir():
                os.makedirs(path, exist_ok=True)
                continue
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with archive.open(info) as source, open(path, "wb") as target:
                while chunk := source.read(65536):
                    target.write(chunk)
            if mode:
                os.chmod(path, mode)