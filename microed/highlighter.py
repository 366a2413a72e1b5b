"""Line-by-line syntax highlighting driven by a syntax Definition."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from microed.chars import character_count
from microed.syntax import Definition, Region
from microed.util import slice_end, slice_start

LineMatch = Dict[int, int]
"""Maps each character index where the colouring changes to its group id."""

State = Optional[Region]
"""The region still open at the end of a line, or None."""


class LineStates(Protocol):
    """A buffer-like object that also stores per-line states and matches."""

    def __len__(self) -> int:
        """Number of lines."""

    def line(self, n: int) -> str:
        """Text of line ``n``."""

    def state(self, n: int) -> State:
        """Region open at the end of line ``n``."""

    def set_state(self, n: int, state: State) -> None:
        """Store the region open at the end of line ``n``."""

    def set_match(self, n: int, match: LineMatch) -> None:
        """Store the highlighting of line ``n``."""


def _rune_pos(offset: int, line: str) -> int:
    if offset <= 0:
        return 0
    if offset >= len(line):
        return character_count(line)
    return character_count(line[:offset])


def _find_index(
    regex: re.Pattern[str], skip: Optional[re.Pattern[str]], line: str
) -> Optional[Tuple[int, int]]:
    """Character span of the first match of ``regex``, ignoring ``skip`` matches."""
    searched = line
    if skip is not None:
        searched = skip.sub(lambda m: "\0" * character_count(m.group()), line)
    match = regex.search(searched)
    if match is None:
        return None
    return _rune_pos(match.start(), line), _rune_pos(match.end(), line)


def _find_all_index(regex: re.Pattern[str], line: str) -> List[Tuple[int, int]]:
    return [
        (character_count(line[: m.start()]), character_count(line[: m.end()]))
        for m in regex.finditer(line)
    ]


def _record_changes(highlights: LineMatch, start: int, groups: Sequence[int]) -> None:
    previous = None
    for i, group in enumerate(groups):
        if i == 0 or group != previous:
            highlights[start + i] = group
        previous = group


class Highlighter:
    """Highlights text according to a syntax definition."""

    def __init__(self, definition: Definition) -> None:
        self.definition = definition
        self._last_region: State = None

    def _highlight_region(
        self,
        highlights: LineMatch,
        start: int,
        can_match_end: bool,
        line: str,
        region: Region,
        states_only: bool,
    ) -> LineMatch:
        line_len = character_count(line)
        if start == 0 and not states_only:
            highlights.setdefault(0, region.group)

        first_region: Optional[Region] = None
        first_loc = (line_len, 0)
        search_nesting = True
        end_loc = _find_index(region.end, region.skip, line)
        if end_loc is not None:
            if start == end_loc[0]:
                search_nesting = False
            else:
                first_loc = end_loc
        if search_nesting:
            for sub in region.rules.regions:
                loc = _find_index(sub.start, sub.skip, line)
                if loc is not None and loc[0] < first_loc[0]:
                    first_loc = loc
                    first_region = sub
        if first_region is not None and first_loc[0] != line_len:
            if not states_only:
                highlights[start + first_loc[0]] = first_region.limit_group
            rest = slice_end(line, first_loc[1])
            self._highlight_empty_region(
                highlights, start + first_loc[1], can_match_end, rest, states_only
            )
            self._highlight_region(
                highlights, start + first_loc[1], can_match_end, rest, first_region, states_only
            )
            return highlights

        if not states_only:
            full = [region.group] * line_len
            if search_nesting:
                for pattern in region.rules.patterns:
                    if region.group != region.limit_group and pattern.group != region.limit_group:
                        continue
                    for m_start, m_end in _find_all_index(pattern.regex, line):
                        if end_loc is None or m_start < end_loc[0]:
                            full[m_start:m_end] = [pattern.group] * (m_end - m_start)
            _record_changes(highlights, start, full)

        if end_loc is not None:
            if not states_only:
                highlights[start + end_loc[0]] = region.limit_group
            rest = slice_end(line, end_loc[1])
            if region.parent is None:
                if not states_only:
                    highlights[start + end_loc[1]] = 0
                self._highlight_empty_region(
                    highlights, start + end_loc[1], can_match_end, rest, states_only
                )
                return highlights
            if not states_only:
                highlights[start + end_loc[1]] = region.parent.group
            self._highlight_region(
                highlights, start + end_loc[1], can_match_end, rest, region.parent, states_only
            )
            return highlights

        if can_match_end:
            self._last_region = region
        return highlights

    def _highlight_empty_region(
        self,
        highlights: LineMatch,
        start: int,
        can_match_end: bool,
        line: str,
        states_only: bool,
    ) -> LineMatch:
        line_len = character_count(line)
        if line_len == 0:
            if can_match_end:
                self._last_region = None
            return highlights

        rules = self.definition.rules
        first_region: Optional[Region] = None
        first_loc = (line_len, 0)
        for region in rules.regions:
            loc = _find_index(region.start, region.skip, line)
            if loc is not None and loc[0] < first_loc[0]:
                first_loc = loc
                first_region = region
        if first_region is not None and first_loc[0] != line_len:
            if not states_only:
                highlights[start + first_loc[0]] = first_region.limit_group
            self._highlight_empty_region(
                highlights, start, False, slice_start(line, first_loc[0]), states_only
            )
            self._highlight_region(
                highlights,
                start + first_loc[1],
                can_match_end,
                slice_end(line, first_loc[1]),
                first_region,
                states_only,
            )
            return highlights

        if not states_only:
            full = [0] * line_len
            for pattern in rules.patterns:
                for m_start, m_end in _find_all_index(pattern.regex, line):
                    full[m_start:m_end] = [pattern.group] * (m_end - m_start)
            _record_changes(highlights, start, full)

        if can_match_end:
            self._last_region = None
        return highlights

    def _highlight_line(
        self, line_number: int, line: str, state: State, states_only: bool
    ) -> LineMatch:
        highlights: LineMatch = {}
        if line_number == 0 or state is None:
            return self._highlight_empty_region(highlights, 0, True, line, states_only)
        return self._highlight_region(highlights, 0, True, line, state, states_only)

    def highlight_string(self, text: str) -> List[LineMatch]:
        """Highlight every line of ``text`` and return one match per line."""
        matches = []
        for i, line in enumerate(text.split("\n")):
            matches.append(self._highlight_line(i, line, self._last_region, False))
        return matches

    def highlight_states(self, lines: LineStates) -> None:
        """Compute and store the end-of-line state of every line."""
        for i in range(len(lines)):
            self._highlight_line(i, lines.line(i), self._last_region, True)
            lines.set_state(i, self._last_region)

    def highlight_matches(self, lines: LineStates, start_line: int, end_line: int) -> None:
        """Store matches for lines ``start_line`` to ``end_line`` inclusive.

        The states of the preceding lines must already be correct.
        """
        for i in range(start_line, min(end_line, len(lines) - 1) + 1):
            state = lines.state(i - 1) if i > 0 else None
            lines.set_match(i, self._highlight_line(i, lines.line(i), state, False))

    def rehighlight_states(self, lines: LineStates, start_line: int) -> int:
        """Recompute states from ``start_line`` until one is unchanged.

        Returns the number of the last line that was examined.
        """
        self._last_region = lines.state(start_line - 1) if start_line > 0 else None
        for i in range(start_line, len(lines)):
            self._highlight_line(i, lines.line(i), self._last_region, True)
            current = self._last_region
            previous = lines.state(i)
            lines.set_state(i, current)
            if current is previous:
                return i
        return len(lines) - 1

    def rehighlight_line(self, lines: LineStates, line_number: int) -> None:
        """Recompute the state and match of a single line."""
        self._last_region = lines.state(line_number - 1) if line_number > 0 else None
        match = self._highlight_line(
            line_number, lines.line(line_number), self._last_region, False
        )
        lines.set_match(line_number, match)
        lines.set_state(line_number, self._last_region)