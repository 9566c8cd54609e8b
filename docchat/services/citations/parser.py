"""Inline citation marker rewriting and offset reconciliation.

The model cites passages with ``[src:N]`` markers, N being the 1-based number
of a passage in the turn's source registry. Markers are rewritten to the
compact display form ``[N]`` and every citation's offsets are computed
against the rewritten text, so ``answer[start:end] == marker`` always holds.

Processing runs in three pure steps:

1. ``tokenize`` splits the raw text into text and marker tokens.
2. ``rewrite`` joins the tokens into the display text in one linear pass and
   records every marker emission in source order, duplicates included.
3. ``locate_markers`` searches the display text for each emission with a
   cursor that only moves forward, so the k-th emission of ``[2]`` binds to
   the k-th occurrence of ``[2]``.

If no marker is found, or any marker points outside ``[1, len(sources)]``,
the raw text is returned untouched in fallback mode (``has_citations=False``).
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Sequence, Tuple, Union

from docchat.schemas.chat import Citation, Source

# ASCII digits only
SOURCE_MARKER_PATTERN = re.compile(r"\[src:([0-9]+)\]")

# Longer digit runs cannot name a registry entry and are not converted
MAX_MARKER_DIGITS = 9
UNRESOLVABLE_MARKER = -1


class TokenKind(str, Enum):
    """Kinds of tokens produced by the tokenizer."""

    TEXT = "text"
    MARKER = "marker"


class Token(NamedTuple):
    """A slice of the raw answer.

    ``value`` is the literal text for ``TEXT`` tokens and the referenced
    source number for ``MARKER`` tokens.
    """

    kind: TokenKind
    span: Tuple[int, int]
    value: Union[str, int]


class MarkerEmission(NamedTuple):
    """One rewritten marker, in the order it was emitted."""

    source_number: int
    display_marker: str


@dataclass(frozen=True)
class ParseResult:
    """Outcome of citation parsing for one answer."""

    answer: str
    citations: List[Citation] = field(default_factory=list)
    has_citations: bool = False


def display_marker(source_number: int) -> str:
    """Compact display form of a source reference."""
    return f"[{source_number}]"


def marker_number(digits: str) -> int:
    """
    Source number written in a marker.

    Returns ``UNRESOLVABLE_MARKER``, which is always out of range, when the
    number has more than ``MAX_MARKER_DIGITS`` significant digits.
    """
    significant = digits.lstrip("0")
    if len(significant) > MAX_MARKER_DIGITS:
        return UNRESOLVABLE_MARKER
    return int(significant or "0")


def tokenize(raw_answer: str) -> List[Token]:
    """
    Split raw model output into text and marker tokens, left to right.

    Args:
        raw_answer: Raw model output

    Returns:
        Tokens covering the whole input without gaps
    """
    tokens: List[Token] = []
    position = 0

    for match in SOURCE_MARKER_PATTERN.finditer(raw_answer):
        start, end = match.span()
        if start > position:
            tokens.append(
                Token(TokenKind.TEXT, (position, start), raw_answer[position:start])
            )
        tokens.append(
            Token(TokenKind.MARKER, (start, end), marker_number(match.group(1)))
        )
        position = end

    if position < len(raw_answer):
        tokens.append(
            Token(TokenKind.TEXT, (position, len(raw_answer)), raw_answer[position:])
        )

    return tokens


def marker_numbers(tokens: Sequence[Token]) -> List[int]:
    """Source numbers referenced by marker tokens, in order."""
    return [token.value for token in tokens if token.kind is TokenKind.MARKER]


def rewrite(tokens: Sequence[Token]) -> Tuple[str, List[MarkerEmission]]:
    """
    Build the display text and the ordered marker emissions in a single pass.

    Args:
        tokens: Output of ``tokenize``

    Returns:
        Tuple of (display text, emissions in source order)
    """
    parts: List[str] = []
    emissions: List[MarkerEmission] = []

    for token in tokens:
        if token.kind is TokenKind.MARKER:
            marker = display_marker(token.value)
            emissions.append(MarkerEmission(token.value, marker))
            parts.append(marker)
        else:
            parts.append(token.value)

    return "".join(parts), emissions


def locate_markers(
    answer: str, emissions: Sequence[MarkerEmission]
) -> List[Citation]:
    """
    Resolve each emission to its exact span in the display text.

    The search cursor starts at 0 and advances past every match, so repeated
    markers resolve to successive, non-overlapping occurrences.

    Args:
        answer: Display text produced by ``rewrite``
        emissions: Emissions produced by ``rewrite``

    Returns:
        One citation per resolved emission
    """
    citations: List[Citation] = []
    cursor = 0

    for emission in emissions:
        start = answer.find(emission.display_marker, cursor)
        if start == -1:
            continue
        end = start + len(emission.display_marker)
        citations.append(
            Citation(
                source_index=emission.source_number - 1,
                start_offset=start,
                end_offset=end,
                marker=emission.display_marker,
            )
        )
        cursor = end

    return citations


def parse_citations(raw_answer: str, sources: Sequence[Source]) -> ParseResult:
    """
    Convert ``[src:N]`` markers into ``[N]`` display markers with exact offsets.

    Args:
        raw_answer: Raw model output
        sources: The turn's registry sources; ``sources[N - 1]`` is source N

    Returns:
        ParseResult with the display answer and its citations, or the raw
        answer in fallback mode when there are no markers or any marker is
        out of range
    """
    tokens = tokenize(raw_answer)
    numbers = marker_numbers(tokens)

    if not numbers or any(n < 1 or n > len(sources) for n in numbers):
        return ParseResult(answer=raw_answer, citations=[], has_citations=False)

    answer, emissions = rewrite(tokens)
    citations = locate_markers(answer, emissions)

    return ParseResult(answer=answer, citations=citations, has_citations=True)
