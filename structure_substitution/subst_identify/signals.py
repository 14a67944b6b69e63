"""
Signal extraction from free-form structure descriptions.

A description such as "connected regions of 3 within 2 steps of 5
(diagonal)" is reduced to a DescriptionSignals record:

- values: candidate cell values, in order of appearance
- adjacency / path: relation phrasing, with the landmark values and
  coordinates that follow it
- connectivity, max_path_length, column_count, row_count
- vocabulary flags: column, row, rectangle, boundary, region, plus shape

Numbers consumed by a more specific reading (dimensions like "3x3",
landmarks, step limits, run counts, "8-connected") never become value
candidates. Extraction is pure keyword matching and never raises.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from subst_core.types import Pixel, description_text

_DIMENSION_RE = re.compile(r"\b(\d+)\s*[x×]\s*(\d+)\b")
_COORD_RE = re.compile(r"\(\s*(\d+)\s*,\s*(\d+)\s*\)")
_TOKEN_RE = re.compile(r"\d+|[a-z]+")

ADJACENCY_PHRASES = [
    ("adjacent",),
    ("next", "to"),
    ("touching",),
    ("touches",),
    ("bordering",),
    ("neighboring",),
    ("neighbouring",),
    ("beside",),
]

PATH_PHRASES = [
    ("path",),
    ("paths",),
    ("reach",),
    ("reaches",),
    ("reachable",),
    ("connected", "to"),
    ("leads", "to"),
    ("route",),
    ("near",),
]

# Words allowed between a relation phrase and its landmark values
LANDMARK_FILLER = {
    "to", "the", "a", "an", "any", "of", "from", "with", "and", "or", "nor",
    "cell", "cells", "value", "values", "color", "colors", "colour", "colours",
    "landmark", "landmarks", "s",
}

LIMIT_WORDS = {"within", "most", "max", "maximum", "length", "distance", "up"}
STEP_WORDS = {"step", "steps", "move", "moves", "hop", "hops"}
CONNECTIVITY_WORDS = {"connected", "connectivity", "way", "neighbor", "neighbors", "neighbour", "neighbours", "neighborhood"}

COLUMN_WORDS = {"column", "columns", "col", "cols", "vertical", "vertically"}
ROW_WORDS = {"row", "rows", "horizontal", "horizontally"}
RECT_WORDS = {"rectangle", "rectangles", "rectangular", "block", "blocks", "square", "squares", "box", "boxes"}
BOUNDARY_WORDS = {
    "boundary", "boundaries", "border", "borders", "outline", "outlines", "edge", "edges",
    "perimeter", "frame", "frames", "enclosed", "enclosing",
}
REGION_WORDS = {
    "region", "regions", "connected", "component", "components", "blob", "blobs",
    "shape", "shapes", "object", "objects", "cluster", "clusters", "island", "islands",
    "group", "groups",
}
DIAGONAL_WORDS = {"diagonal", "diagonals", "diagonally"}
ORTHOGONAL_WORDS = {"orthogonal", "orthogonally", "cardinal"}
PLUS_WORDS = {"plus", "pluses", "cardinal", "cross", "crosses"}


@dataclass(frozen=True)
class DescriptionSignals:
    text: str
    tokens: Tuple[str, ...] = ()
    values: Tuple[int, ...] = ()
    dimensions: Tuple[Tuple[int, int], ...] = ()
    adjacency: bool = False
    path: bool = False
    adjacency_landmarks: Tuple = ()
    path_landmarks: Tuple = ()
    connectivity: Optional[int] = None
    max_path_length: Optional[int] = None
    column_count: Optional[int] = None
    row_count: Optional[int] = None
    has_column: bool = False
    has_row: bool = False
    has_rect: bool = False
    has_boundary: bool = False
    has_region: bool = False
    has_plus: bool = False

    @property
    def target_value(self) -> Optional[int]:
        return self.values[0] if self.values else None

    def has_any(self, words) -> bool:
        return any(t in words for t in self.tokens)

    def has_phrase(self, phrase: Tuple[str, ...]) -> bool:
        return _find_phrase(self.tokens, phrase) is not None


def _find_phrase(tokens, phrase) -> Optional[int]:
    """Index just past the first occurrence of `phrase`, or None."""
    n = len(phrase)
    for i in range(len(tokens) - n + 1):
        if tuple(tokens[i:i + n]) == phrase:
            return i + n
    return None


def _phrase_ends(tokens, phrases) -> List[int]:
    """Indices just past every occurrence of any phrase."""
    ends = []
    for phrase in phrases:
        n = len(phrase)
        for i in range(len(tokens) - n + 1):
            if tuple(tokens[i:i + n]) == phrase:
                ends.append(i + n)
    return sorted(set(ends))


def _collect_numbers(tokens, start: int, consumed: set) -> List[int]:
    """Numbers following `start`, skipping filler words; stops at other words."""
    found = []
    i = start
    while i < len(tokens):
        tok = tokens[i]
        if tok.isdigit():
            if i not in consumed:
                found.append(int(tok))
                consumed.add(i)
        elif tok not in LANDMARK_FILLER:
            break
        i += 1
    return found


def extract_signals(description) -> DescriptionSignals:
    """Reduce a description to its classification signals."""
    text = description_text(description).lower()

    dimensions = tuple((int(a), int(b)) for a, b in _DIMENSION_RE.findall(text))
    stripped = _DIMENSION_RE.sub(" dimension ", text)

    coordinates = tuple(Pixel(int(r), int(c)) for r, c in _COORD_RE.findall(stripped))
    stripped = _COORD_RE.sub(" coordinate ", stripped)

    tokens = tuple(_TOKEN_RE.findall(stripped))
    consumed: set = set()

    # Connectivity: "8-connected", "4 way", "diagonal", "orthogonal"
    connectivity = None
    for i, tok in enumerate(tokens):
        if tok in ("4", "8") and i + 1 < len(tokens) and tokens[i + 1] in CONNECTIVITY_WORDS:
            connectivity = int(tok)
            consumed.add(i)
    if connectivity is None:
        if any(t in DIAGONAL_WORDS for t in tokens):
            connectivity = 8
        elif any(t in ORTHOGONAL_WORDS for t in tokens):
            connectivity = 4

    # Path limit: "within 2 steps", "at most 3", "2 steps"
    max_path_length = None
    for i, tok in enumerate(tokens):
        if not tok.isdigit() or i in consumed:
            continue
        before = tokens[i - 1] if i > 0 else ""
        after = tokens[i + 1] if i + 1 < len(tokens) else ""
        if before in LIMIT_WORDS or after in STEP_WORDS:
            if max_path_length is None:
                max_path_length = int(tok)
            consumed.add(i)

    # Run thresholds: "4 columns", "at least 3 rows"
    column_count = None
    row_count = None
    for i, tok in enumerate(tokens):
        if not tok.isdigit() or i in consumed or i + 1 >= len(tokens):
            continue
        after = tokens[i + 1]
        if after in ("columns", "cols", "tall", "high") and column_count is None:
            column_count = int(tok)
            consumed.add(i)
        elif after in ("rows", "wide", "long") and row_count is None:
            row_count = int(tok)
            consumed.add(i)

    # Relations and their landmarks
    path_ends = _phrase_ends(tokens, PATH_PHRASES)
    adjacency_ends = _phrase_ends(tokens, ADJACENCY_PHRASES)
    path_landmarks: List = []
    adjacency_landmarks: List = []
    for end in path_ends:
        path_landmarks.extend(_collect_numbers(tokens, end, consumed))
    for end in adjacency_ends:
        adjacency_landmarks.extend(_collect_numbers(tokens, end, consumed))

    if coordinates:
        if path_ends:
            path_landmarks.extend(coordinates)
        elif adjacency_ends:
            adjacency_landmarks.extend(coordinates)

    values = tuple(
        int(tok) for i, tok in enumerate(tokens)
        if tok.isdigit() and i not in consumed
    )

    return DescriptionSignals(
        text=text,
        tokens=tokens,
        values=values,
        dimensions=dimensions,
        adjacency=bool(adjacency_ends),
        path=bool(path_ends),
        adjacency_landmarks=tuple(dict.fromkeys(adjacency_landmarks)),
        path_landmarks=tuple(dict.fromkeys(path_landmarks)),
        connectivity=connectivity,
        max_path_length=max_path_length,
        column_count=column_count,
        row_count=row_count,
        has_column=any(t in COLUMN_WORDS for t in tokens),
        has_row=any(t in ROW_WORDS for t in tokens),
        has_rect=any(t in RECT_WORDS for t in tokens),
        has_boundary=any(t in BOUNDARY_WORDS for t in tokens),
        has_region=any(t in REGION_WORDS for t in tokens),
        has_plus=any(t in PLUS_WORDS for t in tokens),
    )
