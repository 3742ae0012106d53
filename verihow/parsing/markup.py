"""
Lightweight markup model.

Line-oriented parser for the restricted formatting dialect used in narrative
bodies: fenced code, pipe tables, ``##``/``###`` headings, blockquotes,
``- `` list items, blank lines and paragraphs with ``**bold**``, `` `code` ``
and ``==highlight==`` spans. The node sequence is the contract handed to the
renderer; this module has no notion of visual form.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Tuple, Union

_FENCE = "```"
_INLINE_PATTERN = re.compile(r"(\*\*.*?\*\*|`.*?`|==.*?==)")
_QUOTE_MARKER = re.compile(r"^>\s?")
_HEADING_MARKERS = (("### ", 3), ("## ", 2))


@dataclass(frozen=True)
class Span:
    kind: str
    """text | bold | code | highlight"""

    text: str


@dataclass(frozen=True)
class CodeBlockNode:
    text: str
    language: str = ""
    kind: str = field(default="code_block", init=False)


@dataclass(frozen=True)
class TableNode:
    header: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]
    kind: str = field(default="table", init=False)


@dataclass(frozen=True)
class HeadingNode:
    level: int
    text: str
    kind: str = field(default="heading", init=False)


@dataclass(frozen=True)
class QuoteNode:
    text: str
    kind: str = field(default="quote", init=False)


@dataclass(frozen=True)
class ListItemNode:
    spans: Tuple[Span, ...]
    kind: str = field(default="list_item", init=False)


@dataclass(frozen=True)
class SpacerNode:
    kind: str = field(default="spacer", init=False)


@dataclass(frozen=True)
class ParagraphNode:
    spans: Tuple[Span, ...]
    kind: str = field(default="paragraph", init=False)


Node = Union[CodeBlockNode, TableNode, HeadingNode, QuoteNode, ListItemNode, SpacerNode, ParagraphNode]


def parse_inline(text: str) -> Tuple[Span, ...]:
    """Resolves inline spans left to right; unmatched delimiters stay literal."""
    spans: List[Span] = []
    for index, part in enumerate(_INLINE_PATTERN.split(text)):
        if not part:
            continue
        if index % 2 == 0:
            spans.append(Span("text", part))
        elif part.startswith("**"):
            spans.append(Span("bold", part[2:-2]))
        elif part.startswith("`"):
            spans.append(Span("code", part[1:-1]))
        else:
            spans.append(Span("highlight", part[2:-2]))
    return tuple(spans)


def heading_level(line: str) -> int:
    """3 or 2 for a heading line, 0 otherwise; markers must start at column 0."""
    for marker, level in _HEADING_MARKERS:
        if line.startswith(marker):
            return level
    return 0


def is_heading_line(line: str) -> bool:
    return heading_level(line) > 0


def _split_row(row: str) -> Tuple[str, ...]:
    cells = [cell.strip() for cell in row.strip().split("|")]
    while cells and not cells[0]:
        cells.pop(0)
    while cells and not cells[-1]:
        cells.pop()
    return tuple(cells)


def _consume_code_block(lines: List[str], start: int) -> Tuple[CodeBlockNode, int]:
    language = lines[start].strip()[len(_FENCE):].strip()
    body: List[str] = []
    cursor = start + 1
    while cursor < len(lines) and not lines[cursor].strip().startswith(_FENCE):
        body.append(lines[cursor])
        cursor += 1
    # skip the closing fence when there is one
    return CodeBlockNode(text="\n".join(body), language=language), cursor + 1


def _consume_table(lines: List[str], start: int) -> Tuple[TableNode | None, int]:
    cursor = start
    rows: List[str] = []
    while cursor < len(lines) and lines[cursor].strip().startswith("|"):
        rows.append(lines[cursor])
        cursor += 1
    if len(rows) < 2:
        return None, start
    header = _split_row(rows[0])
    body = tuple(_split_row(row) for row in rows[2:])
    return TableNode(header=header, rows=body), cursor


def parse_markup(text: str) -> List[Node]:
    if not text:
        return []

    lines = text.split("\n")
    nodes: List[Node] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        trimmed = line.strip()

        if trimmed.startswith(_FENCE):
            node, index = _consume_code_block(lines, index)
            nodes.append(node)
            continue

        if trimmed.startswith("|"):
            table, next_index = _consume_table(lines, index)
            if table is not None:
                nodes.append(table)
                index = next_index
                continue

        level = heading_level(line)
        if level:
            nodes.append(HeadingNode(level=level, text=line[level + 1 :]))
        elif trimmed.startswith(">"):
            nodes.append(QuoteNode(text=_QUOTE_MARKER.sub("", trimmed, count=1)))
        elif trimmed.startswith("- "):
            nodes.append(ListItemNode(spans=parse_inline(trimmed[2:])))
        elif trimmed == "":
            nodes.append(SpacerNode())
        else:
            nodes.append(ParagraphNode(spans=parse_inline(line)))
        index += 1

    return nodes


def nodes_to_dicts(nodes: List[Node]) -> List[Dict[str, Any]]:
    """JSON-ready node sequence for the renderer."""
    return [asdict(node) for node in nodes]
