"""
Template Tokenizer
==================

Splits a template into a tree of typed nodes. Loop blocks own their body
nodes, so nesting is resolved once here and rendering never has to re-scan
text it has already produced.
"""

from dataclasses import dataclass, field
from typing import List, Union
import re

from quick_html_pdf.core.exceptions import TemplateError

# Alternation order matters: raw tags must win over the escaped form that
# would otherwise match their inner ``{{path}}``.
_TAG_PATTERN = re.compile(
    r"(?P<raw>\{\{\{\s*(?P<raw_path>[\w.]+)\s*\}\}\})"
    r"|(?P<open>\{\{#each\s+(?P<each_path>[\w.]+)\s*\}\})"
    r"|(?P<close>\{\{/each\}\})"
    r"|(?P<escaped>\{\{\s*(?P<escaped_path>[\w.@]+)\s*\}\})"
)


@dataclass
class TextNode:
    """Literal template text."""
    text: str


@dataclass
class EscapedTag:
    """``{{path}}`` interpolation."""
    path: str
    source: str


@dataclass
class RawTag:
    """``{{{path}}}`` interpolation."""
    path: str
    source: str


@dataclass
class EachBlock:
    """``{{#each path}}...{{/each}}`` loop with its body."""
    path: str
    source: str
    line: int
    children: List["Node"] = field(default_factory=list)


Node = Union[TextNode, EscapedTag, RawTag, EachBlock]


def tokenize(template: str) -> List[Node]:
    """
    Parse a template into a node tree.

    Args:
        template: Template source

    Returns:
        Top-level nodes in source order

    Raises:
        TemplateError: On a closing tag without an opener or an unclosed loop block
    """
    root: List[Node] = []
    open_blocks: List[EachBlock] = []
    position = 0

    for match in _TAG_PATTERN.finditer(template):
        current = open_blocks[-1].children if open_blocks else root

        if match.start() > position:
            current.append(TextNode(template[position : match.start()]))
        position = match.end()

        if match.group("raw"):
            current.append(RawTag(match.group("raw_path"), match.group(0)))
        elif match.group("open"):
            block = EachBlock(
                path=match.group("each_path"),
                source=match.group(0),
                line=_line_of(template, match.start()),
            )
            current.append(block)
            open_blocks.append(block)
        elif match.group("close"):
            if not open_blocks:
                raise TemplateError(
                    "Unexpected closing tag",
                    f"Found {{{{/each}}}} without matching {{{{#each}}}} "
                    f"on line {_line_of(template, match.start())}",
                    kind="unexpected_close",
                )
            open_blocks.pop()
        else:
            current.append(EscapedTag(match.group("escaped_path"), match.group(0)))

    if position < len(template):
        current = open_blocks[-1].children if open_blocks else root
        current.append(TextNode(template[position:]))

    if open_blocks:
        block = open_blocks[-1]
        raise TemplateError(
            "Unclosed each block",
            f'Block for "{block.path}" opened on line {block.line} is not closed',
            path=block.path,
            kind="unclosed_block",
        )

    return root


def _line_of(template: str, offset: int) -> int:
    return template.count("\n", 0, offset) + 1
