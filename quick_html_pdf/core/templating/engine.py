"""
Template Engine
===============

Renders HTML templates against nested data.

The template is tokenized into a node tree and rendered in a single
recursive pass. Substituted values are written straight to the output and
are never scanned for tags again, so each tag in the source is consumed
exactly once. Loop iterations render against a child scope layered on top of
the enclosing one; the caller's data is only ever read.
"""

from collections.abc import Mapping, Sequence
from typing import Any, List
import json
import re

from quick_html_pdf.config.logging import get_logger
from quick_html_pdf.core.exceptions import TemplateError
from .resolver import MISSING, Scope, resolve
from .tokenizer import EachBlock, EscapedTag, Node, RawTag, TextNode, tokenize

logger = get_logger(__name__)

_RESIDUAL_OPEN = re.compile(r"\{\{#each\s+([\w.]+)")


def escape_html(text: str) -> str:
    """Escape HTML special characters for element content (quotes are left as-is)."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def to_text(value: Any) -> str:
    """
    Convert a data value to its template string form.

    ``None`` and missing values render empty, booleans as ``true``/``false``,
    mappings and sequences as compact JSON, everything else through ``str``.
    """
    if value is None or value is MISSING:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(_plain(value), ensure_ascii=False, default=str)
    return str(value)


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


class TemplateEngine:
    """Template engine that processes HTML templates with dynamic data."""

    def __init__(self) -> None:
        self.logger: Any = logger.bind(component="template_engine")  # structlog.BoundLoggerBase

    def render(self, template: str, data: Mapping) -> str:
        """
        Render a template with the given data.

        Args:
            template: Template source
            data: Data context; never modified

        Returns:
            Rendered HTML fragment

        Raises:
            TemplateError: If the template syntax is invalid or a loop target
                is missing or not a list
        """
        try:
            nodes = tokenize(template)
            result = self._render_nodes(nodes, Scope(data))
            self._validate_no_remaining_tags(result)
        except TemplateError as e:
            self.logger.debug("Template rendering failed", error=e.message, path=e.path)
            raise
        except Exception as e:
            raise TemplateError("Template rendering failed", str(e)) from e

        self.logger.debug(
            "Template rendered", template_length=len(template), output_length=len(result)
        )
        return result

    def _render_nodes(self, nodes: List[Node], scope: Scope) -> str:
        parts: List[str] = []
        for node in nodes:
            if isinstance(node, TextNode):
                parts.append(node.text)
            elif isinstance(node, EachBlock):
                parts.append(self._render_each(node, scope))
            elif isinstance(node, RawTag):
                parts.append(to_text(resolve(node.path, scope)))
            elif isinstance(node, EscapedTag):
                parts.append(self._render_escaped(node, scope))
        return "".join(parts)

    def _render_escaped(self, node: EscapedTag, scope: Scope) -> str:
        if node.path.startswith("@"):
            # Loop variables are looked up by their full name; outside a loop
            # the tag stays visible instead of silently disappearing.
            value = scope.get(node.path)
            if value is None:
                return node.source
            return escape_html(to_text(value))

        return escape_html(to_text(resolve(node.path, scope)))

    def _render_each(self, block: EachBlock, scope: Scope) -> str:
        items = resolve(block.path, scope)

        if items is MISSING or items is None:
            raise TemplateError(
                f"Each block key not found: {block.path}",
                f"Available keys: {', '.join(str(key) for key in scope)}",
                path=block.path,
                kind="each_target_not_found",
            )

        if not _is_sequence(items):
            raise TemplateError(
                f"Each block requires a list, got {type(items).__name__}",
                f"Key: {block.path}",
                path=block.path,
                kind="each_target_not_sequence",
            )

        count = len(items)
        parts: List[str] = []
        for index, item in enumerate(items):
            item_scope = scope.child(
                {
                    "@index": index,
                    "@index1": index + 1,
                    "@first": index == 0,
                    "@last": index == count - 1,
                }
            )
            if isinstance(item, Mapping):
                item_scope = item_scope.child(item)
            item_scope = item_scope.child({"this": item})
            parts.append(self._render_nodes(block.children, item_scope))

        return "".join(parts)

    def _validate_no_remaining_tags(self, result: str) -> None:
        """Validate that no loop tags survive in the rendered output."""
        if "{{#each" in result:
            match = _RESIDUAL_OPEN.search(result)
            raise TemplateError(
                "Unclosed each block",
                f'Block for "{match.group(1)}" is not closed' if match else None,
                path=match.group(1) if match else None,
                kind="unclosed_block",
            )

        if "{{/each}}" in result:
            raise TemplateError(
                "Unexpected closing tag",
                "Found {{/each}} without matching {{#each}}",
                kind="unexpected_close",
            )


_default_engine = None


def render(template: str, data: Mapping) -> str:
    """Render a template with the shared engine instance."""
    global _default_engine
    if _default_engine is None:
        _default_engine = TemplateEngine()
    return _default_engine.render(template, data)
