"""
Templating Module
=================

Minimal HTML template engine.

Components:
- resolver: Dot-path lookups and the immutable scope chain used by loops
- tokenizer: Template source to node tree
- engine: Recursive rendering of the node tree against data

Supported syntax:
- ``{{key}}`` HTML-escaped interpolation, ``{{nested.path}}`` dot notation
- ``{{{rawHtml}}}`` unescaped interpolation
- ``{{#each items}}...{{/each}}`` loop blocks with ``{{this}}``, ``{{this.field}}``,
  ``{{@index}}``, ``{{@index1}}``, ``{{@first}}`` and ``{{@last}}``
"""

from .engine import TemplateEngine, render, to_text, escape_html
from .resolver import MISSING, Scope, resolve

__all__ = ["TemplateEngine", "render", "to_text", "escape_html", "MISSING", "Scope", "resolve"]
