"""Mustache-style variable substitution for prompt text.

Supported tags:

- ``{{name}}`` and dotted paths such as ``{{doc.links.0}}``
- ``{{#name}}...{{/name}}`` renders when the value is truthy; lists repeat
  the block once per item
- ``{{^name}}...{{/name}}`` renders when the value is falsy or missing
- ``{{.}}`` is the current item; ``first``, ``last`` and ``index`` are
  available while iterating a list

Missing values render as an empty string. Output is never HTML-escaped.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"\{\{\{\s*(?P<raw>[^}]+?)\s*\}\}\}|\{\{\s*(?P<kind>[#^/&]?)\s*(?P<name>[^}]*?)\s*\}\}")
_STANDALONE_RE = re.compile(r"^[ \t]*(\{\{\s*[#^/][^}]*\}\})[ \t]*$\n?", re.MULTILINE)

_HELPER_NAMES = frozenset({".", "first", "last", "index"})

Node = tuple[Any, ...]


def _strip_standalone(template: str) -> str:
    """Drop the line around section tags that sit alone on a line."""
    return _STANDALONE_RE.sub(r"\1", template)


def parse(template: str) -> list[Node]:
    """Parse template text into a node tree.

    Unbalanced section tags do not raise: a close tag with no matching open
    tag is dropped and sections left open at the end are closed implicitly.
    """
    root: list[Node] = []
    stack: list[tuple[str, bool, list[Node]]] = []
    current = root
    pos = 0
    text = _strip_standalone(template)

    for match in _TAG_RE.finditer(text):
        if match.start() > pos:
            current.append(("text", text[pos : match.start()]))
        pos = match.end()

        if match.group("raw") is not None:
            current.append(("var", match.group("raw")))
            continue

        kind = match.group("kind")
        name = match.group("name")
        if kind in ("#", "^"):
            children: list[Node] = []
            current.append(("section", name, kind == "^", children))
            stack.append((name, kind == "^", children))
            current = children
        elif kind == "/":
            open_names = [entry[0] for entry in stack]
            if name not in open_names:
                logger.warning("Ignoring unmatched closing tag {{/%s}}", name)
                continue
            while stack:
                closed = stack.pop()[0]
                if closed == name:
                    break
                logger.warning("Section {{#%s}} closed implicitly by {{/%s}}", closed, name)
            current = stack[-1][2] if stack else root
        elif name:
            current.append(("var", name))

    if pos < len(text):
        current.append(("text", text[pos:]))
    for name, _inverted, _children in stack:
        logger.warning("Section {{#%s}} is never closed", name)
    return root


def lookup(name: str, stack: Sequence[Any]) -> Any:
    """Resolve a (possibly dotted) name against a context stack, top first."""
    if name == ".":
        return stack[-1] if stack else None

    head, *rest = name.split(".")
    value: Any = None
    for frame in reversed(stack):
        if isinstance(frame, Mapping) and head in frame:
            value = frame[head]
            break
    else:
        return None

    for segment in rest:
        if isinstance(value, Mapping):
            value = value.get(segment)
        elif isinstance(value, list | tuple) and segment.isdigit():
            index = int(segment)
            value = value[index] if index < len(value) else None
        else:
            return None
        if value is None:
            return None
    return value


def format_value(value: Any) -> str:
    """Render a context value as prompt text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list | tuple):
        return ", ".join(format_value(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, indent=2, default=str)
    return str(value)


def _render_nodes(nodes: list[Node], stack: list[Any]) -> str:
    out: list[str] = []
    for node in nodes:
        kind = node[0]
        if kind == "text":
            out.append(node[1])
        elif kind == "var":
            out.append(format_value(lookup(node[1], stack)))
        else:
            _, name, inverted, children = node
            value = lookup(name, stack)
            if inverted:
                if not value:
                    out.append(_render_nodes(children, stack))
                continue
            if not value:
                continue
            if isinstance(value, list | tuple):
                last_index = len(value) - 1
                for index, item in enumerate(value):
                    helpers = {"first": index == 0, "last": index == last_index, "index": index}
                    out.append(_render_nodes(children, [*stack, helpers, item]))
            else:
                out.append(_render_nodes(children, [*stack, value]))
    return "".join(out)


def render(template: str, context: Mapping[str, Any]) -> str:
    """Substitute a context into template text."""
    return _render_nodes(parse(template), [context])


def placeholder_names(template: str) -> list[str]:
    """Return top-level names referenced by a template, in first-use order."""
    names: list[str] = []

    def _walk(nodes: list[Node]) -> None:
        for node in nodes:
            if node[0] == "text":
                continue
            head = node[1].split(".")[0]
            if head and head not in _HELPER_NAMES and head not in names:
                names.append(head)
            if node[0] == "section":
                _walk(node[3])

    _walk(parse(template))
    return names


def find_template_issues(template: str) -> list[str]:
    """Report structural problems in template text."""
    issues: list[str] = []
    opens = template.count("{{")
    closes = template.count("}}")
    if opens != closes:
        issues.append(f"mismatched braces: {opens} '{{{{' vs {closes} '}}}}'")

    stack: list[str] = []
    for match in _TAG_RE.finditer(template):
        if match.group("raw") is not None:
            continue
        kind, name = match.group("kind"), match.group("name")
        if not name:
            issues.append("empty tag '{{}}'")
        elif " " in name:
            issues.append(f"tag name contains spaces: '{name}'")
        elif kind in ("#", "^"):
            stack.append(name)
        elif kind == "/":
            if not stack:
                issues.append(f"closing tag without opening tag: '{{{{/{name}}}}}'")
            elif stack[-1] != name:
                issues.append(f"section '{stack[-1]}' closed by '{name}'")
                if name in stack:
                    while stack and stack.pop() != name:
                        pass
            else:
                stack.pop()
    for name in stack:
        issues.append(f"unclosed section '{name}'")
    return issues
