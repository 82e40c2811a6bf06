"""S-expression encoder for KiCad board nodes.

A node is a list whose first item is the tag; the remaining items are
atoms (str, int, float, bool) or nested nodes. None items are skipped.
"""

import re

from .utils import fmt

INDENT = "  "

_BARE_ATOM = re.compile(r"^[A-Za-z_*][A-Za-z0-9_.*:+\-]*$")


def encode_atom(value) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return fmt(value)
    s = str(value)
    if _BARE_ATOM.match(s):
        return s
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'


def _is_flat(node) -> bool:
    """True when no child node has children of its own."""
    return not any(
        isinstance(child, list) and any(isinstance(c, list) for c in child)
        for child in node
    )


def encode(node, depth: int = 0) -> str:
    """Render a node tree as KiCad S-expression text.

    Nodes nested more than one level deep are broken across lines.
    """
    tag, *children = node
    children = [c for c in children if c is not None]
    head = "(" + encode_atom(tag)

    if _is_flat(children):
        parts = [head]
        for child in children:
            parts.append(encode(child, depth + 1) if isinstance(child, list) else encode_atom(child))
        return " ".join(parts) + ")"

    pad = INDENT * (depth + 1)
    lines = [head]
    for child in children:
        if isinstance(child, list):
            lines.append("\n" + pad + encode(child, depth + 1))
        else:
            lines.append(" " + encode_atom(child))
    return "".join(lines) + "\n" + INDENT * depth + ")"
