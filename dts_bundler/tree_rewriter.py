"""
Text-preserving rewrite of a syntax tree.

Text the walk does not replace is copied from the source verbatim, so
whitespace and comments survive byte for byte.
"""

from typing import Callable, Optional

from .models import SyntaxNode

Replacer = Callable[[SyntaxNode], Optional[str]]


def rewrite(source_text: str, root: SyntaxNode, replacer: Replacer) -> str:
    """Rewrite ``source_text`` by replacing the nodes ``replacer`` picks.

    Nodes are visited in pre-order. When ``replacer`` returns a string it
    stands in for the whole node and its children are not visited; when it
    returns None the walk descends into the children.
    """
    parts = []
    cursor = 0

    def visit(node: SyntaxNode):
        nonlocal cursor
        if node.start > cursor:
            parts.append(source_text[cursor:node.start])
            cursor = node.start

        replacement = replacer(node)
        if replacement is not None:
            parts.append(replacement)
            cursor = max(cursor, node.end)
            return

        for child in node.children:
            visit(child)

    visit(root)
    parts.append(source_text[cursor:])
    return ''.join(parts)
