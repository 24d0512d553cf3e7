"""
Tests for the text-preserving tree rewriter.
"""

from dts_bundler.models import SyntaxKind, SyntaxNode
from dts_bundler.tree_rewriter import rewrite


def _node(kind, start, end, children=()):
    node = SyntaxNode(kind=kind, type=kind.value, start=start, end=end)
    node.children = list(children)
    for child in node.children:
        child.parent = node
    return node


def _sample():
    #       0         1         2
    #       0123456789012345678901234567
    text = "  /* c */ foo(bar, baz)  // x"
    bar = _node(SyntaxKind.OTHER, 14, 17)
    baz = _node(SyntaxKind.STRING_LITERAL, 19, 22)
    call = _node(SyntaxKind.OTHER, 10, 23, [bar, baz])
    root = _node(SyntaxKind.SOURCE_FILE, 10, 23, [call])
    return text, root, bar, baz, call


def test_null_replacer_is_identity():
    text, root, *_ = _sample()
    assert rewrite(text, root, lambda node: None) == text


def test_single_replacement_splices_text():
    text, root, bar, baz, call = _sample()

    result = rewrite(text, root, lambda node: 'QUX' if node is baz else None)

    assert result == text[:baz.start] + 'QUX' + text[baz.end:]


def test_replaced_node_children_are_not_visited():
    text, root, bar, baz, call = _sample()
    visited = []

    def replacer(node):
        visited.append(node)
        return 'call()' if node is call else None

    result = rewrite(text, root, replacer)

    assert result == text[:call.start] + 'call()' + text[call.end:]
    assert bar not in visited and baz not in visited


def test_empty_replacement_deletes_span():
    text, root, bar, baz, call = _sample()
    result = rewrite(text, root, lambda node: '' if node is bar else None)
    assert result == "  /* c */ foo(, baz)  // x"


def test_identity_on_parsed_declarations(parse):
    text = (
        "/// <reference path=\"./globals.d.ts\" />\n"
        "// héllo wörld\n"
        "import { f } from './a';\n"
        "\n"
        "export declare function g(x: number): void; /* trailing */\n"
    )
    file = parse(text)
    assert rewrite(file.text, file.root, lambda node: None) == text


def test_rewrite_after_non_ascii_text(parse):
    text = "// ünïcödé\nimport { f } from './a';\nexport const x: number;\n"
    file = parse(text)

    result = rewrite(
        file.text,
        file.root,
        lambda node: "'pkg/a'" if node.kind is SyntaxKind.STRING_LITERAL else None
    )

    assert result == "// ünïcödé\nimport { f } from 'pkg/a';\nexport const x: number;\n"
