"""
Declaration file parser built on tree-sitter.

Converts the tree-sitter concrete syntax tree into the bundler's own
``SyntaxNode`` tree, tagging the handful of node kinds the classifier and
the emitter care about.
"""

import logging
from typing import Dict, List, Optional, Any

import tree_sitter
import tree_sitter_typescript

from .models import NodeFlags, ParsedDeclarationFile, SyntaxKind, SyntaxNode

_LANGUAGE_CACHE: Dict[str, Any] = {}

DECLARATION_TYPES = {
    'ambient_declaration',
    'interface_declaration',
    'type_alias_declaration',
    'enum_declaration',
    'class_declaration',
    'abstract_class_declaration',
    'function_signature',
    'function_declaration',
    'lexical_declaration',
    'variable_declaration',
    'module',
    'internal_module',
}


def get_typescript_language() -> tree_sitter.Language:
    """Return the tree-sitter TypeScript language, loading it once."""
    lang = _LANGUAGE_CACHE.get('typescript')
    if lang is None:
        lang = tree_sitter.Language(tree_sitter_typescript.language_typescript())
        _LANGUAGE_CACHE['typescript'] = lang
        logging.debug("Loaded tree-sitter language 'typescript'")
    return lang


class _Offsets:
    """Maps UTF-8 byte offsets reported by tree-sitter to string indices."""

    def __init__(self, text: str, source: bytes):
        self.text = text
        self._table: Optional[List[int]] = None
        if len(source) != len(text):
            table = []
            for index, char in enumerate(text):
                table.extend([index] * len(char.encode('utf-8')))
            table.append(len(text))
            self._table = table

    def __call__(self, byte_offset: int) -> int:
        if self._table is None:
            return byte_offset
        return self._table[byte_offset]


class DeclarationParser:
    """Parses declaration text into ``ParsedDeclarationFile`` objects."""

    def __init__(self):
        self._parser = tree_sitter.Parser(get_typescript_language())

    def parse(self, file_path: str, text: str) -> ParsedDeclarationFile:
        source = text.encode('utf-8')
        tree = self._parser.parse(source)
        offsets = _Offsets(text, source)

        root = self._convert(tree.root_node, None, offsets)
        statements = [child for child in root.children if child.type != 'comment']

        has_errors = tree.root_node.has_error
        if has_errors:
            logging.warning(f"Syntax errors in {file_path}; bundling its text as parsed")

        return ParsedDeclarationFile(
            file_path=file_path,
            text=text,
            root=root,
            statements=statements,
            has_errors=has_errors
        )

    def _convert(self, ts_node, parent: Optional[SyntaxNode], offsets: _Offsets) -> SyntaxNode:
        kind, flags = self._classify(ts_node)
        node = SyntaxNode(
            kind=kind,
            type=ts_node.type,
            start=offsets(ts_node.start_byte),
            end=offsets(ts_node.end_byte),
            flags=flags,
            parent=parent
        )

        if ts_node.type == 'import_require_clause':
            node.children = self._convert_require_clause(ts_node, node, offsets)
        else:
            children = [self._convert(child, node, offsets) for child in ts_node.children]
            node.children = _join_split_require_imports(children, offsets.text)

        if kind is SyntaxKind.STRING_LITERAL:
            node.literal = _unquote(offsets.text[node.start:node.end])
        elif kind is SyntaxKind.DECLARE_KEYWORD:
            node.end = _skip_one_blank(offsets.text, node.end)
        elif kind is SyntaxKind.IMPORT_EQUALS_DECLARATION:
            node.module_reference = self._find_module_reference(node)
        return node

    def _convert_require_clause(self, ts_node, clause: SyntaxNode, offsets: _Offsets) -> List[SyntaxNode]:
        """Group ``require ( 'path' )`` into one external module reference node."""
        ts_children = ts_node.children
        require_index = next(
            (i for i, child in enumerate(ts_children) if child.type == 'require' and not child.is_named),
            None
        )
        if require_index is None:
            return [self._convert(child, clause, offsets) for child in ts_children]

        children = [self._convert(child, clause, offsets) for child in ts_children[:require_index]]
        reference_parts = ts_children[require_index:]
        reference = SyntaxNode(
            kind=SyntaxKind.EXTERNAL_MODULE_REFERENCE,
            type='external_module_reference',
            start=offsets(reference_parts[0].start_byte),
            end=offsets(reference_parts[-1].end_byte),
            parent=clause
        )
        reference.children = [self._convert(child, reference, offsets) for child in reference_parts]
        children.append(reference)
        return children

    @staticmethod
    def _find_module_reference(node: SyntaxNode) -> Optional[SyntaxNode]:
        if node.type == 'import_alias':
            # import A = B.C;  the entity name follows '='
            seen_equals = False
            for child in node.children:
                if seen_equals and child.type != 'comment':
                    return child
                seen_equals = child.type == '='
            return None

        for child in node.children:
            if child.type == 'import_require_clause':
                return child.find_child(SyntaxKind.EXTERNAL_MODULE_REFERENCE)
        return None

    @staticmethod
    def _classify(ts_node):
        node_type = ts_node.type

        if node_type == 'program':
            return SyntaxKind.SOURCE_FILE, NodeFlags.NONE

        if node_type == 'import_statement':
            if any(child.type == 'import_require_clause' for child in ts_node.children):
                return SyntaxKind.IMPORT_EQUALS_DECLARATION, NodeFlags.NONE
            return SyntaxKind.IMPORT_DECLARATION, NodeFlags.NONE

        if node_type == 'import_alias':
            return SyntaxKind.IMPORT_EQUALS_DECLARATION, NodeFlags.NONE

        if node_type == 'export_statement':
            return _classify_export(ts_node)

        if node_type == 'string':
            return SyntaxKind.STRING_LITERAL, NodeFlags.NONE

        if node_type == 'declare' and not ts_node.is_named:
            return SyntaxKind.DECLARE_KEYWORD, NodeFlags.NONE

        if node_type in DECLARATION_TYPES:
            return SyntaxKind.DECLARATION, NodeFlags.NONE

        return SyntaxKind.OTHER, NodeFlags.NONE


def _classify_export(ts_node):
    if ts_node.child_by_field_name('declaration') is not None:
        return SyntaxKind.DECLARATION, NodeFlags.EXPORT
    if ts_node.child_by_field_name('value') is not None:
        # export default <expression>;
        return SyntaxKind.EXPORT_ASSIGNMENT, NodeFlags.NONE

    token_types = [child.type for child in ts_node.children if not child.is_named]
    if '=' in token_types:
        return SyntaxKind.EXPORT_ASSIGNMENT, NodeFlags.NONE
    if 'as' in token_types and 'namespace' in token_types:
        return SyntaxKind.NAMESPACE_EXPORT_DECLARATION, NodeFlags.NONE
    return SyntaxKind.EXPORT_DECLARATION, NodeFlags.NONE


def _unquote(raw: str) -> str:
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ('"', "'", '`'):
        return raw[1:-1]
    return raw


def _skip_one_blank(text: str, offset: int) -> int:
    if offset < len(text) and text[offset] in (' ', '\t'):
        return offset + 1
    return offset


def _split_require_alias(node: SyntaxNode, text: str) -> Optional[SyntaxNode]:
    """Return the ``import_alias`` of ``export import A = require`` cut short before ``(``."""
    if node.type != 'export_statement':
        return None
    alias = next((child for child in node.children if child.type == 'import_alias'), None)
    if alias is None:
        return None
    tokens = [child for child in alias.children if child.end > child.start and child.type != 'comment']
    if tokens and tokens[-1].type == 'identifier' and text[tokens[-1].start:tokens[-1].end] == 'require':
        return alias
    return None


def _parenthesized_string(node: Optional[SyntaxNode]) -> Optional[SyntaxNode]:
    """Return the ``('path')`` expression of a statement consisting of just that."""
    if node is None or node.type != 'expression_statement' or not node.children:
        return None
    expression = node.children[0]
    if expression.type != 'parenthesized_expression':
        return None
    if [child.type for child in expression.children if child.type != 'comment'] != ['(', 'string', ')']:
        return None
    return expression


def _join_split_require_imports(children: List[SyntaxNode], text: str) -> List[SyntaxNode]:
    """
    Fold ``export import A = require('./a');`` back into one statement.

    tree-sitter-typescript reads it as an export of ``import A = require``
    followed by a separate ``('./a');`` expression statement. The two are
    merged and given the same external module reference as a plain
    ``import A = require('./a')``.
    """
    joined = []
    index = 0
    while index < len(children):
        statement = children[index]
        following = children[index + 1] if index + 1 < len(children) else None
        alias = _split_require_alias(statement, text)
        call = _parenthesized_string(following) if alias is not None else None
        if call is None:
            joined.append(statement)
            index += 1
            continue

        require = [c for c in alias.children if c.end > c.start and c.type != 'comment'][-1]
        reference = SyntaxNode(
            kind=SyntaxKind.EXTERNAL_MODULE_REFERENCE,
            type='external_module_reference',
            start=require.start,
            end=call.end,
            parent=alias
        )
        reference.children = [require] + call.children
        for child in reference.children:
            child.parent = reference

        # Zero-width nodes are the semicolons tree-sitter assumed missing
        alias.children = [child for child in alias.children if child is not require and child.end > child.start]
        alias.children.append(reference)
        alias.end = call.end
        alias.module_reference = reference

        rest = [child for child in following.children if child is not call]
        statement.children = [child for child in statement.children if child.end > child.start] + rest
        for child in rest:
            child.parent = statement
        statement.end = following.end

        joined.append(statement)
        index += 2
    return joined
