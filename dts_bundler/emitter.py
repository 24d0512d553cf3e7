"""
Writes one declaration file into the bundle.

External modules are wrapped in a ``declare module '<id>'`` block with their
relative module paths rewritten to bundled ids; ambient files are copied
through unchanged.
"""

import logging
import re
from typing import Optional, TextIO

from .classifier import is_external_module
from .models import ParsedDeclarationFile, SyntaxKind, SyntaxNode
from .module_ids import resolve_module_id, to_module_id
from .tree_rewriter import rewrite

MODULE_SPECIFIER_PARENTS = (SyntaxKind.IMPORT_DECLARATION, SyntaxKind.EXPORT_DECLARATION)


class DeclarationEmitter:
    """Emits parsed declaration files to an output sink."""

    def __init__(self, sink: TextIO, base_dir: str, name: str, eol: str = '\n', indent: str = '\t'):
        self.sink = sink
        self.base_dir = base_dir
        self.name = name
        self.eol = eol
        self.indent = indent
        # A line break not followed by another line break or the end of input
        self._non_empty_line_start = re.compile(
            re.escape(eol) + '(?!' + re.escape(eol) + r'|\Z)'
        )

    def emit(self, file: ParsedDeclarationFile):
        source_module_id = to_module_id(self.base_dir, file.file_path, self.name)

        if not is_external_module(file):
            logging.debug(f"{file.file_path} is an ambient declaration file")
            self.sink.write(file.text)
            return

        logging.debug(f"Wrapping {file.file_path} as module '{source_module_id}'")
        self.sink.write(self.eol + f"declare module '{source_module_id}' {{" + self.eol + self.indent)

        content = rewrite(file.text, file.root, self._make_replacer(source_module_id))

        self.sink.write(self.reindent(content))
        self.sink.write(self.eol + '}' + self.eol)

    def reindent(self, content: str) -> str:
        """Nest every non-empty line one indent unit deeper."""
        indent = self.indent
        return self._non_empty_line_start.sub(lambda match: match.group(0) + indent, content)

    @staticmethod
    def _make_replacer(source_module_id: str):
        def replacer(node: SyntaxNode) -> Optional[str]:
            kind = node.kind

            if kind is SyntaxKind.EXTERNAL_MODULE_REFERENCE:
                literal = node.find_child(SyntaxKind.STRING_LITERAL)
                if literal is not None and literal.literal.startswith('.'):
                    return f"require('{resolve_module_id(source_module_id, literal.literal)}')"
                return None

            if kind is SyntaxKind.DECLARE_KEYWORD:
                return ''

            if (
                kind is SyntaxKind.STRING_LITERAL
                and node.parent is not None
                and node.parent.kind in MODULE_SPECIFIER_PARENTS
                and node.literal.startswith('.')
            ):
                return f"'{resolve_module_id(source_module_id, node.literal)}'"

            return None

        return replacer
