"""
Data models for the declaration bundler.
"""

from enum import Enum, Flag
from dataclasses import dataclass, field
from typing import List, Optional

from .module_ids import is_declaration_file


class SyntaxKind(Enum):
    """Node kinds the bundler distinguishes; everything else is OTHER."""
    SOURCE_FILE = "source_file"
    IMPORT_DECLARATION = "import_declaration"
    IMPORT_EQUALS_DECLARATION = "import_equals_declaration"
    EXTERNAL_MODULE_REFERENCE = "external_module_reference"
    EXPORT_DECLARATION = "export_declaration"
    EXPORT_ASSIGNMENT = "export_assignment"
    NAMESPACE_EXPORT_DECLARATION = "namespace_export_declaration"
    DECLARATION = "declaration"
    DECLARE_KEYWORD = "declare_keyword"
    STRING_LITERAL = "string_literal"
    OTHER = "other"


class NodeFlags(Flag):
    """Modifier flags attached to a syntax node."""
    NONE = 0
    EXPORT = 1


@dataclass(eq=False)
class SyntaxNode:
    """A node of a parsed declaration file.

    ``start`` and ``end`` are character offsets into the file text. ``type``
    keeps the grammar's own node type for logging and debugging.
    """
    kind: SyntaxKind
    type: str
    start: int
    end: int
    flags: NodeFlags = NodeFlags.NONE
    children: List['SyntaxNode'] = field(default_factory=list, repr=False)
    parent: Optional['SyntaxNode'] = field(default=None, repr=False)
    # Only set on IMPORT_EQUALS_DECLARATION nodes
    module_reference: Optional['SyntaxNode'] = field(default=None, repr=False)
    # Unquoted value of STRING_LITERAL nodes
    literal: Optional[str] = None

    def has_flag(self, flag: NodeFlags) -> bool:
        return bool(self.flags & flag)

    def find_child(self, kind: SyntaxKind) -> Optional['SyntaxNode']:
        for child in self.children:
            if child.kind is kind:
                return child
        return None


@dataclass(eq=False)
class ParsedDeclarationFile:
    """A declaration file together with its syntax tree."""
    file_path: str
    text: str
    root: SyntaxNode = field(repr=False)
    statements: List[SyntaxNode] = field(default_factory=list, repr=False)
    has_errors: bool = False


@dataclass(frozen=True)
class SourceFile:
    """One entry of the program's file list, in compiler order."""
    file_path: str

    @property
    def is_declaration(self) -> bool:
        return is_declaration_file(self.file_path)


@dataclass(frozen=True)
class Diagnostic:
    """A compiler diagnostic. ``line`` and ``column`` are 1-based."""
    file: Optional[str]
    line: int
    column: int
    code: int
    message: str
    category: str = "error"

    def to_dict(self) -> dict:
        return {
            'file': self.file,
            'line': self.line,
            'column': self.column,
            'code': self.code,
            'message': self.message,
        }


@dataclass
class EmitResult:
    """Declaration output produced by the compiler for one source file."""
    file_path: str
    text: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)
    emit_skipped: bool = False

    @property
    def failed(self) -> bool:
        return self.emit_skipped or bool(self.diagnostics)
