"""
External module detection for declaration files.
"""

from .models import NodeFlags, ParsedDeclarationFile, SyntaxKind, SyntaxNode


def _is_external_marker(statement: SyntaxNode) -> bool:
    if statement.has_flag(NodeFlags.EXPORT):
        return True

    kind = statement.kind
    if kind is SyntaxKind.IMPORT_EQUALS_DECLARATION:
        reference = statement.module_reference
        return reference is not None and reference.kind is SyntaxKind.EXTERNAL_MODULE_REFERENCE
    if kind is SyntaxKind.IMPORT_DECLARATION:
        return True
    if kind is SyntaxKind.EXPORT_ASSIGNMENT:
        return True
    if kind is SyntaxKind.EXPORT_DECLARATION:
        return True
    return False


def is_external_module(file: ParsedDeclarationFile) -> bool:
    """Whether the file is a module (has imports or exports) rather than a global script."""
    return any(_is_external_marker(statement) for statement in file.statements)
