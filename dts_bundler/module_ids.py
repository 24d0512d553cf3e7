"""
Mapping between file paths and bundled module ids.
"""

import os
import posixpath

DECLARATION_EXTENSIONS = ('.d.ts', '.d.mts', '.d.cts')
SOURCE_EXTENSIONS = ('.tsx', '.ts', '.mts', '.cts')


def normalize_path(path: str) -> str:
    """Convert platform separators to forward slashes."""
    if os.sep != '/':
        path = path.replace(os.sep, '/')
    if os.altsep and os.altsep != '/':
        path = path.replace(os.altsep, '/')
    return path


def is_declaration_file(file_path: str) -> bool:
    return file_path.endswith(DECLARATION_EXTENSIONS)


def is_typescript_source(file_path: str) -> bool:
    return file_path.endswith(SOURCE_EXTENSIONS) and not is_declaration_file(file_path)


def strip_extension(file_path: str) -> str:
    """Remove a declaration or source extension, declaration ones first."""
    for ext in DECLARATION_EXTENSIONS + SOURCE_EXTENSIONS:
        if file_path.endswith(ext):
            return file_path[:-len(ext)]
    return os.path.splitext(file_path)[0]


def declaration_path(file_path: str) -> str:
    """Path of the declaration file the compiler emits for a source file."""
    if is_declaration_file(file_path):
        return file_path
    for source_ext, declaration_ext in (('.mts', '.d.mts'), ('.cts', '.d.cts')):
        if file_path.endswith(source_ext):
            return file_path[:-len(source_ext)] + declaration_ext
    return strip_extension(file_path) + '.d.ts'


def is_under(base_dir: str, file_path: str) -> bool:
    """Whether ``file_path`` lies inside ``base_dir`` (both absolute)."""
    base = os.path.normcase(os.path.normpath(base_dir))
    path = os.path.normcase(os.path.normpath(file_path))
    return path == base or path.startswith(base.rstrip(os.sep) + os.sep)


def to_module_id(base_dir: str, file_path: str, name: str) -> str:
    """
    Build the module id of a file: ``name`` followed by the file's path
    relative to ``base_dir``, extension stripped, forward slashes only.

    Args:
        base_dir: Absolute base directory
        file_path: Absolute path of a file under ``base_dir``
        name: Package name prefix

    Returns:
        Module id such as ``pkg/util/strings``
    """
    relative = os.path.relpath(os.path.normpath(file_path), os.path.normpath(base_dir))
    return f"{name}/{normalize_path(strip_extension(relative))}"


def resolve_module_id(source_module_id: str, specifier: str) -> str:
    """Resolve a relative import specifier against the importing module's id."""
    return posixpath.normpath(posixpath.join(posixpath.dirname(source_module_id), normalize_path(specifier)))
