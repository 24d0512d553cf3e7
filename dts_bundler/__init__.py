"""
dts-bundler

Bundles a project's TypeScript declaration files into a single .d.ts file
that declares every module under a package-level name.
"""

from .models import SyntaxKind, NodeFlags, SyntaxNode, ParsedDeclarationFile, SourceFile, Diagnostic, EmitResult
from .module_ids import to_module_id
from .tree_rewriter import rewrite
from .classifier import is_external_module
from .emitter import DeclarationEmitter
from .parser import DeclarationParser
from .config_loader import BundleOptions, ConfigLoader, load_config
from .bundler import DeclarationBundler, generate
from .exceptions import BundlerError, ConfigurationError, CompilationError, CompilerInvocationError

__all__ = [
    'SyntaxKind', 'NodeFlags', 'SyntaxNode', 'ParsedDeclarationFile', 'SourceFile', 'Diagnostic', 'EmitResult',
    'to_module_id', 'rewrite', 'is_external_module', 'DeclarationEmitter', 'DeclarationParser',
    'BundleOptions', 'ConfigLoader', 'load_config', 'DeclarationBundler', 'generate',
    'BundlerError', 'ConfigurationError', 'CompilationError', 'CompilerInvocationError'
]
