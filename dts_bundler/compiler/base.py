"""
Base classes for the compiler the bundler drives.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any

from ..models import Diagnostic, EmitResult, SourceFile


class Program(ABC):
    """A compiled set of root files."""

    @abstractmethod
    def get_source_files(self) -> List[SourceFile]:
        """Return every file of the program in dependency order."""
        pass

    @abstractmethod
    def emit(self, source_file: SourceFile) -> EmitResult:
        """Return the declaration text emitted for a non-declaration source file."""
        pass

    @abstractmethod
    def get_diagnostics(self, source_file: SourceFile) -> List[Diagnostic]:
        """Return every diagnostic reported against the file."""
        pass

    def get_source_text(self, source_file: SourceFile) -> str:
        """Return the file's text with its line endings untouched."""
        with open(source_file.file_path, 'r', encoding='utf-8-sig', newline='') as f:
            return f.read()


class DeclarationCompiler(ABC):
    """Creates programs from root files and compiler options."""

    @abstractmethod
    def create_program(self, files: List[str], compiler_options: Dict[str, Any], base_dir: str) -> Program:
        """Compile ``files`` and return the resulting program.

        Raises:
            ConfigurationError: the compiler rejected the options
            CompilerInvocationError: the compiler could not be run
        """
        pass
