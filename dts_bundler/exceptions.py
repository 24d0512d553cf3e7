"""
Custom exceptions for dts-bundler.

Every failure of a bundling run is surfaced as one of these, carrying
structured details for the command line and for callers embedding the bundler.
"""

from typing import List, Dict, Any, Optional


class BundlerError(Exception):
    """Base exception for bundler errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to a serializable error report."""
        return {
            'type': self.__class__.__name__,
            'message': self.message,
            'details': self.details
        }


class ConfigurationError(BundlerError):
    """Invalid bundle options or project configuration."""

    def __init__(self, message: str, config_file: str = None):
        super().__init__(
            message,
            details={'config_file': config_file}
        )
        self.config_file = config_file


class CompilationError(BundlerError):
    """The compiler reported diagnostics for a source file."""

    def __init__(self, file_path: str, diagnostics: List[Dict[str, Any]]):
        message = 'Declaration generation failed'
        for diagnostic in diagnostics:
            message += (
                f"\n{diagnostic['file']}({diagnostic['line']},{diagnostic['column']}): "
                f"error TS{diagnostic['code']}: {diagnostic['message']}"
            )
        super().__init__(
            message,
            details={
                'file': file_path,
                'diagnostics': diagnostics
            }
        )
        self.file_path = file_path
        self.diagnostics = diagnostics


class CompilerInvocationError(BundlerError):
    """The compiler process could not be run."""

    def __init__(self, command: List[str], reason: str, exit_code: Optional[int] = None):
        super().__init__(
            f"Failed to run {' '.join(command)}: {reason}",
            details={
                'command': command,
                'reason': reason,
                'exit_code': exit_code
            }
        )
