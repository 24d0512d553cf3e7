"""
Compiler adapters.
"""

from .base import DeclarationCompiler, Program
from .tsc import TscCompiler, TscProgram, parse_tsc_output

__all__ = ['DeclarationCompiler', 'Program', 'TscCompiler', 'TscProgram', 'parse_tsc_output']
