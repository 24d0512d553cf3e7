"""
Shared fixtures: an in-memory compiler standing in for tsc, and helpers to
lay out small TypeScript projects under a temporary directory.
"""

import os
from typing import Dict, List, Optional

import pytest

from dts_bundler.compiler.base import DeclarationCompiler, Program
from dts_bundler.config_loader import BundleOptions
from dts_bundler.models import Diagnostic, EmitResult, SourceFile
from dts_bundler.module_ids import declaration_path
from dts_bundler.parser import DeclarationParser


class FakeProgram(Program):
    """Program serving canned file lists, emitted declarations and diagnostics."""

    def __init__(
        self,
        files: List[str],
        emitted: Optional[Dict[str, str]] = None,
        diagnostics: Optional[Dict[str, List[Diagnostic]]] = None
    ):
        self.files = files
        self.emitted = emitted or {}
        self.diagnostics = diagnostics or {}
        self.emitted_files: List[str] = []

    def get_source_files(self) -> List[SourceFile]:
        return [SourceFile(path) for path in self.files]

    def get_diagnostics(self, source_file: SourceFile) -> List[Diagnostic]:
        return list(self.diagnostics.get(source_file.file_path, []))

    def emit(self, source_file: SourceFile) -> EmitResult:
        self.emitted_files.append(source_file.file_path)
        text = self.emitted.get(source_file.file_path)
        return EmitResult(
            file_path=declaration_path(source_file.file_path),
            text=text,
            diagnostics=self.get_diagnostics(source_file),
            emit_skipped=text is None
        )


class FakeCompiler(DeclarationCompiler):
    """Returns a program listing the root files in order, plus ``extra_files`` first."""

    def __init__(self, emitted=None, diagnostics=None, extra_files=None):
        self.emitted = emitted or {}
        self.diagnostics = diagnostics or {}
        self.extra_files = extra_files or []
        self.calls = []
        self.program: Optional[FakeProgram] = None

    def create_program(self, files, compiler_options, base_dir) -> Program:
        self.calls.append({'files': list(files), 'compiler_options': dict(compiler_options), 'base_dir': base_dir})
        self.program = FakeProgram(list(self.extra_files) + list(files), self.emitted, self.diagnostics)
        return self.program


class Project:
    """A throwaway TypeScript project rooted at ``root``."""

    def __init__(self, root):
        self.root = root

    def path(self, relative: str) -> str:
        return os.path.join(str(self.root), *relative.split('/'))

    def write(self, relative: str, text: str) -> str:
        path = self.path(relative)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(text)
        return path

    def options(self, **kwargs) -> BundleOptions:
        values = {
            'base_dir': str(self.root),
            'name': 'pkg',
            'out': self.path('dist/pkg.d.ts'),
            'eol': '\n',
        }
        values.update(kwargs)
        return BundleOptions(**values)

    def read_output(self, relative: str = 'dist/pkg.d.ts') -> str:
        with open(self.path(relative), 'r', encoding='utf-8', newline='') as f:
            return f.read()


@pytest.fixture
def project(tmp_path):
    return Project(tmp_path / 'project')


@pytest.fixture
def declaration_parser():
    return DeclarationParser()


@pytest.fixture
def parse(declaration_parser, tmp_path):
    """Parse declaration text as if it lived at ``tmp_path/<name>``."""
    def _parse(text: str, name: str = 'index.d.ts'):
        return declaration_parser.parse(os.path.join(str(tmp_path), name), text)
    return _parse
