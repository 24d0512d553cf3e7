"""
Compiler adapter running the TypeScript compiler (``tsc``) as a subprocess.

The whole program is compiled once with ``emitDeclarationOnly`` into a
temporary directory; the emitted declarations, the ordered file list and the
diagnostics are then served per source file.
"""

import json
import logging
import os
import re
import shlex
import shutil
import subprocess
import tempfile
from typing import Dict, List, Optional, Tuple, Any

from ..exceptions import CompilerInvocationError, ConfigurationError
from ..models import Diagnostic, EmitResult, SourceFile
from ..module_ids import declaration_path, is_declaration_file, is_under
from .base import DeclarationCompiler, Program

TSC_ENV_VAR = 'DTS_BUNDLER_TSC'

# Seconds allowed for one compiler run
DEFAULT_TIMEOUT = 600

DIAGNOSTIC_PATTERN = re.compile(
    r'^(?P<file>.+?)\((?P<line>\d+),(?P<column>\d+)\): '
    r'(?P<category>error|warning|message) TS(?P<code>\d+): (?P<message>.*)$'
)
GLOBAL_DIAGNOSTIC_PATTERN = re.compile(
    r'^(?P<category>error|warning|message) TS(?P<code>\d+): (?P<message>.*)$'
)

# Options that would redirect or suppress the declaration output we read back
CONFLICTING_OPTIONS = (
    'watch', 'diagnostics', 'noEmit', 'noEmitOnError', 'outFile', 'out', 'outDir',
    'declarationDir', 'declarationMap', 'incremental', 'composite', 'tsBuildInfoFile',
)


def _file_key(path: str) -> str:
    return os.path.normcase(os.path.normpath(path))


def parse_tsc_output(output: str, cwd: str) -> Tuple[List[str], List[Diagnostic]]:
    """
    Split ``tsc --listFiles --pretty false`` output into files and diagnostics.

    Args:
        output: Captured standard output of the compiler
        cwd: Directory the compiler ran in; diagnostic paths are relative to it

    Returns:
        (absolute file paths in program order, diagnostics in report order)
    """
    files: List[str] = []
    pending: List[Dict[str, Any]] = []

    for line in output.splitlines():
        if not line.strip():
            continue

        if line[0].isspace():
            # Continuation of a chained diagnostic message
            if pending:
                pending[-1]['message'] += '\n' + line.rstrip()
            continue

        match = DIAGNOSTIC_PATTERN.match(line)
        if match:
            pending.append({
                'file': os.path.normpath(os.path.join(cwd, match.group('file'))),
                'line': int(match.group('line')),
                'column': int(match.group('column')),
                'code': int(match.group('code')),
                'category': match.group('category'),
                'message': match.group('message'),
            })
            continue

        match = GLOBAL_DIAGNOSTIC_PATTERN.match(line)
        if match:
            pending.append({
                'file': None,
                'line': 0,
                'column': 0,
                'code': int(match.group('code')),
                'category': match.group('category'),
                'message': match.group('message'),
            })
            continue

        if os.path.isabs(line.strip()):
            files.append(os.path.normpath(line.strip()))
        else:
            logging.debug(f"Ignoring compiler output line: {line}")

    return files, [Diagnostic(**entry) for entry in pending]


class TscProgram(Program):
    """Program backed by one completed ``tsc`` run."""

    def __init__(self, file_paths: List[str], diagnostics: List[Diagnostic], declarations: Dict[str, str]):
        self._source_files = [SourceFile(path) for path in file_paths]
        self._diagnostics = diagnostics
        self._declarations = declarations

    def get_source_files(self) -> List[SourceFile]:
        return list(self._source_files)

    def get_diagnostics(self, source_file: SourceFile) -> List[Diagnostic]:
        key = _file_key(source_file.file_path)
        return [d for d in self._diagnostics if d.file is not None and _file_key(d.file) == key]

    def emit(self, source_file: SourceFile) -> EmitResult:
        text = self._declarations.get(_file_key(source_file.file_path))
        return EmitResult(
            file_path=declaration_path(source_file.file_path),
            text=text,
            diagnostics=self.get_diagnostics(source_file),
            emit_skipped=text is None
        )


class TscCompiler(DeclarationCompiler):
    """Runs the TypeScript compiler found on the system."""

    def __init__(self, executable: Optional[str] = None, timeout: Optional[float] = None):
        """
        Args:
            executable: Compiler command, e.g. ``tsc`` or ``npx tsc``
            timeout: Seconds before the compiler run is abandoned,
                ``DEFAULT_TIMEOUT`` when not given
        """
        self.executable = executable
        self.timeout = DEFAULT_TIMEOUT if timeout is None else timeout

    def find_command(self, base_dir: str) -> List[str]:
        """Locate the compiler: explicit setting, env var, local install, then PATH."""
        configured = self.executable or os.environ.get(TSC_ENV_VAR)
        if configured:
            return shlex.split(configured)

        local_bin = os.path.join(base_dir, 'node_modules', '.bin')
        for candidate in ('tsc', 'tsc.cmd'):
            local_tsc = os.path.join(local_bin, candidate)
            if os.path.isfile(local_tsc):
                return [local_tsc]

        global_tsc = shutil.which('tsc')
        if global_tsc:
            return [global_tsc]

        raise ConfigurationError(
            f"TypeScript compiler not found; install typescript or set {TSC_ENV_VAR}"
        )

    def create_program(self, files: List[str], compiler_options: Dict[str, Any], base_dir: str) -> Program:
        command = self.find_command(base_dir)

        with tempfile.TemporaryDirectory(prefix='dts-bundler-') as declaration_dir:
            options = self.declaration_options(compiler_options, base_dir, declaration_dir)
            config_path = self._write_config(base_dir, files, options)
            full_command = command + ['-p', config_path, '--listFiles', '--pretty', 'false']
            logging.info(f"Running {' '.join(full_command)}")

            try:
                result = subprocess.run(
                    full_command,
                    cwd=base_dir,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout
                )
            except subprocess.TimeoutExpired:
                raise CompilerInvocationError(full_command, f"timed out after {self.timeout}s")
            except OSError as e:
                raise CompilerInvocationError(full_command, str(e))
            finally:
                os.remove(config_path)

            # 1 and 2 mean diagnostics were reported, with or without output
            if result.returncode not in (0, 1, 2):
                raise CompilerInvocationError(
                    full_command, result.stderr.strip() or result.stdout.strip(), result.returncode
                )

            file_paths, diagnostics = parse_tsc_output(result.stdout, base_dir)
            global_errors = [d for d in diagnostics if d.file is None and d.category == 'error']
            if global_errors:
                raise ConfigurationError(
                    '\n'.join(f"error TS{d.code}: {d.message}" for d in global_errors),
                    config_file=os.path.join(base_dir, 'tsconfig.json')
                )

            declarations = self._read_declarations(file_paths, base_dir, declaration_dir)

        logging.info(f"Compiled {len(file_paths)} files with {len(diagnostics)} diagnostics")
        return TscProgram(file_paths, diagnostics, declarations)

    @staticmethod
    def declaration_options(compiler_options: Dict[str, Any], base_dir: str, declaration_dir: str) -> Dict[str, Any]:
        """Options for a declaration-only build into ``declaration_dir``."""
        options = {k: v for k, v in compiler_options.items() if k not in CONFLICTING_OPTIONS}
        options.update({
            'declaration': True,
            'emitDeclarationOnly': True,
            'declarationDir': declaration_dir,
            'rootDir': base_dir,
        })
        return options

    @staticmethod
    def _write_config(base_dir: str, files: List[str], options: Dict[str, Any]) -> str:
        # Lives in base_dir so paths inside the options resolve as in the project tsconfig
        fd, config_path = tempfile.mkstemp(prefix='.dts-bundler-', suffix='.json', dir=base_dir)
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump({'compilerOptions': options, 'files': files}, f, indent=2)
        return config_path

    @staticmethod
    def _read_declarations(file_paths: List[str], base_dir: str, declaration_dir: str) -> Dict[str, str]:
        declarations = {}
        for path in file_paths:
            if is_declaration_file(path) or not is_under(base_dir, path):
                continue
            relative = os.path.relpath(declaration_path(path), base_dir)
            emitted = os.path.join(declaration_dir, relative)
            if os.path.isfile(emitted):
                with open(emitted, 'r', encoding='utf-8', newline='') as f:
                    declarations[_file_key(path)] = f.read()
            else:
                logging.debug(f"No declaration emitted for {path}")
        return declarations
