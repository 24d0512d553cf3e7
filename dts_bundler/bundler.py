"""
Declaration bundle assembler.

Drives a run end to end: resolves the inputs, compiles them, and writes the
banner, external references, one block per bundled file and the optional
main-module alias to the output file.
"""

import fnmatch
import logging
import os
from typing import Callable, Dict, List, Optional, Sequence, TextIO

from .compiler.base import DeclarationCompiler, Program
from .compiler.tsc import TscCompiler
from .config_loader import BundleOptions
from .config_reader import TsConfigReader
from .emitter import DeclarationEmitter
from .exceptions import CompilationError
from .module_ids import is_typescript_source, is_under, normalize_path, to_module_id
from .parser import DeclarationParser

BANNER = ('//', '// Auto-generated by dts-bundler', '//')

MessageCallback = Callable[[str], None]


def _no_message(message: str):
    pass


def get_filenames(base_dir: str, files: Sequence[str]) -> List[str]:
    """Resolve entry files; paths not already under ``base_dir`` are taken relative to it."""
    filenames = []
    for filename in files:
        resolved = os.path.abspath(filename)
        if is_under(base_dir, resolved):
            filenames.append(resolved)
        else:
            filenames.append(os.path.normpath(os.path.join(base_dir, filename)))
    return filenames


def matches_excludes(relative_path: str, patterns: Sequence[str]) -> bool:
    """
    Check a base-relative path against exclude globs.

    Patterns apply in order; a pattern starting with ``!`` un-excludes what
    earlier patterns matched. A leading ``**/`` also matches at the top level.
    """
    path = normalize_path(relative_path)
    excluded = False
    for pattern in patterns:
        negated = pattern.startswith('!')
        glob = pattern[1:] if negated else pattern
        matched = fnmatch.fnmatchcase(path, glob) or (
            glob.startswith('**/') and fnmatch.fnmatchcase(path, glob[3:])
        )
        if matched:
            excluded = not negated
    return excluded


class DeclarationBundler:
    """Bundles a project's declarations into one file."""

    def __init__(
        self,
        options: BundleOptions,
        send_message: Optional[MessageCallback] = None,
        compiler: Optional[DeclarationCompiler] = None,
        parser: Optional[DeclarationParser] = None
    ):
        """Initialize the bundler.

        Args:
            options: Options for this run; validated here
            send_message: Optional callback receiving progress messages
            compiler: Compiler collaborator, ``TscCompiler`` by default
            parser: Declaration parser, created on demand by default
        """
        self.options = options.validate()
        self.send_message = send_message or _no_message
        self.compiler = compiler or TscCompiler(options.tsc, options.timeout)
        self.parser = parser or DeclarationParser()
        self.base_dir = os.path.abspath(options.base_dir)
        # module id -> excluded
        self.excludes_map: Dict[str, bool] = {}

    def run(self):
        """Run the bundler. Returns once the output file is closed.

        Raises:
            ConfigurationError: options, tsconfig or compiler setup is invalid
            CompilationError: a source file failed to compile
            OSError: the output file could not be written
        """
        options = self.options
        filenames = get_filenames(self.base_dir, options.files)
        settings = TsConfigReader.resolve_settings(
            self.base_dir,
            filenames,
            eol=options.eol,
            target=options.target,
            project=options.project
        )

        logging.info(f"Bundling {len(filenames)} entry files from {self.base_dir} as '{options.name}'")
        program = self.compiler.create_program(settings.files, settings.compiler_options, self.base_dir)

        out = os.path.abspath(options.out)
        os.makedirs(os.path.dirname(out), exist_ok=True)

        with open(out, 'w', encoding='utf-8', newline='') as output:
            self._write_bundle(output, program, settings.eol)

        logging.info(f"Wrote declaration bundle to {out}")

    def _write_bundle(self, output: TextIO, program: Program, eol: str):
        options = self.options
        emitter = DeclarationEmitter(output, self.base_dir, options.name, eol=eol, indent=options.indent)

        output.write(eol.join(BANNER) + eol + eol)

        for path in options.externs:
            self.send_message(f"Writing external dependency {path}")
            output.write(f'/// <reference path="{path}" />' + eol)

        for source_file in program.get_source_files():
            file_path = os.path.normpath(source_file.file_path)

            # Default libraries and dependencies of other projects are not bundled
            if not is_under(self.base_dir, file_path):
                continue

            if self._is_excluded(file_path):
                continue

            self.send_message(f"Processing {source_file.file_path}")

            if source_file.is_declaration:
                text = program.get_source_text(source_file)
                emitter.emit(self.parser.parse(file_path, text))
                continue

            result = program.emit(source_file)
            if result.failed:
                diagnostics = list(dict.fromkeys(result.diagnostics + program.get_diagnostics(source_file)))
                if not diagnostics and not is_typescript_source(file_path):
                    # JSON modules and plain JavaScript have no declarations of their own
                    logging.debug(f"No declarations emitted for {file_path}")
                    continue
                logging.error(f"Declaration emit failed for {file_path} with {len(diagnostics)} diagnostics")
                raise CompilationError(file_path, [d.to_dict() for d in diagnostics])

            emitter.emit(self.parser.parse(result.file_path, result.text))

        if options.main:
            output.write(eol + f"declare module '{options.name}' {{" + eol)
            output.write(options.indent + f"export * from '{options.main}';" + eol)
            output.write('}' + eol)
            self.send_message(f"Aliased main module {options.name} to {options.main}")

    def _is_excluded(self, file_path: str) -> bool:
        if not self.options.excludes:
            return False

        relative = normalize_path(os.path.relpath(file_path, self.base_dir))
        if not matches_excludes(relative, self.options.excludes):
            return False

        self.excludes_map[to_module_id(self.base_dir, file_path, self.options.name)] = True
        self.send_message(f"Excluding {relative}")
        return True


def generate(
    options: BundleOptions,
    send_message: Optional[MessageCallback] = None,
    compiler: Optional[DeclarationCompiler] = None,
    parser: Optional[DeclarationParser] = None
):
    """Bundle declarations as described by ``options``; see ``DeclarationBundler.run``."""
    DeclarationBundler(options, send_message=send_message, compiler=compiler, parser=parser).run()
