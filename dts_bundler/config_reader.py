"""
TypeScript project configuration reader.

Loads ``tsconfig.json`` from the bundle's base directory and merges the
bundle options that override it (line endings, target) into the compiler
options handed to the compiler.
"""

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Any

from .exceptions import ConfigurationError
from .module_ids import is_declaration_file

DEFAULT_TARGET = 'esnext'

# Options that make no sense when generating declarations
IGNORED_OPTIONS = ('watch', 'diagnostics', 'noEmit')

_TRAILING_COMMA = re.compile(r',(\s*[}\]])')


@dataclass
class CompilerSettings:
    """Root files, compiler options and line ending for one run."""
    files: List[str]
    compiler_options: Dict[str, Any] = field(default_factory=dict)
    eol: str = os.linesep
    config_file: Optional[str] = None


def strip_json_comments(content: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside of string literals."""
    result = []
    i = 0
    length = len(content)
    in_string = False

    while i < length:
        char = content[i]
        if in_string:
            result.append(char)
            if char == '\\' and i + 1 < length:
                result.append(content[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
        elif char == '"':
            in_string = True
            result.append(char)
            i += 1
        elif content.startswith('//', i):
            newline = content.find('\n', i)
            i = length if newline == -1 else newline
        elif content.startswith('/*', i):
            close = content.find('*/', i + 2)
            i = length if close == -1 else close + 2
        else:
            result.append(char)
            i += 1

    return ''.join(result)


def newline_option(eol: str) -> str:
    return 'crlf' if eol == '\r\n' else 'lf'


class TsConfigReader:
    """Read TypeScript configuration for declaration generation."""

    @staticmethod
    def read(tsconfig_path: Path) -> Dict[str, Any]:
        """
        Parse a tsconfig file, tolerating comments and trailing commas.

        Raises:
            ConfigurationError: the file cannot be read or is not valid JSON
        """
        try:
            with open(tsconfig_path, 'r', encoding='utf-8-sig') as f:
                content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Failed to read {tsconfig_path}: {e}", config_file=str(tsconfig_path))

        content = _TRAILING_COMMA.sub(r'\1', strip_json_comments(content))
        try:
            config = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse {tsconfig_path}: {e}", config_file=str(tsconfig_path))

        if not isinstance(config, dict):
            raise ConfigurationError(f"{tsconfig_path} must contain a JSON object", config_file=str(tsconfig_path))
        return config

    @classmethod
    def resolve_settings(
        cls,
        base_dir: str,
        files: List[str],
        eol: Optional[str] = None,
        target: Optional[str] = None,
        project: Optional[str] = None
    ) -> CompilerSettings:
        """
        Build the compiler settings for a run.

        Args:
            base_dir: Absolute base directory of the bundle
            files: Absolute root files requested by the user
            eol: Line terminator requested by the user, if any
            target: Language level requested by the user, if any
            project: tsconfig path; defaults to ``<base_dir>/tsconfig.json``

        Returns:
            CompilerSettings with the tsconfig merged in when one exists
        """
        resolved_eol = eol or os.linesep
        compiler_options: Dict[str, Any] = {
            'declaration': True,
            'module': 'commonjs',
            'newLine': newline_option(resolved_eol),
            'target': target or DEFAULT_TARGET,
        }

        tsconfig_path = Path(project) if project else Path(base_dir) / 'tsconfig.json'
        if not tsconfig_path.is_absolute():
            tsconfig_path = Path(base_dir) / tsconfig_path

        if not tsconfig_path.exists():
            if project:
                raise ConfigurationError(f"Project file not found: {tsconfig_path}", config_file=str(tsconfig_path))
            logging.debug(f"No tsconfig.json found at {tsconfig_path}")
            return CompilerSettings(files=list(files), compiler_options=compiler_options, eol=resolved_eol)

        logging.info(f"Loading compiler options from {tsconfig_path}")
        tsconfig = cls.read(tsconfig_path)

        tsconfig_options = tsconfig.get('compilerOptions') or {}
        if not isinstance(tsconfig_options, dict):
            raise ConfigurationError("compilerOptions must be an object", config_file=str(tsconfig_path))

        compiler_options = dict(tsconfig_options)
        compiler_options['declaration'] = True

        # The eol option overrides the line terminator from the tsconfig
        if eol:
            compiler_options['newLine'] = newline_option(eol)
        elif compiler_options.get('newLine'):
            resolved_eol = '\r\n' if str(compiler_options['newLine']).lower() == 'crlf' else '\n'

        if target:
            compiler_options['target'] = target

        for option in IGNORED_OPTIONS:
            compiler_options.pop(option, None)

        # Declaration files listed in the tsconfig go first so the compiler can
        # resolve public types of sources lacking reference comments
        tsconfig_files = tsconfig.get('files') or []
        declaration_files = [
            os.path.normpath(os.path.join(base_dir, name))
            for name in tsconfig_files
            if isinstance(name, str) and is_declaration_file(name)
        ]
        if declaration_files:
            logging.info(f"Found {len(declaration_files)} declaration files in {tsconfig_path.name}")

        return CompilerSettings(
            files=declaration_files + list(files),
            compiler_options=compiler_options,
            eol=resolved_eol,
            config_file=str(tsconfig_path)
        )
