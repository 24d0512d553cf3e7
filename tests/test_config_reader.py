"""
Tests for tsconfig.json reading and compiler settings resolution.
"""

import os

import pytest

from dts_bundler.config_reader import (
    DEFAULT_TARGET,
    TsConfigReader,
    newline_option,
    strip_json_comments,
)
from dts_bundler.exceptions import ConfigurationError


def test_defaults_without_tsconfig(project):
    os.makedirs(str(project.root))
    files = [project.path('a.d.ts')]

    settings = TsConfigReader.resolve_settings(str(project.root), files, eol='\n')

    assert settings.files == files
    assert settings.eol == '\n'
    assert settings.config_file is None
    assert settings.compiler_options == {
        'declaration': True,
        'module': 'commonjs',
        'newLine': 'lf',
        'target': DEFAULT_TARGET,
    }


def test_tsconfig_options_are_merged(project):
    project.write('tsconfig.json', """{
    // project settings
    "compilerOptions": {
        "target": "es2019",
        "strict": true,
        "noEmit": true,
        "watch": true, /* ignored */
    },
    "files": ["typings/node.d.ts", "src/index.ts"],
}
""")

    settings = TsConfigReader.resolve_settings(str(project.root), [project.path('src/index.ts')])

    assert settings.files == [project.path('typings/node.d.ts'), project.path('src/index.ts')]
    assert settings.compiler_options['target'] == 'es2019'
    assert settings.compiler_options['strict'] is True
    assert settings.compiler_options['declaration'] is True
    assert 'noEmit' not in settings.compiler_options
    assert 'watch' not in settings.compiler_options
    assert settings.config_file == project.path('tsconfig.json')


def test_user_options_override_tsconfig(project):
    project.write('tsconfig.json', '{"compilerOptions": {"target": "es5", "newLine": "lf"}}')

    settings = TsConfigReader.resolve_settings(str(project.root), [], eol='\r\n', target='es2020')

    assert settings.compiler_options['target'] == 'es2020'
    assert settings.compiler_options['newLine'] == 'crlf'
    assert settings.eol == '\r\n'


def test_tsconfig_newline_sets_eol(project):
    project.write('tsconfig.json', '{"compilerOptions": {"newLine": "CRLF"}}')

    settings = TsConfigReader.resolve_settings(str(project.root), [])

    assert settings.eol == '\r\n'


def test_explicit_project_file(project):
    project.write('config/tsconfig.build.json', '{"compilerOptions": {"strict": true}}')

    settings = TsConfigReader.resolve_settings(str(project.root), [], project='config/tsconfig.build.json')

    assert settings.compiler_options['strict'] is True
    assert settings.config_file == project.path('config/tsconfig.build.json')


def test_missing_explicit_project_file(project):
    os.makedirs(str(project.root))
    with pytest.raises(ConfigurationError) as excinfo:
        TsConfigReader.resolve_settings(str(project.root), [], project='missing.json')
    assert excinfo.value.config_file == project.path('missing.json')


@pytest.mark.parametrize('content', [
    '{"compilerOptions": ',
    '["not", "an", "object"]',
    '{"compilerOptions": "strict"}',
])
def test_invalid_tsconfig(project, content):
    project.write('tsconfig.json', content)
    with pytest.raises(ConfigurationError):
        TsConfigReader.resolve_settings(str(project.root), [])


def test_comment_markers_inside_strings_are_kept():
    content = '{"paths": {"@app/*": ["src/*"]}, "url": "http://example.com" // trailing\n}'
    assert strip_json_comments(content) == '{"paths": {"@app/*": ["src/*"]}, "url": "http://example.com" \n}'


def test_newline_option():
    assert newline_option('\r\n') == 'crlf'
    assert newline_option('\n') == 'lf'
