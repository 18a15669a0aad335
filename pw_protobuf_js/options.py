# Copyright 2026 The Pigweed Authors
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not
# use this file except in compliance with the License. You may obtain a copy of
# the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.
"""Generator options for pw_protobuf_js.

Options arrive from protoc as a single parameter string, e.g.

  --pwjs_out=import_style=commonjs,binary:out/

They are parsed once per run into an immutable GeneratorOptions, which is
passed explicitly to every component of the generator.
"""

import dataclasses
from dataclasses import dataclass
import enum
from shlex import shlex

from pw_protobuf_js.errors import ConfigurationError


class ImportStyle(enum.Enum):
    """How generated files import their dependencies."""

    CLOSURE = 'closure'  # goog.provide() / goog.require()
    COMMONJS = 'commonjs'  # require()
    COMMONJS_STRICT = 'commonjs_strict'  # require() with no global export
    BROWSER = 'browser'  # no import statements
    ES6 = 'es6'  # import { member } from ''


class OutputMode(enum.Enum):
    """How generated code is grouped into output files."""

    # An output file for each input .proto file.
    ONE_OUTPUT_FILE_PER_INPUT_FILE = 1
    # An output file for each strongly connected component of input files.
    ONE_OUTPUT_FILE_PER_SCC = 2
    # Everything in a single file named by the library option.
    EVERYTHING_IN_ONE_FILE = 3


# Options that are only meaningful for import_style=closure, paired with their
# default values.
_CLOSURE_ONLY_OPTIONS = (
    ('add_require_for_enums', False),
    ('testonly', False),
    ('library', ''),
    ('extension', '.js'),
    ('one_output_file_per_input_file', False),
)


@dataclass(frozen=True)
class GeneratorOptions:
    """Configuration for a single generation run."""

    # Output path.
    output_dir: str = '.'
    # Namespace prefix; replaces `proto.<package>` when set.
    namespace_prefix: str = ''
    # Enable binary-format support.
    binary: bool = False
    import_style: ImportStyle = ImportStyle.CLOSURE
    # Emit goog.require() instead of goog.forwardDeclare() for enum types.
    add_require_for_enums: bool = False
    # Mark generated modules with goog.setTestOnly().
    testonly: bool = False
    # Put everything into a single <library><extension> file.
    library: str = ''
    # File name extension of closure-style output files.
    extension: str = '.js'
    one_output_file_per_input_file: bool = False
    # Append a GeneratedCodeInfo cross-reference comment to every file.
    annotate_code: bool = False
    # Drop unknown fields while deserializing instead of preserving them.
    discard_unknown_fields: bool = False

    def file_name_extension(self) -> str:
        """Returns the file name extension to use for generated code."""
        if self.import_style is ImportStyle.CLOSURE:
            return self.extension
        return '_pb.js'

    def output_mode(self) -> OutputMode:
        if self.import_style is not ImportStyle.CLOSURE:
            return OutputMode.ONE_OUTPUT_FILE_PER_INPUT_FILE
        if self.library:
            return OutputMode.EVERYTHING_IN_ONE_FILE
        if self.one_output_file_per_input_file:
            return OutputMode.ONE_OUTPUT_FILE_PER_INPUT_FILE
        return OutputMode.ONE_OUTPUT_FILE_PER_SCC

    def want_es6(self) -> bool:
        """True if classes and imports should use ES6 module syntax."""
        return self.import_style is ImportStyle.ES6

    def validate(self) -> None:
        """Rejects option combinations that cannot produce valid output.

        Raises:
          ConfigurationError: The options are inconsistent.
        """
        if self.import_style is not ImportStyle.CLOSURE:
            for name, default in _CLOSURE_ONLY_OPTIONS:
                if getattr(self, name) != default:
                    raise ConfigurationError(
                        'The add_require_for_enums, testonly, library, '
                        'extension, and one_output_file_per_input_file '
                        'options should only be used for '
                        f'import_style=closure (got {name} with '
                        f'import_style={self.import_style.value})')

        if self.library and self.one_output_file_per_input_file:
            raise ConfigurationError(
                'Cannot specify both library and '
                'one_output_file_per_input_file')

        if self.namespace_prefix and not all(
                self.namespace_prefix.split('.')):
            raise ConfigurationError(
                f'Invalid namespace_prefix {self.namespace_prefix!r}')


_FLAG_OPTIONS = frozenset((
    'binary',
    'add_require_for_enums',
    'testonly',
    'one_output_file_per_input_file',
    'annotate_code',
    'discard_unknown_fields',
))

_VALUE_OPTIONS = frozenset((
    'output_dir',
    'namespace_prefix',
    'library',
    'extension',
    'import_style',
))


def _parse_import_style(value: str) -> ImportStyle:
    try:
        return ImportStyle(value)
    except ValueError:
        expected = ', '.join(style.value for style in ImportStyle)
        raise ConfigurationError(
            f'Unknown import style {value}, expected one of: {expected}.'
        ) from None


def split_parameter(parameter: str) -> list[tuple[str, str]]:
    """Splits a protoc parameter string into (name, value) pairs.

    protoc passes the options in shell quoted form, separated by commas. Use
    shlex to split them, correctly handling quoted sections, with equivalent
    options to IFS=",".
    """
    lex = shlex(parameter, posix=True)
    lex.whitespace_split = True
    lex.whitespace = ','
    lex.commenters = ''

    pairs = []
    for item in lex:
        name, _, value = item.partition('=')
        pairs.append((name.strip(), value))
    return pairs


def parse_options(parameter: str) -> GeneratorOptions:
    """Parses and validates a protoc parameter string.

    Raises:
      ConfigurationError: An option is unknown, malformed, or the options are
          inconsistent with each other.
    """
    values: dict[str, object] = {}

    for name, value in split_parameter(parameter):
        if name in _FLAG_OPTIONS:
            if value:
                raise ConfigurationError(
                    f'Unexpected option value for {name}')
            values[name] = True
        elif name == 'import_style':
            values[name] = _parse_import_style(value)
        elif name in _VALUE_OPTIONS:
            values[name] = value
        else:
            raise ConfigurationError(f'Unknown option: {name}')

    options = GeneratorOptions(**values)  # type: ignore[arg-type]
    options.validate()
    return options


def replace(options: GeneratorOptions, **changes) -> GeneratorOptions:
    """Returns a validated copy of options with some values changed."""
    updated = dataclasses.replace(options, **changes)
    updated.validate()
    return updated
