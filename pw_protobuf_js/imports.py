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
"""Emits the module bootstrapping at the start and end of generated files."""

from typing import Sequence

from pw_protobuf_js.options import GeneratorOptions, ImportStyle
from pw_protobuf_js.output_file import OutputFile
from pw_protobuf_js.proto_tree import ProtoFile, ProtoNode
from pw_protobuf_js.symbols import Symbol, SymbolSets
from pw_protobuf_js.type_names import TypeNames, module_path

GENERATOR_NAME = 'protoc-gen-pwjs'
GENERATOR_VERSION = '0.0.1'


def symbol_expression(type_names: TypeNames, symbol: Symbol) -> str:
    """The JavaScript name under which a symbol is defined."""
    if isinstance(symbol, ProtoNode):
        return type_names.js_expression(symbol)
    return type_names.extension_expression(symbol)


def namespace_root(type_names: TypeNames, proto_file: ProtoFile) -> str:
    """The global object at the base of a file's namespace, e.g. proto."""
    return type_names.namespace(proto_file).split('.', 1)[0]


def _file_comment(output: OutputFile, files: Sequence[ProtoFile]) -> None:
    for proto_file in files:
        output.write_line(f'// source: {proto_file.name()}')
    output.write_lines((
        '/**',
        ' * @fileoverview',
        ' * @enhanceable',
        ' * @suppress {missingRequire} reports error on implicit type usages.',
        ' * @suppress {messageConventions} JS Compiler reports an error if a '
        'variable or',
        ' *     field starts with \'MSG_\' and isn\'t a translatable message.',
        ' * @public',
        ' */',
        f'// Generated by {GENERATOR_NAME} {GENERATOR_VERSION}. DO NOT EDIT!',
        '/* eslint-disable */',
        '// @ts-nocheck',
        '',
    ))


def _closure_header(options: GeneratorOptions, type_names: TypeNames,
                    output: OutputFile, symbols: SymbolSets) -> None:
    provided = sorted(
        {symbol_expression(type_names, symbol)
         for symbol in symbols.provided})
    for name in provided:
        output.write_line(f"goog.provide('{name}');")
    if options.testonly:
        output.write_line('goog.setTestOnly();')
    output.write_line()

    runtime = []
    if options.binary:
        runtime += ['jspb.BinaryReader', 'jspb.BinaryWriter']
    if symbols.has_extension:
        if options.binary:
            runtime.append('jspb.ExtensionFieldBinaryInfo')
        runtime.append('jspb.ExtensionFieldInfo')
    if symbols.has_map:
        runtime.append('jspb.Map')
    if symbols.has_message:
        runtime.append('jspb.Message')

    for name in runtime:
        output.write_line(f"goog.require('{name}');")

    required = sorted(
        {symbol_expression(type_names, symbol)
         for symbol in symbols.required})
    for name in required:
        output.write_line(f"goog.require('{name}');")

    forwards = sorted(
        {symbol_expression(type_names, symbol)
         for symbol in symbols.forwards})
    for name in forwards:
        output.write_line(f"goog.forwardDeclare('{name}');")

    output.write_line()


def _commonjs_header(options: GeneratorOptions, type_names: TypeNames,
                     output: OutputFile, proto_file: ProtoFile,
                     symbols: SymbolSets) -> None:
    strict = options.import_style is ImportStyle.COMMONJS_STRICT
    root = namespace_root(type_names, proto_file)

    output.write_line("var jspb = require('google-protobuf');")
    output.write_line('var goog = jspb;')
    if strict:
        output.write_line(f'var {root} = {{}};')
    else:
        output.write_line("var global = Function('return this')();")
    output.write_line()

    # One module load per imported file, merged into the local namespace.
    for dependency in proto_file.dependency_files():
        alias = type_names.module_alias(dependency.name())
        path = module_path(proto_file, dependency)
        output.write_line(f"var {alias} = require('{path}');")
        output.write_line(f'goog.object.extend({root}, {alias});')

    _export_symbols(type_names, output, symbols,
                    target=root if strict else 'global',
                    strip_root=root if strict else '')


def _browser_header(type_names: TypeNames, output: OutputFile,
                    symbols: SymbolSets) -> None:
    _export_symbols(type_names, output, symbols, target='goog.global')


def _export_symbols(type_names: TypeNames,
                    output: OutputFile,
                    symbols: SymbolSets,
                    target: str,
                    strip_root: str = '') -> None:
    names = sorted(
        {symbol_expression(type_names, symbol)
         for symbol in symbols.provided})
    for name in names:
        if strip_root and name.startswith(strip_root + '.'):
            name = name[len(strip_root) + 1:]
        output.write_line(f"goog.exportSymbol('{name}', null, {target});")
    output.write_line()


def _es6_header(type_names: TypeNames, output: OutputFile,
                symbols: SymbolSets) -> None:
    output.write_line("import * as jspb from 'google-protobuf';")

    # Only top-level types can be imported; nested types are reached through
    # their outermost message.
    needed = {
        id(symbol.top_level())
        for symbol in symbols.referenced() if isinstance(symbol, ProtoNode)
    }

    for dependency, exports in type_names.imports():
        specifiers = []
        for node, binding in exports:
            if id(node) not in needed:
                continue
            exported = type_names.js_name(node.proto_path())
            if binding == exported:
                specifiers.append(exported)
            else:
                specifiers.append(f'{exported} as {binding}')

        if specifiers:
            output.write_line(
                f"import {{ {', '.join(specifiers)} }} from "
                f"'{type_names.module_path(dependency)}';")

    output.write_line()


def generate_header(
    options: GeneratorOptions,
    type_names: TypeNames,
    output: OutputFile,
    files: Sequence[ProtoFile],
    symbols: SymbolSets,
) -> None:
    """Writes the file comment and the imports and exports for a unit.

    Args:
      options: Generator options for the run.
      type_names: Naming context of the output file.
      output: The file to write to.
      files: The .proto files whose code goes into output.
      symbols: Finalized symbols of the files.
    """
    _file_comment(output, files)

    if options.import_style is ImportStyle.CLOSURE:
        _closure_header(options, type_names, output, symbols)
    elif options.import_style in (ImportStyle.COMMONJS,
                                  ImportStyle.COMMONJS_STRICT):
        # CommonJS output always has exactly one input file.
        _commonjs_header(options, type_names, output, files[0], symbols)
    elif options.import_style is ImportStyle.BROWSER:
        _browser_header(type_names, output, symbols)
    else:
        _es6_header(type_names, output, symbols)


def generate_footer(options: GeneratorOptions, type_names: TypeNames,
                    output: OutputFile, files: Sequence[ProtoFile]) -> None:
    """Writes the CommonJS exports of a file; other styles need none."""
    if options.import_style is ImportStyle.COMMONJS:
        output.write_line(
            f'goog.object.extend(exports, {type_names.namespace(files[0])});')
    elif options.import_style is ImportStyle.COMMONJS_STRICT:
        root = namespace_root(type_names, files[0])
        output.write_line(f'goog.object.extend(exports, {root});')
