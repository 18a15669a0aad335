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
"""Tests for the import and export sections of generated files."""

import unittest

from pw_protobuf_js import imports, symbols
from pw_protobuf_js.options import GeneratorOptions, ImportStyle
from pw_protobuf_js.output_file import OutputFile
from pw_protobuf_js.type_names import TypeNames
from pw_protobuf_js.testing import build_files

_BASE_FILE = '''
name: "geo/base.proto"
package: "geo"
message_type { name: "Origin" }
message_type { name: "Unused" }
enum_type { name: "Color" value { name: "RED" number: 0 } }
'''

_POINT_FILE = '''
name: "geo/point.proto"
package: "geo"
syntax: "proto3"
dependency: "geo/base.proto"
message_type {
  name: "Point"
  field { name: "x" number: 1 label: LABEL_OPTIONAL type: TYPE_INT32 }
  field {
    name: "origin" number: 2 label: LABEL_OPTIONAL type: TYPE_MESSAGE
    type_name: ".geo.Origin"
  }
  field {
    name: "color" number: 3 label: LABEL_OPTIONAL type: TYPE_ENUM
    type_name: ".geo.Color"
  }
}
'''


class GenerateHeaderTest(unittest.TestCase):
    """Tests the header and footer written for each import style."""

    def setUp(self) -> None:
        self.root, (self.base, self.point) = build_files(
            _BASE_FILE, _POINT_FILE)

    def _generate(self, options: GeneratorOptions) -> str:
        if options.want_es6():
            type_names = TypeNames.es6(options, self.point)
        else:
            type_names = TypeNames.dot_delimited(options, self.root)
        unit_symbols = symbols.collect_unit_symbols(options, [self.point])

        output = OutputFile('point.js')
        imports.generate_header(options, type_names, output, [self.point],
                                unit_symbols)
        imports.generate_footer(options, type_names, output, [self.point])
        return output.content()

    def test_file_comment(self) -> None:
        content = self._generate(GeneratorOptions())
        self.assertTrue(content.startswith('// source: geo/point.proto\n'))
        self.assertIn(
            f'// Generated by {imports.GENERATOR_NAME} '
            f'{imports.GENERATOR_VERSION}. DO NOT EDIT!\n', content)
        self.assertIn('/* eslint-disable */\n', content)

    def test_closure(self) -> None:
        content = self._generate(GeneratorOptions(binary=True))
        self.assertIn(
            "goog.provide('proto.geo.Point');\n"
            '\n'
            "goog.require('jspb.BinaryReader');\n"
            "goog.require('jspb.BinaryWriter');\n"
            "goog.require('jspb.Message');\n"
            "goog.require('proto.geo.Origin');\n"
            "goog.forwardDeclare('proto.geo.Color');\n", content)
        self.assertNotIn('Unused', content)
        self.assertNotIn('goog.setTestOnly', content)
        self.assertNotIn('exports', content)

    def test_closure_enum_requires(self) -> None:
        content = self._generate(GeneratorOptions(add_require_for_enums=True))
        self.assertIn("goog.require('proto.geo.Color');\n", content)
        self.assertNotIn('forwardDeclare', content)
        self.assertNotIn('jspb.BinaryReader', content)

    def test_closure_testonly(self) -> None:
        content = self._generate(GeneratorOptions(testonly=True))
        self.assertIn("goog.provide('proto.geo.Point');\n"
                      'goog.setTestOnly();\n', content)

    def test_commonjs(self) -> None:
        content = self._generate(
            GeneratorOptions(import_style=ImportStyle.COMMONJS))
        self.assertIn(
            "var jspb = require('google-protobuf');\n"
            'var goog = jspb;\n'
            "var global = Function('return this')();\n"
            '\n'
            "var geo_base_pb = require('../geo/base_pb.js');\n"
            'goog.object.extend(proto, geo_base_pb);\n'
            "goog.exportSymbol('proto.geo.Point', null, global);\n", content)
        self.assertTrue(
            content.endswith('goog.object.extend(exports, proto.geo);\n'))

    def test_commonjs_strict(self) -> None:
        content = self._generate(
            GeneratorOptions(import_style=ImportStyle.COMMONJS_STRICT))
        self.assertIn('var proto = {};\n', content)
        self.assertNotIn('var global', content)
        self.assertIn("goog.exportSymbol('geo.Point', null, proto);\n",
                      content)
        self.assertTrue(
            content.endswith('goog.object.extend(exports, proto);\n'))

    def test_browser(self) -> None:
        content = self._generate(
            GeneratorOptions(import_style=ImportStyle.BROWSER))
        self.assertIn(
            "goog.exportSymbol('proto.geo.Point', null, goog.global);\n",
            content)
        self.assertNotIn('require(', content)

    def test_es6(self) -> None:
        content = self._generate(GeneratorOptions(import_style=ImportStyle.ES6))
        self.assertIn(
            "import * as jspb from 'google-protobuf';\n"
            "import { Origin, Color } from '../geo/base_pb.js';\n", content)
        self.assertNotIn('Unused', content)
        self.assertNotIn('goog.', content)

    def test_es6_without_referenced_imports(self) -> None:
        options = GeneratorOptions(import_style=ImportStyle.ES6)
        output = OutputFile('base.js')
        imports.generate_header(
            options, TypeNames.es6(options, self.base), output, [self.base],
            symbols.collect_unit_symbols(options, [self.base]))
        self.assertNotIn(' from ', output.content().replace(
            "import * as jspb from 'google-protobuf';", ''))


if __name__ == '__main__':
    unittest.main()
