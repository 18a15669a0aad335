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
"""Tests for the generated message classes."""

import base64
import unittest

from google.protobuf import descriptor_pb2
from parameterized import parameterized  # type: ignore

from pw_protobuf_js import codegen_js
from pw_protobuf_js.options import GeneratorOptions, ImportStyle
from pw_protobuf_js.output_file import OutputFile
from pw_protobuf_js.proto_tree import ProtoMessage
from pw_protobuf_js.testing import build_files
from pw_protobuf_js.type_names import TypeNames

_POINT_FILE = '''
name: "point.proto"
package: "geo"
syntax: "proto3"
message_type {
  name: "Point"
  field { name: "x" number: 1 label: LABEL_OPTIONAL type: TYPE_INT32 }
  field { name: "y" number: 2 label: LABEL_OPTIONAL type: TYPE_INT32 }
}
'''

_SHAPES_FILE = '''
name: "shapes.proto"
package: "geo"
syntax: "proto2"
dependency: "point.proto"
message_type {
  name: "Shape"
  field {
    name: "center" number: 1 label: LABEL_OPTIONAL type: TYPE_MESSAGE
    type_name: ".geo.Point"
  }
  field {
    name: "vertices" number: 2 label: LABEL_REPEATED type: TYPE_MESSAGE
    type_name: ".geo.Point"
  }
  field {
    name: "tags" number: 3 label: LABEL_REPEATED type: TYPE_SINT32
  }
  field {
    name: "label" number: 4 label: LABEL_OPTIONAL type: TYPE_STRING
    default_value: "none"
  }
  field {
    name: "radius" number: 5 label: LABEL_OPTIONAL type: TYPE_DOUBLE
    oneof_index: 0
  }
  field {
    name: "side" number: 6 label: LABEL_OPTIONAL type: TYPE_DOUBLE
    oneof_index: 0
  }
  field {
    name: "named_points" number: 7 label: LABEL_REPEATED type: TYPE_MESSAGE
    type_name: ".geo.Shape.NamedPointsEntry"
  }
  field {
    name: "kind" number: 8 label: LABEL_OPTIONAL type: TYPE_ENUM
    type_name: ".geo.Shape.Kind"
  }
  field {
    name: "blob" number: 9 label: LABEL_OPTIONAL type: TYPE_BYTES
    default_value: "\\\\001\\\\002"
  }
  field {
    name: "ratio" number: 10 label: LABEL_OPTIONAL type: TYPE_FLOAT
    default_value: "inf"
  }
  nested_type {
    name: "NamedPointsEntry"
    field { name: "key" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
    field {
      name: "value" number: 2 label: LABEL_OPTIONAL type: TYPE_MESSAGE
      type_name: ".geo.Point"
    }
    options { map_entry: true }
  }
  enum_type {
    name: "Kind"
    value { name: "CIRCLE" number: 3 }
    value { name: "SQUARE" number: 4 }
  }
  oneof_decl { name: "size" }
  extension_range { start: 100 end: 536870912 }
}
extension {
  name: "area" number: 100 label: LABEL_OPTIONAL type: TYPE_DOUBLE
  extendee: ".geo.Shape"
}
extension {
  name: "anchors" number: 101 label: LABEL_REPEATED type: TYPE_MESSAGE
  type_name: ".geo.Point" extendee: ".geo.Shape"
}
'''


def _generate(options: GeneratorOptions, *texts: str) -> str:
    root, files = build_files(*texts)
    if options.want_es6():
        type_names = TypeNames.es6(options, files[-1])
    else:
        type_names = TypeNames.dot_delimited(options, root)
    output = OutputFile('out.js')
    codegen_js.generate_code_for_file(files[-1], type_names, output, options)
    return output.content()


class PointMessageTest(unittest.TestCase):
    """Tests code for a message with implicit presence scalars."""

    def setUp(self) -> None:
        self.content = _generate(GeneratorOptions(binary=True), _POINT_FILE)

    def test_constructor(self) -> None:
        self.assertIn(
            'proto.geo.Point = function(opt_data) {\n'
            '  jspb.Message.initialize(this, opt_data, 0, -1, null, null);\n'
            '};\n'
            'goog.inherits(proto.geo.Point, jspb.Message);\n', self.content)
        self.assertIn("proto.geo.Point.displayName = 'proto.geo.Point';",
                      self.content)

    def test_accessors(self) -> None:
        self.assertIn(
            'proto.geo.Point.prototype.getX = function() {\n'
            '  return /** @type {number} */ '
            '(jspb.Message.getFieldWithDefault(this, 1, 0));\n'
            '};\n', self.content)
        self.assertIn(
            'proto.geo.Point.prototype.setX = function(value) {\n'
            '  return jspb.Message.setProto3IntField(this, 1, value);\n'
            '};\n', self.content)
        self.assertNotIn('hasX', self.content)
        self.assertNotIn('clearX', self.content)

    def test_serialization(self) -> None:
        self.assertIn(
            '  f = message.getX();\n'
            '  if (f !== 0) {\n'
            '    writer.writeInt32(\n'
            '      1,\n'
            '      f\n'
            '    );\n'
            '  }\n', self.content)
        self.assertIn(
            '    case 2:\n'
            '      var value = /** @type {number} */ (reader.readInt32());\n'
            '      msg.setY(value);\n'
            '      break;\n', self.content)

    def test_unknown_fields_preserved(self) -> None:
        self.assertIn(
            '    default:\n'
            '      var fieldStart = reader.getFieldCursor();\n'
            '      reader.skipField();\n'
            '      (msg.unknownFields_ || (msg.unknownFields_ = [])).push(\n'
            '          reader.getBuffer().slice(fieldStart, '
            'reader.getCursor()));\n'
            '      break;\n', self.content)
        self.assertIn(
            '  var unknownFields = message.unknownFields_;\n'
            '  if (unknownFields) {\n'
            '    for (var i = 0; i < unknownFields.length; i++) {\n'
            '      writer.writeSerializedMessage(\n'
            '          unknownFields[i], 0, unknownFields[i].length);\n'
            '    }\n'
            '  }\n', self.content)
        self.assertNotIn('jspb.Message.readUnknownField', self.content)

    def test_object_conversion(self) -> None:
        self.assertIn(
            '  var f, obj = {\n'
            '    x: jspb.Message.getFieldWithDefault(msg, 1, 0),\n'
            '    y: jspb.Message.getFieldWithDefault(msg, 2, 0)\n'
            '  };\n', self.content)
        self.assertIn('obj.x != null && jspb.Message.setField(msg, 1, obj.x);',
                      self.content)

    def test_registration(self) -> None:
        self.assertTrue(
            self.content.endswith(
                "jspb.Message.registerMessageType('geo.Point', "
                'proto.geo.Point);\n\n'))

    def test_without_binary(self) -> None:
        content = _generate(GeneratorOptions(), _POINT_FILE)
        self.assertNotIn('serializeBinary', content)
        self.assertNotIn('BinaryReader', content)
        self.assertIn('proto.geo.Point.prototype.toObject', content)

    def test_discard_unknown_fields(self) -> None:
        content = _generate(
            GeneratorOptions(binary=True, discard_unknown_fields=True),
            _POINT_FILE)
        self.assertIn('reader.skipField();', content)
        self.assertNotIn('unknownFields_', content)


class ShapeMessageTest(unittest.TestCase):
    """Tests code for a message using most field kinds."""

    def setUp(self) -> None:
        self.content = _generate(GeneratorOptions(binary=True), _POINT_FILE,
                                 _SHAPES_FILE)

    def test_field_tables(self) -> None:
        self.assertIn(
            'jspb.Message.initialize(this, opt_data, 0, 11, '
            'proto.geo.Shape.repeatedFields_, proto.geo.Shape.oneofGroups_);',
            self.content)
        self.assertIn('proto.geo.Shape.repeatedFields_ = [2,3];', self.content)
        self.assertIn('proto.geo.Shape.oneofGroups_ = [[5,6]];', self.content)

    def test_oneof(self) -> None:
        self.assertIn(
            'proto.geo.Shape.SizeCase = {\n'
            '  SIZE_NOT_SET: 0,\n'
            '  RADIUS: 5,\n'
            '  SIDE: 6\n'
            '};\n', self.content)
        self.assertIn(
            'return jspb.Message.setOneofField(this, 5, '
            'proto.geo.Shape.oneofGroups_[0], value);', self.content)
        self.assertIn(
            'return jspb.Message.setOneofField(this, 6, '
            'proto.geo.Shape.oneofGroups_[0], undefined);', self.content)
        self.assertIn('proto.geo.Shape.prototype.getSizeCase = function() {',
                      self.content)

    def test_message_fields(self) -> None:
        self.assertIn(
            'jspb.Message.getWrapperField(this, proto.geo.Point, 1));',
            self.content)
        self.assertIn('proto.geo.Shape.prototype.hasCenter', self.content)
        self.assertIn(
            'return jspb.Message.addToRepeatedWrapperField(this, 2, '
            'opt_value, proto.geo.Point, opt_index);', self.content)
        self.assertIn(
            'reader.readMessage(value, '
            'proto.geo.Point.deserializeBinaryFromReader);', self.content)
        self.assertIn('    writer.writeRepeatedMessage(\n', self.content)

    def test_repeated_scalar_not_packed(self) -> None:
        self.assertIn('    writer.writeRepeatedSint32(\n', self.content)
        self.assertIn(
            '(reader.isDelimited() ? reader.readPackedSint32() : '
            '[reader.readSint32()]);', self.content)
        self.assertIn('proto.geo.Shape.prototype.addTags = function(value, '
                      'opt_index) {', self.content)

    def test_defaults(self) -> None:
        self.assertIn('(jspb.Message.getFieldWithDefault(this, 4, "none"));',
                      self.content)
        self.assertIn('(jspb.Message.getFieldWithDefault(this, 8, 3));',
                      self.content)
        encoded = base64.b64encode(b'\x01\x02').decode('ascii')
        self.assertIn(f'(jspb.Message.getFieldWithDefault(this, 9, '
                      f'"{encoded}"));', self.content)
        self.assertIn('getFloatingPointFieldWithDefault(this, 10, Infinity)',
                      self.content)

    def test_explicit_presence(self) -> None:
        self.assertIn('return jspb.Message.setField(this, 4, value);',
                      self.content)
        self.assertIn('proto.geo.Shape.prototype.hasLabel', self.content)
        self.assertIn(
            '  f = /** @type {string} */ (jspb.Message.getField(message, 4));\n'
            '  if (f != null) {\n', self.content)

    def test_bytes(self) -> None:
        self.assertIn('proto.geo.Shape.prototype.getBlob_asB64', self.content)
        self.assertIn('proto.geo.Shape.prototype.getBlob_asU8', self.content)

    def test_map(self) -> None:
        self.assertIn(
            '      jspb.Message.getMapField(this, 7, opt_noLazyCreate,\n'
            '        proto.geo.Point));', self.content)
        self.assertIn('proto.geo.Shape.prototype.clearNamedPointsMap',
                      self.content)
        self.assertIn(
            'jspb.Map.deserializeBinary(message, reader, '
            'jspb.BinaryReader.prototype.readString, '
            'jspb.BinaryReader.prototype.readMessage, '
            'proto.geo.Point.deserializeBinaryFromReader, "", '
            'new proto.geo.Point());', self.content)
        self.assertNotIn('NamedPointsEntry', self.content)

    def test_nested_enum(self) -> None:
        self.assertIn(
            'proto.geo.Shape.Kind = {\n'
            '  CIRCLE: 3,\n'
            '  SQUARE: 4\n'
            '};\n', self.content)

    def test_extensions(self) -> None:
        self.assertIn('proto.geo.Shape.extensions = {};', self.content)
        self.assertIn('proto.geo.Shape.extensionsBinary = {};', self.content)
        self.assertIn('proto.geo.area = new jspb.ExtensionFieldInfo(\n'
                      '    100,\n'
                      '    {area: 0},\n'
                      '    null,\n'
                      '     /** @type {?function((boolean|undefined),'
                      '!jspb.Message=): !Object} */ (null),\n'
                      '    0);\n', self.content)
        self.assertIn('proto.geo.Shape.extensions[100] = proto.geo.area;',
                      self.content)
        self.assertIn(
            'proto.geo.Shape.extensionsBinary[101] = '
            'new jspb.ExtensionFieldBinaryInfo(\n'
            '    proto.geo.anchorsList,\n'
            '    jspb.BinaryReader.prototype.readMessage,\n'
            '    jspb.BinaryWriter.prototype.writeRepeatedMessage,\n'
            '    proto.geo.Point.serializeBinaryToWriter,\n'
            '    proto.geo.Point.deserializeBinaryFromReader,\n'
            '    false);', self.content)
        self.assertIn('jspb.Message.readBinaryExtension(msg, reader,',
                      self.content)
        self.assertIn('jspb.Message.serializeBinaryExtensions(message, writer,',
                      self.content)
        self.assertIn('jspb.Message.toObjectExtension(', self.content)

    def test_serialized_in_field_number_order(self) -> None:
        positions = [
            self.content.index(f'writer.write{method}(\n      {number},')
            for number, method in ((1, 'Message'), (2, 'RepeatedMessage'),
                                   (3, 'RepeatedSint32'), (4, 'String'))
        ]
        self.assertEqual(positions, sorted(positions))


class Es6CodegenTest(unittest.TestCase):
    """Tests ES6 class and export syntax."""

    def test_es6_class(self) -> None:
        content = _generate(
            GeneratorOptions(import_style=ImportStyle.ES6, binary=True),
            _POINT_FILE, _SHAPES_FILE)
        self.assertIn('export class Shape extends jspb.Message {\n'
                      '  constructor(opt_data) {\n'
                      '    super();\n', content)
        self.assertIn('export const area = new jspb.ExtensionFieldInfo(',
                      content)
        self.assertIn('Shape.Kind = {', content)
        self.assertNotIn('export const Shape.Kind', content)
        self.assertNotIn('goog.inherits', content)


class DefaultLiteralTest(unittest.TestCase):
    """Tests JavaScript literals for field defaults."""

    @parameterized.expand([
        ('int', 'TYPE_INT32', '', '0'),
        ('int default', 'TYPE_INT64', '-5', '-5'),
        ('bool', 'TYPE_BOOL', '', 'false'),
        ('bool default', 'TYPE_BOOL', 'true', 'true'),
        ('string', 'TYPE_STRING', '', '""'),
        ('string quotes', 'TYPE_STRING', 'say "hi"', '"say \\"hi\\""'),
        ('double', 'TYPE_DOUBLE', '', '0.0'),
        ('nan', 'TYPE_DOUBLE', 'nan', 'NaN'),
        ('negative inf', 'TYPE_FLOAT', '-inf', '-Infinity'),
        ('float', 'TYPE_FLOAT', '1.5', '1.5'),
    ])
    def test_default_literal(self, _name, field_type, default,
                             expected) -> None:
        field = descriptor_pb2.FieldDescriptorProto(
            name='value',
            number=1,
            label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
            type=descriptor_pb2.FieldDescriptorProto.Type.Value(field_type))
        if default:
            field.default_value = default
        proto_file = descriptor_pb2.FileDescriptorProto(name='d.proto')
        proto_file.message_type.add(name='M').field.append(field)

        root, _ = build_files(str(proto_file))
        message = root.find('M')
        assert isinstance(message, ProtoMessage)
        self.assertEqual(codegen_js.default_literal(message.fields()[0]),
                         expected)


class AnnotationTest(unittest.TestCase):
    """Tests cross-references from generated code to descriptors."""

    def test_annotations(self) -> None:
        root, files = build_files(_POINT_FILE)
        options = GeneratorOptions(annotate_code=True)
        output = OutputFile('point.js')
        codegen_js.generate_code_for_file(
            files[0], TypeNames.dot_delimited(options, root), output, options)

        paths = [(tuple(annotation.path), annotation.source_file)
                 for annotation in output.annotations().annotation]
        self.assertIn(((4, 0), 'point.proto'), paths)
        self.assertIn(((4, 0, 2, 1), 'point.proto'), paths)

        content = output.content()
        for annotation in output.annotations().annotation:
            self.assertLess(annotation.begin, annotation.end)
            self.assertLessEqual(annotation.end, len(content))


if __name__ == '__main__':
    unittest.main()
