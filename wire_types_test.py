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
"""Tests for the field type encoding table."""

import unittest

from google.protobuf import descriptor_pb2
from parameterized import parameterized  # type: ignore

from pw_protobuf_js import wire_types
from pw_protobuf_js.errors import UnsupportedFeatureError
from pw_protobuf_js.wire_types import WireType

_Field = descriptor_pb2.FieldDescriptorProto


class WireTypeTest(unittest.TestCase):
    """Tests for wire type selection."""

    @parameterized.expand([
        ('int32', _Field.TYPE_INT32, WireType.VARINT),
        ('sint64', _Field.TYPE_SINT64, WireType.VARINT),
        ('bool', _Field.TYPE_BOOL, WireType.VARINT),
        ('enum', _Field.TYPE_ENUM, WireType.VARINT),
        ('fixed32', _Field.TYPE_FIXED32, WireType.FIXED32),
        ('float', _Field.TYPE_FLOAT, WireType.FIXED32),
        ('sfixed64', _Field.TYPE_SFIXED64, WireType.FIXED64),
        ('double', _Field.TYPE_DOUBLE, WireType.FIXED64),
        ('string', _Field.TYPE_STRING, WireType.DELIMITED),
        ('bytes', _Field.TYPE_BYTES, WireType.DELIMITED),
        ('message', _Field.TYPE_MESSAGE, WireType.DELIMITED),
        ('group', _Field.TYPE_GROUP, WireType.START_GROUP),
    ])
    def test_unpacked_wire_type(self, _name, field_type, expected) -> None:
        self.assertEqual(wire_types.field_wire_type(field_type), expected)

    def test_packed_scalars_are_delimited(self) -> None:
        self.assertEqual(
            wire_types.field_wire_type(_Field.TYPE_FIXED64, packed=True),
            WireType.DELIMITED)

    @parameterized.expand([
        ('string', _Field.TYPE_STRING),
        ('bytes', _Field.TYPE_BYTES),
        ('message', _Field.TYPE_MESSAGE),
    ])
    def test_packing_unpackable_type_fails(self, _name, field_type) -> None:
        self.assertFalse(wire_types.is_packable(field_type))
        with self.assertRaises(UnsupportedFeatureError):
            wire_types.field_wire_type(field_type, packed=True)

    def test_unknown_type(self) -> None:
        with self.assertRaises(UnsupportedFeatureError):
            wire_types.field_type_info(99)

    def test_message_types(self) -> None:
        self.assertTrue(wire_types.is_message_type(_Field.TYPE_MESSAGE))
        self.assertTrue(wire_types.is_message_type(_Field.TYPE_GROUP))
        self.assertFalse(wire_types.is_message_type(_Field.TYPE_ENUM))

    def test_every_type_has_an_entry(self) -> None:
        for name, number in _Field.Type.items():
            info = wire_types.field_type_info(number)
            self.assertEqual('TYPE_' + info.proto_name.upper(), name)


class MakeTagTest(unittest.TestCase):
    """Tests for field tag computation."""

    @parameterized.expand([
        ('varint', 1, WireType.VARINT, 0x08),
        ('delimited', 2, WireType.DELIMITED, 0x12),
        ('fixed32', 15, WireType.FIXED32, 0x7d),
        ('large number', 1000, WireType.FIXED64, 8001),
    ])
    def test_make_tag(self, _name, number, wire_type, expected) -> None:
        self.assertEqual(wire_types.make_tag(number, wire_type), expected)

    def test_invalid_field_number(self) -> None:
        with self.assertRaises(ValueError):
            wire_types.make_tag(0, WireType.VARINT)


if __name__ == '__main__':
    unittest.main()
