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
"""Wire encoding rules for each protobuf field type.

This module is a pure lookup table: it maps a descriptor field type to the
wire type used to encode it, the jspb reader/writer methods that implement
that encoding, and the JavaScript type and zero value of the decoded value.
"""

import enum
from dataclasses import dataclass

from google.protobuf import descriptor_pb2

from pw_protobuf_js.errors import UnsupportedFeatureError

_FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto


class WireType(enum.IntEnum):
    """The low three bits of a field tag."""

    VARINT = 0
    FIXED64 = 1
    DELIMITED = 2
    START_GROUP = 3
    END_GROUP = 4
    FIXED32 = 5


@dataclass(frozen=True)
class FieldTypeInfo:
    """Encoding and JavaScript representation of one field type.

    Attributes:
      proto_name: The type's keyword in .proto syntax.
      suffix: Suffix of the jspb reader/writer methods, e.g. `Int32` for
          readInt32, writeInt32, readPackedInt32 and writePackedInt32.
      wire_type: Wire type of a single, unpacked value.
      js_type: JSDoc type of a decoded value.
      default: JavaScript literal for the zero value of the type.
      packable: Whether repeated fields of the type may use packed encoding.
      setter_kind: Flavor of jspb.Message.setProto3<kind>Field used for
          implicit-presence fields.
      getter_kind: Flavor of jspb.Message.get<kind>Field.
      nonzero_check: JavaScript condition on `f` that is true when an
          implicit-presence value differs from the default.
    """

    proto_name: str
    suffix: str
    wire_type: WireType
    js_type: str
    default: str
    packable: bool
    setter_kind: str
    getter_kind: str = ''
    nonzero_check: str = 'f !== 0'


def _numeric(proto_name: str, suffix: str,
             wire_type: WireType) -> FieldTypeInfo:
    return FieldTypeInfo(proto_name, suffix, wire_type, 'number', '0', True,
                         'Int')


def _floating(proto_name: str, suffix: str,
              wire_type: WireType) -> FieldTypeInfo:
    return FieldTypeInfo(proto_name, suffix, wire_type, 'number', '0.0', True,
                         'Float', 'FloatingPoint', 'f !== 0.0')


_FIELD_TYPES: dict[int, FieldTypeInfo] = {
    _FieldDescriptorProto.TYPE_DOUBLE:
    _floating('double', 'Double', WireType.FIXED64),
    _FieldDescriptorProto.TYPE_FLOAT:
    _floating('float', 'Float', WireType.FIXED32),
    _FieldDescriptorProto.TYPE_INT64:
    _numeric('int64', 'Int64', WireType.VARINT),
    _FieldDescriptorProto.TYPE_UINT64:
    _numeric('uint64', 'Uint64', WireType.VARINT),
    _FieldDescriptorProto.TYPE_INT32:
    _numeric('int32', 'Int32', WireType.VARINT),
    _FieldDescriptorProto.TYPE_FIXED64:
    _numeric('fixed64', 'Fixed64', WireType.FIXED64),
    _FieldDescriptorProto.TYPE_FIXED32:
    _numeric('fixed32', 'Fixed32', WireType.FIXED32),
    _FieldDescriptorProto.TYPE_BOOL:
    FieldTypeInfo('bool', 'Bool', WireType.VARINT, 'boolean', 'false', True,
                  'Boolean', 'Boolean', 'f'),
    _FieldDescriptorProto.TYPE_STRING:
    FieldTypeInfo('string', 'String', WireType.DELIMITED, 'string', '""',
                  False, 'String', '', 'f.length > 0'),
    _FieldDescriptorProto.TYPE_GROUP:
    FieldTypeInfo('group', 'Group', WireType.START_GROUP, 'Object', 'null',
                  False, '', '', 'f != null'),
    _FieldDescriptorProto.TYPE_MESSAGE:
    FieldTypeInfo('message', 'Message', WireType.DELIMITED, 'Object', 'null',
                  False, '', '', 'f != null'),
    _FieldDescriptorProto.TYPE_BYTES:
    FieldTypeInfo('bytes', 'Bytes', WireType.DELIMITED, '!(string|Uint8Array)',
                  '""', False, 'Bytes', '', 'f.length > 0'),
    _FieldDescriptorProto.TYPE_UINT32:
    _numeric('uint32', 'Uint32', WireType.VARINT),
    _FieldDescriptorProto.TYPE_ENUM:
    FieldTypeInfo('enum', 'Enum', WireType.VARINT, 'number', '0', True,
                  'Enum'),
    _FieldDescriptorProto.TYPE_SFIXED32:
    _numeric('sfixed32', 'Sfixed32', WireType.FIXED32),
    _FieldDescriptorProto.TYPE_SFIXED64:
    _numeric('sfixed64', 'Sfixed64', WireType.FIXED64),
    _FieldDescriptorProto.TYPE_SINT32:
    _numeric('sint32', 'Sint32', WireType.VARINT),
    _FieldDescriptorProto.TYPE_SINT64:
    _numeric('sint64', 'Sint64', WireType.VARINT),
}


def field_type_info(field_type: int) -> FieldTypeInfo:
    """Returns the encoding rules for a FieldDescriptorProto.Type value."""
    try:
        return _FIELD_TYPES[field_type]
    except KeyError:
        raise UnsupportedFeatureError(
            f'unknown field type {field_type}') from None


def is_packable(field_type: int) -> bool:
    """True for the scalar types that support packed repeated encoding."""
    return field_type_info(field_type).packable


def is_message_type(field_type: int) -> bool:
    return field_type in (_FieldDescriptorProto.TYPE_MESSAGE,
                          _FieldDescriptorProto.TYPE_GROUP)


def field_wire_type(field_type: int, packed: bool = False) -> WireType:
    """The wire type that appears in the tag of an encoded field."""
    if packed:
        if not is_packable(field_type):
            raise UnsupportedFeatureError(
                f'{field_type_info(field_type).proto_name} fields cannot be '
                'packed')
        return WireType.DELIMITED
    return field_type_info(field_type).wire_type


def make_tag(field_number: int, wire_type: WireType) -> int:
    """Computes the varint tag that precedes a field on the wire."""
    if field_number < 1:
        raise ValueError(f'invalid field number {field_number}')
    return (field_number << 3) | int(wire_type)
