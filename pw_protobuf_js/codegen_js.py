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
"""This module defines the generated code for JavaScript protobuf classes.

Every message becomes a subclass of jspb.Message. Fields are stored in the
message's backing array by the runtime; the generated code supplies typed
accessors, plain object conversion and, when binary support is enabled, the
wire format reader and writer for each field.
"""

import abc
import base64
import contextlib
import json
from typing import ContextManager, Type

from google.protobuf import descriptor_pb2, text_encoding

from pw_protobuf_js.errors import UnsupportedFeatureError
from pw_protobuf_js.options import GeneratorOptions
from pw_protobuf_js.output_file import OutputFile
from pw_protobuf_js.proto_tree import (
    ProtoEnum,
    ProtoFile,
    ProtoMessage,
    ProtoMessageField,
    ProtoNode,
    ProtoOneof,
)
from pw_protobuf_js.type_names import TypeNames

_FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto

_FLOAT_TYPES = (
    _FieldDescriptorProto.TYPE_FLOAT,
    _FieldDescriptorProto.TYPE_DOUBLE,
)

_SPECIAL_FLOAT_DEFAULTS = {
    'inf': 'Infinity',
    '-inf': '-Infinity',
    'nan': 'NaN',
}


def type_expression(type_names: TypeNames, node: ProtoNode) -> str:
    """Names a message or enum from the current output file.

    Raises:
      UnsupportedFeatureError: The type lives in an ES6 module that the
          current module does not import.
    """
    expression = type_names.js_expression(node)
    if expression:
        return expression

    # ES6 modules only export their top-level types; nested types are reached
    # through the imported outer type.
    outer = node.top_level()
    outer_expression = type_names.js_expression(outer)
    if not outer_expression:
        raise UnsupportedFeatureError(
            f'{node.proto_path()} is defined in '
            f'{node.proto_file().name()}, which is not imported directly',
            node)
    return outer_expression + node.nested_name()[len(outer.name()):]


def field_type_expression(type_names: TypeNames,
                          field: ProtoMessageField) -> str:
    """Names the message or enum type of a field."""
    expression = type_names.submessage_type_ref(field)
    if expression:
        return expression
    type_node = field.type_node()
    assert type_node is not None
    return type_expression(type_names, type_node)


def _annotate(options: GeneratorOptions, output: OutputFile,
              path: tuple[int, ...], proto_file: ProtoFile) -> ContextManager:
    if options.annotate_code:
        return output.annotate(path, proto_file.name())
    return contextlib.nullcontext()


def default_literal(field: ProtoMessageField) -> str:
    """The JavaScript literal for a field's default value."""
    info = field.type_info()

    if field.is_enum():
        type_node = field.type_node()
        assert isinstance(type_node, ProtoEnum)
        if field.has_default_value():
            return str(type_node.value_number(field.default_value()))
        values = type_node.values()
        return str(values[0][1]) if values else '0'

    if not field.has_default_value():
        return info.default

    value = field.default_value()
    if field.is_string():
        return json.dumps(value)
    if field.is_bytes():
        # Byte defaults are C-escaped in descriptors; the runtime expects
        # base64 strings.
        raw = text_encoding.CUnescape(value)
        return json.dumps(base64.b64encode(raw).decode('ascii'))
    if field.type() in _FLOAT_TYPES:
        return _SPECIAL_FLOAT_DEFAULTS.get(value, value)
    return value


def element_type(field: ProtoMessageField, type_names: TypeNames) -> str:
    """JSDoc type of a single value of a field."""
    if field.is_message() or field.is_enum():
        return '!' + field_type_expression(type_names, field)
    return field.type_info().js_type


def field_type(field: ProtoMessageField, type_names: TypeNames) -> str:
    """JSDoc type returned by a field's getter."""
    if field.is_map():
        key = field.map_key_field()
        value = field.map_value_field()
        return (f'!jspb.Map<{element_type(key, type_names)},'
                f'{element_type(value, type_names)}>')
    if field.is_repeated():
        return f'!Array<{element_type(field, type_names)}>'
    if field.is_message():
        return '?' + element_type(field, type_names)[1:]
    return element_type(field, type_names)


def oneof_group(class_name: str, oneof: ProtoOneof) -> str:
    return f'{class_name}.oneofGroups_[{oneof.real_index()}]'


class JsAccessor(abc.ABC):
    """Base class for a generated method of a message class for one field."""

    def __init__(
        self,
        options: GeneratorOptions,
        type_names: TypeNames,
        field: ProtoMessageField,
        class_name: str,
    ):
        """Creates an accessor.

        Args:
          options: Generator options for the run.
          type_names: Naming context of the output file.
          field: The field the method accesses.
          class_name: Expression naming the message class.
        """
        self._options = options
        self._type_names = type_names
        self._field = field
        self._class_name = class_name

    @abc.abstractmethod
    def name(self) -> str:
        """Returns the name of the method, e.g. getFoo."""

    def params(self) -> list[str]:
        return []

    @abc.abstractmethod
    def doc(self) -> list[str]:
        """Returns the lines of the method's JSDoc comment."""

    @abc.abstractmethod
    def body(self) -> list[str]:
        """Returns the method body as a list of source code lines."""

    def should_appear(self) -> bool:  # pylint: disable=no-self-use
        """Whether the method should be generated."""
        return True

    def _type(self) -> str:
        return field_type(self._field, self._type_names)

    def _element_type(self) -> str:
        return element_type(self._field, self._type_names)

    def _type_class(self) -> str:
        return field_type_expression(self._type_names, self._field)

    def _number(self) -> int:
        return self._field.number()

    def _returns_this(self) -> str:
        return f'@return {{!{self._class_name}}} returns this'


class FieldGetter(JsAccessor):
    """Returns the value of a singular scalar field, or its default."""

    def name(self) -> str:
        return f'get{self._field.accessor_name()}'

    def doc(self) -> list[str]:
        return [f'optional {self._field.type_info().proto_name} '
                f'{self._field.field_name()} = {self._number()};',
                f'@return {{{self._type()}}}']

    def body(self) -> list[str]:
        kind = self._field.type_info().getter_kind
        default = default_literal(self._field)
        return [
            f'return /** @type {{{self._type()}}} */ '
            f'(jspb.Message.get{kind}FieldWithDefault(this, {self._number()}, '
            f'{default}));'
        ]


class FieldSetter(JsAccessor):
    """Sets a singular scalar field, clearing other members of its oneof."""

    def name(self) -> str:
        return f'set{self._field.accessor_name()}'

    def params(self) -> list[str]:
        return ['value']

    def doc(self) -> list[str]:
        return [f'@param {{{self._type()}}} value', self._returns_this()]

    def body(self) -> list[str]:
        oneof = self._field.oneof()
        if oneof is not None:
            group = oneof_group(self._class_name, oneof)
            return [
                f'return jspb.Message.setOneofField(this, {self._number()}, '
                f'{group}, value);'
            ]
        if self._field.has_presence():
            return [
                f'return jspb.Message.setField(this, {self._number()}, value);'
            ]
        kind = self._field.type_info().setter_kind
        return [
            f'return jspb.Message.setProto3{kind}Field(this, '
            f'{self._number()}, value);'
        ]


class FieldClearer(JsAccessor):
    """Clears a field that tracks presence."""

    def name(self) -> str:
        return f'clear{self._field.accessor_name()}'

    def doc(self) -> list[str]:
        return ['Clears the field making it undefined.', self._returns_this()]

    def body(self) -> list[str]:
        oneof = self._field.oneof()
        if oneof is not None:
            group = oneof_group(self._class_name, oneof)
            return [
                f'return jspb.Message.setOneofField(this, {self._number()}, '
                f'{group}, undefined);'
            ]
        return [
            f'return jspb.Message.setField(this, {self._number()}, undefined);'
        ]

    def should_appear(self) -> bool:
        return self._field.has_presence()


class FieldHas(JsAccessor):
    """Reports whether a field that tracks presence is set."""

    def name(self) -> str:
        return f'has{self._field.accessor_name()}'

    def doc(self) -> list[str]:
        return ['Returns whether this field is set.', '@return {boolean}']

    def body(self) -> list[str]:
        return [
            f'return jspb.Message.getField(this, {self._number()}) != null;'
        ]

    def should_appear(self) -> bool:
        return self._field.has_presence()


class BytesB64Getter(JsAccessor):
    """Returns a bytes field as a base64 string."""

    def name(self) -> str:
        return f'get{self._field.accessor_name()}_asB64'

    def doc(self) -> list[str]:
        noun = 'list' if self._field.is_repeated() else 'field'
        kind = '!Array<string>' if self._field.is_repeated() else 'string'
        return [
            f'{self._field.field_name()} = {self._number()};',
            f'This is a type-conversion wrapper around `get'
            f'{self._field.accessor_name()}()`',
            f'@return {{{kind}}} The {noun} as base64 encoded string',
        ]

    def body(self) -> list[str]:
        function = ('bytesListAsB64'
                    if self._field.is_repeated() else 'bytesAsB64')
        kind = '!Array<string>' if self._field.is_repeated() else 'string'
        return [
            f'return /** @type {{{kind}}} */ (jspb.Message.{function}(',
            f'    this.get{self._field.accessor_name()}()));',
        ]


class BytesU8Getter(JsAccessor):
    """Returns a bytes field as a Uint8Array."""

    def name(self) -> str:
        return f'get{self._field.accessor_name()}_asU8'

    def doc(self) -> list[str]:
        kind = ('!Array<!Uint8Array>'
                if self._field.is_repeated() else '!Uint8Array')
        return [
            f'{self._field.field_name()} = {self._number()};',
            'Note that Uint8Array is not supported on all browsers.',
            '@see http://caniuse.com/Uint8Array',
            f'This is a type-conversion wrapper around `get'
            f'{self._field.accessor_name()}()`',
            f'@return {{{kind}}}',
        ]

    def body(self) -> list[str]:
        function = ('bytesListAsU8'
                    if self._field.is_repeated() else 'bytesAsU8')
        kind = ('!Array<!Uint8Array>'
                if self._field.is_repeated() else '!Uint8Array')
        return [
            f'return /** @type {{{kind}}} */ (jspb.Message.{function}(',
            f'    this.get{self._field.accessor_name()}()));',
        ]


class MessageGetter(JsAccessor):
    """Returns a submessage field, or undefined when it is not set."""

    def name(self) -> str:
        return f'get{self._field.accessor_name()}'

    def doc(self) -> list[str]:
        return [
            f'optional {self._type_class()} {self._field.field_name()} = '
            f'{self._number()};',
            f'@return {{{self._type()}}}',
        ]

    def body(self) -> list[str]:
        return [
            f'return /** @type{{{self._type()}}} */ (',
            f'  jspb.Message.getWrapperField(this, {self._type_class()}, '
            f'{self._number()}));',
        ]


class MessageSetter(JsAccessor):
    """Sets a submessage field, clearing other members of its oneof."""

    def name(self) -> str:
        return f'set{self._field.accessor_name()}'

    def params(self) -> list[str]:
        return ['value']

    def doc(self) -> list[str]:
        return [
            f'@param {{{self._type()}|undefined}} value',
            self._returns_this(),
        ]

    def body(self) -> list[str]:
        oneof = self._field.oneof()
        if oneof is not None:
            group = oneof_group(self._class_name, oneof)
            return [
                f'return jspb.Message.setOneofWrapperField(this, '
                f'{self._number()}, {group}, value);'
            ]
        return [
            f'return jspb.Message.setWrapperField(this, {self._number()}, '
            'value);'
        ]


class MessageClearer(JsAccessor):
    """Clears a submessage field."""

    def name(self) -> str:
        return f'clear{self._field.accessor_name()}'

    def doc(self) -> list[str]:
        return ['Clears the message field making it undefined.',
                self._returns_this()]

    def body(self) -> list[str]:
        return [f'return this.set{self._field.accessor_name()}(undefined);']


class RepeatedGetter(JsAccessor):
    """Returns the values of a repeated scalar field."""

    def name(self) -> str:
        return f'get{self._field.accessor_name()}'

    def doc(self) -> list[str]:
        return [
            f'repeated {self._field.type_info().proto_name} '
            f'{self._field.field_name()} = {self._number()};',
            f'@return {{{self._type()}}}',
        ]

    def body(self) -> list[str]:
        kind = self._field.type_info().getter_kind
        return [
            f'return /** @type {{{self._type()}}} */ '
            f'(jspb.Message.getRepeated{kind}Field(this, {self._number()}));'
        ]


class RepeatedSetter(JsAccessor):
    """Replaces the values of a repeated scalar field."""

    def name(self) -> str:
        return f'set{self._field.accessor_name()}'

    def params(self) -> list[str]:
        return ['value']

    def doc(self) -> list[str]:
        return [f'@param {{{self._type()}}} value', self._returns_this()]

    def body(self) -> list[str]:
        return [
            f'return jspb.Message.setField(this, {self._number()}, '
            'value || []);'
        ]


class RepeatedAdder(JsAccessor):
    """Appends to, or inserts into, a repeated scalar field."""

    def name(self) -> str:
        return f'add{self._field.name()}'

    def params(self) -> list[str]:
        return ['value', 'opt_index']

    def doc(self) -> list[str]:
        return [
            f'@param {{{self._element_type()}}} value',
            '@param {number=} opt_index',
            self._returns_this(),
        ]

    def body(self) -> list[str]:
        return [
            f'return jspb.Message.addToRepeatedField(this, {self._number()}, '
            'value, opt_index);'
        ]


class ListClearer(JsAccessor):
    """Removes every value of a repeated field."""

    def name(self) -> str:
        return f'clear{self._field.accessor_name()}'

    def doc(self) -> list[str]:
        return ['Clears the list making it empty but non-null.',
                self._returns_this()]

    def body(self) -> list[str]:
        return [f'return this.set{self._field.accessor_name()}([]);']


class RepeatedMessageGetter(JsAccessor):
    """Returns the messages of a repeated message field."""

    def name(self) -> str:
        return f'get{self._field.accessor_name()}'

    def doc(self) -> list[str]:
        return [
            f'repeated {self._type_class()} {self._field.field_name()} = '
            f'{self._number()};',
            f'@return {{{self._type()}}}',
        ]

    def body(self) -> list[str]:
        return [
            f'return /** @type{{{self._type()}}} */ (',
            f'  jspb.Message.getRepeatedWrapperField(this, '
            f'{self._type_class()}, {self._number()}));',
        ]


class RepeatedMessageSetter(JsAccessor):
    """Replaces the messages of a repeated message field."""

    def name(self) -> str:
        return f'set{self._field.accessor_name()}'

    def params(self) -> list[str]:
        return ['value']

    def doc(self) -> list[str]:
        return [f'@param {{{self._type()}}} value', self._returns_this()]

    def body(self) -> list[str]:
        return [
            f'return jspb.Message.setRepeatedWrapperField(this, '
            f'{self._number()}, value);'
        ]


class RepeatedMessageAdder(JsAccessor):
    """Appends a message, a new one when none is given, to a list."""

    def name(self) -> str:
        return f'add{self._field.name()}'

    def params(self) -> list[str]:
        return ['opt_value', 'opt_index']

    def doc(self) -> list[str]:
        return [
            f'@param {{{self._element_type()}=}} opt_value',
            '@param {number=} opt_index',
            f'@return {{{self._element_type()}}}',
        ]

    def body(self) -> list[str]:
        return [
            f'return jspb.Message.addToRepeatedWrapperField(this, '
            f'{self._number()}, opt_value, {self._type_class()}, opt_index);'
        ]


class MapGetter(JsAccessor):
    """Returns the jspb.Map backing a map field."""

    def name(self) -> str:
        return f'get{self._field.accessor_name()}'

    def params(self) -> list[str]:
        return ['opt_noLazyCreate']

    def doc(self) -> list[str]:
        return [
            f'map<{self._field.map_key_field().type_info().proto_name}, '
            f'...> {self._field.field_name()} = {self._number()};',
            '@param {boolean=} opt_noLazyCreate Do not create the map if',
            'empty, instead returning `undefined`',
            f'@return {{{self._type()}}}',
        ]

    def body(self) -> list[str]:
        value = self._field.map_value_field()
        value_class = 'null'
        if value.is_message():
            value_type = value.type_node()
            assert value_type is not None
            value_class = type_expression(self._type_names, value_type)
        return [
            f'return /** @type {{{self._type()}}} */ (',
            f'    jspb.Message.getMapField(this, {self._number()}, '
            f'opt_noLazyCreate,',
            f'      {value_class}));',
        ]


class MapClearer(JsAccessor):
    """Removes every entry of a map field."""

    def name(self) -> str:
        return f'clear{self._field.accessor_name()}'

    def doc(self) -> list[str]:
        return ['Clears values from the map. The map will be non-null.',
                self._returns_this()]

    def body(self) -> list[str]:
        return [
            f'this.get{self._field.accessor_name()}().clear();',
            'return this;',
        ]


def field_accessors(field: ProtoMessageField) -> list[Type[JsAccessor]]:
    """The accessor methods generated for a field, in emission order."""
    if field.is_map():
        return [MapGetter, MapClearer]

    if field.is_repeated():
        if field.is_message():
            return [
                RepeatedMessageGetter,
                RepeatedMessageSetter,
                RepeatedMessageAdder,
                ListClearer,
            ]
        accessors: list[Type[JsAccessor]] = [RepeatedGetter]
        if field.is_bytes():
            accessors += [BytesB64Getter, BytesU8Getter]
        return accessors + [RepeatedSetter, RepeatedAdder, ListClearer]

    if field.is_message():
        return [MessageGetter, MessageSetter, MessageClearer, FieldHas]

    accessors = [FieldGetter]
    if field.is_bytes():
        accessors += [BytesB64Getter, BytesU8Getter]
    return accessors + [FieldSetter, FieldClearer, FieldHas]


def _write_doc(output: OutputFile, lines: list[str]) -> None:
    output.write_line('/**')
    for line in lines:
        output.write_line(f' * {line}' if line else ' *')
    output.write_line(' */')


def _write_function(output: OutputFile, target: str, params: list[str],
                    body: list[str]) -> None:
    output.write_line(f'{target} = function({", ".join(params)}) {{')
    with output.indent():
        output.write_lines(body)
    output.write_line('};')
    output.write_line()


def _generate_constructor(message: ProtoMessage, class_name: str,
                          output: OutputFile,
                          options: GeneratorOptions) -> None:
    repeated = (f'{class_name}.repeatedFields_'
                if _repeated_field_numbers(message) else 'null')
    oneofs = (f'{class_name}.oneofGroups_'
              if message.real_oneofs() else 'null')
    initialize = (f'jspb.Message.initialize(this, opt_data, 0, '
                  f'{message.pivot()}, {repeated}, {oneofs});')

    _write_doc(output, [
        'Generated by protoc-gen-pwjs.',
        '@param {Array=} opt_data Optional initial data array, typically '
        'from a',
        'server response, or constructed directly in Javascript. The array '
        'is used',
        'in place and becomes part of the constructed object. It is not '
        'cloned.',
        'If no data is provided, the constructed object will be empty, but '
        'still',
        'valid.',
        '@extends {jspb.Message}',
        '@constructor',
    ])

    if options.want_es6():
        if message.is_top_level():
            output.write_line(
                f'export class {class_name} extends jspb.Message {{')
        else:
            output.write_line(f'{class_name} = class extends jspb.Message {{')
        with output.indent():
            output.write_line('constructor(opt_data) {')
            with output.indent():
                output.write_line('super();')
                output.write_line(initialize)
            output.write_line('}')
        output.write_line('};')
        output.write_line()
        return

    output.write_line(f'{class_name} = function(opt_data) {{')
    with output.indent():
        output.write_line(initialize)
    output.write_line('};')
    output.write_line(f'goog.inherits({class_name}, jspb.Message);')
    output.write_line('if (goog.DEBUG && !COMPILED) {')
    with output.indent():
        _write_doc(output, ['@public', '@override'])
        output.write_line(f"{class_name}.displayName = '{class_name}';")
    output.write_line('}')
    output.write_line()


def _repeated_field_numbers(message: ProtoMessage) -> list[int]:
    return [
        field.number() for field in message.fields()
        if field.is_repeated() and not field.is_map()
    ]


def _generate_field_tables(message: ProtoMessage, class_name: str,
                           output: OutputFile) -> None:
    repeated = _repeated_field_numbers(message)
    if repeated:
        _write_doc(output, [
            'List of repeated fields within this message type.',
            '@private {!Array<number>}',
            '@const',
        ])
        numbers = ','.join(str(number) for number in repeated)
        output.write_line(f'{class_name}.repeatedFields_ = [{numbers}];')
        output.write_line()

    oneofs = message.real_oneofs()
    if oneofs:
        _write_doc(output, [
            'Oneof group definitions for this message. Each group defines '
            'the field',
            'numbers belonging to that group. When of these fields\' value '
            'is set, all',
            'other fields in the group are cleared. During deserialization, '
            'if multiple',
            'fields are encountered for a group, only the last value seen '
            'will be kept.',
            '@private {!Array<!Array<number>>}',
            '@const',
        ])
        groups = ','.join(
            '[' + ','.join(str(field.number())
                           for field in oneof.fields()) + ']'
            for oneof in oneofs)
        output.write_line(f'{class_name}.oneofGroups_ = [{groups}];')
        output.write_line()


def _generate_oneof_cases(message: ProtoMessage, class_name: str,
                          output: OutputFile) -> None:
    for oneof in message.real_oneofs():
        case_enum = f'{class_name}.{oneof.name()}Case'
        _write_doc(output, ['@enum {number}'])
        output.write_line(f'{case_enum} = {{')
        with output.indent():
            entries = [f'{oneof.oneof_name().upper()}_NOT_SET: 0']
            entries += [
                f'{field.field_name().upper()}: {field.number()}'
                for field in oneof.fields()
            ]
            for i, entry in enumerate(entries):
                output.write_line(entry +
                                  (',' if i < len(entries) - 1 else ''))
        output.write_line('};')
        output.write_line()

        _write_doc(output, [f'@return {{{case_enum}}}'])
        _write_function(output, f'{class_name}.prototype.get{oneof.name()}Case',
                        [], [
                            f'return /** @type {{{case_enum}}} */(jspb.Message'
                            f'.computeOneofCase(this, '
                            f'{oneof_group(class_name, oneof)}));'
                        ])


def _to_object_value(field: ProtoMessageField, type_names: TypeNames) -> str:
    """The expression converting a field of msg to its plain object form."""
    number = field.number()
    getter = f'msg.get{field.accessor_name()}'
    info = field.type_info()

    if field.is_map():
        value = field.map_value_field()
        converter = 'undefined'
        if value.is_message():
            value_type = value.type_node()
            assert value_type is not None
            converter = type_expression(type_names, value_type) + '.toObject'
        return (f'(f = {getter}()) ? '
                f'f.toObject(includeInstance, {converter}) : []')

    if field.is_message():
        type_class = field_type_expression(type_names, field)
        if field.is_repeated():
            return (f'jspb.Message.toObjectList({getter}(),\n'
                    f'    {type_class}.toObject, includeInstance)')
        return f'(f = {getter}()) && {type_class}.toObject(includeInstance, f)'

    if field.is_bytes():
        return f'{getter}_asB64()'

    if field.is_repeated():
        return (f'(f = jspb.Message.getRepeated{info.getter_kind}Field(msg, '
                f'{number})) == null ? undefined : f')

    if not field.has_presence() or field.has_default_value():
        return (f'jspb.Message.get{info.getter_kind}FieldWithDefault(msg, '
                f'{number}, {default_literal(field)})')

    raw_getter = {
        'Boolean': 'getBooleanField',
        'FloatingPoint': 'getOptionalFloatingPointField',
    }.get(info.getter_kind, 'getField')
    return (f'(f = jspb.Message.{raw_getter}(msg, {number})) == null '
            '? undefined : f')


def _from_object_statement(field: ProtoMessageField, class_name: str,
                           type_names: TypeNames) -> str:
    """A statement copying a field from obj into msg, if it is present."""
    key = f'obj.{field.object_key()}'
    number = field.number()
    oneof = field.oneof()

    if field.is_map():
        value = field.map_value_field()
        arguments = key
        if value.is_message():
            value_type = value.type_node()
            assert value_type is not None
            value_class = type_expression(type_names, value_type)
            arguments += f', {value_class}, {value_class}.fromObject'
        return (f'{key} != null && jspb.Message.setWrapperField(msg, {number}, '
                f'jspb.Map.fromObject({arguments}));')

    if field.is_message():
        type_class = field_type_expression(type_names, field)
        if field.is_repeated():
            return (f'{key} != null && jspb.Message.setRepeatedWrapperField('
                    f'msg, {number}, {key}.map({type_class}.fromObject));')
        if oneof is not None:
            return (f'{key} != null && jspb.Message.setOneofWrapperField('
                    f'msg, {number}, {oneof_group(class_name, oneof)}, '
                    f'{type_class}.fromObject({key}));')
        return (f'{key} != null && jspb.Message.setWrapperField(msg, '
                f'{number}, {type_class}.fromObject({key}));')

    if oneof is not None:
        return (f'{key} != null && jspb.Message.setOneofField(msg, {number}, '
                f'{oneof_group(class_name, oneof)}, {key});')
    return f'{key} != null && jspb.Message.setField(msg, {number}, {key});'


def _generate_object_conversion(message: ProtoMessage, class_name: str,
                                output: OutputFile,
                                type_names: TypeNames) -> None:
    fields = message.fields()

    _write_doc(output, ['@typedef {{'] + [
        f'  {field.object_key()}: {field_type(field, type_names)}'
        + (',' if i < len(fields) - 1 else '')
        for i, field in enumerate(fields)
    ] + ['}}'])
    output.write_line(f'{class_name}.AsObject;')
    output.write_line()

    output.write_line('if (jspb.Message.GENERATE_TO_OBJECT) {')
    _write_doc(output, [
        'Creates an object representation of this proto.',
        'Field names that are reserved in JavaScript and will be renamed to '
        'pb_name.',
        'Optional fields that are not set will be set to undefined.',
        'To access a reserved field use, foo.pb_<name>, eg, foo.pb_default.',
        '@param {boolean=} opt_includeInstance Deprecated. whether to '
        'include the',
        '    JSPB instance for transitional soy proto support:',
        '    http://goto/soy-param-migration',
        f'@return {{!{class_name}.AsObject}}',
    ])
    _write_function(output, f'{class_name}.prototype.toObject',
                    ['opt_includeInstance'], [
                        f'return {class_name}.toObject('
                        'opt_includeInstance, this);'
                    ])

    body = []
    if fields:
        body.append('var f, obj = {')
        for i, field in enumerate(fields):
            value = _to_object_value(field, type_names).replace('\n', '\n  ')
            separator = ',' if i < len(fields) - 1 else ''
            for line in f'{field.object_key()}: {value}{separator}'.split(
                    '\n'):
                body.append('  ' + line)
        body.append('};')
    else:
        body.append('var f, obj = {};')
    body.append('')

    if message.is_extendable():
        body += [
            'jspb.Message.toObjectExtension(/** @type {!jspb.Message} */ '
            '(msg), obj,',
            f'    {class_name}.extensions,',
            f'    {class_name}.prototype.getExtension,',
            '    includeInstance);',
        ]
    body += [
        'if (includeInstance) {',
        '  obj.$jspbMessageInstance = msg;',
        '}',
        'return obj;',
    ]

    _write_doc(output, [
        'Static version of the {@see toObject} method.',
        '@param {boolean|undefined} includeInstance Deprecated. Whether to '
        'include',
        '    the JSPB instance for transitional soy proto support:',
        '    http://goto/soy-param-migration',
        f'@param {{!{class_name}}} msg The msg instance to transform.',
        f'@return {{!{class_name}.AsObject}}',
        '@suppress {unusedLocalVariables} f is only used for nested messages',
    ])
    _write_function(output, f'{class_name}.toObject',
                    ['includeInstance', 'msg'], body)
    output.write_line('}')
    output.write_line()

    body = [f'var msg = new {class_name}();']
    body += [
        _from_object_statement(field, class_name, type_names)
        for field in fields
    ]
    body.append('return msg;')
    _write_doc(output, [
        'Loads data from an object into a new instance of this proto.',
        f'@param {{!{class_name}.AsObject}} obj The object representation of '
        'this proto to',
        '    load the data from.',
        f'@return {{!{class_name}}}',
    ])
    _write_function(output, f'{class_name}.fromObject', ['obj'], body)


def _deserialize_field(field: ProtoMessageField,
                       type_names: TypeNames) -> list[str]:
    """Statements reading one occurrence of a field from reader into msg."""
    info = field.type_info()
    store = (f'msg.add{field.name()}'
             if field.is_repeated() else f'msg.set{field.accessor_name()}')

    if field.is_map():
        key = field.map_key_field()
        value = field.map_value_field()
        value_reader = 'null'
        value_default = default_literal(value)
        if value.is_message():
            value_class = type_expression(type_names, value.type_node())
            value_reader = f'{value_class}.deserializeBinaryFromReader'
            value_default = f'new {value_class}()'
        return [
            f'var value = msg.get{field.accessor_name()}();',
            'reader.readMessage(value, function(message, reader) {',
            '  jspb.Map.deserializeBinary(message, reader, '
            f'jspb.BinaryReader.prototype.read{key.type_info().suffix}, '
            f'jspb.BinaryReader.prototype.read{value.type_info().suffix}, '
            f'{value_reader}, {default_literal(key)}, '
            f'{value_default});',
            '});',
        ]

    if field.is_message():
        type_class = field_type_expression(type_names, field)
        if field.is_group():
            read = (f'reader.readGroup({field.number()}, value, '
                    f'{type_class}.deserializeBinaryFromReader);')
        else:
            read = (f'reader.readMessage(value, '
                    f'{type_class}.deserializeBinaryFromReader);')
        return [f'var value = new {type_class};', read, f'{store}(value);']

    element = element_type(field, type_names)
    if field.is_packable():
        # Accept both encodings regardless of how the field is declared.
        return [
            f'var values = /** @type {{!Array<{element}>}} */ '
            f'(reader.isDelimited() ? reader.readPacked{info.suffix}() : '
            f'[reader.read{info.suffix}()]);',
            'for (var i = 0; i < values.length; i++) {',
            f'  {store}(values[i]);',
            '}',
        ]

    return [
        f'var value = /** @type {{{element}}} */ '
        f'(reader.read{info.suffix}());',
        f'{store}(value);',
    ]


def _serialize_field(field: ProtoMessageField,
                     type_names: TypeNames) -> list[str]:
    """Statements writing a field of message to writer, when it is set."""
    info = field.type_info()
    number = field.number()
    getter = f'message.get{field.accessor_name()}'

    if field.is_map():
        key = field.map_key_field()
        value = field.map_value_field()
        value_writer = ''
        if value.is_message():
            value_class = type_expression(type_names, value.type_node())
            value_writer = f', {value_class}.serializeBinaryToWriter'
        return [
            f'f = {getter}(true);',
            'if (f && f.getLength() > 0) {',
            f'  f.serializeBinary({number}, writer, '
            f'jspb.BinaryWriter.prototype.write{key.type_info().suffix}, '
            f'jspb.BinaryWriter.prototype.write{value.type_info().suffix}'
            f'{value_writer});',
            '}',
        ]

    if field.is_message():
        type_class = field_type_expression(type_names, field)
        method = 'Group' if field.is_group() else 'Message'
        if field.is_repeated():
            return [
                f'f = {getter}();',
                'if (f.length > 0) {',
                f'  writer.writeRepeated{method}(',
                f'    {number},',
                '    f,',
                f'    {type_class}.serializeBinaryToWriter',
                '  );',
                '}',
            ]
        return [
            f'f = {getter}();',
            'if (f != null) {',
            f'  writer.write{method}(',
            f'    {number},',
            '    f,',
            f'    {type_class}.serializeBinaryToWriter',
            '  );',
            '}',
        ]

    if field.is_repeated():
        method = 'Packed' if field.is_packed() else 'Repeated'
        read = f'{getter}_asU8()' if field.is_bytes() else f'{getter}()'
        return [
            f'f = {read};',
            'if (f.length > 0) {',
            f'  writer.write{method}{info.suffix}(',
            f'    {number},',
            '    f',
            '  );',
            '}',
        ]

    if field.has_presence():
        read = (f'/** @type {{{element_type(field, type_names)}}} */ '
                f'(jspb.Message.getField(message, {number}))')
        check = 'f != null'
    else:
        read = f'{getter}_asU8()' if field.is_bytes() else f'{getter}()'
        check = info.nonzero_check

    return [
        f'f = {read};',
        f'if ({check}) {{',
        f'  writer.write{info.suffix}(',
        f'    {number},',
        '    f',
        '  );',
        '}',
    ]


def _generate_binary(message: ProtoMessage, class_name: str,
                     output: OutputFile, options: GeneratorOptions,
                     type_names: TypeNames) -> None:
    _write_doc(output, [
        'Deserializes binary data (in protobuf wire format).',
        '@param {jspb.ByteSource} bytes The bytes to deserialize.',
        f'@return {{!{class_name}}}',
    ])
    _write_function(output, f'{class_name}.deserializeBinary', ['bytes'], [
        'var reader = new jspb.BinaryReader(bytes);',
        f'var msg = new {class_name};',
        f'return {class_name}.deserializeBinaryFromReader(msg, reader);',
    ])

    body = [
        'while (reader.nextField()) {',
        '  if (reader.isEndGroup()) {',
        '    break;',
        '  }',
        '  var field = reader.getFieldNumber();',
        '  switch (field) {',
    ]
    for field in message.fields():
        body.append(f'  case {field.number()}:')
        body += [
            '    ' + line for line in _deserialize_field(field, type_names)
        ]
        body.append('    break;')
    body.append('  default:')
    if message.is_extendable():
        body += [
            f'    if ({class_name}.extensionsBinary[field] !== undefined) {{',
            '      jspb.Message.readBinaryExtension(msg, reader,',
            f'        {class_name}.extensionsBinary,',
            f'        {class_name}.prototype.getExtension,',
            f'        {class_name}.prototype.setExtension);',
            '      break;',
            '    }',
        ]
    if options.discard_unknown_fields:
        body.append('    reader.skipField();')
    else:
        body += [
            '    var fieldStart = reader.getFieldCursor();',
            '    reader.skipField();',
            '    (msg.unknownFields_ || (msg.unknownFields_ = [])).push(',
            '        reader.getBuffer().slice(fieldStart, '
            'reader.getCursor()));',
        ]
    body += ['    break;', '  }', '}', 'return msg;']

    _write_doc(output, [
        'Deserializes binary data (in protobuf wire format) from the',
        'given reader into the given message object.',
        f'@param {{!{class_name}}} msg The message object to deserialize '
        'into.',
        '@param {!jspb.BinaryReader} reader The BinaryReader to use.',
        f'@return {{!{class_name}}}',
    ])
    _write_function(output, f'{class_name}.deserializeBinaryFromReader',
                    ['msg', 'reader'], body)

    _write_doc(output, [
        'Serializes the message to binary data (in protobuf wire format).',
        '@return {!Uint8Array}',
    ])
    _write_function(output, f'{class_name}.prototype.serializeBinary', [], [
        'var writer = new jspb.BinaryWriter();',
        f'{class_name}.serializeBinaryToWriter(this, writer);',
        'return writer.getResultBuffer();',
    ])

    body = ['var f = undefined;']
    for field in message.fields_by_number():
        body += _serialize_field(field, type_names)
    if message.is_extendable():
        body += [
            'jspb.Message.serializeBinaryExtensions(message, writer,',
            f'  {class_name}.extensionsBinary, '
            f'{class_name}.prototype.getExtension);',
        ]
    if not options.discard_unknown_fields:
        body += [
            'var unknownFields = message.unknownFields_;',
            'if (unknownFields) {',
            '  for (var i = 0; i < unknownFields.length; i++) {',
            '    writer.writeSerializedMessage(',
            '        unknownFields[i], 0, unknownFields[i].length);',
            '  }',
            '}',
        ]

    _write_doc(output, [
        'Serializes the given message to binary data (in protobuf wire',
        'format), writing to the given BinaryWriter.',
        f'@param {{!{class_name}}} message',
        '@param {!jspb.BinaryWriter} writer',
        '@suppress {unusedLocalVariables} f is only used for nested messages',
    ])
    _write_function(output, f'{class_name}.serializeBinaryToWriter',
                    ['message', 'writer'], body)


def _generate_extension_registries(class_name: str, output: OutputFile,
                                   options: GeneratorOptions) -> None:
    _write_doc(output, [
        'The extensions registered with this message class. This is a map of',
        'extension field number to fieldInfo object.',
        '',
        'For example:',
        '    { 123: {fieldIndex: 123, fieldName: {my_field_name: 0}, '
        'ctor: proto.example.MyMessage} }',
        '',
        'fieldName contains the JsCompiler renamed field name property so '
        'that it',
        'works in OPTIMIZED mode.',
        '',
        '@type {!Object<number, jspb.ExtensionFieldInfo>}',
    ])
    output.write_line(f'{class_name}.extensions = {{}};')
    output.write_line()

    if options.binary:
        _write_doc(output, [
            'The extensions registered with this message class. This is a map '
            'of',
            'extension field number to fieldInfo object.',
            '',
            '@type {!Object<number, jspb.ExtensionFieldBinaryInfo>}',
        ])
        output.write_line(f'{class_name}.extensionsBinary = {{}};')
        output.write_line()


def generate_class_for_message(
    message: ProtoMessage,
    type_names: TypeNames,
    output: OutputFile,
    options: GeneratorOptions,
) -> None:
    """Creates a JavaScript class for a protobuf message."""
    assert message.type() == ProtoNode.Type.MESSAGE
    proto_file = message.proto_file()
    assert proto_file is not None

    class_name = type_names.js_expression(message)

    with _annotate(options, output, message.descriptor_path(), proto_file):
        _generate_constructor(message, class_name, output, options)
    _generate_field_tables(message, class_name, output)

    # Generate methods for each of the message's fields.
    for field in message.fields():
        with _annotate(options, output, field.descriptor_path(), proto_file):
            for accessor_class in field_accessors(field):
                accessor = accessor_class(options, type_names, field,
                                          class_name)
                if not accessor.should_appear():
                    continue

                _write_doc(output, accessor.doc())
                _write_function(output,
                                f'{class_name}.prototype.{accessor.name()}',
                                accessor.params(), accessor.body())

    _generate_oneof_cases(message, class_name, output)
    _generate_object_conversion(message, class_name, output, type_names)

    if options.binary:
        _generate_binary(message, class_name, output, options, type_names)

    if message.is_extendable():
        _generate_extension_registries(class_name, output, options)

    output.write_line(f"jspb.Message.registerMessageType('"
                      f"{message.proto_path()}', {class_name});")
    output.write_line()


def generate_code_for_enum(
    proto_enum: ProtoEnum,
    type_names: TypeNames,
    output: OutputFile,
    options: GeneratorOptions,
) -> None:
    """Creates a JavaScript enum object for a proto enum."""
    assert proto_enum.type() == ProtoNode.Type.ENUM
    proto_file = proto_enum.proto_file()
    assert proto_file is not None

    name = type_names.js_expression(proto_enum)
    if options.want_es6() and proto_enum.is_top_level():
        definition = f'export const {name} = {{'
    else:
        definition = f'{name} = {{'

    with _annotate(options, output, proto_enum.descriptor_path(),
                   proto_file):
        _write_doc(output, ['@enum {number}'])
        output.write_line(definition)
        with output.indent():
            values = proto_enum.values()
            for i, (value_name, number) in enumerate(values):
                separator = ',' if i < len(values) - 1 else ''
                output.write_line(f'{value_name}: {number}{separator}')
        output.write_line('};')
    output.write_line()


def generate_message_tree(
    message: ProtoMessage,
    type_names: TypeNames,
    output: OutputFile,
    options: GeneratorOptions,
) -> None:
    """Generates a message class followed by its nested types."""
    if message.is_map_entry():
        return

    generate_class_for_message(message, type_names, output, options)
    for nested in message.nested_messages():
        generate_message_tree(nested, type_names, output, options)
    for proto_enum in message.nested_enums():
        generate_code_for_enum(proto_enum, type_names, output, options)


def generate_extension(
    field: ProtoMessageField,
    type_names: TypeNames,
    output: OutputFile,
    options: GeneratorOptions,
) -> None:
    """Defines an extension and registers it with the message it extends."""
    extendee = field.extendee()
    assert extendee is not None
    extendee_class = type_expression(type_names, extendee)
    name = type_names.extension_expression(field)
    info = field.type_info()
    repeated = 1 if field.is_repeated() else 0

    constructor = 'null'
    to_object = 'null'
    serializer = 'undefined'
    deserializer = 'undefined'
    if field.is_message():
        constructor = field_type_expression(type_names, field)
        to_object = f'{constructor}.toObject'
        serializer = f'{constructor}.serializeBinaryToWriter'
        deserializer = f'{constructor}.deserializeBinaryFromReader'

    if (options.want_es6() and field.scope() is None):
        definition = f'export const {name}'
    else:
        definition = name

    with _annotate(options, output, field.descriptor_path(),
                   field.proto_file()):
        _write_doc(output, [
            'A tuple of {field number, class constructor} for the extension',
            f'field named `{field.object_key()}`.',
            f'@type {{!jspb.ExtensionFieldInfo<'
            f'{field_type(field, type_names)}>}}',
        ])
        output.write_lines([
            f'{definition} = new jspb.ExtensionFieldInfo(',
            f'    {field.number()},',
            f'    {{{field.object_key()}: 0}},',
            f'    {constructor},',
            '     /** @type {?function((boolean|undefined),!jspb.Message=): '
            f'!Object}} */ ({to_object}),',
            f'    {repeated});',
            '',
        ])

    if options.binary:
        method = info.suffix
        if field.is_packed():
            method = 'Packed' + method
        elif field.is_repeated():
            method = 'Repeated' + method
        reader = 'Packed' + info.suffix if field.is_packed() else info.suffix
        output.write_lines([
            f'{extendee_class}.extensionsBinary[{field.number()}] = '
            'new jspb.ExtensionFieldBinaryInfo(',
            f'    {name},',
            f'    jspb.BinaryReader.prototype.read{reader},',
            f'    jspb.BinaryWriter.prototype.write{method},',
            f'    {serializer},',
            f'    {deserializer},',
            f'    {"true" if field.is_packed() else "false"});',
        ])

    output.write_lines([
        '// This registers the extension field with the extended class, so '
        'that',
        '// toObject() will function correctly.',
        f'{extendee_class}.extensions[{field.number()}] = {name};',
        '',
    ])


def generate_code_for_file(
    proto_file: ProtoFile,
    type_names: TypeNames,
    output: OutputFile,
    options: GeneratorOptions,
) -> None:
    """Generates every message, enum and extension of a .proto file."""
    for message in proto_file.messages():
        generate_message_tree(message, type_names, output, options)

    for proto_enum in proto_file.enums():
        generate_code_for_enum(proto_enum, type_names, output, options)

    for extension in proto_file.all_extensions():
        generate_extension(extension, type_names, output, options)
