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
"""This module defines data structures for protobuf entities.

Unlike a single-file view of a descriptor, the tree built here spans every
file of a generation request: packages shared by several files are merged into
one node, and every message and enum records the ProtoFile that defines it.
All field type references are resolved while the tree is built.
"""

import abc
import collections
import enum
import os
from typing import Callable, Iterable, Iterator, Type, TypeVar

from google.protobuf import descriptor_pb2

from pw_protobuf_js import edition_constants, wire_types
from pw_protobuf_js.errors import UnresolvableSymbolError

T = TypeVar('T')  # pylint: disable=invalid-name

_FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto

# Field numbers in descriptor.proto, used to build GeneratedCodeInfo paths.
_FILE_MESSAGE_TYPE_FIELD = 4
_FILE_ENUM_TYPE_FIELD = 5
_FILE_EXTENSION_FIELD = 7
_MESSAGE_FIELD_FIELD = 2
_MESSAGE_NESTED_TYPE_FIELD = 3
_MESSAGE_ENUM_TYPE_FIELD = 4
_MESSAGE_EXTENSION_FIELD = 6

# Names which may not be used as object keys in generated code.
_JS_RESERVED_WORDS = frozenset((
    'abstract', 'boolean', 'break', 'byte', 'case', 'catch', 'char', 'class',
    'const', 'continue', 'debugger', 'default', 'delete', 'do', 'double',
    'else', 'enum', 'export', 'extends', 'false', 'final', 'finally', 'float',
    'for', 'function', 'goto', 'if', 'implements', 'import', 'in',
    'instanceof', 'int', 'interface', 'long', 'native', 'new', 'null',
    'package', 'private', 'protected', 'public', 'return', 'short', 'static',
    'super', 'switch', 'synchronized', 'this', 'throw', 'throws', 'transient',
    'try', 'typeof', 'var', 'void', 'volatile', 'while', 'with'
))

# Message size past which fields are stored in a sparse object.
_DEFAULT_PIVOT = 500


class ProtoNode(abc.ABC):
    """A ProtoNode represents a named entity in the global proto namespace.

    Nodes form a tree beginning at a top-level (global) scope, descending into a
    hierarchy of .proto packages and the messages and enums defined within them.
    """

    class Type(enum.Enum):
        """The type of a ProtoNode.

        PACKAGE is a .proto package, possibly shared by several files.
        MESSAGE maps to a generated JavaScript class.
        ENUM maps to a generated JavaScript enum object.
        """

        PACKAGE = 1
        MESSAGE = 2
        ENUM = 3

    def __init__(
        self,
        name: str,
        proto_file: 'ProtoFile | None' = None,
        descriptor_path: tuple[int, ...] = (),
    ):
        self._name: str = name
        self._children: dict[str, 'ProtoNode'] = collections.OrderedDict()
        self._parent: 'ProtoNode | None' = None
        self._file = proto_file
        self._descriptor_path = descriptor_path

    @abc.abstractmethod
    def type(self) -> 'ProtoNode.Type':
        """The type of the node."""

    def children(self) -> list['ProtoNode']:
        return list(self._children.values())

    def name(self) -> str:
        return self._name

    def proto_file(self) -> 'ProtoFile | None':
        """The file that defines this node; None for packages."""
        return self._file

    def descriptor_path(self) -> tuple[int, ...]:
        """Path of the node's descriptor within its FileDescriptorProto."""
        return self._descriptor_path

    def proto_path(self) -> str:
        """Fully-qualified package path of the node."""
        path = '.'.join(self._attr_hierarchy(lambda node: node.name(), None))
        return path.lstrip('.')

    def package(self) -> 'ProtoNode | None':
        """The innermost package enclosing this node."""
        node = self._parent
        while node is not None and node.type() is not ProtoNode.Type.PACKAGE:
            node = node.parent()
        return node

    def nested_name(self) -> str:
        """Name of the node relative to its package, e.g. Outer.Inner."""
        return '.'.join(
            self._attr_hierarchy(lambda node: node.name(), self.package()))

    def top_level(self) -> 'ProtoNode':
        """The outermost message or enum containing this node."""
        node: ProtoNode = self
        parent = node.parent()
        while (parent is not None
               and parent.type() is not ProtoNode.Type.PACKAGE):
            node = parent
            parent = node.parent()
        return node

    def is_top_level(self) -> bool:
        return self.top_level() is self

    def depth(self) -> int:
        """Returns the depth of this node from the root."""
        depth = 0
        node = self._parent
        while node:
            depth += 1
            node = node.parent()
        return depth

    def add_child(self, child: 'ProtoNode') -> None:
        """Inserts a new node into the tree as a child of this node.

        Args:
          child: The node to insert.

        Raises:
          ValueError: This node does not allow nesting the given type of child.
        """
        if not self._supports_child(child):
            raise ValueError(
                f'Invalid child {child.type()} for node of type {self.type()}')

        # pylint: disable=protected-access
        if child._parent is not None:
            del child._parent._children[child.name()]

        child._parent = self
        self._children[child.name()] = child
        # pylint: enable=protected-access

    def find(self, path: str) -> 'ProtoNode | None':
        """Finds a node within this node's subtree."""
        node = self

        # pylint: disable=protected-access
        for section in path.split('.'):
            child = node._children.get(section)
            if child is None:
                return None
            node = child
        # pylint: enable=protected-access

        return node

    def parent(self) -> 'ProtoNode | None':
        return self._parent

    def __iter__(self) -> Iterator['ProtoNode']:
        """Iterates depth-first through all nodes in this node's subtree."""
        yield self
        for child_iterator in self._children.values():
            yield from child_iterator

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.proto_path()!r})'

    def _attr_hierarchy(
        self,
        attr_accessor: Callable[['ProtoNode'], T],
        root: 'ProtoNode | None',
    ) -> Iterator[T]:
        """Fetches node attributes at each level of the tree from the root.

        Args:
          attr_accessor: Function which extracts attributes from a ProtoNode.
          root: The node at which to terminate.

        Returns:
          An iterator to a list of the selected attributes from the root to the
          current node.
        """
        hierarchy = []
        node: ProtoNode | None = self
        while node is not None and node != root:
            hierarchy.append(attr_accessor(node))
            node = node.parent()
        return reversed(hierarchy)

    @abc.abstractmethod
    def _supports_child(self, child: 'ProtoNode') -> bool:
        """Returns True if child is a valid child type for the current node."""


class ProtoPackage(ProtoNode):
    """A protobuf package."""

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.PACKAGE

    def _supports_child(self, child: ProtoNode) -> bool:
        return True


class ProtoEnum(ProtoNode):
    """Representation of an enum in a .proto file."""

    def __init__(self, name: str, proto_file: 'ProtoFile',
                 descriptor_path: tuple[int, ...]):
        super().__init__(name, proto_file, descriptor_path)
        self._values: list[tuple[str, int]] = []

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.ENUM

    def values(self) -> list[tuple[str, int]]:
        """Name and number of each value, in declaration order.

        Numbers are not unique when the enum declares aliases.
        """
        return list(self._values)

    def add_value(self, name: str, value: int) -> None:
        self._values.append((name, value))

    def value_number(self, name: str) -> int:
        for value_name, number in self._values:
            if value_name == name:
                return number
        raise UnresolvableSymbolError(f'Enum has no value named {name}', self)

    def _supports_child(self, child: ProtoNode) -> bool:
        # Enums cannot have nested children.
        return False


class ProtoMessage(ProtoNode):
    """Representation of a message in a .proto file."""

    def __init__(
        self,
        name: str,
        proto_file: 'ProtoFile',
        descriptor_path: tuple[int, ...],
        descriptor: descriptor_pb2.DescriptorProto,
    ):
        super().__init__(name, proto_file, descriptor_path)
        self._fields: list['ProtoMessageField'] = []
        self._oneofs: list['ProtoOneof'] = []
        self._extensions: list['ProtoMessageField'] = []
        self._map_entry = descriptor.options.map_entry
        self._features = descriptor.options.features
        self._extension_ranges = [(ext_range.start, ext_range.end)
                                  for ext_range in descriptor.extension_range]

    def type(self) -> ProtoNode.Type:
        return ProtoNode.Type.MESSAGE

    def fields(self) -> list['ProtoMessageField']:
        return list(self._fields)

    def add_field(self, field: 'ProtoMessageField') -> None:
        self._fields.append(field)

    def fields_by_number(self) -> list['ProtoMessageField']:
        return sorted(self._fields, key=lambda field: field.number())

    def oneofs(self) -> list['ProtoOneof']:
        """All oneofs, including synthetic proto3 optional ones."""
        return list(self._oneofs)

    def real_oneofs(self) -> list['ProtoOneof']:
        """The oneofs declared in the .proto source."""
        return [oneof for oneof in self._oneofs if not oneof.is_synthetic()]

    def add_oneof(self, oneof: 'ProtoOneof') -> None:
        self._oneofs.append(oneof)

    def extensions(self) -> list['ProtoMessageField']:
        """Extension fields declared within the scope of this message."""
        return list(self._extensions)

    def add_extension(self, field: 'ProtoMessageField') -> None:
        self._extensions.append(field)

    def is_map_entry(self) -> bool:
        return self._map_entry

    def is_extendable(self) -> bool:
        return bool(self._extension_ranges)

    def extension_ranges(self) -> list[tuple[int, int]]:
        return list(self._extension_ranges)

    def features(self) -> descriptor_pb2.FeatureSet:
        return self._features

    def nested_messages(self) -> list['ProtoMessage']:
        return [
            child for child in self._children.values()
            if isinstance(child, ProtoMessage)
        ]

    def nested_enums(self) -> list[ProtoEnum]:
        return [
            child for child in self._children.values()
            if isinstance(child, ProtoEnum)
        ]

    def pivot(self) -> int:
        """The first field number stored in the sparse extension object."""
        max_field_number = max(
            (field.number() for field in self._fields), default=0)
        if self.is_extendable() or max_field_number >= _DEFAULT_PIVOT:
            return min(max_field_number + 1, _DEFAULT_PIVOT)
        return -1

    def _supports_child(self, child: ProtoNode) -> bool:
        return (child.type() == self.Type.ENUM
                or child.type() == self.Type.MESSAGE)


class ProtoFile:
    """A .proto file: the unit of input and of dependency tracking."""

    def __init__(self, descriptor: descriptor_pb2.FileDescriptorProto,
                 index: int):
        self._descriptor = descriptor
        self._index = index
        self._messages: list[ProtoMessage] = []
        self._enums: list[ProtoEnum] = []
        self._extensions: list['ProtoMessageField'] = []
        self._dependency_files: list[ProtoFile] = []

    def name(self) -> str:
        return self._descriptor.name

    def package(self) -> str:
        return self._descriptor.package

    def index(self) -> int:
        """Position of the file in the input file list."""
        return self._index

    def descriptor(self) -> descriptor_pb2.FileDescriptorProto:
        return self._descriptor

    def dependencies(self) -> list[str]:
        """Names of the files this file imports, in declaration order."""
        return list(self._descriptor.dependency)

    def dependency_files(self) -> list['ProtoFile']:
        """The imported files that are part of the request, in order."""
        return list(self._dependency_files)

    def syntax(self) -> str:
        return self._descriptor.syntax or 'proto2'

    def is_editions(self) -> bool:
        return self.syntax() == 'editions'

    def features(self) -> descriptor_pb2.FeatureSet:
        return self._descriptor.options.features

    def name_without_proto(self) -> str:
        """The file name with a trailing .proto removed."""
        name = self.name()
        return name[:-len('.proto')] if name.endswith('.proto') else name

    def stem(self) -> str:
        """The base name of the file without its directory or .proto."""
        return os.path.basename(self.name_without_proto())

    def messages(self) -> list[ProtoMessage]:
        """The messages declared at file scope."""
        return list(self._messages)

    def enums(self) -> list[ProtoEnum]:
        """The enums declared at file scope."""
        return list(self._enums)

    def extensions(self) -> list['ProtoMessageField']:
        """The extension fields declared at file scope."""
        return list(self._extensions)

    def all_messages(self) -> Iterator[ProtoMessage]:
        """Every message in the file, parents before nested messages."""
        for message in self._messages:
            for node in message:
                if isinstance(node, ProtoMessage):
                    yield node

    def all_enums(self) -> Iterator[ProtoEnum]:
        yield from self._enums
        for message in self.all_messages():
            yield from message.nested_enums()

    def all_extensions(self) -> Iterator['ProtoMessageField']:
        """File scope extensions followed by those nested in messages."""
        yield from self._extensions
        for message in self.all_messages():
            yield from message.extensions()

    def __repr__(self) -> str:
        return f'ProtoFile({self.name()!r})'


class ProtoOneof:
    """A oneof group of fields within a message."""

    def __init__(self, name: str, index: int, message: ProtoMessage):
        self._name = name
        self._index = index
        self._message = message
        self._fields: list['ProtoMessageField'] = []

    def name(self) -> str:
        return ProtoMessageField.upper_camel_case(self._name)

    def oneof_name(self) -> str:
        return self._name

    def index(self) -> int:
        return self._index

    def message(self) -> ProtoMessage:
        return self._message

    def fields(self) -> list['ProtoMessageField']:
        return list(self._fields)

    def add_field(self, field: 'ProtoMessageField') -> None:
        self._fields.append(field)

    def is_synthetic(self) -> bool:
        """True for the implicit oneof wrapping a proto3 optional field."""
        return bool(self._fields) and all(field.is_proto3_optional()
                                          for field in self._fields)

    def real_index(self) -> int:
        """Index of this oneof among the message's non-synthetic oneofs."""
        return self._message.real_oneofs().index(self)


# This class is not a node and does not appear in the proto tree.
# Fields belong to proto messages (or, for extensions, to their declaring
# scope) and are processed separately.
class ProtoMessageField:
    """Representation of a field within a protobuf message."""

    def __init__(
        self,
        descriptor: descriptor_pb2.FieldDescriptorProto,
        proto_file: ProtoFile,
        scope: ProtoMessage | None,
        descriptor_path: tuple[int, ...],
        type_node: ProtoNode | None = None,
        extendee: ProtoMessage | None = None,
        oneof: ProtoOneof | None = None,
    ):
        self._field_name = descriptor.name
        self._number: int = descriptor.number
        self._type: int = descriptor.type
        self._repeated: bool = (
            descriptor.label == _FieldDescriptorProto.LABEL_REPEATED)
        self._options = descriptor.options
        self._proto3_optional = descriptor.proto3_optional
        self._has_default = descriptor.HasField('default_value')
        self._default_value = descriptor.default_value
        self._file = proto_file
        self._scope = scope
        self._descriptor_path = descriptor_path
        self._type_node = type_node
        self._extendee = extendee
        self._oneof = oneof

    def name(self) -> str:
        return self.upper_camel_case(self._field_name)

    def field_name(self) -> str:
        """The field's name as written in the .proto file."""
        return self._field_name

    def accessor_name(self) -> str:
        """Name used in accessors, e.g. FooList in getFooList."""
        return self.name() + self._container_suffix()

    def object_key(self) -> str:
        """Key of the field in plain objects and extension registries."""
        key = self.lower_camel_case(self._field_name)
        key += self._container_suffix()
        if key in _JS_RESERVED_WORDS:
            return 'pb_' + key
        return key

    def number(self) -> int:
        return self._number

    def type(self) -> int:
        return self._type

    def type_info(self) -> wire_types.FieldTypeInfo:
        return wire_types.field_type_info(self._type)

    def type_node(self) -> ProtoNode | None:
        return self._type_node

    def proto_file(self) -> ProtoFile:
        return self._file

    def scope(self) -> ProtoMessage | None:
        """The message that declares this field; None at file scope."""
        return self._scope

    def descriptor_path(self) -> tuple[int, ...]:
        return self._descriptor_path

    def is_repeated(self) -> bool:
        return self._repeated

    def is_message(self) -> bool:
        return wire_types.is_message_type(self._type)

    def is_group(self) -> bool:
        return self._type == _FieldDescriptorProto.TYPE_GROUP

    def is_enum(self) -> bool:
        return self._type == _FieldDescriptorProto.TYPE_ENUM

    def is_bytes(self) -> bool:
        return self._type == _FieldDescriptorProto.TYPE_BYTES

    def is_string(self) -> bool:
        return self._type == _FieldDescriptorProto.TYPE_STRING

    def is_map(self) -> bool:
        return (self._repeated and isinstance(self._type_node, ProtoMessage)
                and self._type_node.is_map_entry())

    def map_key_field(self) -> 'ProtoMessageField':
        assert isinstance(self._type_node, ProtoMessage) and self.is_map()
        return self._type_node.fields()[0]

    def map_value_field(self) -> 'ProtoMessageField':
        assert isinstance(self._type_node, ProtoMessage) and self.is_map()
        return self._type_node.fields()[1]

    def is_extension(self) -> bool:
        return self._extendee is not None

    def extendee(self) -> ProtoMessage | None:
        return self._extendee

    def oneof(self) -> ProtoOneof | None:
        """The real oneof containing this field, if any."""
        if self._oneof is None or self._oneof.is_synthetic():
            return None
        return self._oneof

    def is_proto3_optional(self) -> bool:
        return self._proto3_optional

    def has_default_value(self) -> bool:
        return self._has_default

    def default_value(self) -> str:
        """The explicit default as written in the descriptor."""
        return self._default_value

    def has_presence(self) -> bool:
        """Whether an unset field is distinguishable from its default."""
        if self._repeated:
            return False
        if self.is_message() or self._oneof is not None:
            return True
        if self.is_extension():
            return True
        if self._file.is_editions():
            presence = self._resolve_feature(
                'field_presence', edition_constants.FieldPresence,
                edition_constants.EDITION_DEFAULT_FIELD_PRESENCE)
            return presence is not edition_constants.FieldPresence.IMPLICIT
        return self._file.syntax() != 'proto3'

    def is_packed(self) -> bool:
        """Whether the field is serialized with packed encoding."""
        if not self._repeated or not wire_types.is_packable(self._type):
            return False
        if self._file.is_editions():
            encoding = self._resolve_feature(
                'repeated_field_encoding',
                edition_constants.RepeatedFieldEncoding,
                edition_constants.EDITION_DEFAULT_REPEATED_FIELD_ENCODING)
            return encoding is edition_constants.RepeatedFieldEncoding.PACKED
        if self._file.syntax() == 'proto3':
            return self._options.packed or not self._options.HasField(
                'packed')
        return self._options.packed

    def is_packable(self) -> bool:
        """Repeated scalar fields which may appear packed on the wire."""
        return self._repeated and wire_types.is_packable(self._type)

    def _resolve_feature(self, name: str, feature_type: Type[enum.Enum],
                         default: enum.Enum) -> enum.Enum:
        """Finds the most specific setting of an editions feature."""
        feature_sets = [self._options.features]
        scope: ProtoNode | None = self._scope
        while isinstance(scope, ProtoMessage):
            feature_sets.append(scope.features())
            scope = scope.parent()
        feature_sets.append(self._file.features())

        for feature_set in feature_sets:
            if feature_set.HasField(name):
                return feature_type(getattr(feature_set, name))
        return default

    def _container_suffix(self) -> str:
        if self.is_map():
            return 'Map'
        if self._repeated:
            return 'List'
        return ''

    def __repr__(self) -> str:
        return f'ProtoMessageField({self._field_name!r}, {self._number})'

    @staticmethod
    def upper_camel_case(field_name: str) -> str:
        """Converts a field name to UpperCamelCase."""
        name_components = field_name.split('_')
        for i, _ in enumerate(name_components):
            name_components[i] = name_components[i].lower().capitalize()
        return ''.join(name_components)

    @staticmethod
    def lower_camel_case(field_name: str) -> str:
        """Converts a field name to lowerCamelCase."""
        upper = ProtoMessageField.upper_camel_case(field_name)
        return upper[:1].lower() + upper[1:]


def _resolve_type(global_root: ProtoNode, package_root: ProtoNode,
                  path: str, context: ProtoNode | None) -> ProtoNode:
    """Looks up a type reference, which must name a message or enum."""
    if path.startswith('.'):
        # Fully qualified path, as protoc always produces.
        node = global_root.find(path[1:])
    else:
        node = package_root.find(path) or global_root.find(path)

    if node is None or node.type() is ProtoNode.Type.PACKAGE:
        raise UnresolvableSymbolError(f'Unable to resolve type {path}',
                                      context)
    return node


def _find_or_create_package(root: ProtoNode, package: str) -> ProtoNode:
    node = root
    if not package:
        return node

    for part in package.split('.'):
        child = node.find(part)
        if child is None:
            child = ProtoPackage(part)
            node.add_child(child)
        node = child
    return node


def _build_message_subtree(proto_file: ProtoFile,
                           proto_message: descriptor_pb2.DescriptorProto,
                           path: tuple[int, ...]) -> ProtoMessage:
    node = ProtoMessage(proto_message.name, proto_file, path, proto_message)
    for i, proto_enum in enumerate(proto_message.enum_type):
        enum_node = ProtoEnum(proto_enum.name, proto_file,
                              path + (_MESSAGE_ENUM_TYPE_FIELD, i))
        for value in proto_enum.value:
            enum_node.add_value(value.name, value.number)
        node.add_child(enum_node)
    for i, submessage in enumerate(proto_message.nested_type):
        node.add_child(
            _build_message_subtree(proto_file, submessage,
                                   path + (_MESSAGE_NESTED_TYPE_FIELD, i)))
    return node


def _build_hierarchy(global_root: ProtoNode, proto_file: ProtoFile) -> None:
    """Adds the messages and enums of a file to the tree."""
    descriptor = proto_file.descriptor()
    package_root = _find_or_create_package(global_root, descriptor.package)

    # pylint: disable=protected-access
    for i, proto_enum in enumerate(descriptor.enum_type):
        enum_node = ProtoEnum(proto_enum.name, proto_file,
                              (_FILE_ENUM_TYPE_FIELD, i))
        for value in proto_enum.value:
            enum_node.add_value(value.name, value.number)
        package_root.add_child(enum_node)
        proto_file._enums.append(enum_node)

    for i, message in enumerate(descriptor.message_type):
        node = _build_message_subtree(proto_file, message,
                                      (_FILE_MESSAGE_TYPE_FIELD, i))
        package_root.add_child(node)
        proto_file._messages.append(node)
    # pylint: enable=protected-access


def _create_field(
    global_root: ProtoNode,
    package_root: ProtoNode,
    proto_file: ProtoFile,
    scope: ProtoMessage | None,
    field: descriptor_pb2.FieldDescriptorProto,
    path: tuple[int, ...],
    oneofs: list[ProtoOneof] | None = None,
) -> ProtoMessageField:
    context = scope if scope is not None else package_root

    type_node = None
    if field.type_name:
        # The "type_name" member contains the global .proto path of the
        # field's type object, for example ".pw.protobuf.test.KeyValuePair".
        type_node = _resolve_type(global_root, package_root, field.type_name,
                                  context)

    extendee = None
    if field.extendee:
        extendee = _resolve_type(global_root, package_root, field.extendee,
                                 context)
        if not isinstance(extendee, ProtoMessage):
            raise UnresolvableSymbolError(
                f'Extendee {field.extendee} is not a message', context)

    oneof = None
    if oneofs is not None and field.HasField('oneof_index'):
        oneof = oneofs[field.oneof_index]

    created = ProtoMessageField(field, proto_file, scope, path, type_node,
                                extendee, oneof)
    if oneof is not None:
        oneof.add_field(created)
    return created


def _populate_fields(global_root: ProtoNode, proto_file: ProtoFile) -> None:
    """Traverses a proto file, adding all fields and extensions to a tree."""
    descriptor = proto_file.descriptor()
    package_root = _find_or_create_package(global_root, descriptor.package)

    def populate_message(node: ProtoMessage,
                         message: descriptor_pb2.DescriptorProto) -> None:
        """Recursively populates nested messages."""
        path = node.descriptor_path()
        oneofs = [
            ProtoOneof(oneof.name, i, node)
            for i, oneof in enumerate(message.oneof_decl)
        ]
        for oneof in oneofs:
            node.add_oneof(oneof)

        for i, field in enumerate(message.field):
            node.add_field(
                _create_field(global_root, package_root, proto_file, node,
                              field, path + (_MESSAGE_FIELD_FIELD, i), oneofs))

        for i, field in enumerate(message.extension):
            node.add_extension(
                _create_field(global_root, package_root, proto_file, node,
                              field, path + (_MESSAGE_EXTENSION_FIELD, i)))

        for submessage in message.nested_type:
            child = node.find(submessage.name)
            assert isinstance(child, ProtoMessage)
            populate_message(child, submessage)

    for message in descriptor.message_type:
        node = package_root.find(message.name)
        assert isinstance(node, ProtoMessage)
        populate_message(node, message)

    for i, field in enumerate(descriptor.extension):
        # pylint: disable=protected-access
        proto_file._extensions.append(
            _create_field(global_root, package_root, proto_file, None, field,
                          (_FILE_EXTENSION_FIELD, i)))


def build_node_tree(
    file_descriptor_protos: Iterable[descriptor_pb2.FileDescriptorProto],
) -> tuple[ProtoNode, list[ProtoFile]]:
    """Constructs a tree of proto nodes from a list of file descriptors.

    Files must be listed so that every referenced type is defined by one of
    them, as protoc does for a CodeGeneratorRequest.

    Returns the root node of the entire proto package tree and a ProtoFile
    for each descriptor, in input order.

    Raises:
      UnresolvableSymbolError: A field type or extendee is not defined by any
          of the files.
    """
    global_root = ProtoPackage('')
    files = [
        ProtoFile(descriptor, i)
        for i, descriptor in enumerate(file_descriptor_protos)
    ]

    # Create all nodes before resolving any field types, so files may
    # reference each other in any order.
    for proto_file in files:
        _build_hierarchy(global_root, proto_file)
    for proto_file in files:
        _populate_fields(global_root, proto_file)

    files_by_name = {proto_file.name(): proto_file for proto_file in files}
    for proto_file in files:
        # pylint: disable=protected-access
        proto_file._dependency_files = [
            files_by_name[name] for name in proto_file.dependencies()
            if name in files_by_name
        ]

    return global_root, files
