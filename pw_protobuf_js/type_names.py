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
"""Resolves protobuf types to the JavaScript expressions that name them.

Two kinds of naming are supported. For closure, CommonJS and browser output,
every type lives in one global namespace tree, so a type is always reachable
through its dot-delimited path (proto.my.pkg.Outer.Inner) from any file. ES6
modules instead only see the symbols they import, and a module only exports
its top-level messages and enums, so resolution is scoped to the file being
generated and can fail for types nested in another module.
"""

from pw_protobuf_js.errors import UnresolvableSymbolError
from pw_protobuf_js.options import GeneratorOptions
from pw_protobuf_js.proto_tree import (
    ProtoFile,
    ProtoMessageField,
    ProtoNode,
)

# Well-known types are loaded from the runtime's npm package.
_WELL_KNOWN_TYPES_DIR = 'google/protobuf/'
_WELL_KNOWN_TYPES_MODULE = 'google-protobuf/'

_ES6_MODULE_SUFFIX = '_pb.js'


def namespace(options: GeneratorOptions, proto_file: ProtoFile) -> str:
    """The dot-delimited namespace holding a file's generated symbols."""
    if options.namespace_prefix:
        return options.namespace_prefix
    if proto_file.package():
        return 'proto.' + proto_file.package()
    return 'proto'


def root_path(from_file: str, to_file: str) -> str:
    """The relative path from one generated module to the root of another."""
    if to_file.startswith(_WELL_KNOWN_TYPES_DIR):
        return _WELL_KNOWN_TYPES_MODULE

    depth = from_file.count('/')
    if depth == 0:
        return './'
    return '../' * depth


def module_path(from_file: ProtoFile, to_file: ProtoFile) -> str:
    """Path used to require() or import one generated module from another."""
    return (root_path(from_file.name(), to_file.name()) +
            to_file.name_without_proto() + _ES6_MODULE_SUFFIX)


def module_alias(file_name: str) -> str:
    """Local name bound to a whole imported module, e.g. foo_bar_pb."""
    base = file_name[:-len('.proto')] if file_name.endswith(
        '.proto') else file_name
    base = base.replace('-', '$').replace('/', '_').replace('.', '_')
    return base + '_pb'


class TypeNames:
    """Maps fully-qualified proto names to JavaScript expressions.

    Use TypeNames.dot_delimited() or TypeNames.es6() to create an instance.
    """

    def __init__(
        self,
        options: GeneratorOptions,
        expressions: dict[str, str],
        codegen_file: ProtoFile | None = None,
        imports: list[tuple[ProtoFile, list[tuple[ProtoNode, str]]]]
        | None = None,
    ):
        self._options = options
        self._expressions = expressions
        self._codegen_file = codegen_file
        self._imports = imports if imports is not None else []
        self._bindings: dict[str, str] = {
            node.proto_path(): binding
            for _, symbols in self._imports for node, binding in symbols
        }

    @classmethod
    def dot_delimited(cls, options: GeneratorOptions,
                      root: ProtoNode) -> 'TypeNames':
        """Names every type in the tree by its global dot-delimited path."""
        expressions = {}
        for node in root:
            proto_file = node.proto_file()
            if proto_file is None:
                continue
            expressions[node.proto_path()] = (
                f'{namespace(options, proto_file)}.{node.nested_name()}')
        return cls(options, expressions)

    @classmethod
    def es6(cls, options: GeneratorOptions,
            codegen_file: ProtoFile) -> 'TypeNames':
        """Names types as seen from inside the ES6 module of codegen_file.

        Types of codegen_file are named by their class path within the module.
        Top-level types of each direct dependency are bound to a local import
        name: the exported name itself, or the name prefixed with the
        dependency's module alias when it would collide with a name already
        in use.
        """
        expressions: dict[str, str] = {}
        taken: set[str] = set()

        for message in codegen_file.all_messages():
            expressions[message.proto_path()] = message.nested_name()
        for proto_enum in codegen_file.all_enums():
            expressions[proto_enum.proto_path()] = proto_enum.nested_name()
        for node in _top_level_types(codegen_file):
            taken.add(cls.js_name(node.proto_path()))

        imports = []
        for dependency in codegen_file.dependency_files():
            alias = module_alias(dependency.name())
            symbols = []
            for node in _top_level_types(dependency):
                exported = cls.js_name(node.proto_path())
                binding = exported
                if binding in taken:
                    binding = f'{alias}_{exported}'
                taken.add(binding)
                expressions[node.proto_path()] = binding
                symbols.append((node, binding))
            imports.append((dependency, symbols))

        return cls(options, expressions, codegen_file, imports)

    @staticmethod
    def js_name(full_name: str) -> str:
        """The name under which a top-level type is exported."""
        return full_name.rsplit('.', 1)[-1]

    def is_es6(self) -> bool:
        return self._codegen_file is not None

    def js_expression(self, node: ProtoNode) -> str:
        """Returns the expression naming node in generated code.

        In ES6 mode, returns an empty string for types that the current
        module cannot name directly: types nested in another module's
        messages, and types of files that are not direct dependencies.

        Raises:
          UnresolvableSymbolError: In dot-delimited mode, node is not part of
              the schema.
        """
        expression = self._expressions.get(node.proto_path())
        if expression is not None:
            return expression
        if self.is_es6():
            return ''
        raise UnresolvableSymbolError(
            f'No JavaScript name for type {node.proto_path()}', node)

    def submessage_type_ref(self, field: ProtoMessageField) -> str:
        """The expression naming a message or enum field's type."""
        type_node = field.type_node()
        if type_node is None:
            raise UnresolvableSymbolError('Field has no type reference',
                                          field.scope(), field)
        return self.js_expression(type_node)

    def extension_expression(self, field: ProtoMessageField) -> str:
        """The expression naming an extension's ExtensionFieldInfo."""
        scope = field.scope()
        if scope is not None:
            return f'{self.js_expression(scope)}.{field.object_key()}'
        if self.is_es6():
            return field.object_key()
        return f'{self.namespace(field.proto_file())}.{field.object_key()}'

    def namespace(self, proto_file: ProtoFile) -> str:
        return namespace(self._options, proto_file)

    def exported_names(self, proto_file: ProtoFile) -> list[str]:
        """Names exported by the ES6 module generated for proto_file."""
        return [self.js_name(node.proto_path())
                for node in _top_level_types(proto_file)]

    def imports(self) -> list[tuple[ProtoFile, list[tuple[ProtoNode, str]]]]:
        """The importable symbols of each direct dependency, in order."""
        return list(self._imports)

    def import_binding(self, node: ProtoNode) -> str:
        """The local name bound to an imported type; empty if not imported."""
        return self._bindings.get(node.proto_path(), '')

    def module_path(self, proto_file: ProtoFile) -> str:
        assert self._codegen_file is not None
        return module_path(self._codegen_file, proto_file)

    @staticmethod
    def module_alias(file_name: str) -> str:
        return module_alias(file_name)


def _top_level_types(proto_file: ProtoFile) -> list[ProtoNode]:
    nodes: list[ProtoNode] = []
    nodes.extend(proto_file.messages())
    nodes.extend(proto_file.enums())
    return nodes
