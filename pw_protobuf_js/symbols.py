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
"""Collects the symbols a unit of generated code defines and depends on.

Collection functions each return a fresh SymbolSets value; callers combine
them with merge() and call finalized() once a whole unit has been visited.
"""

from dataclasses import dataclass
import itertools
from typing import Iterable, Union

from pw_protobuf_js.options import GeneratorOptions
from pw_protobuf_js.proto_tree import (
    ProtoFile,
    ProtoMessage,
    ProtoMessageField,
    ProtoNode,
)

# A type, or a file scope extension field.
Symbol = Union[ProtoNode, ProtoMessageField]


def symbol_name(symbol: Symbol) -> str:
    """Fully-qualified proto name of a symbol, used to order symbols."""
    if isinstance(symbol, ProtoNode):
        return symbol.proto_path()

    scope = symbol.scope()
    if scope is not None:
        return f'{scope.proto_path()}.{symbol.field_name()}'
    package = symbol.proto_file().package()
    return f'{package}.{symbol.field_name()}' if package else (
        symbol.field_name())


def _unique(symbols: Iterable[Symbol]) -> tuple[Symbol, ...]:
    seen: set[int] = set()
    result = []
    for symbol in symbols:
        if id(symbol) not in seen:
            seen.add(id(symbol))
            result.append(symbol)
    return tuple(result)


@dataclass(frozen=True)
class SymbolSets:
    """Symbols provided by, required by and forward declared by a unit.

    Attributes:
      provided: Types (and file scope extensions) the unit defines.
      required: Types that must be loaded before the unit's code runs.
      forwards: Types only referenced from function bodies and type
          annotations, which may load later.
      has_message: The unit defines a message, so needs jspb.Message.
      has_map: The unit uses map fields, so needs jspb.Map.
      has_extension: The unit defines extensions, so needs the extension
          field info classes.
    """

    provided: tuple[Symbol, ...] = ()
    required: tuple[Symbol, ...] = ()
    forwards: tuple[Symbol, ...] = ()
    has_message: bool = False
    has_map: bool = False
    has_extension: bool = False

    def merge(self, other: 'SymbolSets') -> 'SymbolSets':
        """Returns the union of two symbol sets."""
        return SymbolSets(
            provided=_unique(itertools.chain(self.provided, other.provided)),
            required=_unique(itertools.chain(self.required, other.required)),
            forwards=_unique(itertools.chain(self.forwards, other.forwards)),
            has_message=self.has_message or other.has_message,
            has_map=self.has_map or other.has_map,
            has_extension=self.has_extension or other.has_extension,
        )

    def finalized(self) -> 'SymbolSets':
        """Sorts the sets by name and makes them disjoint.

        A symbol the unit provides is never required or forward declared,
        and a required symbol is never also forward declared.
        """
        provided_ids = {id(symbol) for symbol in self.provided}
        required = [
            symbol for symbol in self.required
            if id(symbol) not in provided_ids
        ]
        required_ids = {id(symbol) for symbol in required}
        forwards = [
            symbol for symbol in self.forwards
            if id(symbol) not in provided_ids and id(symbol) not in required_ids
        ]

        return SymbolSets(
            provided=tuple(sorted(_unique(self.provided), key=symbol_name)),
            required=tuple(sorted(_unique(required), key=symbol_name)),
            forwards=tuple(sorted(_unique(forwards), key=symbol_name)),
            has_message=self.has_message,
            has_map=self.has_map,
            has_extension=self.has_extension,
        )

    def referenced(self) -> tuple[Symbol, ...]:
        """Required symbols followed by forward declared ones."""
        return self.required + self.forwards


def _merge_all(sets: Iterable[SymbolSets]) -> SymbolSets:
    result = SymbolSets()
    for symbol_set in sets:
        result = result.merge(symbol_set)
    return result


def find_provides(options: GeneratorOptions,
                  proto_file: ProtoFile) -> SymbolSets:
    """The messages, enums and file scope extensions a file defines."""
    del options  # Every import style provides the same symbols.

    provided: list[Symbol] = [
        message for message in proto_file.all_messages()
        if not message.is_map_entry()
    ]
    has_message = bool(provided)
    provided.extend(proto_file.all_enums())
    provided.extend(proto_file.extensions())
    return SymbolSets(provided=tuple(provided), has_message=has_message)


def _find_requires_for_field(options: GeneratorOptions,
                             field: ProtoMessageField) -> SymbolSets:
    if field.is_map():
        # The entry type is never generated; jspb.Map stands in for it.
        value_symbols = _find_requires_for_field(options,
                                                 field.map_value_field())
        return value_symbols.merge(SymbolSets(has_map=True))

    type_node = field.type_node()
    if type_node is None:
        return SymbolSets()

    if field.is_enum() and not options.add_require_for_enums:
        return SymbolSets(forwards=(type_node, ))
    return SymbolSets(required=(type_node, ))


def find_requires_for_message(options: GeneratorOptions,
                              message: ProtoMessage) -> SymbolSets:
    """Types referenced by the fields of a message and its nested messages."""
    if message.is_map_entry():
        return SymbolSets()

    return _merge_all(
        itertools.chain(
            (_find_requires_for_field(options, field)
             for field in message.fields()),
            (find_requires_for_message(options, nested)
             for nested in message.nested_messages()),
        ))


def find_requires_for_extension(options: GeneratorOptions,
                                field: ProtoMessageField) -> SymbolSets:
    """Types needed to register an extension with the message it extends."""
    extendee = field.extendee()
    assert extendee is not None, 'Only extension fields have an extendee'

    return SymbolSets(
        required=(extendee, ),
        has_extension=True,
    ).merge(_find_requires_for_field(options, field))


def find_requires_for_file(options: GeneratorOptions,
                           proto_file: ProtoFile) -> SymbolSets:
    """Everything the generated code for a file references."""
    return _merge_all(
        itertools.chain(
            (find_requires_for_message(options, message)
             for message in proto_file.messages()),
            (find_requires_for_extension(options, extension)
             for extension in proto_file.all_extensions()),
        ))


def collect_unit_symbols(options: GeneratorOptions,
                         files: Iterable[ProtoFile]) -> SymbolSets:
    """Finalized symbols for a group of files generated into one output."""
    return _merge_all(
        find_provides(options, proto_file).merge(
            find_requires_for_file(options, proto_file))
        for proto_file in files).finalized()
