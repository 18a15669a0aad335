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
"""Orders .proto files for generation by their mutual type references.

Generated code for a file may only run once the code for every type it
references has loaded. Files are therefore grouped into strongly connected
components of the "references a type defined in" graph, and the components are
emitted in topological order. A cycle among several files collapses into a
single unit whose members are emitted together.
"""

import graphlib
import logging
from typing import Hashable, Iterable, Iterator, Mapping, Sequence, TypeVar

from pw_protobuf_js.proto_tree import ProtoFile, ProtoMessageField, ProtoNode

_LOG = logging.getLogger(__name__)

NodeT = TypeVar('NodeT', bound=Hashable)


def strongly_connected_components(
    nodes: Sequence[NodeT],
    edges: Mapping[NodeT, Iterable[NodeT]],
) -> list[tuple[NodeT, ...]]:
    """Decomposes a digraph into its strongly connected components.

    This is Tarjan's algorithm, written iteratively so that long dependency
    chains cannot exhaust the interpreter's recursion limit. Edges to nodes
    not listed in nodes are ignored.

    Returns:
      The components in reverse topological order (a component appears after
      every component it has an edge to). The members of each component are
      listed in the order in which they appear in nodes.
    """
    position = {node: i for i, node in enumerate(nodes)}

    def successors(node: NodeT) -> Iterator[NodeT]:
        return (succ for succ in edges.get(node, ()) if succ in position)

    index: dict[NodeT, int] = {}
    lowlink: dict[NodeT, int] = {}
    stack: list[NodeT] = []
    on_stack: set[NodeT] = set()
    components: list[tuple[NodeT, ...]] = []

    def visit(node: NodeT) -> None:
        index[node] = lowlink[node] = len(index)
        stack.append(node)
        on_stack.add(node)

    for start in nodes:
        if start in index:
            continue

        visit(start)
        work = [(start, successors(start))]

        while work:
            node, remaining = work[-1]

            for successor in remaining:
                if successor not in index:
                    visit(successor)
                    work.append((successor, successors(successor)))
                    break
                if successor in on_stack:
                    lowlink[node] = min(lowlink[node], index[successor])
            else:
                # Every successor of node has been explored.
                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])

                if lowlink[node] == index[node]:
                    members = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        members.append(member)
                        if member == node:
                            break
                    members.sort(key=position.__getitem__)
                    components.append(tuple(members))

    return components


def dependency_ordered_units(
    nodes: Sequence[NodeT],
    edges: Mapping[NodeT, Iterable[NodeT]],
) -> list[tuple[NodeT, ...]]:
    """Groups nodes into components, dependencies first.

    A component is listed after every component it has an edge to. Components
    that become ready at the same time are ordered by the position of their
    first member in nodes, so the result does not depend on hash ordering.
    """
    position = {node: i for i, node in enumerate(nodes)}
    components = strongly_connected_components(nodes, edges)
    component_of = {
        member: component
        for component in components for member in component
    }

    sorter: graphlib.TopologicalSorter = graphlib.TopologicalSorter()
    for component in components:
        dependencies = set()
        for member in component:
            for successor in edges.get(member, ()):
                target = component_of.get(successor)
                if target is not None and target != component:
                    dependencies.add(target)
        sorter.add(component, *dependencies)

    sorter.prepare()

    units: list[tuple[NodeT, ...]] = []
    while sorter.is_active():
        ready = sorted(sorter.get_ready(),
                       key=lambda component: position[component[0]])
        units.extend(ready)
        sorter.done(*ready)

    return units


def _field_references(field: ProtoMessageField) -> Iterator[ProtoNode]:
    type_node = field.type_node()
    if type_node is not None:
        if field.is_map():
            yield from _field_references(field.map_value_field())
        else:
            yield type_node
    extendee = field.extendee()
    if extendee is not None:
        yield extendee


class DependencyGraph:
    """The "references a type defined in" relation among generated files."""

    def __init__(self, files: Sequence[ProtoFile]):
        self._files = list(files)
        self._edges: dict[ProtoFile, list[ProtoFile]] = {}

        generated = set(self._files)
        for proto_file in self._files:
            targets: list[ProtoFile] = []
            for node in self._referenced_types(proto_file):
                target = node.proto_file()
                if (target is None or target is proto_file
                        or target not in generated or target in targets):
                    continue
                targets.append(target)
            self._edges[proto_file] = targets

    @staticmethod
    def _referenced_types(proto_file: ProtoFile) -> Iterator[ProtoNode]:
        for message in proto_file.all_messages():
            for field in message.fields():
                yield from _field_references(field)
        for extension in proto_file.all_extensions():
            yield from _field_references(extension)

    def files(self) -> list[ProtoFile]:
        return list(self._files)

    def edges(self, proto_file: ProtoFile) -> list[ProtoFile]:
        """Files, among those generated, whose types proto_file references."""
        return list(self._edges.get(proto_file, ()))

    def units(self) -> list[tuple[ProtoFile, ...]]:
        """Groups of mutually dependent files, in emission order."""
        units = dependency_ordered_units(self._files, self._edges)
        for unit in units:
            if len(unit) > 1:
                _LOG.debug('Files %s form a dependency cycle',
                           ', '.join(f.name() for f in unit))
        return units
