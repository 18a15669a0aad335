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
"""Groups generated code into output files and drives generation."""

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import posixpath
import tempfile
from typing import Iterable, Sequence

from google.protobuf import descriptor_pb2

from pw_protobuf_js import codegen_js, imports, symbols
from pw_protobuf_js.dependency_graph import DependencyGraph
from pw_protobuf_js.errors import CodegenError
from pw_protobuf_js.options import GeneratorOptions, OutputMode
from pw_protobuf_js.output_file import OutputFile
from pw_protobuf_js.proto_tree import ProtoFile, build_node_tree
from pw_protobuf_js.type_names import TypeNames, namespace

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputUnit:
    """A generated file and the .proto files whose code it contains."""

    name: str
    files: tuple[ProtoFile, ...]


def output_file_name(options: GeneratorOptions, proto_file: ProtoFile) -> str:
    """Name of the file generated for a single .proto file."""
    return proto_file.name_without_proto() + options.file_name_extension()


def scc_output_name(options: GeneratorOptions,
                    unit: Sequence[ProtoFile]) -> str:
    """Name of the file generated for a dependency component.

    The name is derived from the component's first file: its directory, then
    its namespace and base name, lower-cased.
    """
    first = unit[0]
    directory = posixpath.dirname(first.name())
    base = f'{namespace(options, first)}.{first.stem()}'.lower()
    return posixpath.join(directory, base + options.extension)


def plan_output_units(options: GeneratorOptions,
                      graph: DependencyGraph) -> list[OutputUnit]:
    """Assigns the files to generate to output files, in emission order."""
    units = graph.units()
    mode = options.output_mode()

    if mode is OutputMode.EVERYTHING_IN_ONE_FILE:
        files = tuple(proto_file for unit in units for proto_file in unit)
        return [OutputUnit(options.library + options.extension, files)]

    if mode is OutputMode.ONE_OUTPUT_FILE_PER_SCC:
        return [
            OutputUnit(scc_output_name(options, unit), unit) for unit in units
        ]

    return [
        OutputUnit(output_file_name(options, proto_file), (proto_file, ))
        for unit in units for proto_file in unit
    ]


def generate_unit(
    options: GeneratorOptions,
    unit: OutputUnit,
    type_names: TypeNames,
) -> OutputFile:
    """Generates the code for one output file.

    The unit is visited twice: first to collect the symbols its files provide
    and reference, then to emit the header, the code for each file and the
    footer.
    """
    output = OutputFile(unit.name)

    unit_symbols = symbols.collect_unit_symbols(options, unit.files)

    imports.generate_header(options, type_names, output, unit.files,
                            unit_symbols)
    for proto_file in unit.files:
        codegen_js.generate_code_for_file(proto_file, type_names, output,
                                          options)
    imports.generate_footer(options, type_names, output, unit.files)

    if options.annotate_code:
        output.write_annotations()

    return output


def generate_all(
    options: GeneratorOptions,
    proto_files: Sequence[descriptor_pb2.FileDescriptorProto],
    files_to_generate: Iterable[str],
) -> list[OutputFile]:
    """Generates JavaScript for a set of .proto files.

    Args:
      options: Generator options for the run.
      proto_files: Descriptors of the files to generate and of everything
          they import, dependencies first.
      files_to_generate: Names of the files to generate code for.

    Returns:
      The generated files. Nothing is returned unless every file was
      generated successfully.

    Raises:
      CodegenError: The options are invalid, or the schema cannot be
          expressed with them.
    """
    options.validate()

    root, files = build_node_tree(proto_files)
    files_by_name = {proto_file.name(): proto_file for proto_file in files}

    targets = []
    for name in files_to_generate:
        if name not in files_by_name:
            raise CodegenError(f'No descriptor for file to generate {name}')
        targets.append(files_by_name[name])

    graph = DependencyGraph(targets)
    units = plan_output_units(options, graph)
    _LOG.debug('Generating %d output file(s) for %d input file(s)',
               len(units), len(targets))

    # Dot-delimited names are valid everywhere, so one instance serves every
    # unit. ES6 names are scoped to the module being generated.
    shared_names = None
    if not options.want_es6():
        shared_names = TypeNames.dot_delimited(options, root)

    outputs = []
    for unit in units:
        type_names = shared_names or TypeNames.es6(options, unit.files[0])
        output = generate_unit(options, unit, type_names)
        _LOG.debug('Generated %s from %s', output.name(),
                   ', '.join(proto_file.name() for proto_file in unit.files))
        outputs.append(output)

    return outputs


def write_output_files(output_dir: Path | str,
                       files: Iterable[OutputFile]) -> None:
    """Writes generated files below output_dir, creating directories.

    Files are staged in a temporary directory inside output_dir and only moved
    into place once every file was written, so a failed write leaves no
    generated files behind.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    with tempfile.TemporaryDirectory(dir=output_dir,
                                     prefix='.pwjs-') as staging:
        staged: list[tuple[Path, Path]] = []
        for output in files:
            path = Path(staging, output.name())
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(output.content())
            staged.append((path, output_dir / output.name()))

        for path, destination in staged:
            destination.parent.mkdir(parents=True, exist_ok=True)
            os.replace(path, destination)
            _LOG.debug('Wrote %s', destination)
