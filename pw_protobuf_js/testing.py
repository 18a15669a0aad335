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
"""Helpers for building descriptors in tests."""

from typing import Iterable

from google.protobuf import descriptor_pb2, text_format

from pw_protobuf_js.options import GeneratorOptions
from pw_protobuf_js.proto_tree import ProtoFile, ProtoNode, build_node_tree


def file_descriptor(text: str) -> descriptor_pb2.FileDescriptorProto:
    """Parses a FileDescriptorProto from protobuf text format."""
    return text_format.Parse(text, descriptor_pb2.FileDescriptorProto())


def file_descriptors(
        *texts: str) -> list[descriptor_pb2.FileDescriptorProto]:
    return [file_descriptor(text) for text in texts]


def build_files(
    *texts: str,
) -> tuple[ProtoNode, list[ProtoFile]]:
    """Builds the proto tree for files given in text format."""
    return build_node_tree(file_descriptors(*texts))


def files_by_name(files: Iterable[ProtoFile]) -> dict[str, ProtoFile]:
    return {proto_file.name(): proto_file for proto_file in files}


def options(**kwargs) -> GeneratorOptions:
    """Creates validated GeneratorOptions."""
    generator_options = GeneratorOptions(**kwargs)
    generator_options.validate()
    return generator_options
