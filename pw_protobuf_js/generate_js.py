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
"""Generates JavaScript from a serialized FileDescriptorSet.

The descriptor set is produced by protoc, for example

    protoc --include_imports --descriptor_set_out=protos.pb -I. foo.proto

This runs the same generator as the protoc plugin without going through
protoc, which is convenient for build systems that cache descriptor sets.
"""

import argparse
import logging
from pathlib import Path
import sys

from google.protobuf import descriptor_pb2

from pw_protobuf_js import log, packager
from pw_protobuf_js.errors import CodegenError
from pw_protobuf_js.options import parse_options

_LOG = logging.getLogger(__name__)


def argument_parser(
    parser: argparse.ArgumentParser | None = None,
) -> argparse.ArgumentParser:
    """Registers the script's arguments on an argument parser."""

    if parser is None:
        parser = argparse.ArgumentParser(description=__doc__)

    parser.add_argument('--descriptor-set',
                        required=True,
                        type=Path,
                        help='Serialized FileDescriptorSet to generate from')
    parser.add_argument('--out-dir',
                        type=Path,
                        help='Output directory for generated code; defaults '
                        'to the output_dir option')
    parser.add_argument('--parameter',
                        default='',
                        help='Generator options, as passed to the protoc '
                        'plugin, e.g. "import_style=commonjs,binary"')
    parser.add_argument('--files',
                        nargs='+',
                        metavar='PROTO',
                        help='Names of the .proto files to generate; defaults '
                        'to every file in the descriptor set')
    parser.add_argument('-v',
                        '--verbose',
                        action='store_true',
                        help='Log debug messages')

    return parser


def main(argv: list[str] | None = None) -> int:
    """Generates JavaScript as configured by command-line arguments."""

    args = argument_parser().parse_args(argv)
    log.install(logging.DEBUG if args.verbose else logging.INFO)

    descriptor_set = descriptor_pb2.FileDescriptorSet.FromString(
        args.descriptor_set.read_bytes())
    files = args.files or [proto.name for proto in descriptor_set.file]

    try:
        options = parse_options(args.parameter)
        outputs = packager.generate_all(options, list(descriptor_set.file),
                                        files)
    except CodegenError as err:
        _LOG.error('%s', err.formatted_message())
        return 1

    out_dir = args.out_dir if args.out_dir is not None else Path(
        options.output_dir)
    packager.write_output_files(out_dir, outputs)
    _LOG.info('Generated %d file(s) in %s', len(outputs), out_dir)
    return 0


if __name__ == '__main__':
    sys.exit(main())
