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
"""pw_protobuf_js compiler plugin.

This file implements a protobuf compiler plugin which generates JavaScript
classes for protobuf messages, for use with the google-protobuf runtime.

    protoc --plugin=protoc-gen-pwjs --pwjs_out=import_style=commonjs,binary:out
"""

import logging
import sys

from google.protobuf.compiler import plugin_pb2

from pw_protobuf_js import edition_constants, log, packager
from pw_protobuf_js.errors import CodegenError
from pw_protobuf_js.options import GeneratorOptions, parse_options

_LOG = logging.getLogger(__name__)


def parse_parameter_options(parameter: str) -> GeneratorOptions:
    """Parses parameters passed through from protoc.

    These parameters come in via passing `--${NAME}_out` or `--${NAME}_opt`
    parameters to protoc, where protoc-gen-${NAME} is the supplied name of the
    plugin.

    Raises:
      ConfigurationError: The parameters are invalid.
    """
    return parse_options(parameter)


def process_proto_request(
    req: plugin_pb2.CodeGeneratorRequest, res: plugin_pb2.CodeGeneratorResponse
) -> bool:
    """Handles a protoc CodeGeneratorRequest message.

    Generates code for the files in the request and writes the output to the
    specified CodeGeneratorResponse message. On failure, sets the response's
    error and adds no files.

    Args:
      req: A CodeGeneratorRequest for a proto compilation.
      res: A CodeGeneratorResponse to populate with the plugin's output.
    """
    try:
        codegen_options = parse_parameter_options(req.parameter)
        output_files = packager.generate_all(codegen_options,
                                             list(req.proto_file),
                                             req.file_to_generate)
    except CodegenError as err:
        _LOG.error('%s', err.formatted_message())
        res.error = err.formatted_message()
        return False

    for output_file in output_files:
        fd = res.file.add()
        fd.name = output_file.name()
        fd.content = output_file.content()

    return True


def main() -> int:
    """Protobuf compiler plugin entrypoint.

    Reads a CodeGeneratorRequest proto from stdin and writes a
    CodeGeneratorResponse to stdout.
    """
    log.install(level=logging.WARNING, hide_timestamp=True)

    data = sys.stdin.buffer.read()
    request = plugin_pb2.CodeGeneratorRequest.FromString(data)
    response = plugin_pb2.CodeGeneratorResponse()

    # Declare that this plugin supports optional fields in proto3.
    response.supported_features |= (  # type: ignore[attr-defined]
        response.FEATURE_PROTO3_OPTIONAL
    )  # type: ignore[attr-defined]

    response.supported_features |= edition_constants.FEATURE_SUPPORTS_EDITIONS

    if hasattr(response, 'minimum_edition'):
        response.minimum_edition = (  # type: ignore[attr-defined]
            edition_constants.Edition.EDITION_PROTO2.value
        )
        response.maximum_edition = (  # type: ignore[attr-defined]
            edition_constants.Edition.EDITION_2023.value
        )

    # Errors are reported to protoc through the response, so the response is
    # always written.
    process_proto_request(request, response)

    sys.stdout.buffer.write(response.SerializeToString())
    return 0


if __name__ == '__main__':
    sys.exit(main())
