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
"""Tests for the protoc plugin entry point."""

import io
import types
import unittest
from unittest import mock

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from pw_protobuf_js import plugin
from pw_protobuf_js.testing import file_descriptor

_POINT_FILE = '''
name: "geo/point.proto"
package: "geo"
syntax: "proto3"
message_type {
  name: "Point"
  field { name: "x" number: 1 label: LABEL_OPTIONAL type: TYPE_INT32 }
}
'''


def _request(parameter: str) -> plugin_pb2.CodeGeneratorRequest:
    request = plugin_pb2.CodeGeneratorRequest(parameter=parameter)
    request.proto_file.append(file_descriptor(_POINT_FILE))
    request.file_to_generate.append('geo/point.proto')
    return request


class ProcessProtoRequestTest(unittest.TestCase):
    """Tests for process_proto_request."""

    def test_generates_files(self) -> None:
        response = plugin_pb2.CodeGeneratorResponse()
        self.assertTrue(
            plugin.process_proto_request(
                _request('import_style=commonjs,binary'), response))

        self.assertFalse(response.HasField('error'))
        generated, = response.file
        self.assertEqual(generated.name, 'geo/point_pb.js')
        self.assertIn('proto.geo.Point.serializeBinaryToWriter',
                      generated.content)

    def test_invalid_parameter(self) -> None:
        response = plugin_pb2.CodeGeneratorResponse()
        with self.assertLogs(plugin.__name__, 'ERROR'):
            self.assertFalse(
                plugin.process_proto_request(_request('bogus'), response))

        self.assertEqual(response.error,
                         'pwjs codegen error: Unknown option: bogus')
        self.assertEqual(len(response.file), 0)

    def test_missing_type_reports_error(self) -> None:
        request = _request('')
        request.proto_file[0].message_type[0].field.add(
            name='other',
            number=2,
            label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
            type=descriptor_pb2.FieldDescriptorProto.TYPE_MESSAGE,
            type_name='.geo.Missing')

        response = plugin_pb2.CodeGeneratorResponse()
        with self.assertLogs(plugin.__name__, 'ERROR'):
            self.assertFalse(plugin.process_proto_request(request, response))
        self.assertIn('Unable to resolve type .geo.Missing', response.error)
        self.assertIn('at geo.Point', response.error)


class MainTest(unittest.TestCase):
    """Tests for the stdin to stdout plugin protocol."""

    def _run(self, request: plugin_pb2.CodeGeneratorRequest
             ) -> plugin_pb2.CodeGeneratorResponse:
        stdin = types.SimpleNamespace(
            buffer=io.BytesIO(request.SerializeToString()))
        stdout = types.SimpleNamespace(buffer=io.BytesIO())

        with mock.patch('sys.stdin', stdin), mock.patch(
                'sys.stdout', stdout), mock.patch.object(plugin.log,
                                                         'install'):
            self.assertEqual(plugin.main(), 0)

        return plugin_pb2.CodeGeneratorResponse.FromString(
            stdout.buffer.getvalue())

    def test_supported_features(self) -> None:
        response = self._run(_request(''))
        self.assertEqual(
            response.supported_features,
            plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL
            | plugin_pb2.CodeGeneratorResponse.FEATURE_SUPPORTS_EDITIONS)
        self.assertEqual([f.name for f in response.file],
                         ['geo/proto.geo.point.js'])

    def test_error_is_written_to_response(self) -> None:
        with self.assertLogs(plugin.__name__, 'ERROR'):
            response = self._run(_request('import_style=amd'))
        self.assertIn('Unknown import style amd', response.error)
        self.assertEqual(len(response.file), 0)


if __name__ == '__main__':
    unittest.main()
