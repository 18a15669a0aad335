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
"""Defines a class used to write generated JavaScript to a file."""

import base64
from contextlib import contextmanager
from typing import Iterator, Sequence

from google.protobuf import descriptor_pb2


class OutputFile:
    """A buffer to which generated code is written.

    Example:

    ```
    output = OutputFile('hello.js')
    output.write_line('function main() {')
    with output.indent():
        output.write_line('console.log("Hello, world");')
    output.write_line('}')

    print(output.content())
    ```

    Produces:
    ```
    function main() {
      console.log("Hello, world");
    }
    ```

    Spans of the output may be annotated with the descriptor path of the
    schema element they were generated from. The annotations are collected
    into a GeneratedCodeInfo message.
    """

    INDENT_WIDTH = 2

    def __init__(self, filename: str):
        self._filename: str = filename
        self._content: list[str] = []
        self._length: int = 0
        self._indentation: int = 0
        self._annotations = descriptor_pb2.GeneratedCodeInfo()

    def write(self, text: str) -> None:
        """Appends text without indentation or a trailing newline."""
        self._content.append(text)
        self._length += len(text)

    def write_line(self, line: str = '') -> None:
        if line:
            self.write(' ' * self._indentation)
            self.write(line)
        self.write('\n')

    def write_lines(self, lines: Sequence[str]) -> None:
        for line in lines:
            self.write_line(line)

    def indent(
        self, width: int = INDENT_WIDTH
    ) -> 'OutputFile._IndentationContext':
        """Increases the indentation level of the output."""
        return self._IndentationContext(self, width)

    @contextmanager
    def annotate(self, path: Sequence[int],
                 source_file: str) -> Iterator[None]:
        """Records the text written inside the context as generated from the
        descriptor element at `path` in `source_file`."""
        begin = self._length
        yield
        annotation = self._annotations.annotation.add()
        annotation.path.extend(path)
        annotation.source_file = source_file
        annotation.begin = begin
        annotation.end = self._length

    def annotations(self) -> descriptor_pb2.GeneratedCodeInfo:
        return self._annotations

    def write_annotations(self) -> None:
        """Embeds the collected annotations as a trailing comment."""
        encoded = base64.b64encode(
            self._annotations.SerializeToString()).decode('ascii')
        self.write_line()
        self.write_line(f'// Annotations: {encoded}')

    def name(self) -> str:
        return self._filename

    def content(self) -> str:
        return ''.join(self._content)

    class _IndentationContext:
        """Context that increases the output's indentation when it is active."""

        def __init__(self, output: 'OutputFile', width: int):
            self._output = output
            self._width = width

        def __enter__(self):
            self._output._indentation += self._width

        def __exit__(self, typ, value, traceback):
            self._output._indentation -= self._width
