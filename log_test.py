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
"""Tests for log formatting helpers."""

import logging
import unittest
from unittest import mock

from pw_protobuf_js import log


class ColorsTest(unittest.TestCase):
    """Tests for ANSI color helpers."""

    def test_enabled(self) -> None:
        self.assertEqual(log.colors(True).red('text'),
                         '\033[31m\033[1mtext\033[0m')

    def test_disabled(self) -> None:
        self.assertEqual(log.colors(False).red('text'), 'text')

    def test_detects_dumb_terminal(self) -> None:
        with mock.patch.dict('os.environ', {'TERM': 'dumb'}):
            self.assertEqual(log.colors().magenta('text'), 'text')


class InstallTest(unittest.TestCase):
    """Tests for log.install."""

    def setUp(self) -> None:
        root = logging.getLogger()
        self._handlers = list(root.handlers)
        self._level = root.level

    def tearDown(self) -> None:
        root = logging.getLogger()
        root.handlers = self._handlers
        root.setLevel(self._level)
        for name in ('CRITICAL', 'ERROR', 'WARNING', 'INFO', 'DEBUG'):
            logging.addLevelName(getattr(logging, name), name)

    def test_short_level_names(self) -> None:
        log.install(logging.DEBUG, use_color=False, hide_timestamp=True)
        self.assertEqual(logging.getLevelName(logging.WARNING), 'WRN')

    def test_colored_level_names(self) -> None:
        log.install(logging.INFO, use_color=True)
        self.assertEqual(logging.getLevelName(logging.WARNING),
                         '\033[33m\033[1mWRN\033[0m')


if __name__ == '__main__':
    unittest.main()
