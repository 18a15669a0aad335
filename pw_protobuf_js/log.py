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
"""Tools for configuring Python logging."""

import logging
import os
from pathlib import Path
import sys
from typing import Callable, NamedTuple


class _LogLevel(NamedTuple):
    level: int
    color: str
    ascii: str


# Shorten all the log levels to 3 characters for column-aligned logs.
# Color the logs using ANSI codes.
_LOG_LEVELS = (
    _LogLevel(logging.CRITICAL, 'bold_red', 'CRT'),
    _LogLevel(logging.ERROR,    'red',      'ERR'),
    _LogLevel(logging.WARNING,  'yellow',   'WRN'),
    _LogLevel(logging.INFO,     'magenta',  'INF'),
    _LogLevel(logging.DEBUG,    'blue',     'DBG'),
)  # yapf: disable

_STDERR_HANDLER = logging.StreamHandler()


def _make_color(*codes: int) -> Callable[[str], str]:
    # Apply all the requested ANSI color codes. Note that this is unbalanced
    # with respect to the reset, which only requires a '0' to erase all codes.
    start = ''.join(f'\033[{code}m' for code in codes)
    reset = '\033[0m'

    return lambda msg: f'{start}{msg}{reset}'


class Color:
    """Helpers to surround text with ASCII color escapes"""

    red = _make_color(31, 1)
    bold_red = _make_color(30, 41)
    yellow = _make_color(33, 1)
    blue = _make_color(34, 1)
    magenta = _make_color(35, 1)
    black_on_white = _make_color(30, 47)  # black fg white bg


class _NoColor:
    """Fake version of the Color class that doesn't colorize."""

    def __getattr__(self, _):
        return str


def colors(enabled: bool | None = None) -> type[Color] | _NoColor:
    """Returns a Color or _NoColor, detecting a color terminal if not set."""
    if enabled is None:
        enabled = (sys.stderr.isatty()
                   and os.environ.get('TERM', 'dumb') != 'dumb'
                   and 'NO_COLOR' not in os.environ)

    return Color if enabled else _NoColor()


def _setup_handler(handler: logging.Handler, formatter: logging.Formatter,
                   level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logging.getLogger().addHandler(handler)


def install(level: int = logging.INFO,
            use_color: bool | None = None,
            hide_timestamp: bool = False,
            log_file: str | Path | None = None) -> None:
    """Configures the system logger for the default log format.

    Logs always go to stderr: protoc reads the plugin's response from stdout.
    """
    color = colors(use_color)

    if hide_timestamp:
        timestamp_fmt = ''
    else:
        # This applies a gray background to the time to make the log lines
        # distinct from other input, in a way that's easier to see than plain
        # colored text.
        timestamp_fmt = color.black_on_white('%(asctime)s') + ' '

    formatter = logging.Formatter(timestamp_fmt + '%(levelname)s %(message)s',
                                  '%Y%m%d %H:%M:%S')

    # Set the log level on the root logger to 1, so logs that all logs
    # propagated from child loggers are handled.
    logging.getLogger().setLevel(1)

    # Always set up the stderr handler, even if it isn't used.
    _setup_handler(_STDERR_HANDLER, formatter, level)

    if log_file:
        _setup_handler(logging.FileHandler(log_file), formatter, level)
        # Since we're using a file, filter logs out of the stderr handler.
        _STDERR_HANDLER.setLevel(logging.CRITICAL + 1)

    for log_level in _LOG_LEVELS:
        colorize = getattr(color, log_level.color)
        logging.addLevelName(log_level.level, colorize(log_level.ascii))
