# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""
Dumper ties the inspection engine to the outside world: configuration, output
streams, call site headers, and the HTML and JSON variants of the output.
"""

import copy
import io
import os
import sys
from collections.abc import Iterable
from typing import Optional

from vardump import colors
from vardump.colors import Colorizer, Tag
from vardump.common import json, log
from vardump.inspect import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_ITEMS,
    DEFAULT_MAX_STRING_LEN,
    Policy,
)
from vardump.inspect.render import Renderer


MAX_STACK_DEPTH = 16
"""How many frames up the stack are examined when looking for the call site."""

INTERNAL_MODULES = ("vardump",)

HTML_PREFIX = (
    "<div style='background-color:black;'>"
    '<pre style="background-color:black; color:white; padding:5px; border-radius: 5px">'
    "\n"
)

HTML_SUFFIX = "</pre></div>"

NO_ARGUMENTS_ERROR = '{"error": "dump_json called with no arguments"}'


def _limit(name, value, default):
    """
    Validates a limit option: None keeps the default, a negative value disables the
    limit, anything that isn't an int is ignored.
    """
    if value is None:
        return default
    if not isinstance(value, int) or isinstance(value, bool):
        log.debug("Ignoring invalid {0}={1!r}", name, value)
        return default
    if value < 0:
        return None
    return value


def _is_binary(stream) -> bool:
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        return True
    mode = getattr(stream, "mode", "")
    return isinstance(mode, str) and "b" in mode


class Dumper:
    """Renders values as indented, optionally colored, text.

    All options are keyword-only and validated independently; a value
    that is out of range is ignored and the default is used instead.

    max_depth, max_items, max_string_len: limits on nesting depth,
    items per sequence or mapping, and code points per string. A
    negative value disables the limit.

    writer: stream that dump() writes to; sys.stdout if None. Binary
    streams receive UTF-8.

    skip_stack_frames: how many frames above the first frame outside of
    vardump to skip when locating the call site for the header, for use
    when dumping is wrapped in helper functions.

    skip_modules: names of additional packages whose frames are never
    reported as the call site.

    colorizer: one of the functions in vardump.colors, or a compatible
    callable. If None, it is chosen according to NO_COLOR and
    FORCE_COLOR each time output is produced.
    """

    policy: Policy

    writer: Optional[io.TextIOBase]

    skip_stack_frames: int

    skip_modules: tuple[str, ...]

    colorizer: Optional[Colorizer]

    def __init__(
        self,
        *,
        max_depth: Optional[int] = None,
        max_items: Optional[int] = None,
        max_string_len: Optional[int] = None,
        writer=None,
        skip_stack_frames: Optional[int] = None,
        skip_modules: Iterable[str] = (),
        colorizer: Optional[Colorizer] = None,
    ):
        log.to_file()

        self.policy = Policy(
            max_depth=_limit("max_depth", max_depth, DEFAULT_MAX_DEPTH),
            max_items=_limit("max_items", max_items, DEFAULT_MAX_ITEMS),
            max_string_len=_limit(
                "max_string_len", max_string_len, DEFAULT_MAX_STRING_LEN
            ),
        )
        self.writer = writer

        self.skip_stack_frames = 0
        if skip_stack_frames is not None:
            if isinstance(skip_stack_frames, int) and skip_stack_frames >= 0:
                self.skip_stack_frames = skip_stack_frames
            else:
                log.debug("Ignoring invalid skip_stack_frames={0!r}", skip_stack_frames)

        self.skip_modules = INTERNAL_MODULES + tuple(skip_modules)
        self.colorizer = colorizer

    def __repr__(self):
        return f"Dumper({self.policy})"

    @property
    def colorize(self) -> Colorizer:
        if self.colorizer is not None:
            return self.colorizer
        return colors.default_colorizer()

    def clone(self) -> "Dumper":
        return copy.copy(self)

    def dump(self, *values: object) -> None:
        """Writes the dump of values to the configured writer."""
        self.write(self.dump_str(*values))

    def dump_str(self, *values: object) -> str:
        """Returns the dump of values: a header identifying the call site, followed
        by every value on its own line(s).
        """
        colorize = self.colorize
        output = io.StringIO()
        self.write_header(output, colorize)

        renderer = Renderer(self.policy, colorize, output)
        for value in values:
            renderer.render(value)
            output.write("\n")
        return output.getvalue()

    def dump_html(self, *values: object) -> str:
        html_dumper = self.clone()
        html_dumper.colorizer = colors.html_span
        return HTML_PREFIX + html_dumper.dump_str(*values) + HTML_SUFFIX

    def dump_json_str(self, *values: object) -> str:
        """Returns values as indented JSON: a single value is encoded directly,
        several as an array. Errors are reported as {"error": "..."} instead
        of being raised.
        """
        if not values:
            return NO_ARGUMENTS_ERROR

        data = values[0] if len(values) == 1 else list(values)
        try:
            return json.dumps(data)
        except Exception as exc:
            log.debug("dump_json failed: {0}", exc)
            return json.dumps({"error": str(exc)}, indent=None)

    def dump_json(self, *values: object) -> None:
        self.write(self.dump_json_str(*values) + "\n")

    def dd(self, *values: object):
        """Dumps values and exits the process with exit code 1."""
        self.dump(*values)
        sys.exit(1)

    def write(self, text: str) -> None:
        writer = self.writer if self.writer is not None else sys.stdout
        if _is_binary(writer):
            writer.write(text.encode("utf-8"))
        else:
            writer.write(text)

    def write_header(self, output, colorize: Colorizer) -> None:
        call_site = self.find_call_site()
        if call_site is None:
            return

        filename, line = call_site
        try:
            filename = os.path.relpath(filename)
        except ValueError:
            # Different drive on Windows.
            pass

        output.write(colorize(Tag.META, f"<#dump // {filename}:{line}"))
        output.write("\n")

    def caller_frame(self):
        return sys._getframe(1)

    def is_internal_frame(self, frame) -> bool:
        module = frame.f_globals.get("__name__", "")
        if not isinstance(module, str):
            return False
        return any(
            module == name or module.startswith(name + ".")
            for name in self.skip_modules
        )

    def find_call_site(self) -> Optional[tuple[str, int]]:
        """Returns (filename, line) of the first frame outside of vardump, after
        skipping skip_stack_frames more, or None if there is no such frame within
        MAX_STACK_DEPTH frames.
        """
        skip = self.skip_stack_frames
        frame = self.caller_frame()
        for _ in range(MAX_STACK_DEPTH):
            if frame is None:
                break
            if not self.is_internal_frame(frame):
                if skip > 0:
                    skip -= 1
                else:
                    return frame.f_code.co_filename, frame.f_lineno
            frame = frame.f_back
        return None


_default = None


def default() -> Dumper:
    """The Dumper used by the module-level functions in vardump."""
    global _default
    if _default is None:
        _default = Dumper()
    return _default
