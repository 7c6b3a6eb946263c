# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import ctypes
import inspect
import io
import types
from collections.abc import Iterable, Mapping
from itertools import count
from typing import Optional, TextIO, assert_never

from vardump.colors import Colorizer, Tag, plain
from vardump.common import log
from vardump.inspect import INDENT_WIDTH, INVALID, Policy
from vardump.inspect.fields import fields_and_values
from vardump.inspect.hexdump import hexdump
from vardump.inspect.kinds import (
    Kind,
    annotation_name,
    classify,
    deref,
    identity,
    is_nil,
    is_tracked,
    typename,
)
from vardump.inspect.refs import ReferenceTracker


MAX_DEPTH_MARKER = "... (max depth)"
TRUNCATED_MARKER = "... (truncated)"
INVALID_MARKER = "<invalid>"
ELLIPSIS = "…"

CONTROL_ESCAPES = str.maketrans(
    {
        "\n": r"\n",
        "\t": r"\t",
        "\r": r"\r",
        "\v": r"\v",
        "\f": r"\f",
        "\x1b": r"\x1b",
    }
)


def escape_control(text: str) -> str:
    return text.translate(CONTROL_ESCAPES)


def reference_marker(ref_id: int) -> str:
    return f"↩︎ &{ref_id}"


def safe_str(value: object) -> str:
    try:
        return str(value)
    except Exception as exc:
        log.swallow_exception("str() failed for object of type {0}", type(value))
        try:
            return f"<str() error: {exc}>"
        except Exception:
            return "<str() error>"


def iter_items(value: Iterable) -> Iterable[object]:
    if isinstance(value, memoryview):
        try:
            value = value.tolist()
        except Exception:
            log.swallow_exception("Error converting memoryview to list.")
            return
    try:
        it = iter(value)
    except Exception:
        log.swallow_exception("Error iterating over {0}", type(value))
        return
    for _ in count():
        try:
            item = next(it)
        except StopIteration:
            break
        except Exception:
            log.swallow_exception("Error retrieving next item.")
            break
        yield item


def iter_pairs(value: Mapping) -> Iterable[tuple[object, object]]:
    if isinstance(value, dict):
        # No user code runs for dict subclasses, e.g. defaultdict.__missing__.
        yield from list(dict.items(value))
        return
    for key in iter_items(value.keys()):
        try:
            item = value[key]
        except Exception as exc:
            item = exc
        yield key, item


class Renderer:
    """
    Writes the text form of values to output, one top-level value at a time.

    All values rendered by the same Renderer share a single ReferenceTracker, so an
    object reached from two different top-level values is expanded once and then
    referred back to.
    """

    output: TextIO

    policy: Policy

    colorize: Colorizer

    refs: ReferenceTracker

    def __init__(
        self,
        policy: Policy = Policy(),
        colorize: Colorizer = plain,
        output: Optional[TextIO] = None,
    ):
        self.output = io.StringIO() if output is None else output
        self.policy = policy
        self.colorize = colorize
        self.refs = ReferenceTracker()

    def __str__(self) -> str:
        return self.output.getvalue()

    def write(self, text: str):
        self.output.write(text)

    def write_tagged(self, tag: Tag, text: str):
        self.output.write(self.colorize(tag, text))

    def write_indent(self, depth: int):
        self.output.write(" " * (depth * INDENT_WIDTH))

    def render(self, value: object, depth: int = 0, annotation: object = None):
        """
        Renders value at the given nesting depth. annotation is the declared type of
        the location value was read from, if known.
        """

        if self.policy.exceeds_depth(depth):
            self.write_tagged(Tag.META, MAX_DEPTH_MARKER)
            return

        try:
            kind = classify(value)
        except Exception:
            log.swallow_exception("Error classifying object of type {0}", type(value))
            kind = Kind.OPAQUE

        if is_nil(value, kind):
            self.render_nil(value, annotation)
            return

        if is_tracked(value, kind):
            ref_id, found = self.refs.lookup_or_register(value, identity(value))
            if found:
                self.write_tagged(Tag.REFERENCE, reference_marker(ref_id))
                return

        try:
            self.render_kind(value, kind, depth)
        except RecursionError:
            self.write_tagged(Tag.META, MAX_DEPTH_MARKER)

    def render_kind(self, value: object, kind: Kind, depth: int):
        match kind:
            case Kind.INVALID:
                self.write_tagged(Tag.META, INVALID_MARKER)
            case Kind.NIL:
                self.render_nil(value, None)
            case Kind.STRINGER:
                self.write_tagged(Tag.STRING, safe_str(value))
                self.write_tagged(Tag.TYPE, " #" + typename(type(value)))
            case Kind.CHANNEL:
                self.render_address(value)
            case Kind.POINTER:
                # Following a reference doesn't count as a nesting level.
                try:
                    target = deref(value)
                except Exception:
                    log.swallow_exception("Error dereferencing {0}", type(value))
                    target = INVALID
                self.render(target, depth)
            case Kind.STRUCT:
                self.render_struct(value, depth)
            case Kind.BYTES:
                self.write(hexdump(bytes(value), depth + 1, self.colorize))
            case Kind.SEQUENCE:
                self.render_sequence(value, depth)
            case Kind.MAP:
                self.render_map(value, depth)
            case Kind.STRING:
                self.render_string(value)
            case Kind.BOOL:
                if value:
                    self.write_tagged(Tag.TRUE, "True")
                else:
                    self.write_tagged(Tag.FALSE, "False")
            case Kind.INT:
                try:
                    text = int.__repr__(value)
                except ValueError:
                    # Too many digits for decimal conversion.
                    text = f"{value:#x}"
                self.write_tagged(Tag.NUMBER, text)
            case Kind.FLOAT:
                self.write_tagged(Tag.NUMBER, f"{float(value):f}")
            case Kind.COMPLEX:
                self.write_tagged(Tag.NUMBER, complex.__repr__(value))
            case Kind.FUNCTION:
                self.render_function(value)
            case Kind.OPAQUE:
                self.render_opaque(value)
            case _:
                assert_never(kind)

    def render_nil(self, value: object, annotation: object):
        if value is not None:
            name = typename(type(value))
        elif annotation is not None:
            name = annotation_name(annotation)
        else:
            name = "None"
        self.write_tagged(Tag.TYPE, name)
        self.write_tagged(Tag.META, "(nil)")

    def render_address(self, value: object):
        self.write_tagged(Tag.TYPE, typename(type(value)))
        self.write("(")
        self.write_tagged(Tag.NUMBER, hex(id(value)))
        self.write(")")

    def render_struct(self, value: object, depth: int):
        try:
            fields = list(fields_and_values(value))
        except Exception:
            log.swallow_exception("Error enumerating fields of {0}", type(value))
            fields = []

        self.write_tagged(Tag.TYPE, "#" + typename(type(value)))
        self.write(" {\n")

        width = max((len(field.name) for field, _ in fields), default=0)
        for field, field_value in fields:
            self.write_indent(depth + 1)
            self.write_tagged(Tag.PUNCTUATION, "+" if field.exported else "-")
            self.write(field.name.ljust(width))
            self.write(" => ")
            self.render(field_value, depth + 1, field.annotation)
            self.write("\n")

        self.write_indent(depth)
        self.write("}")

    def render_sequence(self, value: Iterable, depth: int):
        self.write("[\n")
        for index, item in enumerate(iter_items(value)):
            if self.policy.exceeds_items(index):
                self.write_truncated(depth + 1)
                break
            self.write_indent(depth + 1)
            self.write_tagged(Tag.NUMBER, str(index))
            self.write(" => ")
            self.render(item, depth + 1)
            self.write("\n")
        self.write_indent(depth)
        self.write("]")

    def render_map(self, value: Mapping, depth: int):
        self.write("{\n")
        for index, (key, item) in enumerate(iter_pairs(value)):
            if self.policy.exceeds_items(index):
                self.write_truncated(depth + 1)
                break
            self.write_indent(depth + 1)
            self.write_tagged(Tag.KEY, safe_str(key))
            self.write(" => ")
            self.render(item, depth + 1)
            self.write("\n")
        self.write_indent(depth)
        self.write("}")

    def write_truncated(self, depth: int):
        self.write_indent(depth)
        self.write_tagged(Tag.META, TRUNCATED_MARKER)
        self.write("\n")

    def render_string(self, value: str):
        text = escape_control(str.__str__(value))
        if self.policy.exceeds_string_len(len(text)):
            text = text[: self.policy.max_string_len] + ELLIPSIS
        self.write_tagged(Tag.QUOTE, '"')
        self.write_tagged(Tag.STRING, text)
        self.write_tagged(Tag.QUOTE, '"')

    def render_function(self, value: object):
        if isinstance(value, type):
            self.write_tagged(Tag.TYPE, f"type[{typename(value)}]")
            return
        try:
            signature = str(inspect.signature(value))
        except (TypeError, ValueError):
            signature = "(...)"
        self.write_tagged(Tag.TYPE, "def" + signature)

    def render_opaque(self, value: object):
        match value:
            case types.ModuleType():
                name = vars(value).get("__name__", "?")
                self.write_tagged(Tag.TYPE, f"module({name})")
            case ctypes.c_void_p():
                self.write_tagged(Tag.TYPE, "c_void_p")
                self.write("(")
                self.write_tagged(Tag.NUMBER, hex(value.value or 0))
                self.write(")")
            case _:
                self.render_address(value)


def formatted_dump(
    value: object, policy: Policy = Policy(), colorize: Colorizer = plain
) -> str:
    """Renders a single value with a fresh ReferenceTracker, without a trailing newline."""
    renderer = Renderer(policy, colorize)
    renderer.render(value)
    return str(renderer)
