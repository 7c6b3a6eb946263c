# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import collections
import ctypes
import dataclasses
import queue
import re
import weakref
from typing import Optional

import pytest

from vardump import colors
from vardump.inspect import INVALID, Policy
from vardump.inspect.kinds import typename
from vardump.inspect.render import Renderer, formatted_dump


def name_of(cls):
    return typename(cls)


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y


class Account:
    def __init__(self):
        self.owner = "ann"
        self._balance = 10


class Slotted:
    __slots__ = ("a", "_b", "c")

    def __init__(self):
        self.a = 1
        self._b = 2


class Greeting:
    def __str__(self):
        return "hello"


class BrokenGreeting:
    def __str__(self):
        raise RuntimeError("boom")


class Guarded:
    def __init__(self):
        self.value = 1

    def __getattribute__(self, name):
        raise AttributeError(name)


class Lazy:
    def __init__(self):
        self.loaded = False

    @property
    def data(self):
        raise AssertionError("properties must not be evaluated")


@dataclasses.dataclass
class Node:
    value: int
    next: "Optional[Node]" = None


@dataclasses.dataclass
class Holder:
    point: Optional[Point] = None
    count: int | None = None


Pair = collections.namedtuple("Pair", ["left", "right"])


class CPoint(ctypes.Structure):
    _fields_ = [("x", ctypes.c_int), ("y", ctypes.c_int)]


@pytest.mark.parametrize(
    "value, expected",
    [
        (42, "42"),
        (-7, "-7"),
        (3.5, "3.500000"),
        (complex(1, 2), "(1+2j)"),
        (True, "True"),
        (False, "False"),
        (None, "None(nil)"),
        ("hi", '"hi"'),
        ("", '""'),
        ("a\nb\tc", r'"a\nb\tc"'),
        ("\x1b[31m", r'"\x1b[31m"'),
    ],
)
def test_scalars(value, expected):
    assert formatted_dump(value) == expected


def test_str_subclass_renders_as_string():
    class Name(str):
        pass

    assert formatted_dump(Name("bob")) == '"bob"'


def test_string_truncation():
    policy = Policy(max_string_len=3)
    assert formatted_dump("abcdef", policy) == '"abc…"'
    assert formatted_dump("abc", policy) == '"abc"'


def test_string_truncation_counts_escapes():
    assert formatted_dump("a\nb", Policy(max_string_len=3)) == r'"a\n…"'


def test_list():
    assert formatted_dump([1, "a"]) == '[\n  0 => 1\n  1 => "a"\n]'


def test_empty_containers():
    assert formatted_dump([]) == "[\n]"
    assert formatted_dump({}) == "{\n}"


def test_dict():
    assert formatted_dump({"a": 1, 2: "b"}) == '{\n  a => 1\n  2 => "b"\n}'


def test_nested():
    expected = "{\n  xs => [\n    0 => 1\n  ]\n}"
    assert formatted_dump({"xs": [1]}) == expected


def test_sets_and_tuples():
    assert formatted_dump((1,)) == "[\n  0 => 1\n]"
    assert formatted_dump(frozenset([5])) == "[\n  0 => 5\n]"


def test_struct_fields():
    expected = (
        f"#{name_of(Account)} {{\n"
        '  +owner    => "ann"\n'
        "  -_balance => 10\n"
        "}"
    )
    assert formatted_dump(Account()) == expected


def test_struct_nested_indent():
    expected = (
        "[\n"
        f"  0 => #{name_of(Point)} {{\n"
        "    +x => 1\n"
        "    +y => 2\n"
        "  }\n"
        "]"
    )
    assert formatted_dump([Point(1, 2)]) == expected


def test_slots():
    expected = (
        f"#{name_of(Slotted)} {{\n"
        "  +a  => 1\n"
        "  -_b => 2\n"
        "  +c  => <invalid>\n"
        "}"
    )
    assert formatted_dump(Slotted()) == expected


def test_namedtuple():
    expected = f"#{name_of(Pair)} {{\n  +left  => 1\n  +right => 2\n}}"
    assert formatted_dump(Pair(1, 2)) == expected


def test_dataclass_with_nil_fields():
    output = formatted_dump(Node(1))
    assert output == f"#{name_of(Node)} {{\n  +value => 1\n  +next  => Node(nil)\n}}"


def test_nil_fields_use_declared_type():
    output = formatted_dump(Holder())
    assert f"+point => {name_of(Point)}(nil)" in output
    assert "+count => int(nil)" in output


def test_properties_are_not_evaluated():
    output = formatted_dump(Lazy())
    assert "+loaded => False" in output
    assert "data" not in output


def test_getattribute_is_bypassed():
    output = formatted_dump(Guarded())
    assert output == f"#{name_of(Guarded)} {{\n  +value => 1\n}}"


def test_ctypes_structure():
    output = formatted_dump(CPoint(1, 2))
    assert output == f"#{name_of(CPoint)} {{\n  +x => 1\n  +y => 2\n}}"


def test_ctypes_pointer():
    point = CPoint(3, 4)
    output = formatted_dump(ctypes.pointer(point))
    assert output == f"#{name_of(CPoint)} {{\n  +x => 3\n  +y => 4\n}}"


def test_ctypes_null_pointer():
    output = formatted_dump(ctypes.POINTER(CPoint)())
    assert output.endswith("LP_CPoint(nil)")


def test_ctypes_null_char_pointer():
    assert formatted_dump(ctypes.c_char_p()).endswith("c_char_p(nil)")
    assert "(nil)" not in formatted_dump(ctypes.c_char_p(b"hi"))


def test_ctypes_simple_data():
    assert formatted_dump(ctypes.c_int(5)) == "5"


def test_ctypes_void_pointer():
    assert formatted_dump(ctypes.c_void_p(0x10)) == "c_void_p(0x10)"


def test_weakref_is_followed():
    point = Point(1, 2)
    ref = weakref.ref(point)
    assert formatted_dump(ref) == formatted_dump(point)


def test_dead_weakref_is_nil():
    point = Point(1, 2)
    ref = weakref.ref(point)
    del point
    assert re.fullmatch(r".*ReferenceType\(nil\)", formatted_dump(ref))


def test_closure_cell():
    x = [1]

    def f():
        return x

    assert formatted_dump(f.__closure__[0]) == "[\n  0 => 1\n]"


def test_invalid():
    assert formatted_dump(INVALID) == "<invalid>"


def test_self_reference():
    xs = []
    xs.append(xs)
    assert formatted_dump(xs) == "[\n  0 => ↩︎ &1\n]"

    d = {}
    d["self"] = d
    assert formatted_dump(d) == "{\n  self => ↩︎ &1\n}"


def test_struct_cycle():
    a = Point(1, None)
    a.y = a
    expected = f"#{name_of(Point)} {{\n  +x => 1\n  +y => ↩︎ &1\n}}"
    assert formatted_dump(a) == expected


def test_shared_reference():
    x = [1]
    expected = "[\n  0 => [\n    0 => 1\n  ]\n  1 => ↩︎ &2\n]"
    assert formatted_dump([x, x]) == expected


def test_tuples_are_not_tracked():
    t = (1,)
    expected = "[\n  0 => [\n    0 => 1\n  ]\n  1 => [\n    0 => 1\n  ]\n]"
    assert formatted_dump([t, t]) == expected


def test_ids_are_shared_by_values_of_one_renderer():
    x = [1]
    renderer = Renderer()
    renderer.render(x)
    renderer.write("\n")
    renderer.render(x)
    assert str(renderer) == "[\n  0 => 1\n]\n↩︎ &1"


def test_max_depth():
    assert formatted_dump([1], Policy(max_depth=0)) == "[\n  0 => ... (max depth)\n]"

    expected = "[\n  0 => [\n    0 => ... (max depth)\n  ]\n]"
    assert formatted_dump([[[1]]], Policy(max_depth=1)) == expected


def test_pointers_do_not_count_as_depth():
    point = Point([1], None)
    ref = weakref.ref(point)
    expected = formatted_dump([point], Policy(max_depth=2))
    assert "... (max depth)" in expected
    assert formatted_dump([ref], Policy(max_depth=2)) == expected


def test_unbounded_depth():
    value = [[[[1]]]]
    assert "max depth" not in formatted_dump(value, Policy(max_depth=None))


def test_deep_recursion_does_not_raise():
    value = []
    for _ in range(5000):
        value = [value]
    output = formatted_dump(value, Policy(max_depth=None))
    assert output.startswith("[\n")
    assert output.endswith("]")


@pytest.mark.parametrize("count", [2, 3])
def test_item_truncation(count):
    output = formatted_dump(list(range(count)), Policy(max_items=2))
    lines = output.splitlines()
    assert lines[1:3] == ["  0 => 0", "  1 => 1"]
    if count > 2:
        assert lines[3] == "  ... (truncated)"
    else:
        assert "truncated" not in output


def test_map_truncation():
    output = formatted_dump({"a": 1, "b": 2}, Policy(max_items=1))
    assert output == "{\n  a => 1\n  ... (truncated)\n}"


def test_unbounded_items():
    output = formatted_dump(list(range(200)), Policy(max_items=None))
    assert "199 => 199" in output
    assert "truncated" not in output


def test_bytes():
    lines = formatted_dump(b"AB").splitlines()
    assert lines == [
        "([]uint8) (len=2 cap=2) {",
        "  00000000  41 42 " + " " * 44 + "| AB" + " " * 14 + " |",
        "}",
    ]


def test_bytearray_in_struct():
    holder = Point(bytearray(b"\x00"), 1)
    lines = formatted_dump(holder).splitlines()
    assert lines[1] == "  +x => ([]uint8) (len=1 cap=1) {"
    assert lines[2].startswith("    00000000  00 ")
    assert lines[3] == "  }"
    assert lines[4] == "  +y => 1"


def test_stringer():
    assert formatted_dump(Greeting()) == f"hello #{name_of(Greeting)}"


def test_stringer_error():
    output = formatted_dump(BrokenGreeting())
    assert output == f"<str() error: boom> #{name_of(BrokenGreeting)}"


def test_exception_is_stringer():
    assert formatted_dump(ValueError("bad")) == "bad #ValueError"


def test_function():
    def f(a, b=1):
        pass

    assert formatted_dump(f) == "def(a, b=1)"
    assert formatted_dump(int) == "type[int]"
    assert formatted_dump(Point) == f"type[{name_of(Point)}]"


def test_channel():
    output = formatted_dump(queue.Queue())
    assert re.fullmatch(r"queue\.Queue\(0x[0-9a-f]+\)", output)


def test_generator_is_channel():
    output = formatted_dump(x for x in [1])
    assert re.fullmatch(r"generator\(0x[0-9a-f]+\)", output)


def test_module():
    assert formatted_dump(re) == "module(re)"


def test_opaque():
    output = formatted_dump(object())
    assert re.fullmatch(r"object\(0x[0-9a-f]+\)", output)


def test_iteration_error():
    class Flaky(list):
        def __iter__(self):
            yield 1
            raise RuntimeError("flaky")

    assert formatted_dump(Flaky()) == "[\n  0 => 1\n]"


def test_ansi_colors():
    output = formatted_dump([True], colorize=colors.ansi)
    assert colors.ansi(colors.Tag.TRUE, "True") in output
    assert colors.ansi(colors.Tag.NUMBER, "0") in output


def test_html_colors_escape():
    output = formatted_dump("<b>", colorize=colors.html_span)
    assert "&lt;b&gt;" in output
    assert "<b>" not in output
