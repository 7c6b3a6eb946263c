# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Structural classification of values."""

import array
import asyncio
import collections
import ctypes
import enum
import functools
import inspect
import io
import multiprocessing.queues
import queue
import re
import types
import typing
import weakref
from collections.abc import AsyncIterator, Awaitable, Iterator, Mapping, Sequence, Set

from vardump.inspect import INVALID
from vardump.inspect.fields import is_struct_like


class Kind(enum.Enum):
    INVALID = "invalid"
    NIL = "nil"
    STRINGER = "stringer"
    CHANNEL = "channel"
    POINTER = "pointer"
    FUNCTION = "function"
    OPAQUE = "opaque"
    MAP = "map"
    STRUCT = "struct"
    BYTES = "bytes"
    SEQUENCE = "sequence"
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    COMPLEX = "complex"


CHANNEL_TYPES = (
    queue.Queue,
    queue.SimpleQueue,
    asyncio.Queue,
    multiprocessing.queues.Queue,
    multiprocessing.queues.SimpleQueue,
    io.IOBase,
    Iterator,
    AsyncIterator,
    Awaitable,
)

POINTER_TYPES = (
    weakref.ReferenceType,
    ctypes._Pointer,
    ctypes._SimpleCData,
    types.CellType,
)

BYTE_CTYPES = (ctypes.c_ubyte, ctypes.c_char)

CDATA_TYPES = (
    ctypes.Structure,
    ctypes.Union,
    ctypes.Array,
    ctypes._SimpleCData,
    ctypes._Pointer,
)

# Builtin immutable aggregates can be shared by the interpreter between unrelated
# places (e.g. the empty tuple), so they are never reported as back-references.
UNTRACKED_TYPES = (tuple, frozenset, range)


def has_custom_str(cls: type) -> bool:
    """Whether cls has its own string form, as opposed to a builtin one."""
    for owner in cls.__mro__:
        if "__str__" in owner.__dict__:
            return owner is not object and owner.__module__ != "builtins"
    return False


def is_byte_sequence(value: object) -> bool:
    if isinstance(value, (bytes, bytearray)):
        return True
    if isinstance(value, memoryview):
        return value.format in ("B", "c") and value.ndim <= 1
    if isinstance(value, array.array):
        return value.typecode == "B"
    if isinstance(value, ctypes.Array):
        return value._type_ in BYTE_CTYPES
    return False


def classify(value: object) -> Kind:
    if value is INVALID:
        return Kind.INVALID
    if value is None:
        return Kind.NIL

    cls = type(value)
    if cls is bool:
        return Kind.BOOL

    if not issubclass(cls, type) and (
        issubclass(cls, BaseException) or has_custom_str(cls)
    ):
        return Kind.STRINGER

    match value:
        case str():
            return Kind.STRING
        case int():
            return Kind.INT
        case float():
            return Kind.FLOAT
        case complex():
            return Kind.COMPLEX

    if is_byte_sequence(value):
        return Kind.BYTES
    # Checks go by the class, so that a __class__ or __getattribute__ override on
    # the instance is never invoked.
    if issubclass(cls, ctypes.c_void_p):
        return Kind.OPAQUE
    if issubclass(cls, POINTER_TYPES):
        return Kind.POINTER
    if issubclass(cls, CHANNEL_TYPES):
        return Kind.CHANNEL
    if (
        issubclass(cls, type)
        or issubclass(cls, (functools.partial, types.MethodWrapperType))
        or inspect.isroutine(value)
    ):
        return Kind.FUNCTION
    if issubclass(cls, types.ModuleType):
        return Kind.OPAQUE
    if issubclass(cls, Mapping):
        return Kind.MAP
    if issubclass(cls, (ctypes.Structure, ctypes.Union)):
        return Kind.STRUCT
    if issubclass(cls, tuple) and hasattr(cls, "_fields"):
        return Kind.STRUCT
    if issubclass(
        cls, (Sequence, Set, collections.deque, array.array, memoryview, ctypes.Array)
    ):
        return Kind.SEQUENCE
    if is_struct_like(value):
        return Kind.STRUCT
    return Kind.OPAQUE


def typename(cls: type) -> str:
    """Display name of a class: "name" for builtins, "module.name" otherwise."""
    name = getattr(cls, "__name__", None)
    if not isinstance(name, str):
        return repr(cls)
    module = getattr(cls, "__module__", None)
    if not isinstance(module, str) or module == "builtins":
        return name
    return module.rpartition(".")[2] + "." + name


_OPTIONAL_RE = re.compile(r"(?:typing\.)?Optional\[(.*)\]")
_NONE_UNION_RE = re.compile(r"\s*\|\s*None\b|\bNone\s*\|\s*")


def annotation_name(annotation: object) -> str:
    """
    Display name of a declared type, with None removed from optional types, since it
    is only used to name the type of a None value.
    """
    if isinstance(annotation, str):
        text = annotation.strip()
        match = _OPTIONAL_RE.fullmatch(text)
        if match:
            return match.group(1)
        return _NONE_UNION_RE.sub("", text)
    if isinstance(annotation, typing.ForwardRef):
        return annotation_name(annotation.__forward_arg__)

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        return " | ".join(annotation_name(arg) for arg in args)
    if isinstance(annotation, type) and origin is None:
        return typename(annotation)
    return str(annotation).replace("typing.", "")


def is_nil(value: object, kind: Kind) -> bool:
    if kind is Kind.NIL:
        return True
    if kind is not Kind.POINTER:
        return False
    if isinstance(value, weakref.ReferenceType):
        return value() is None
    if isinstance(value, ctypes._Pointer):
        return not value
    if isinstance(value, ctypes._SimpleCData):
        # NULL c_char_p and c_wchar_p.
        return value.value is None
    return False


def deref(value: object) -> object:
    """The value a POINTER node refers to."""
    if isinstance(value, weakref.ReferenceType):
        return value()
    if isinstance(value, ctypes._Pointer):
        return value.contents
    if isinstance(value, ctypes._SimpleCData):
        return value.value
    try:
        return value.cell_contents
    except ValueError:
        # Cell of a variable that hasn't been assigned yet.
        return INVALID


def is_tracked(value: object, kind: Kind) -> bool:
    """Whether back-references to value should be detected."""
    # References themselves are not tracked; the objects they lead to are.
    if kind not in (Kind.STRUCT, Kind.MAP, Kind.SEQUENCE):
        return False
    return type(value) not in UNTRACKED_TYPES


def identity(value: object) -> object:
    """
    Key identifying the storage of value: type and address for ctypes data, which
    can be reached through different wrapper objects, and id() for everything else.
    """
    if isinstance(value, CDATA_TYPES):
        return ("ctypes", type(value), ctypes.addressof(value))
    return id(value)
