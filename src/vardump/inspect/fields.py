# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""
Enumerates the fields of struct-like objects and reads their stored values.

Reading is done directly from instance storage (the instance __dict__, slot
descriptors, named tuple items, ctypes fields), so that properties, __getattr__
and __getattribute__ overrides of the inspected object never run, and names that
are private by convention are just as readable as public ones.
"""

import ctypes
import dataclasses
import inspect
from collections.abc import Iterable
from typing import Any, Optional

from vardump.common import log
from vardump.inspect import INVALID


class Field:
    """A single field of a struct-like object."""

    name: str
    """Name of the field as written in the class body."""

    storage_name: str
    """Name under which the value is actually stored, after private name mangling."""

    annotation: Any
    """Declared type of the field, or None if it wasn't annotated."""

    def __init__(self, name: str, storage_name: Optional[str] = None, annotation=None):
        self.name = name
        self.storage_name = name if storage_name is None else storage_name
        self.annotation = annotation

    def __repr__(self):
        return f"Field({self.name!r})"

    def __eq__(self, other):
        if not isinstance(other, Field):
            return NotImplemented
        return (self.name, self.storage_name) == (other.name, other.storage_name)

    @property
    def exported(self) -> bool:
        return not self.name.startswith("_")


def instance_dict(obj: object) -> Optional[dict]:
    try:
        state = object.__getattribute__(obj, "__dict__")
    except Exception:
        return None
    return state if isinstance(state, dict) else None


def _mangle(owner: type, name: str) -> str:
    if name.startswith("__") and not name.endswith("__"):
        return "_" + owner.__name__.lstrip("_") + name
    return name


def slot_fields(cls: type) -> list[Field]:
    """Fields declared in __slots__ anywhere in the class hierarchy, base first."""
    fields = []
    for owner in reversed(cls.__mro__):
        slots = owner.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__"):
                continue
            fields.append(Field(name, _mangle(owner, name)))
    return fields


def is_struct_like(obj: object) -> bool:
    if isinstance(obj, (ctypes.Structure, ctypes.Union)):
        return True
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return True
    if isinstance(obj, tuple) and hasattr(type(obj), "_fields"):
        return True
    return instance_dict(obj) is not None or bool(slot_fields(type(obj)))


def _class_annotations(cls: type) -> dict[str, Any]:
    annotations = {}
    for owner in reversed(cls.__mro__):
        try:
            annotations.update(inspect.get_annotations(owner))
        except Exception:
            log.swallow_exception("Error retrieving annotations of {0!r}", owner)
    return annotations


def _demangled(name: str, cls: type) -> str:
    for owner in cls.__mro__:
        prefix = "_" + owner.__name__.lstrip("_") + "__"
        if name.startswith(prefix) and not name.endswith("__"):
            return name[len(prefix) - 2 :]
    return name


def struct_fields(obj: object) -> list[Field]:
    """
    Returns the fields of obj in declaration order. Every field is listed exactly
    once; fields inherited from base classes are ordinary fields of obj.
    """

    cls = type(obj)

    if isinstance(obj, (ctypes.Structure, ctypes.Union)):
        fields = []
        for owner in reversed(cls.__mro__):
            for entry in owner.__dict__.get("_fields_", ()):
                fields.append(Field(entry[0], annotation=entry[1]))
        return fields

    if dataclasses.is_dataclass(obj):
        return [
            Field(_demangled(f.name, cls), f.name, f.type)
            for f in dataclasses.fields(obj)
        ]

    annotations = _class_annotations(cls)

    if isinstance(obj, tuple) and hasattr(cls, "_fields"):
        return [Field(name, annotation=annotations.get(name)) for name in cls._fields]

    fields = slot_fields(cls)
    seen = {field.storage_name for field in fields}
    for storage_name in instance_dict(obj) or ():
        if not isinstance(storage_name, str) or storage_name in seen:
            continue
        seen.add(storage_name)
        fields.append(Field(_demangled(storage_name, cls), storage_name))

    for field in fields:
        field.annotation = annotations.get(field.storage_name)
    return fields


def force_exported(obj: object, field: Field) -> object:
    """
    Returns the value stored for the given field of obj, regardless of whether it
    is public, or INVALID if there is no stored value or it can't be read.
    """

    cls = type(obj)
    name = field.storage_name

    if isinstance(obj, tuple) and hasattr(cls, "_fields"):
        try:
            return tuple.__getitem__(obj, cls._fields.index(name))
        except (ValueError, IndexError):
            return INVALID

    if isinstance(obj, (ctypes.Structure, ctypes.Union)):
        # ctypes fields are plain data descriptors implemented in C.
        try:
            return getattr(obj, name)
        except Exception:
            log.swallow_exception("Error reading ctypes field {0!r}", name)
            return INVALID

    state = instance_dict(obj)
    if state is not None and name in state:
        return state[name]

    for owner in cls.__mro__:
        descriptor = owner.__dict__.get(name)
        if descriptor is None:
            continue
        if inspect.ismemberdescriptor(descriptor):
            try:
                return descriptor.__get__(obj, cls)
            except AttributeError:
                # Declared but never assigned.
                return INVALID
        break

    return INVALID


def fields_and_values(obj: object) -> Iterable[tuple[Field, object]]:
    for field in struct_fields(obj):
        yield field, force_exported(obj, field)
