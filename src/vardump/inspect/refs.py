# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

from itertools import count


class ReferenceTracker:
    """
    Assigns small integer ids to objects in the order in which a single render first
    reaches them, so that later encounters of the same object can be rendered as a
    back-reference instead of being expanded again.

    A tracker belongs to exactly one top-level render call and is passed explicitly
    through the walk; it must not be shared between concurrent renders.
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self._refs: dict[object, tuple[int, object]] = {}
        self._ids = count(1)

    def __len__(self):
        return len(self._refs)

    def lookup_or_register(self, obj: object, key=None) -> tuple[int, bool]:
        """
        Returns (id, True) if obj has already been registered, or registers it and
        returns (new id, False). Objects are told apart by key, which defaults to
        id(obj).
        """
        # The object is kept alive by the table, so that its id() cannot be reused
        # by a temporary object created later during the same render.
        if key is None:
            key = id(obj)
        entry = self._refs.get(key)
        if entry is not None:
            return entry[0], True
        ref_id = next(self._ids)
        self._refs[key] = (ref_id, obj)
        return ref_id, False
