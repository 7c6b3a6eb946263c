# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""
Value inspection: classifying, walking and rendering arbitrary object graphs.

This package has no knowledge of output sinks, call sites or environment settings,
so that it can be unit-tested in isolation. vardump.dumper wraps it with all of
those.
"""

from dataclasses import dataclass
from typing import Optional


DEFAULT_MAX_DEPTH = 15
DEFAULT_MAX_ITEMS = 100
DEFAULT_MAX_STRING_LEN = 100000

INDENT_WIDTH = 2


@dataclass(frozen=True)
class Policy:
    max_depth: Optional[int] = DEFAULT_MAX_DEPTH
    """
    How many levels of nested members are rendered before the walker stops with
    a "... (max depth)" marker. Following a reference does not count as a level.
    None means unbounded.
    """

    max_items: Optional[int] = DEFAULT_MAX_ITEMS
    """Maximum number of items rendered for a sequence or mapping. None means all."""

    max_string_len: Optional[int] = DEFAULT_MAX_STRING_LEN
    """
    Maximum number of code points of a string that are rendered before it is cut
    with an ellipsis. None means unbounded.
    """

    def exceeds_depth(self, depth: int) -> bool:
        return self.max_depth is not None and depth > self.max_depth

    def exceeds_items(self, count: int) -> bool:
        """Whether an item at zero-based position count is past the limit."""
        return self.max_items is not None and count >= self.max_items

    def exceeds_string_len(self, length: int) -> bool:
        return self.max_string_len is not None and length > self.max_string_len


class _Invalid:
    def __repr__(self):
        return "<invalid>"


INVALID = _Invalid()
"""
Stands for "no value here": an unset slot, a field that could not be read, an
empty closure cell. Rendered as "<invalid>".
"""
