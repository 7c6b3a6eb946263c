# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""
Output decoration. The renderer only ever tags text with a semantic Tag; a
Colorizer decides what that tag looks like.
"""

import enum
import html
import os
from typing import Callable


class Tag(enum.Enum):
    PUNCTUATION = "punctuation"
    QUOTE = "quote"
    STRING = "string"
    NUMBER = "number"
    TRUE = "true"
    FALSE = "false"
    META = "meta"
    REFERENCE = "reference"
    TYPE = "type"
    KEY = "key"


Colorizer = Callable[[Tag, str], str]

ANSI_RESET = "\033[0m"

ANSI_CODES = {
    Tag.PUNCTUATION: "\033[33m",
    Tag.QUOTE: "\033[33m",
    Tag.STRING: "\033[1;38;5;113m",
    Tag.NUMBER: "\033[38;5;38m",
    Tag.TRUE: "\033[33m",
    Tag.FALSE: "\033[90m",
    Tag.META: "\033[90m",
    Tag.REFERENCE: "\033[38;5;247m",
    Tag.TYPE: "\033[90m",
    Tag.KEY: "\033[38;5;170m",
}

HTML_COLORS = {
    Tag.PUNCTUATION: "#ffb400",
    Tag.QUOTE: "#ffb400",
    Tag.STRING: "#80ff80",
    Tag.NUMBER: "#40c0ff",
    Tag.TRUE: "#ffb400",
    Tag.FALSE: "#999",
    Tag.META: "#999",
    Tag.REFERENCE: "#aaa",
    Tag.TYPE: "#999",
    Tag.KEY: "#d087d0",
}


def plain(tag: Tag, text: str) -> str:
    return text


def ansi(tag: Tag, text: str) -> str:
    return ANSI_CODES[tag] + text + ANSI_RESET


def html_span(tag: Tag, text: str) -> str:
    color = HTML_COLORS.get(tag, "")
    return f'<span style="color:{color}">{html.escape(text, quote=False)}</span>'


def detect_color() -> bool:
    """
    Whether output should be colored, according to the NO_COLOR and FORCE_COLOR
    environment variables. Color is on unless explicitly turned off.
    """
    if os.getenv("NO_COLOR", ""):
        return False
    if os.getenv("FORCE_COLOR", ""):
        return True
    return True


def default_colorizer() -> Colorizer:
    return ansi if detect_color() else plain
