# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Hex dump rendering of byte sequences."""

import io

from vardump.colors import Colorizer, Tag, plain
from vardump.inspect import INDENT_WIDTH

LINE_LEN = 16
ASCII_START_COL = 50


def printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte <= 0x7E else "."


def hexdump(data: bytes, indent: int, colorize: Colorizer = plain) -> str:
    """
    Formats data as a "([]uint8) (len=N cap=N) {" block with 16 bytes per line:
    offset, hex columns and an ASCII column. Body lines are indented by indent
    levels, the closing brace by one level less.
    """

    output = io.StringIO()
    body_indent = " " * (indent * INDENT_WIDTH)

    output.write(f"([]uint8) (len={len(data)} cap={len(data)}) {{\n")

    for offset in range(0, len(data), LINE_LEN):
        line = data[offset : offset + LINE_LEN]

        offset_text = f"{offset:08x}  "
        output.write(body_indent)
        output.write(colorize(Tag.KEY, offset_text))
        visible_len = len(offset_text)

        for i in range(LINE_LEN):
            hex_text = f"{line[i]:02x} " if i < len(line) else "   "
            if i == 7:
                hex_text += " "
            output.write(colorize(Tag.NUMBER, hex_text))
            visible_len += len(hex_text)

        output.write(" " * max(1, ASCII_START_COL - visible_len))

        output.write(colorize(Tag.META, "| "))
        for byte in line:
            output.write(colorize(Tag.STRING, printable(byte)))
        output.write(" " * (LINE_LEN - len(line)))
        output.write(colorize(Tag.META, " |") + "\n")

    output.write(" " * (max(0, indent - 1) * INDENT_WIDTH) + "}")
    return output.getvalue()
