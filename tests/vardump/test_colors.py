# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import pytest

from vardump import colors
from vardump.colors import Tag


def test_plain():
    assert colors.plain(Tag.STRING, "x") == "x"


def test_ansi():
    assert colors.ansi(Tag.NUMBER, "1") == "\033[38;5;38m1\033[0m"
    assert colors.ansi(Tag.META, "m") == "\033[90mm\033[0m"


@pytest.mark.parametrize("tag", list(Tag))
def test_every_tag_has_colors(tag):
    assert tag in colors.ANSI_CODES
    assert tag in colors.HTML_COLORS


def test_html_span():
    assert colors.html_span(Tag.STRING, "a<b>&") == (
        '<span style="color:#80ff80">a&lt;b&gt;&amp;</span>'
    )


@pytest.mark.parametrize(
    "env, expected",
    [
        ({}, True),
        ({"NO_COLOR": "1"}, False),
        ({"NO_COLOR": ""}, True),
        ({"FORCE_COLOR": "1"}, True),
        ({"NO_COLOR": "1", "FORCE_COLOR": "1"}, False),
    ],
)
def test_detect_color(monkeypatch, env, expected):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    for name, value in env.items():
        monkeypatch.setenv(name, value)

    assert colors.detect_color() == expected
    assert colors.default_colorizer() is (colors.ansi if expected else colors.plain)
