import math

import pytest

from reporting.utils import (
    escape_html,
    format_number,
    format_time_ago,
    heat_bar,
    heat_color,
    is_dark_theme,
    md_cell,
)

NOW = 1_700_000_000_000


@pytest.mark.parametrize(
    "value, expected",
    [
        (2_500_000, "2.5M"),
        (1_500, "1.5k"),
        (999, "999"),
        (12.0, "12"),
        (3.14159, "3.14"),
        (0, "0"),
        (math.nan, "0"),
        (math.inf, "0"),
    ],
)
def test_format_number(value, expected):
    assert format_number(value) == expected


@pytest.mark.parametrize(
    "age_ms, expected",
    [
        (30_000, "Just now"),
        (5 * 60_000, "5m ago"),
        (3 * 3_600_000, "3h ago"),
        (2 * 86_400_000, "2d ago"),
    ],
)
def test_format_time_ago(age_ms, expected):
    assert format_time_ago(NOW - age_ms, now_ms=NOW) == expected


def test_dark_themes():
    assert is_dark_theme("github-dark")
    assert is_dark_theme("zinc-dark")
    assert is_dark_theme("nord")
    assert not is_dark_theme("github-light")


def test_heat_bar_and_color():
    assert heat_bar(5, 10, width=10) == "█████░░░░░"
    assert heat_bar(10, 10, width=4) == "████"
    assert heat_bar(1, 0) == ""
    assert heat_color(0, dark=False) == "rgb(250, 248, 245)"
    assert heat_color(2, dark=True) == heat_color(1, dark=True)


def test_escape_html_covers_all_special_characters():
    assert str(escape_html("<a href=\"x\">Tom & 'Jerry'</a>")) == (
        "&lt;a href=&#34;x&#34;&gt;Tom &amp; &#39;Jerry&#39;&lt;/a&gt;"
    )


def test_md_cell_keeps_single_cell():
    assert md_cell("a|b\nc") == "a\\|b c"
    assert md_cell(None) == ""
