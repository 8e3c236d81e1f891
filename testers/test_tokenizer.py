# -*- coding: utf-8 -*-
import io

import pytest

from crystal3d.importers.errors import FileFormatError
from crystal3d.importers.tokenizer import (
    logical_lines, parse_float, parse_floats, parse_int, split_line,
)


def test_comments_and_blank_lines_are_skipped():
    text = "# header\n\n   \nv 1 2 3\n  # indented comment\nvn 0 0 1\n"
    lines = list(logical_lines(io.StringIO(text)))
    assert lines == [(4, "v 1 2 3"), (6, "vn 0 0 1")]


def test_continuation_joins_next_non_empty_line():
    text = "v 1 2 \\\n\n 3\nvn 0 0 1\n"
    lines = list(logical_lines(io.StringIO(text)))
    assert len(lines) == 2
    line_no, line = lines[0]
    assert line_no == 1
    keyword, args = split_line(line)
    assert keyword == "v"
    assert parse_floats(args) == [1.0, 2.0, 3.0]
    # номер строки после продолжения учитывает склеенные строки
    assert lines[1] == (4, "vn 0 0 1")


def test_continuation_at_end_of_stream():
    lines = list(logical_lines(io.StringIO("f 1 2 3 \\\n")))
    assert lines == [(1, "f 1 2 3 ")]


def test_split_line_lowercases_keyword_only():
    assert split_line("USEMTL Red_Material") == ("usemtl", "Red_Material")
    assert split_line("g") == ("g", "")
    assert split_line("s\toff") == ("s", "off")


def test_parse_floats_is_culture_invariant():
    assert parse_floats("1.5  -2e3 0.25") == [1.5, -2000.0, 0.25]
    with pytest.raises(FileFormatError) as err:
        parse_floats("1,5 2", line_no=7)
    assert err.value.line_no == 7
    assert "line 7" in str(err.value)


def test_parse_floats_minimum_count():
    with pytest.raises(FileFormatError):
        parse_floats("1 2", count=3)


def test_parse_int_rejects_garbage():
    assert parse_int("-4") == -4
    with pytest.raises(FileFormatError):
        parse_int("4.5")


@pytest.mark.parametrize("token", ["1_0", "١", "nan", "inf", "1e", ".", "0x10", "+-1"])
def test_parse_float_accepts_only_plain_ascii_numbers(token):
    with pytest.raises(FileFormatError):
        parse_float(token, line_no=3)


@pytest.mark.parametrize("token, expected", [
    ("7", 7.0), ("-0.5", -0.5), ("+.25", 0.25), ("3.", 3.0), ("1E-2", 0.01),
])
def test_parse_float_plain_forms(token, expected):
    assert parse_float(token) == pytest.approx(expected)


@pytest.mark.parametrize("token", ["1_000", "٢", "+"])
def test_parse_int_accepts_only_ascii_digits(token):
    with pytest.raises(FileFormatError):
        parse_int(token)
