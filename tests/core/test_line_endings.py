"""Tests for line-ending detection and restoration."""
import os

import pytest

from ai_file_edit.core.line_endings import (
    CRLF,
    LF,
    apply_line_endings,
    detect_line_ending,
    get_platform_line_ending,
    normalize_line_endings,
    split_lines,
)


class TestPlatformLineEnding:
    def test_matches_os(self) -> None:
        expected = "\r\n" if os.name == "nt" else "\n"
        assert get_platform_line_ending() == expected


class TestDetectLineEnding:
    def test_lf(self) -> None:
        assert detect_line_ending("a\nb\n") == LF

    def test_crlf(self) -> None:
        assert detect_line_ending("a\r\nb\r\n") == CRLF

    def test_first_break_decides(self) -> None:
        assert detect_line_ending("a\r\nb\nc\n") == CRLF
        assert detect_line_ending("a\nb\r\nc\r\n") == LF

    def test_no_break_uses_platform_default(self) -> None:
        assert detect_line_ending("single line") == get_platform_line_ending()
        assert detect_line_ending("") == get_platform_line_ending()

    def test_leading_newline(self) -> None:
        assert detect_line_ending("\nrest") == LF


class TestNormalizeAndApply:
    def test_normalize_converts_crlf_only(self) -> None:
        assert normalize_line_endings("a\r\nb\rc\n") == "a\nb\rc\n"

    def test_apply_crlf(self) -> None:
        assert apply_line_endings("a\nb\n", CRLF) == "a\r\nb\r\n"

    def test_apply_does_not_double_crlf(self) -> None:
        assert apply_line_endings("a\r\nb\n", CRLF) == "a\r\nb\r\n"

    def test_apply_lf(self) -> None:
        assert apply_line_endings("a\r\nb\r\n", LF) == "a\nb\n"

    @pytest.mark.skipif(os.name == "nt", reason="platform default is CRLF on Windows")
    def test_apply_defaults_to_platform(self) -> None:
        assert apply_line_endings("a\r\nb") == "a\nb"


class TestSplitLines:
    def test_keeps_terminators(self) -> None:
        assert split_lines("a\nb\n") == ["a\n", "b\n"]

    def test_last_line_without_terminator(self) -> None:
        assert split_lines("a\nb") == ["a\n", "b"]

    def test_empty(self) -> None:
        assert split_lines("") == []

    def test_only_splits_on_newline(self) -> None:
        assert split_lines("a\x0cb c\n") == ["a\x0cb c\n"]

    def test_blank_lines(self) -> None:
        assert split_lines("\n\n") == ["\n", "\n"]
