# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the console status helpers."""

from __future__ import annotations

import pytest

from fastts import logging as fastts_logging
from fastts.logging import emoji, fail, ok, section, warn


def test_status_helpers_write_plain_lines_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    ok("built", use_emoji=False, use_color=False)
    warn("careful", use_emoji=False, use_color=False)
    fail("broken", use_emoji=False, use_color=False)
    section("Summary", use_color=False)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.splitlines() == ["built", "careful", "broken", "", "--- Summary ---"]


def test_emoji_prefixes_follow_the_flag(capsys: pytest.CaptureFixture[str]) -> None:
    ok("done", use_emoji=True, use_color=False)

    assert capsys.readouterr().err == "✅ done\n"
    assert emoji("✅ ", False) == ""


def test_only_used_helpers_are_exported() -> None:
    assert fastts_logging.__all__ == ["emoji", "fail", "ok", "section", "warn"]
