"""Tests for index text helpers."""

from __future__ import annotations

import hashlib

import pytest

from diffcommit.index.tokens import content_hash, estimate_tokens, keywords, normalize_text, tokenize


def test_normalize_collapses_whitespace() -> None:
    assert normalize_text("  Hello\n\n  WORLD\t! ") == "hello world !"


def test_tokenize_drops_single_characters_and_punctuation() -> None:
    assert tokenize("A cat, a HAT & 42 x-rays!") == ["cat", "hat", "42", "rays"]


def test_tokenize_treats_non_ascii_as_separator() -> None:
    assert tokenize("café au lait") == ["caf", "au", "lait"]


def test_keywords_are_distinct_in_order_and_capped() -> None:
    assert keywords("beta alpha beta gamma alpha delta", 3) == ["beta", "alpha", "gamma"]


@pytest.mark.parametrize(("text", "expected"), [("", 0), ("abc", 1), ("abcd", 1), ("abcde", 2)])
def test_estimate_tokens_rounds_up(text: str, expected: int) -> None:
    assert estimate_tokens(text) == expected


def test_content_hash_is_sha1_hex() -> None:
    assert content_hash("Hello") == hashlib.sha1(b"Hello").hexdigest()
    assert content_hash("Hello") != content_hash("hello")
