# tests/test_slug.py
"""Slug derivation and tag parsing."""

from inkwell.services.post_service import generate_slug, parse_tags


def test_slug_from_title() -> None:
    assert generate_slug("Hello World", 1700000000000) == "hello-world-1700000000000"


def test_slug_strips_punctuation_and_collapses_hyphens() -> None:
    assert generate_slug("  C++ & Rust!! -- tips ", 1) == "c-rust-tips-1"


def test_slug_of_symbol_only_title() -> None:
    assert generate_slug("!!!", 5) == "post-5"


def test_slug_drops_non_ascii() -> None:
    assert generate_slug("Café Olé", 2) == "caf-ol-2"


def test_slug_defaults_to_current_time() -> None:
    slug = generate_slug("Now")
    prefix, _, stamp = slug.partition("-")
    assert prefix == "now"
    assert stamp.isdigit() and len(stamp) >= 13


def test_parse_tags() -> None:
    assert parse_tags(" python, web ,, ,fastapi ") == ["python", "web", "fastapi"]
    assert parse_tags(["a", " b ", ""]) == ["a", "b"]
    assert parse_tags("") == []
    assert parse_tags(None) == []


def test_slug_has_no_leading_hyphen() -> None:
    assert generate_slug(" Hello", 3) == "hello-3"
