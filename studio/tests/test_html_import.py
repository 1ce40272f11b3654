"""Tests for imported HTML normalization."""

from __future__ import annotations

from studio.kernel.html_import import BASE_FONT_CSS, TAILWIND_SRC, normalize_imported_html


def _head(document: str) -> str:
    return document.split("</head>")[0]


def test_fragment_gets_full_skeleton():
    result = normalize_imported_html("<h1>Hi</h1>")

    assert result.startswith("<!DOCTYPE html>\n<html><head>")
    assert TAILWIND_SRC in result
    assert "family=Inter" in result
    assert BASE_FONT_CSS in result
    assert "<body><h1>Hi</h1></body>" in result


def test_injects_into_existing_head():
    html = "<!doctype html><html><head><title>T</title></head><body>x</body></html>"

    result = normalize_imported_html(html)

    head = _head(result)
    assert result.startswith("<!DOCTYPE html>\n")
    assert "<title>T</title>" in head
    assert f'<script src="{TAILWIND_SRC}"></script>' in head
    assert f"<style>{BASE_FONT_CSS}</style>" in head
    assert "<body>x</body>" in result


def test_html_without_head_gets_one():
    result = normalize_imported_html("<html lang='en'><body>x</body></html>")

    assert '<html lang="en"><head>' in result
    assert result.index("</head>") < result.index("<body>")


def test_body_without_html_is_not_wrapped_twice():
    result = normalize_imported_html("<body><h1>Hi</h1></body>")

    assert result.count("<body") == 1
    assert "<body><h1>Hi</h1></body>" in result
    assert result.index("</head>") < result.index("<body>")


def test_unclosed_head_keeps_its_tags():
    html = f'<html><head><script src="{TAILWIND_SRC}"></script><title>x</title><body>y</body></html>'

    result = normalize_imported_html(html)

    head = _head(result)
    assert result.count(TAILWIND_SRC) == 1
    assert "<title>x</title>" in head
    assert "family=Inter" in head
    assert result.count("<body") == 1
    assert result.index("</head>") < result.index("<body>y</body>")


def test_existing_assets_are_not_duplicated():
    html = (
        "<!DOCTYPE html><html><head>"
        f'<script src="{TAILWIND_SRC}"></script>'
        '<link rel="stylesheet" href="https://fonts.googleapis.com/css2?family=Inter&display=swap">'
        "</head><body></body></html>"
    )

    result = normalize_imported_html(html)

    assert result.count(TAILWIND_SRC) == 1
    assert result.count("family=Inter") == 1
    assert result.count(BASE_FONT_CSS) == 1


def test_idempotent():
    once = normalize_imported_html("<div class='p-4'>Hello</div>")

    assert normalize_imported_html(once) == once
