"""Tests for URL path helpers."""

import pytest
from docroute.core.paths import (
    doc_path,
    has_scheme,
    is_valid_external_url,
    normalize_path,
    split_href,
)


class TestNormalizePath:
    """Tests for normalize_path()."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("/", "/"),
            ("", "/"),
            ("//", "/"),
            ("guides/a", "/guides/a"),
            ("/guides/a/", "/guides/a"),
            ("/guides//a///", "/guides/a"),
            ("/caf%C3%A9", "/café"),
            ("/with%20space", "/with space"),
            ("/100%", "/100%25"),
        ],
    )
    def test__normalizes(self, raw: str, expected: str) -> None:
        """Normalize slashes and percent-encoding."""
        assert normalize_path(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["/", "/guides/a/", "//x//y//", "/caf%C3%A9", "/%2541", "/100%", "a%2Fb"],
    )
    def test__idempotent(self, raw: str) -> None:
        """Normalizing twice equals normalizing once."""
        once = normalize_path(raw)

        assert normalize_path(once) == once

    def test__encoded_and_decoded_compare_equal(self) -> None:
        """Encoded and decoded forms of the same path normalize identically."""
        assert normalize_path("/руководство") == normalize_path(
            "/%D1%80%D1%83%D0%BA%D0%BE%D0%B2%D0%BE%D0%B4%D1%81%D1%82%D0%B2%D0%BE/"
        )


class TestDocPath:
    """Tests for doc_path()."""

    def test__plain_id(self) -> None:
        assert doc_path("guides/a") == "/guides/a"

    def test__index_maps_to_directory(self) -> None:
        assert doc_path("deployment/index") == "/deployment"

    def test__root_index_maps_to_root(self) -> None:
        assert doc_path("index") == "/"

    def test__route_base_path_prefix(self) -> None:
        assert doc_path("guides/a", route_base_path="/docs/") == "/docs/guides/a"

    def test__absolute_slug_replaces_id(self) -> None:
        assert doc_path("welcome/start-here", slug="/start") == "/start"

    def test__relative_slug_replaces_last_segment(self) -> None:
        assert doc_path("guides/a", slug="alpha") == "/guides/alpha"


class TestHrefHelpers:
    """Tests for href helpers."""

    def test__split_href__strips_fragment_and_query(self) -> None:
        assert split_href("/guides/a?x=1#section") == "/guides/a"

    def test__has_scheme(self) -> None:
        assert has_scheme("https://example.com")
        assert has_scheme("mailto:team@example.com")
        assert not has_scheme("/guides/a")

    @pytest.mark.parametrize(
        "href",
        ["https://example.com", "http://example.com/llms.txt", "mailto:team@example.com"],
    )
    def test__valid_external_urls(self, href: str) -> None:
        assert is_valid_external_url(href)

    @pytest.mark.parametrize(
        "href",
        ["https://", "http:/missing-host", "ftp://example.com", "example.com", "https://exa mple.com"],
    )
    def test__invalid_external_urls(self, href: str) -> None:
        assert not is_valid_external_url(href)
