"""Unit tests for cache key derivation."""

import fnmatch

from src.mn_cache.domain.keys import (
    DIGEST_LENGTH,
    build_cache_key,
    invalidation_pattern,
    query_digest,
    resource_for_path,
)


class TestBuildCacheKey:
    def test_layout_with_identity(self) -> None:
        key = build_cache_key("cache", "notes", "/api/notes", [("page", "1")], "42")
        prefix, resource, identity, path, digest = key.split(":")
        assert (prefix, resource, identity, path) == ("cache", "notes", "42", "/api/notes")
        assert len(digest) == DIGEST_LENGTH

    def test_identity_segment_omitted_when_anonymous(self) -> None:
        key = build_cache_key("cache", "notes", "/api/notes", [], None)
        assert key.split(":")[:3] == ["cache", "notes", "/api/notes"]
        assert len(key.split(":")) == 4

    def test_deterministic(self) -> None:
        items = [("page", "2"), ("limit", "10")]
        assert build_cache_key("c", "notes", "/p", items, "1") == build_cache_key(
            "c", "notes", "/p", list(items), "1"
        )

    def test_query_order_does_not_matter(self) -> None:
        a = build_cache_key("c", "notes", "/p", [("a", "1"), ("b", "2")], "1")
        b = build_cache_key("c", "notes", "/p", [("b", "2"), ("a", "1")], "1")
        assert a == b

    def test_different_identity_gives_different_key(self) -> None:
        items = [("page", "1")]
        assert build_cache_key("c", "notes", "/p", items, "1") != build_cache_key(
            "c", "notes", "/p", items, "2"
        )

    def test_different_query_gives_different_key(self) -> None:
        assert build_cache_key("c", "notes", "/p", [("page", "1")], "1") != build_cache_key(
            "c", "notes", "/p", [("page", "2")], "1"
        )

    def test_repeated_query_names_are_kept(self) -> None:
        assert query_digest([("tag", "a"), ("tag", "b")]) != query_digest([("tag", "a")])


class TestInvalidationPattern:
    def test_matches_only_that_identity_and_resource(self) -> None:
        pattern = invalidation_pattern("cache", "notes", "1")
        own = build_cache_key("cache", "notes", "/api/notes", [], "1")
        other_user = build_cache_key("cache", "notes", "/api/notes", [], "12")
        other_resource = build_cache_key("cache", "todos", "/api/todos", [], "1")
        anonymous = build_cache_key("cache", "notes", "/api/notes", [], None)

        assert fnmatch.fnmatchcase(own, pattern)
        assert not fnmatch.fnmatchcase(other_user, pattern)
        assert not fnmatch.fnmatchcase(other_resource, pattern)
        assert not fnmatch.fnmatchcase(anonymous, pattern)


class TestResourceForPath:
    def test_collection_and_item_paths(self) -> None:
        assert resource_for_path("/api/notes") == "notes"
        assert resource_for_path("/api/notes/5") == "notes"
        assert resource_for_path("/api/todos/stats/summary") == "todos"

    def test_uncached_paths(self) -> None:
        assert resource_for_path("/api/auth/me") is None
        assert resource_for_path("/api/notesx") is None
        assert resource_for_path("/health") is None

    def test_custom_routes(self) -> None:
        routes = {"/v2/items": "items"}
        assert resource_for_path("/v2/items/1", routes) == "items"
        assert resource_for_path("/api/notes", routes) is None
