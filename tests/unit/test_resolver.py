"""
Unit tests for path resolution.
"""

import os

import pytest

from pyfront.handlers.resolver import PathResolver, ResolvedResource, PathTraversalError


@pytest.fixture
def public(site):
    return (site / "public").resolve()


@pytest.fixture
def resolver(public):
    return PathResolver(public)


class TestResolve:
    """Tests for the resolution rules."""

    def test_root_falls_back_to_index(self, resolver, public):
        resource = resolver.resolve("/")
        assert resource == ResolvedResource(public / "index.py", is_dynamic=True, is_index_fallback=True)

    @pytest.mark.parametrize("path", ["/docs", "/docs/", "/docs/?page=2", "/docs#top"])
    def test_directory_falls_back_to_index(self, resolver, public, path):
        resource = resolver.resolve(path)
        assert resource.path == public / "docs" / "index.py"
        assert resource.is_index_fallback
        assert resource.is_dynamic

    def test_extensionless_path_falls_back_to_index(self, resolver, public):
        """No extension → index, even when a file by that name exists."""
        resource = resolver.resolve("/notes")
        assert resource.path == public / "notes" / "index.py"
        assert resource.is_index_fallback

    def test_static_file(self, resolver, public):
        resource = resolver.resolve("/style.css")
        assert resource.path == public / "style.css"
        assert not resource.is_dynamic
        assert not resource.is_index_fallback
        assert resource.extension == "css"

    def test_trailing_slash_on_file(self, resolver, public):
        resource = resolver.resolve("/style.css/")
        assert resource.path == public / "style.css"
        assert not resource.is_index_fallback

    def test_query_and_fragment_stripped(self, resolver, public):
        resource = resolver.resolve("/style.css?v=3#x")
        assert resource.path == public / "style.css"

    def test_script_is_dynamic(self, resolver, public):
        resource = resolver.resolve("/broken.py?debug=1")
        assert resource.path == public / "broken.py"
        assert resource.is_dynamic
        assert not resource.is_index_fallback

    def test_extension_match_is_case_insensitive(self, resolver):
        assert resolver.resolve("/Page.PY").is_dynamic

    def test_percent_decoded_once(self, resolver, public):
        resource = resolver.resolve("/my%20file.txt")
        assert resource.path == public / "my file.txt"

        # %2520 decodes to the literal "%20", not to a space
        resource = resolver.resolve("/my%2520file.txt")
        assert resource.path == public / "my%20file.txt"

    def test_missing_file_still_resolves(self, resolver, public):
        """Existence is the dispatcher's business."""
        resource = resolver.resolve("/nope.txt")
        assert resource.path == public / "nope.txt"

    def test_custom_index_and_extension(self, public):
        resolver = PathResolver(public, index_file="home.html", dynamic_extension="tpl")
        resource = resolver.resolve("/")
        assert resource.path == public / "home.html"
        assert not resource.is_dynamic
        assert resolver.resolve("/page.tpl").is_dynamic

    def test_root_override(self, resolver, site):
        other = (site / "private").resolve()
        resource = resolver.resolve("/vocabulary/en.json", public_root=other)
        assert resource.path == other / "vocabulary" / "en.json"

    def test_idempotent(self, resolver):
        for path in ["/", "/docs/", "/style.css", "/nope.txt"]:
            assert resolver.resolve(path) == resolver.resolve(path)

    @pytest.mark.parametrize("path", [
        "/style.css",
        "/docs/index.py",
        "/a/b/c/d.txt",
        "/./docs/./x.css",
        "//double//slash.css",
    ])
    def test_result_stays_under_root(self, resolver, public, path):
        resource = resolver.resolve(path)
        assert resource is not None
        assert resource.path != public
        resource.path.relative_to(public)


class TestTraversal:
    """Security: nothing may resolve outside the public root."""

    @pytest.mark.parametrize("path", [
        "/../private/vocabulary/en.json",
        "/docs/../../private/plugins/acme/widget.py",
        "/%2e%2e/private/vocabulary/en.json",
        "/%2E%2E%2Fprivate/vocabulary/en.json",
        "/docs/..%2f..%2fprivate",
        "/..\\private\\vocabulary\\en.json",
        "/..",
        "/style.css%00.py",
    ])
    def test_rejected(self, resolver, path, caplog):
        assert resolver.resolve(path) is None
        assert "traversal" in caplog.text.lower()

    def test_double_encoded_dots_are_literal(self, resolver, public):
        """%252e%252e decodes once to '%2e%2e', a harmless literal name."""
        resource = resolver.resolve("/%252e%252e/secret.txt")
        assert resource.path == public / "%2e%2e" / "secret.txt"

    def test_error_carries_path(self):
        error = PathTraversalError("/../x")
        assert error.request_path == "/../x"
        assert isinstance(error, ValueError)


class TestHelpers:
    def test_is_accessible(self, resolver, public):
        assert resolver.is_accessible(public / "style.css")
        assert not resolver.is_accessible(public / "nope.txt")
        assert not resolver.is_accessible(public / "docs")

    @pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="needs POSIX permissions as non-root")
    def test_unreadable_not_accessible(self, resolver, public):
        path = public / "secret.css"
        path.write_text("x")
        path.chmod(0)
        try:
            assert not resolver.is_accessible(path)
        finally:
            path.chmod(0o644)

    def test_has_index(self, resolver, public):
        assert resolver.has_index(public)
        assert resolver.has_index(public / "docs")
        assert not resolver.has_index(public / "empty")
        assert not resolver.has_index(public / "style.css")

    def test_is_index(self, resolver):
        assert resolver.is_index("/")
        assert resolver.is_index("/docs/")
        assert not resolver.is_index("/empty/")
        assert not resolver.is_index("/style.css")
        assert not resolver.is_index("/../")
