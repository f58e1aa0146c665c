"""Tests for CloudFront Function code templates."""

import pytest

from src.edge import (
    js_regex_escape,
    spa_index_code,
    strip_prefix_code,
    trailing_slash_redirect_code,
)


class TestJsRegexEscape:
    """Tests for js_regex_escape."""

    def test_escapes_slashes(self):
        """Test forward slashes are escaped for regex literals."""
        assert js_regex_escape("/sub-site/") == "\\/sub-site\\/"

    def test_escapes_metacharacters(self):
        """Test regex metacharacters are escaped."""
        assert js_regex_escape("/a.b+c") == "\\/a\\.b\\+c"

    def test_plain_text_unchanged(self):
        """Test text without metacharacters is unchanged."""
        assert js_regex_escape("docs-2024") == "docs-2024"


class TestStripPrefixCode:
    """Tests for strip_prefix_code."""

    def test_strips_prefix(self):
        """Test the sub-site prefix is replaced by a single slash."""
        code = strip_prefix_code("/sub-site")

        assert code.startswith("function handler(event) {")
        assert 'request.uri = request.uri.replace(/^\\/sub-site\\//, "/");' in code
        assert code.rstrip().endswith("}")
        assert "return request;" in code

    def test_directory_index_without_spa(self):
        """Test directory URIs get index.html appended for non-SPA sites."""
        code = strip_prefix_code("/docs")

        assert 'request.uri += "index.html";' in code
        assert 'request.uri = "/index.html";' not in code

    def test_spa_rewrites_to_index(self):
        """Test SPA sites rewrite extension-less URIs to /index.html."""
        code = strip_prefix_code("/app", spa=True)

        assert 'indexOf(".") === -1' in code
        assert 'request.uri = "/index.html";' in code

    def test_nested_prefix(self):
        """Test nested prefixes are escaped segment by segment."""
        code = strip_prefix_code("/campaign/2024")

        assert "/^\\/campaign\\/2024\\//" in code

    @pytest.mark.parametrize("prefix", ["sub-site", "/sub-site/", "/", ""])
    def test_rejects_invalid_prefix(self, prefix):
        """Test prefixes must start with / and not end with /."""
        with pytest.raises(ValueError, match="Path prefix"):
            strip_prefix_code(prefix)


class TestTrailingSlashRedirectCode:
    """Tests for trailing_slash_redirect_code."""

    def test_redirects_to_trailing_slash(self):
        """Test the bare prefix is redirected permanently."""
        code = trailing_slash_redirect_code("/sub-site")

        assert "statusCode: 301" in code
        assert 'location: { value: "/sub-site/" }' in code

    def test_rejects_invalid_prefix(self):
        """Test a prefix with trailing slash is rejected."""
        with pytest.raises(ValueError):
            trailing_slash_redirect_code("/sub-site/")


class TestSpaIndexCode:
    """Tests for spa_index_code."""

    def test_rewrites_extensionless_uris(self):
        """Test the SPA function rewrites to /index.html."""
        code = spa_index_code()

        assert code.startswith("function handler(event) {")
        assert 'request.uri = "/index.html";' in code
        assert "replace(" not in code
