"""
Unit tests for the router request.
"""

from staticserver import RouterRequest


class TestFromTarget:
    """Tests for building requests from a raw request-target."""

    def test_simple_get(self):
        request = RouterRequest.from_target("get", "/static/app.js", client_address=("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.original_url == "/static/app.js"
        assert request.route is None
        assert request.client_address == ("127.0.0.1", 12345)

    def test_query_string_is_split_off(self):
        """Test that the query string never reaches original_url."""
        request = RouterRequest.from_target("GET", "/search?q=python&tag=a&tag=b")

        assert request.original_url == "/search"
        assert request.query_params == {"q": ["python"], "tag": ["a", "b"]}

    def test_path_is_kept_as_received(self):
        """Test that original_url stays encoded and path decodes it."""
        request = RouterRequest.from_target("GET", "/static/my%20file.txt")

        assert request.original_url == "/static/my%20file.txt"
        assert request.path == "/static/my file.txt"

    def test_empty_path_becomes_root(self):
        assert RouterRequest.from_target("GET", "?x=1").original_url == "/"

    def test_headers_are_lowercased(self):
        """Test case-insensitive header access."""
        request = RouterRequest.from_target(
            "GET", "/", headers={"User-Agent": "pytest", "X-Thing": "1"},
        )

        assert request.headers == {"user-agent": "pytest", "x-thing": "1"}
        assert request.get_header("X-THING") == "1"
        assert request.get_header("missing", "none") == "none"
        assert request.user_agent == "pytest"

    def test_path_alias(self):
        assert RouterRequest("GET", "/a/b").path == "/a/b"
