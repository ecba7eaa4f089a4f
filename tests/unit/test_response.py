"""
Unit tests for the router response.
"""

from datetime import datetime, timedelta, timezone

import pytest

from staticserver import (
    HTTPStatus,
    RedirectError,
    ResponseAlreadyEndedError,
    RouterResponse,
    SendFileError,
    format_http_date,
)


class TestHeaders:
    """Tests for header handling."""

    def test_set_header_chaining(self):
        """Test method chaining for headers."""
        response = (RouterResponse()
            .set_header("X-One", "1")
            .set_header("X-Two", "2"))

        assert response.headers == {"X-One": "1", "X-Two": "2"}

    def test_set_header_replaces_case_insensitively(self):
        """A differently-cased name replaces instead of duplicating."""
        response = RouterResponse()
        response.set_header("Cache-Control", "max-age=0")
        response.set_header("cache-control", "no-store")

        assert response.headers == {"cache-control": "no-store"}

    def test_get_header(self):
        response = RouterResponse().set_header("Content-Type", "text/plain")

        assert response.get_header("content-type") == "text/plain"
        assert response.get_header("X-Missing") is None
        assert response.get_header("X-Missing", "fallback") == "fallback"

    def test_remove_header(self):
        response = RouterResponse().set_header("X-Temp", "1")
        response.remove_header("x-temp")

        assert response.headers == {}


class TestSend:
    """Tests for send() and send_file()."""

    def test_send_string_encodes_utf8(self):
        response = RouterResponse().send("héllo")

        assert response.body == "héllo".encode("utf-8")
        assert response.get_header("Content-Length") == "6"

    def test_send_after_end_raises(self):
        response = RouterResponse().end()

        with pytest.raises(ResponseAlreadyEndedError):
            response.send("late")

    def test_send_file_sets_type_and_length(self, tmp_path):
        """Test that Content-Type comes from the extension."""
        path = tmp_path / "site.css"
        path.write_text("body{}")

        response = RouterResponse().send_file(str(path))

        assert response.body == b"body{}"
        assert response.get_header("Content-Type") == "text/css; charset=utf-8"
        assert response.get_header("Content-Length") == "6"
        assert response.status_code is None

    def test_send_file_keeps_existing_content_type(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"\x00\x01")

        response = RouterResponse().set_header("Content-Type", "application/x-custom")
        response.send_file(str(path))

        assert response.get_header("Content-Type") == "application/x-custom"

    def test_send_file_unknown_extension(self, tmp_path):
        path = tmp_path / "blob.xyz"
        path.write_bytes(b"x")

        response = RouterResponse().send_file(str(path))

        assert response.get_header("Content-Type") == "application/octet-stream"

    def test_send_file_missing_raises(self, tmp_path):
        """Test that a missing file raises SendFileError, which is an OSError."""
        missing = str(tmp_path / "nope.txt")

        with pytest.raises(SendFileError) as exc_info:
            RouterResponse().send_file(missing)

        assert exc_info.value.path == missing
        assert isinstance(exc_info.value, OSError)

    def test_send_file_on_directory_raises(self, tmp_path):
        with pytest.raises(SendFileError):
            RouterResponse().send_file(str(tmp_path))

    def test_send_file_after_end_raises(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_text("a")

        with pytest.raises(SendFileError):
            RouterResponse().end().send_file(str(path))


class TestRedirect:
    """Tests for redirect()."""

    def test_redirect_defaults_to_302_and_ends(self):
        response = RouterResponse().redirect("/docs/")

        assert response.status_code == HTTPStatus.FOUND
        assert response.get_header("Location") == "/docs/"
        assert response.body == b""
        assert response.is_ended

    def test_redirect_permanent(self):
        response = RouterResponse().redirect("/new", HTTPStatus.MOVED_PERMANENTLY)

        assert response.status_line == "HTTP/1.1 301 Moved Permanently"

    def test_redirect_clears_body(self):
        response = RouterResponse().send("stale")
        response.redirect("/fresh")

        assert response.body == b""
        assert response.get_header("Content-Length") == "0"

    def test_redirect_rejects_non_3xx(self):
        with pytest.raises(RedirectError):
            RouterResponse().redirect("/x", HTTPStatus.OK)

    def test_redirect_after_end_raises(self):
        response = RouterResponse().end()

        with pytest.raises(RedirectError) as exc_info:
            response.redirect("/docs/")

        assert exc_info.value.location == "/docs/"


class TestEnd:
    def test_end_defaults_status_to_200(self):
        response = RouterResponse().end()

        assert response.status_code == HTTPStatus.OK
        assert response.is_ended

    def test_end_keeps_status(self):
        response = RouterResponse().status(HTTPStatus.NOT_FOUND).end()

        assert response.status_code == HTTPStatus.NOT_FOUND

    def test_end_twice_raises(self):
        response = RouterResponse().end()

        with pytest.raises(ResponseAlreadyEndedError):
            response.end()


class TestSerialization:
    """Tests for to_bytes()."""

    def test_to_bytes_includes_headers(self):
        """Test that to_bytes includes all headers."""
        response = RouterResponse(server_name="test/1.0")
        response.status(HTTPStatus.OK).set_header("X-Custom", "value").send(b"test")

        result = response.to_bytes()

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"X-Custom: value\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert b"Server: test/1.0\r\n" in result
        assert b"Date: " in result
        assert result.endswith(b"\r\n\r\ntest")

    def test_to_bytes_without_body(self):
        """HEAD responses keep Content-Length but drop the body."""
        response = RouterResponse().status(HTTPStatus.OK).send(b"hello")

        result = response.to_bytes(include_body=False)

        assert b"Content-Length: 5\r\n" in result
        assert result.endswith(b"\r\n\r\n")

    def test_status_line_without_status(self):
        assert RouterResponse().status_line == "HTTP/1.1 200 OK"


class TestFormatHttpDate:
    """Tests for HTTP-date formatting."""

    def test_naive_datetime_is_utc(self):
        dt = datetime(2026, 1, 1, 12, 0, 0)

        assert format_http_date(dt) == "Thu, 01 Jan 2026 12:00:00 GMT"

    def test_aware_datetime_is_converted(self):
        plus_two = timezone(timedelta(hours=2))
        dt = datetime(2023, 11, 15, 0, 13, 20, tzinfo=plus_two)

        assert format_http_date(dt) == "Tue, 14 Nov 2023 22:13:20 GMT"

    def test_from_timestamp(self):
        dt = datetime.fromtimestamp(1700000000, tz=timezone.utc)

        assert format_http_date(dt) == "Tue, 14 Nov 2023 22:13:20 GMT"
