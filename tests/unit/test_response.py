"""
Unit tests for the response stream.
"""

from datetime import datetime, timezone

import pytest

from pyfront.http.response import ResponseStream, RequestOutcome, format_http_date
from pyfront.http.status_codes import HTTPStatus

from conftest import StartResponseRecorder


class TestHeaders:
    """Tests for status and header handling before output."""

    def test_defaults(self):
        response = ResponseStream()
        assert response.status == 200
        assert response.status_line == "200 OK"
        assert not response.headers_sent

    def test_set_header_replaces_case_insensitively(self):
        response = ResponseStream()
        response.set_header("content-type", "text/plain")
        response.set_header("Content-Type", "text/html")

        assert response.headers == {"Content-Type": "text/html"}
        assert response.get_header("CONTENT-TYPE") == "text/html"

    def test_remove_header(self):
        response = ResponseStream()
        response.set_header("X-One", "1")
        assert response.remove_header("x-one")
        assert response.get_header("X-One") is None

    def test_unknown_status_line(self):
        response = ResponseStream()
        response.set_status(299)
        assert response.status_line == "299 Unknown"

    def test_redirect(self):
        response = ResponseStream()
        response.set_header("location", "/old")
        assert response.redirect("/new")

        assert response.status == HTTPStatus.FOUND
        assert response.headers == {"Location": "/new"}

    def test_permanent_redirect(self):
        response = ResponseStream()
        response.redirect("/new", permanent=True)
        assert response.status_line == "301 Moved Permanently"


class TestHeadersSentGuard:
    """Once output starts, header changes are skipped with a warning."""

    def test_everything_is_guarded(self, caplog):
        response = ResponseStream()
        response.write("x")

        assert response.set_status(404) is False
        assert response.set_header("X-Late", "1") is False
        assert response.set_content_type("text/plain") is False
        assert response.remove_header("X-Late") is False
        assert response.set_cookie("a", "b") is False
        assert response.redirect("/elsewhere") is False

        assert response.status == 200
        assert response.headers == {}
        assert "a" not in response.cookies
        assert caplog.text.count("Headers already sent") == 6

    def test_guard_never_raises_through_write(self):
        response = ResponseStream()
        response.write(b"a")
        response.set_header("X", "1")
        response.write(b"b")
        assert response.body == b"ab"


class TestCookies:
    def test_set_cookie(self):
        response = ResponseStream()
        response.set_cookie("lang", "fr", max_age=3600)

        morsel = response.cookies["lang"]
        assert morsel.value == "fr"
        assert morsel["path"] == "/"
        assert morsel["max-age"] == "3600"
        assert morsel["expires"].endswith("GMT")
        assert morsel["samesite"] == "Lax"

    def test_cookie_in_header_list(self):
        response = ResponseStream()
        response.set_cookie("lang", "fr", max_age=60, http_only=True)

        cookies = [value for name, value in response.header_list() if name == "Set-Cookie"]
        assert len(cookies) == 1
        assert cookies[0].startswith("lang=fr")
        assert "Max-Age=60" in cookies[0]
        assert "HttpOnly" in cookies[0]
        assert "Path=/" in cookies[0]

    def test_session_cookie_has_no_expiry(self):
        response = ResponseStream()
        response.set_cookie("sid", "abc", same_site=None)
        output = response.cookies["sid"].OutputString()
        assert "expires" not in output.lower()
        assert "samesite" not in output.lower()


class TestOutput:
    """Tests for body writing and header commit."""

    def test_buffered_body(self):
        response = ResponseStream()
        assert response.write("héllo") == 6
        assert response.write(b" there") == 6
        assert response.write("") == 0

        assert response.body == "héllo there".encode()
        assert response.bytes_written == 12
        assert response.headers_sent

    def test_empty_write_does_not_commit(self):
        response = ResponseStream()
        response.write(b"")
        assert not response.headers_sent

    def test_streams_to_wsgi_write(self):
        recorder = StartResponseRecorder()
        response = ResponseStream(recorder, server_name="PyFront/1.0")
        response.set_header("Content-Type", "text/plain")

        response.write("one")
        response.write("two")
        response.finish()

        assert len(recorder.calls) == 1
        assert recorder.status == "200 OK"
        assert ("Content-Type", "text/plain") in recorder.headers
        assert ("Server", "PyFront/1.0") in recorder.headers
        assert recorder.body == b"onetwo"
        assert response.body == b""

    def test_finish_commits_headers_without_body(self):
        recorder = StartResponseRecorder()
        response = ResponseStream(recorder)
        response.set_status(HTTPStatus.NOT_FOUND)
        response.finish()
        response.finish()

        assert recorder.calls == [("404 Not Found", [])]
        assert recorder.body == b""

    def test_explicit_server_header_wins(self):
        response = ResponseStream(server_name="PyFront/1.0")
        response.set_header("Server", "custom")
        assert response.header_list() == [("Server", "custom")]


class TestRequestOutcome:
    def test_found(self):
        assert RequestOutcome(200, "text/css").found
        assert not RequestOutcome(404).found
        assert RequestOutcome(500, "text/html").found

    def test_frozen(self):
        outcome = RequestOutcome(200)
        with pytest.raises(AttributeError):
            outcome.status = 404


class TestFormatHttpDate:
    def test_format(self):
        dt = datetime(2024, 6, 10, 10, 55, 36, tzinfo=timezone.utc)
        assert format_http_date(dt) == "Mon, 10 Jun 2024 10:55:36 GMT"
