"""
Unit tests for the request dispatcher.
"""

import stat
import sys
from pathlib import Path

import pytest

from httpif.commands import CommandBridge
from httpif.config import ServerConfig
from httpif.dispatcher import NOT_IMPLEMENTED_TEXT, RequestDispatcher
from httpif.exceptions import BadRequestError, CommandError, StorageError
from httpif.http import HTTPStatus


posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs /bin/sh")


class RecordingBridge(CommandBridge):
    """Bridge that records the argument list instead of starting a process."""

    def __init__(self, output: str = "ran"):
        super().__init__()
        self.output = output
        self.calls = []

    def run(self, args):
        self.calls.append(list(args))
        return self.output


def write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class TestCommonResponseFields:
    """Fields handle() sets no matter which handler ran."""

    def test_server_header(self, dispatcher, make_request):
        response = dispatcher.handle(make_request("GET", "/notes.txt"))
        assert response.headers["Server"] == "htt-pif"

    def test_version_copied_from_request(self, dispatcher, make_request):
        response = dispatcher.handle(make_request("GET", "/notes.txt", version="HTTP/1.0"))
        assert response.version == "HTTP/1.0"

    def test_server_header_on_error_status(self, dispatcher, make_request):
        response = dispatcher.handle(make_request("DELETE", "/missing.txt"))
        assert response.headers["Server"] == "htt-pif"
        assert "Content-Length" not in response.headers

    def test_access_log_record(self, dispatcher, make_request, caplog):
        with caplog.at_level("INFO", logger="httpif.access"):
            dispatcher.handle(make_request("GET", "/missing.txt"))

        assert "GET /missing.txt with status 404" in caplog.text


class TestUnknownMethod:

    @pytest.mark.parametrize("method", ["PATCH", "OPTIONS", "TRACE", "BREW"])
    def test_not_implemented_response(self, dispatcher, make_request, method):
        response = dispatcher.handle(make_request(method, "/notes.txt"))

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Type"] == "text/plain"
        assert response.body == NOT_IMPLEMENTED_TEXT.encode()
        assert response.headers["Content-Length"] == str(len(NOT_IMPLEMENTED_TEXT))

    def test_template_not_mutated_between_requests(self, dispatcher, make_request):
        first = dispatcher.handle(make_request("PATCH", "/a", version="HTTP/1.0"))
        first.set_header("X-Extra", "1")
        second = dispatcher.handle(make_request("PATCH", "/b"))

        assert "X-Extra" not in second.headers
        assert second.version == "HTTP/1.1"

    def test_no_filesystem_access(self, dispatcher, make_request, web_root):
        dispatcher.handle(make_request("PATCH", "/created.txt", body=b"x"))
        assert not (web_root / "created.txt").exists()


class TestGet:

    def test_existing_file(self, dispatcher, make_request):
        response = dispatcher.handle(make_request("GET", "/notes.txt"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"hello"
        assert response.headers["Content-Type"] == "text/plain"
        assert response.headers["Content-Length"] == "5"

    def test_root_serves_index(self, dispatcher, make_request):
        root = dispatcher.handle(make_request("GET", "/"))
        index = dispatcher.handle(make_request("GET", "/index.html"))

        assert root.status == index.status == HTTPStatus.OK
        assert root.body == index.body == b"<h1>home</h1>"
        assert root.headers["Content-Type"] == index.headers["Content-Type"] == "text/html"
        assert root.headers["Content-Length"] == index.headers["Content-Length"]

    def test_root_rewrites_request_uri(self, dispatcher, make_request):
        request = make_request("GET", "/")
        dispatcher.handle(request)
        assert request.uri == "/index.html"

    def test_index_hello_scenario(self, tmp_path, make_request):
        (tmp_path / "index.html").write_bytes(b"hello")
        dispatcher = RequestDispatcher(ServerConfig(web_root=str(tmp_path)))

        response = dispatcher.handle(make_request("GET", "/"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"hello"
        assert response.headers["Content-Length"] == "5"

    def test_missing_file(self, dispatcher, make_request):
        response = dispatcher.handle(make_request("GET", "/missing.txt"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body is None
        assert "Content-Type" not in response.headers

    def test_directory(self, dispatcher, make_request):
        response = dispatcher.handle(make_request("GET", "/docs"))

        assert response.status == HTTPStatus.FORBIDDEN
        assert response.body is None
        assert "Content-Type" not in response.headers

    def test_read_failure(self, dispatcher, make_request, monkeypatch):
        def broken_read(uri):
            raise StorageError("disk on fire")

        monkeypatch.setattr(dispatcher.store, "read", broken_read)
        response = dispatcher.handle(make_request("GET", "/notes.txt"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body is None
        assert "Content-Type" not in response.headers

    def test_unknown_extension_has_no_content_type(self, dispatcher, make_request, web_root):
        (web_root / "LICENSE").write_bytes(b"MIT")
        response = dispatcher.handle(make_request("GET", "/LICENSE"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"MIT"
        assert "Content-Type" not in response.headers

    def test_binary_content_unchanged(self, dispatcher, make_request, web_root):
        data = bytes(range(256))
        (web_root / "blob.png").write_bytes(data)
        response = dispatcher.handle(make_request("GET", "/blob.png"))

        assert response.body == data
        assert response.headers["Content-Type"] == "image/png"

    def test_empty_file(self, dispatcher, make_request, web_root):
        (web_root / "empty.txt").write_bytes(b"")
        response = dispatcher.handle(make_request("GET", "/empty.txt"))

        assert response.status == HTTPStatus.OK
        assert response.body == b""
        assert response.headers["Content-Length"] == "0"


class TestHead:

    def test_same_headers_as_get_without_body(self, dispatcher, make_request):
        get = dispatcher.handle(make_request("GET", "/notes.txt"))
        head = dispatcher.handle(make_request("HEAD", "/notes.txt"))

        assert head.status == get.status
        assert head.headers == get.headers
        assert head.headers["Content-Length"] == "5"
        assert head.body is None

    def test_root(self, dispatcher, make_request):
        head = dispatcher.handle(make_request("HEAD", "/"))

        assert head.status == HTTPStatus.OK
        assert head.headers["Content-Type"] == "text/html"
        assert head.headers["Content-Length"] == str(len(b"<h1>home</h1>"))
        assert head.body is None

    @pytest.mark.parametrize("uri,status", [
        ("/missing.txt", HTTPStatus.NOT_FOUND),
        ("/docs", HTTPStatus.FORBIDDEN),
    ])
    def test_failures_match_get(self, dispatcher, make_request, uri, status):
        head = dispatcher.handle(make_request("HEAD", uri))

        assert head.status == status
        assert head.body is None
        assert "Content-Length" not in head.headers


class TestPut:

    def test_create(self, dispatcher, make_request, web_root):
        response = dispatcher.handle(make_request("PUT", "/new.txt", body=b"data"))

        assert response.status == HTTPStatus.CREATED
        assert response.headers["Content-Location"] == "/new.txt"
        assert response.body is None
        assert (web_root / "new.txt").read_bytes() == b"data"

    def test_create_then_get(self, dispatcher, make_request):
        dispatcher.handle(make_request("PUT", "/new.txt", body=b"data"))
        response = dispatcher.handle(make_request("GET", "/new.txt"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"data"

    def test_overwrite(self, dispatcher, make_request, web_root):
        response = dispatcher.handle(make_request("PUT", "/notes.txt", body=b"bye"))

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Location"] == "/notes.txt"
        assert (web_root / "notes.txt").read_bytes() == b"bye"

    def test_empty_body_truncates(self, dispatcher, make_request, web_root):
        response = dispatcher.handle(make_request("PUT", "/notes.txt", body=b""))

        assert response.status == HTTPStatus.OK
        assert (web_root / "notes.txt").read_bytes() == b""

    @pytest.mark.parametrize("uri", ["/fresh.txt", "/notes.txt", "/docs"])
    def test_missing_body_rejected_without_write(self, dispatcher, make_request, web_root, uri):
        before = sorted(p.name for p in web_root.iterdir())

        with pytest.raises(BadRequestError) as exc_info:
            dispatcher.handle(make_request("PUT", uri))

        assert exc_info.value.status_code == HTTPStatus.BAD_REQUEST
        assert sorted(p.name for p in web_root.iterdir()) == before
        assert (web_root / "notes.txt").read_bytes() == b"hello"

    def test_write_failure(self, dispatcher, make_request):
        # Parent directory does not exist
        with pytest.raises(StorageError) as exc_info:
            dispatcher.handle(make_request("PUT", "/no/such/dir/file.txt", body=b"x"))

        assert exc_info.value.status_code == HTTPStatus.INTERNAL_SERVER_ERROR


class TestDelete:

    def test_existing(self, dispatcher, make_request, web_root):
        response = dispatcher.handle(make_request("DELETE", "/notes.txt"))

        assert response.status == HTTPStatus.NO_CONTENT
        assert response.body is None
        assert not (web_root / "notes.txt").exists()

    def test_missing(self, dispatcher, make_request, web_root):
        before = sorted(p.name for p in web_root.iterdir())
        response = dispatcher.handle(make_request("DELETE", "/missing.txt"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body is None
        assert sorted(p.name for p in web_root.iterdir()) == before

    def test_empty_directory(self, dispatcher, make_request, web_root):
        response = dispatcher.handle(make_request("DELETE", "/docs"))

        assert response.status == HTTPStatus.NO_CONTENT
        assert not (web_root / "docs").exists()

    def test_failed_delete_still_204(self, dispatcher, make_request, web_root):
        (web_root / "docs" / "keep.txt").write_bytes(b"x")

        # Non-empty directory: removal fails, outcome is not reported
        response = dispatcher.handle(make_request("DELETE", "/docs"))

        assert response.status == HTTPStatus.NO_CONTENT
        assert (web_root / "docs").exists()


class TestPost:

    def test_without_body_is_get(self, dispatcher, make_request):
        get = dispatcher.handle(make_request("GET", "/notes.txt"))
        post = dispatcher.handle(make_request("POST", "/notes.txt"))

        assert post.status == get.status
        assert post.headers == get.headers
        assert post.body == get.body

    def test_without_body_on_root(self, dispatcher, make_request):
        response = dispatcher.handle(make_request("POST", "/"))
        assert response.body == b"<h1>home</h1>"

    def test_without_body_missing(self, dispatcher, make_request):
        response = dispatcher.handle(make_request("POST", "/missing.txt"))
        assert response.status == HTTPStatus.NOT_FOUND

    def test_non_executable_ignores_body(self, config, make_request):
        bridge = RecordingBridge()
        dispatcher = RequestDispatcher(config, bridge=bridge)

        response = dispatcher.handle(make_request("POST", "/notes.txt", body=b"a=1"))

        assert response.status == HTTPStatus.OK
        assert "Content-Type" not in response.headers
        assert "Content-Length" not in response.headers
        assert response.body is None
        assert bridge.calls == []

    def test_executable_arguments(self, config, make_request, web_root):
        bridge = RecordingBridge(output="12")
        dispatcher = RequestDispatcher(config, bridge=bridge)

        response = dispatcher.handle(make_request("POST", "/run.shar", body=b"a=1&b=2"))

        expected_path = str((web_root / "run.shar").absolute())
        assert bridge.calls == [[expected_path, "1", "2"]]
        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Type"] == "text/plain"
        assert response.body == b"12"
        assert response.headers["Content-Length"] == "2"

    def test_malformed_pairs_skipped(self, config, make_request):
        bridge = RecordingBridge()
        dispatcher = RequestDispatcher(config, bridge=bridge)

        dispatcher.handle(make_request("POST", "/run.shar", body=b"x&y=&z=1=2&ok=yes"))

        assert bridge.calls[0][1:] == ["yes"]

    def test_launch_failure(self, dispatcher, make_request):
        # Marked executable by name, but there is no such file
        with pytest.raises(CommandError) as exc_info:
            dispatcher.handle(make_request("POST", "/missing.shar", body=b"a=1"))

        assert exc_info.value.status_code == HTTPStatus.INTERNAL_SERVER_ERROR

    @posix_only
    def test_runs_script(self, dispatcher, make_request, web_root):
        write_script(web_root / "args.shar", 'printf "[%s]" "$@"\n')

        response = dispatcher.handle(make_request("POST", "/args.shar", body=b"a=1&b=2"))

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Type"] == "text/plain"
        assert response.body == b"[1][2]"

    @posix_only
    def test_output_lines_concatenated(self, dispatcher, make_request, web_root):
        write_script(web_root / "lines.shar", "echo one\necho two\necho three\n")

        response = dispatcher.handle(make_request("POST", "/lines.shar", body=b"k=v"))

        assert response.body == b"onetwothree"

    @posix_only
    def test_exit_status_ignored(self, dispatcher, make_request, web_root):
        write_script(web_root / "fail.shar", "echo partial\nexit 3\n")

        response = dispatcher.handle(make_request("POST", "/fail.shar", body=b""))

        assert response.status == HTTPStatus.OK
        assert response.body == b"partial"
