"""
Unit tests for the frame reader and the per-connection loop.

These use socket.socketpair(), so no TCP port is involved.
"""

import socket
import threading
from pathlib import Path

import pytest

from minihttpd import HTTPServer, ServerConfig
from minihttpd.core.connection import (
    Connection,
    ConnectionState,
    HeaderTooLarge,
    FrameTimeout,
    UnexpectedEof,
    declared_body_length,
)

from conftest import recv_all


def make_conn(sock: socket.socket, **kwargs) -> Connection:
    return Connection(socket=sock, address=("local", 0), **kwargs)


class TestReadFrame:
    """Tests for Connection.read_frame()."""

    def test_simple_request(self, socket_pair):
        server_side, client = socket_pair
        client.sendall(b"GET / HTTP/1.1\r\n\r\n")

        conn = make_conn(server_side)
        frame = conn.read_frame()

        assert frame.buffer == b"GET / HTTP/1.1\r\n\r\n"
        assert frame.body_offset == len(frame.buffer)
        assert frame.body == b""
        assert conn.state == ConnectionState.READING

    def test_boundary_split_across_chunks(self, socket_pair):
        """The boundary is found even when recv() cuts through it."""
        server_side, client = socket_pair
        raw = b"GET /echo/abc HTTP/1.1\r\nHost: x\r\n\r\n"
        client.sendall(raw)

        frame = make_conn(server_side, buffer_size=3).read_frame()

        assert frame.header_block == raw
        assert frame.body_offset == len(raw)

    def test_bytes_after_boundary_are_body(self, socket_pair):
        server_side, client = socket_pair
        client.sendall(b"POST /files/a HTTP/1.1\r\n\r\nxyz")
        client.shutdown(socket.SHUT_WR)

        frame = make_conn(server_side).read_frame()

        assert frame.body == b"xyz"

    def test_body_completed_from_content_length(self, socket_pair):
        """A body arriving after the headers is still collected."""
        server_side, client = socket_pair
        client.sendall(b"POST /files/a HTTP/1.1\r\nContent-Length: 5\r\n\r\n")
        timer = threading.Timer(0.1, client.sendall, args=(b"hello",))
        timer.start()

        try:
            frame = make_conn(server_side).read_frame()
        finally:
            timer.join()

        assert frame.body == b"hello"

    def test_peer_closes_mid_body(self, socket_pair):
        server_side, client = socket_pair
        client.sendall(b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc")
        client.shutdown(socket.SHUT_WR)

        frame = make_conn(server_side).read_frame()

        assert frame.body == b"abc"

    def test_eof_before_boundary(self, socket_pair):
        server_side, client = socket_pair
        client.sendall(b"GET / HTTP/1.1\r\nHost: x\r\n")
        client.shutdown(socket.SHUT_WR)

        with pytest.raises(UnexpectedEof):
            make_conn(server_side).read_frame()

    def test_eof_without_any_data(self, socket_pair):
        server_side, client = socket_pair
        client.close()

        with pytest.raises(UnexpectedEof):
            make_conn(server_side).read_frame()

    def test_header_size_limit(self, socket_pair):
        server_side, client = socket_pair
        client.sendall(b"GET / HTTP/1.1\r\nX-Long: " + b"a" * 64)

        with pytest.raises(HeaderTooLarge):
            make_conn(server_side, buffer_size=8, max_header_size=32).read_frame()

    def test_header_within_limit(self, socket_pair):
        server_side, client = socket_pair
        client.sendall(b"GET / HTTP/1.1\r\n\r\n")

        frame = make_conn(server_side, max_header_size=64).read_frame()
        assert frame.body_offset == 18

    def test_read_timeout(self, socket_pair):
        server_side, _ = socket_pair

        with pytest.raises(FrameTimeout):
            make_conn(server_side, read_timeout=0.1).read_frame()

    def test_short_body_times_out(self, socket_pair):
        """A client that stops short of its Content-Length is dropped after read_timeout."""
        server_side, client = socket_pair
        client.sendall(b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\nhello")

        with pytest.raises(FrameTimeout):
            make_conn(server_side, read_timeout=0.2).read_frame()

    def test_frame_errors_are_connection_errors(self):
        assert issubclass(UnexpectedEof, ConnectionError)
        assert issubclass(HeaderTooLarge, ConnectionError)
        assert issubclass(FrameTimeout, ConnectionError)


class TestDeclaredBodyLength:
    @pytest.mark.parametrize("block,expected", [
        (b"POST / HTTP/1.1\r\nContent-Length: 5", 5),
        (b"POST / HTTP/1.1\r\ncontent-length:12", 12),
        (b"POST / HTTP/1.1\r\nContent-Length: 1\r\nContent-Length: 3", 3),
        (b"POST / HTTP/1.1\r\nContent-Length: 0", 0),
        (b"POST / HTTP/1.1\r\nContent-Length: -1", None),
        (b"POST / HTTP/1.1\r\nContent-Length: five", None),
        (b"POST / HTTP/1.1\r\nHost: x", None),
        (b"Content-Length: 5", None),  # request line is never a header
    ])
    def test_declared_body_length(self, block, expected):
        assert declared_body_length(block) == expected


class TestSendAndClose:
    def test_send_then_close(self, socket_pair):
        server_side, client = socket_pair
        conn = make_conn(server_side)

        assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n") is True
        assert conn.state == ConnectionState.WRITTEN

        client.shutdown(socket.SHUT_WR)
        conn.close()

        assert conn.state == ConnectionState.CLOSED
        assert recv_all(client) == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_send_to_closed_peer(self, socket_pair):
        server_side, client = socket_pair
        client.close()

        conn = make_conn(server_side)
        assert conn.send_response(b"x" * 65536) is False
        assert conn.state == ConnectionState.WRITING

    def test_close_is_idempotent(self, socket_pair):
        server_side, client = socket_pair
        client.close()

        conn = make_conn(server_side)
        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_client_ip(self, socket_pair):
        server_side, _ = socket_pair

        assert make_conn(server_side).client_ip == "local"
        assert Connection(socket=server_side, address=()).client_ip == ""

    def test_context_manager_closes(self, socket_pair):
        server_side, client = socket_pair
        client.close()

        with make_conn(server_side) as conn:
            pass

        assert conn.state == ConnectionState.CLOSED


class TestConnectionLoop:
    """HTTPServer._process_connection() driven over a socket pair."""

    @pytest.fixture
    def server(self, files_dir: Path) -> HTTPServer:
        return HTTPServer(ServerConfig(port=0, directory=str(files_dir)))

    def exchange(self, server: HTTPServer, socket_pair, raw: bytes) -> tuple:
        server_side, client = socket_pair
        client.sendall(raw)
        client.shutdown(socket.SHUT_WR)

        conn = make_conn(server_side)
        server._process_connection(conn)

        return conn, recv_all(client)

    def test_response_written_and_closed(self, server, socket_pair):
        conn, data = self.exchange(server, socket_pair, b"GET /echo/abc HTTP/1.1\r\n\r\n")

        assert data == b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 3\r\n\r\nabc"
        assert conn.state == ConnectionState.CLOSED

    def test_unparseable_request_gets_no_response(self, server, socket_pair, caplog):
        """Documented legacy behavior: silence rather than 400 Bad Request."""
        with caplog.at_level("INFO", logger="minihttpd"):
            conn, data = self.exchange(server, socket_pair, b"garbage\r\n\r\n")

        assert data == b""
        assert conn.state == ConnectionState.CLOSED
        assert "does not support the http request" in caplog.text

    def test_eof_before_boundary_gets_no_response(self, server, socket_pair):
        _, data = self.exchange(server, socket_pair, b"GET / HTTP/1.1\r\n")
        assert data == b""

    def test_handler_crash_gets_no_response(self, socket_pair, caplog):
        server = HTTPServer(ServerConfig(port=0))
        server.router.add_route("GET", lambda p: p == "boom", lambda r: 1 / 0)

        with caplog.at_level("ERROR", logger="minihttpd"):
            _, data = self.exchange(server, socket_pair, b"GET /boom HTTP/1.1\r\n\r\n")

        assert data == b""
        assert "Handler error" in caplog.text

    def test_post_writes_file(self, server, socket_pair, files_dir: Path, sample_post_request: bytes):
        _, data = self.exchange(server, socket_pair, sample_post_request)

        assert data == b"HTTP/1.1 201 CREATED\r\n\r\n"
        assert (files_dir / "new.txt").read_bytes() == b"hello"
