"""tests/unit/test_body.py

Unit tests for request body resolution and body framing helpers.
"""

import asyncio
import errno
import io
from unittest import mock

import pytest

from wayfetch.exceptions import FilesystemError, InvalidInputError
from wayfetch.http.body import (
    BodyKind,
    BodySource,
    iter_body_chunks,
    iter_read_chunked,
    read_exact,
    resolve_body,
    write_chunked,
)

# ============================================================================
# resolve_body
# ============================================================================


class TestResolveBody:
    """Tests for resolve_body()."""

    @pytest.mark.parametrize("method", ["GET", "HEAD", "get"])
    def test_bodyless_methods_force_zero(self, method, tmp_path):
        """GET/HEAD never send a payload, whatever was supplied."""
        path = tmp_path / "data.bin"
        path.write_bytes(b"abc")
        headers = {}

        source = resolve_body(method, headers, body="ignored", file=str(path))

        assert source == BodySource(BodyKind.NONE, None, 0)
        assert headers == {"content-length": "0"}

    def test_text_body_utf8_length(self):
        """Text length is its UTF-8 byte count."""
        headers = {}
        source = resolve_body("POST", headers, body="hello")
        assert source.kind is BodyKind.TEXT
        assert source.length == 5
        assert headers["content-length"] == "5"

    def test_text_body_multibyte(self):
        """Multi-byte characters count as several bytes."""
        headers = {}
        source = resolve_body("PUT", headers, body="héllo €")
        assert source.length == len("héllo €".encode("utf-8"))
        assert headers["content-length"] == "10"

    @pytest.mark.parametrize("body", [b"\x00\x01\x02", bytearray(b"\x00\x01\x02")])
    def test_bytes_body(self, body):
        """Byte buffers use their length."""
        headers = {}
        source = resolve_body("POST", headers, body=body)
        assert source.kind is BodyKind.BYTES
        assert source.data == b"\x00\x01\x02"
        assert headers["content-length"] == "3"

    def test_file_body(self, tmp_path):
        """A file's size comes from the filesystem, its content is not read."""
        path = tmp_path / "upload.txt"
        path.write_bytes(b"x" * 1234)
        headers = {}

        source = resolve_body("POST", headers, file=str(path))

        assert source.kind is BodyKind.FILE
        assert source.data == str(path)
        assert source.length == 1234
        assert headers["content-length"] == "1234"

    def test_file_wins_over_body(self, tmp_path):
        """When both are set the file is used."""
        path = tmp_path / "f"
        path.write_bytes(b"12")
        source = resolve_body("POST", {}, body="ignored", file=path)
        assert source.kind is BodyKind.FILE
        assert source.length == 2

    def test_missing_file(self, tmp_path):
        """A missing file raises FilesystemError."""
        missing = tmp_path / "nope.bin"
        headers = {}
        with pytest.raises(FilesystemError) as exc_info:
            resolve_body("POST", headers, file=str(missing))
        assert exc_info.value.filename == str(missing)
        assert exc_info.value.errno == errno.ENOENT
        assert str(exc_info.value).startswith("Cannot read request body file")
        assert "content-length" not in headers

    @pytest.mark.parametrize("declared", ["abc", "-1", "1.5"])
    def test_invalid_declared_length(self, declared):
        """A declared content-length must be a non-negative integer."""
        with pytest.raises(InvalidInputError, match="Invalid content-length"):
            resolve_body("POST", {"content-length": declared}, body=iter([b"x"]))

    @pytest.mark.parametrize(
        "source, chunked",
        [
            (BodySource(BodyKind.STREAM, None, None), True),
            (BodySource(BodyKind.STREAM, None, 4), False),
            (BodySource(BodyKind.FILE, "f", None), True),
            (BodySource(BodyKind.TEXT, "abcd", 4), False),
            (BodySource(BodyKind.NONE, None, None), False),
        ],
    )
    def test_is_chunked(self, source, chunked):
        """Only streams without a length use chunked framing."""
        assert source.is_chunked is chunked

    def test_explicit_content_length_is_trusted(self):
        """An explicit content-length is kept and the body is not measured."""
        headers = {"content-length": "3"}
        source = resolve_body("POST", headers, body="hello")
        assert source.kind is BodyKind.TEXT
        assert source.length == 3
        assert headers == {"content-length": "3"}

    def test_explicit_content_length_skips_stat(self, tmp_path):
        """With an explicit length the file is streamed without stat()."""
        headers = {"content-length": "10"}
        with mock.patch("wayfetch.http.body.os.stat") as mock_stat:
            source = resolve_body("POST", headers, file=str(tmp_path / "later.bin"))
        mock_stat.assert_not_called()
        assert source.kind is BodyKind.FILE
        assert source.length == 10

    @pytest.mark.parametrize(
        "stream",
        [io.BytesIO(b"abc"), iter([b"a", b"b"])],
        ids=["fileobj", "iterator"],
    )
    def test_stream_body_has_no_length(self, stream):
        """Streams leave the length undetermined."""
        headers = {}
        source = resolve_body("POST", headers, body=stream)
        assert source.kind is BodyKind.STREAM
        assert source.length is None
        assert source.is_streaming
        assert "content-length" not in headers

    def test_async_iterator_body(self):
        """Async iterators are streams too."""

        async def gen():
            yield b"x"

        source = resolve_body("PUT", {}, body=gen())
        assert source.kind is BodyKind.STREAM

    def test_absent_body(self):
        """No body means no payload and no content-length."""
        headers = {}
        source = resolve_body("DELETE", headers)
        assert source.kind is BodyKind.NONE
        assert source.length is None
        assert headers == {}

    def test_unsupported_body_type(self):
        """Other objects are rejected."""
        with pytest.raises(InvalidInputError, match="Unsupported request body type"):
            resolve_body("POST", {}, body=12345)


# ============================================================================
# Body chunk helpers
# ============================================================================


class TestIterBodyChunks:
    """Tests for iter_body_chunks()."""

    @pytest.mark.asyncio
    async def test_fileobj(self):
        """File objects are read in chunk_size pieces."""
        chunks = [c async for c in iter_body_chunks(io.BytesIO(b"abcdefg"), chunk_size=3)]
        assert chunks == [b"abc", b"def", b"g"]

    @pytest.mark.asyncio
    async def test_sync_iterator_with_text(self):
        """Text chunks are UTF-8 encoded."""
        chunks = [c async for c in iter_body_chunks(iter([b"a", "é"]))]
        assert chunks == [b"a", "é".encode("utf-8")]

    @pytest.mark.asyncio
    async def test_async_iterator(self):
        """Async iterators are consumed as-is."""

        async def gen():
            yield b"one"
            yield b"two"

        chunks = [c async for c in iter_body_chunks(gen())]
        assert chunks == [b"one", b"two"]

    @pytest.mark.asyncio
    async def test_file_read_error(self):
        """Read failures on a file object raise FilesystemError."""
        fileobj = mock.Mock()
        fileobj.name = "/data/upload.bin"
        fileobj.read.side_effect = OSError(errno.EIO, "Input/output error")

        with pytest.raises(FilesystemError, match="Input/output error") as exc_info:
            _ = [c async for c in iter_body_chunks(fileobj)]
        assert exc_info.value.filename == "/data/upload.bin"
        assert exc_info.value.errno == errno.EIO


class TestWriteChunked:
    """Tests for write_chunked()."""

    @staticmethod
    def _make_writer() -> mock.Mock:
        writer = mock.Mock()
        writer.drain = mock.AsyncMock()
        return writer

    @staticmethod
    async def _agen(*items):
        for item in items:
            yield item

    @pytest.mark.asyncio
    async def test_chunks_and_terminator(self):
        """Each chunk is framed and a terminator is sent."""
        writer = self._make_writer()
        await write_chunked(writer, self._agen(b"hello", b"", b"x" * 256))

        calls = writer.write.call_args_list
        assert calls[0] == mock.call(b"5\r\nhello\r\n")
        assert calls[1] == mock.call(b"100\r\n" + b"x" * 256 + b"\r\n")
        assert calls[2] == mock.call(b"0\r\n\r\n")
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_empty_stream(self):
        """An empty stream only writes the terminator."""
        writer = self._make_writer()
        await write_chunked(writer, self._agen())
        writer.write.assert_called_once_with(b"0\r\n\r\n")


# ============================================================================
# Response body readers
# ============================================================================


def _reader(data: bytes) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    reader.feed_data(data)
    reader.feed_eof()
    return reader


class TestReadExact:
    """Tests for read_exact()."""

    @pytest.mark.asyncio
    async def test_reads_exact(self):
        """Exactly n bytes are returned, the rest stays buffered."""
        reader = _reader(b"Hello World")
        assert await read_exact(reader, 5) == b"Hello"
        assert await reader.read() == b" World"

    @pytest.mark.asyncio
    async def test_zero(self):
        """Zero bytes needs no read."""
        assert await read_exact(_reader(b""), 0) == b""

    @pytest.mark.asyncio
    async def test_premature_eof(self):
        """A short stream raises EOFError."""
        with pytest.raises(EOFError, match="Stream closed prematurely"):
            await read_exact(_reader(b"Hel"), 10)


class TestIterReadChunked:
    """Tests for iter_read_chunked()."""

    @pytest.mark.asyncio
    async def test_multiple_chunks_with_trailer(self):
        """Chunks are decoded and trailers skipped."""
        reader = _reader(
            b"5\r\nHello\r\n6;ext=1\r\n World\r\n0\r\nX-Trailer: 1\r\n\r\nrest"
        )
        chunks = [c async for c in iter_read_chunked(reader)]
        assert chunks == [b"Hello", b" World"]
        assert await reader.read() == b"rest"

    @pytest.mark.asyncio
    async def test_invalid_size(self):
        """A non-hex size line raises ValueError."""
        with pytest.raises(ValueError, match="Invalid chunk size"):
            _ = [c async for c in iter_read_chunked(_reader(b"zz\r\nabc\r\n"))]

    @pytest.mark.asyncio
    async def test_truncated(self):
        """EOF inside the chunk stream raises EOFError."""
        with pytest.raises(EOFError):
            _ = [c async for c in iter_read_chunked(_reader(b"5\r\nHel"))]
