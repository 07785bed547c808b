"""stdio transport — newline-delimited JSON-RPC on stdin/stdout.

The client writes one request per line to our stdin and reads one response
per line from our stdout. Logging never goes to stdout.

Each chunk of complete lines read from stdin is handed to its own task, so a
tool waiting on the network or a subprocess does not stop further input from
being read. Within a chunk, lines are dispatched and answered in order.
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
import stat
import sys
from typing import Any, BinaryIO, Optional, TextIO, Union

from weather_mcp.dispatcher import RequestDispatcher, split_lines

from .base import BaseTransport, TransportError

logger = logging.getLogger(__name__)

READ_SIZE = 65536
READ_RETRY_DELAY = 0.1


class BlockingStreamReader:
    """Async ``read`` over a blocking binary stream, run in the default executor.

    Used for stdin when it is a regular file, which the event loop cannot watch.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    async def read(self, n: int = -1) -> bytes:
        loop = asyncio.get_running_loop()
        read = getattr(self._stream, "read1", self._stream.read)
        return await loop.run_in_executor(None, read, n)


class StdioServerTransport(BaseTransport):
    """Serve a RequestDispatcher over the process's stdin/stdout."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        reader: Optional[Union[asyncio.StreamReader, BlockingStreamReader]] = None,
        writer: Optional[TextIO] = None,
        read_size: int = READ_SIZE,
    ) -> None:
        """Initialize the stdio transport.

        Args:
            dispatcher: Dispatcher that turns request lines into responses.
            reader: Optional reader with an async ``read(n)``. When None,
                ``connect`` attaches one to sys.stdin.
            writer: Optional text stream for responses. Defaults to sys.stdout.
            read_size: Maximum number of bytes consumed per read.
        """
        self._dispatcher = dispatcher
        self._reader = reader
        self._writer = writer
        self._read_size = read_size
        self._is_connected = False
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def is_connected(self) -> bool:
        """Return whether the transport is connected."""
        return self._is_connected

    @property
    def transport_type(self) -> str:
        """Return the transport type identifier."""
        return "stdio"

    async def connect(self) -> None:
        """Attach a reader to stdin unless one was injected.

        Pipes and sockets are watched by the event loop. Anything else the
        loop cannot watch (a regular file or /dev/null redirected onto stdin)
        is read in a worker thread instead.

        Raises:
            TransportError: If stdin cannot be read at all.
        """
        if self._reader is None:
            self._reader = await _attach_stdin()
        if self._writer is None:
            self._writer = sys.stdout
        self._is_connected = True
        logger.info("stdio transport connected")

    async def serve(self) -> None:
        """Read stdin until EOF, dispatching every complete line.

        Errors raised by the read plumbing are logged and reading resumes.
        On EOF, any trailing unterminated line is dispatched and in-flight
        chunks are awaited before returning.
        """
        if not self._is_connected:
            await self.connect()
        assert self._reader is not None

        loop = asyncio.get_running_loop()
        loop.set_exception_handler(_log_loop_exception)

        buffer = b""
        try:
            while True:
                try:
                    data = await self._reader.read(self._read_size)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.error(
                        "Error reading from stdin: %s %s",
                        type(e).__name__,
                        e or "(no message)",
                    )
                    await asyncio.sleep(READ_RETRY_DELAY)
                    continue

                if not data:
                    logger.info("stdin closed")
                    break

                buffer += data
                complete, sep, buffer = buffer.rpartition(b"\n")
                if sep:
                    self._spawn_chunk(complete)

            if buffer.strip():
                self._spawn_chunk(buffer)
            if self._pending:
                await asyncio.gather(*self._pending, return_exceptions=True)
        finally:
            self._is_connected = False

    def _spawn_chunk(self, data: bytes) -> None:
        text = data.decode("utf-8", errors="replace")
        logger.debug("Received: %s", text)
        task = asyncio.create_task(self._process_chunk(text))
        self._pending.add(task)
        task.add_done_callback(self._chunk_done)

    def _chunk_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Error processing input chunk: %s %s", type(exc).__name__, exc)

    async def _process_chunk(self, text: str) -> None:
        for line in split_lines(text):
            response = await self._dispatcher.dispatch(line)
            if response is None:
                continue
            try:
                self.write_message(response)
            except TransportError as e:
                logger.error("Failed to write response: %s", e)

    def write_message(self, message: dict[str, Any]) -> None:
        """Write a JSON-RPC message to stdout as a single line.

        Raises:
            TransportError: If stdout is closed.
        """
        writer = self._writer or sys.stdout
        try:
            json_line = json.dumps(message)
            writer.write(json_line + "\n")
            writer.flush()
            logger.debug("Sent: %s", json_line)
        except (BrokenPipeError, OSError, ValueError) as e:
            raise TransportError(f"Failed to write to stdout: {e}") from e


def _log_loop_exception(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
    """Log exceptions nothing else caught; the server keeps running."""
    exc = context.get("exception")
    message = context.get("message", "Unhandled exception in event loop")
    if exc is not None:
        logger.error("Uncaught exception: %s", message, exc_info=exc)
    else:
        logger.error("Uncaught exception: %s", message)


def _stdin_is_pollable() -> bool:
    try:
        mode = os.fstat(sys.stdin.fileno()).st_mode
    except (AttributeError, OSError, ValueError):
        return True
    return stat.S_ISFIFO(mode) or stat.S_ISSOCK(mode) or sys.stdin.isatty()


async def _attach_stdin() -> Union[asyncio.StreamReader, BlockingStreamReader]:
    if not _stdin_is_pollable():
        logger.info("stdin is a file or device; reading it in a worker thread")
        return BlockingStreamReader(sys.stdin.buffer)

    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    protocol = asyncio.StreamReaderProtocol(reader)
    try:
        await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    except ValueError as e:
        logger.info("stdin is not a pipe (%s); reading it in a worker thread", e)
        return BlockingStreamReader(sys.stdin.buffer)
    except OSError as e:
        raise TransportError(f"Cannot attach to stdin: {e}") from e
    return reader
