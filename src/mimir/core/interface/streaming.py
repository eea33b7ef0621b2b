"""ChunkChannel — ordered, cancellable stream of :class:`ChatChunk`.

Consumers ``await channel.receive()`` until a chunk with ``done=True``
arrives.  Producers push with :meth:`ChunkChannel.send` and finish with
:meth:`ChunkChannel.close`; the terminal chunk is emitted exactly once no
matter how often ``close`` is called.  :func:`pump` drives a channel from an
async iterable and closes it on completion, upstream error, or
cancellation.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable

from mimir.core.interface.models import ChatChunk
from mimir.errors import ExecutionError

logger = logging.getLogger(__name__)

CANCELLED = "cancelled"


class ChunkChannel:
    def __init__(self) -> None:
        self._queue: asyncio.Queue[ChatChunk] = asyncio.Queue()
        self._closed = False
        self._terminal: ChatChunk | None = None
        self._producer: asyncio.Task[None] | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, content: str) -> None:
        if self._closed:
            raise RuntimeError("Cannot send on a closed channel")
        self._queue.put_nowait(ChatChunk(content=content))

    def close(self, error: str | None = None) -> None:
        """Emit the terminal chunk.  Later calls are ignored."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(ChatChunk(done=True, error=error))

    async def receive(self) -> ChatChunk:
        """Next chunk in order.  After the terminal chunk, returns it again."""
        if self._terminal is not None:
            return self._terminal
        chunk = await self._queue.get()
        if chunk.done:
            self._terminal = chunk
        return chunk

    def cancel(self) -> None:
        """Stop the producer and terminate the stream."""
        if self._producer is not None and not self._producer.done():
            self._producer.cancel()
        self.close(CANCELLED)

    async def collect(self) -> str:
        """Drain the channel and return the concatenated content."""
        parts: list[str] = []
        while True:
            chunk = await self.receive()
            if chunk.done:
                if chunk.error:
                    raise ExecutionError(f"Stream failed: {chunk.error}")
                return "".join(parts)
            parts.append(chunk.content)


def pump(source: AsyncIterable[str], channel: ChunkChannel | None = None) -> ChunkChannel:
    """Feed *source* into *channel* on a background task."""
    chan = channel or ChunkChannel()

    async def _run() -> None:
        error: str | None = None
        try:
            async for piece in source:
                if piece:
                    chan.send(piece)
        except asyncio.CancelledError:
            error = CANCELLED
            raise
        except Exception as exc:
            logger.warning("Stream producer failed: %s", exc)
            error = str(exc) or type(exc).__name__
        finally:
            chan.close(error)

    chan._producer = asyncio.get_running_loop().create_task(_run())
    return chan
