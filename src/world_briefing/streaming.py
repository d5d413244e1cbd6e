"""Deliver briefing text as ordered, paced chunks.

Tokens keep their trailing whitespace and every newline starts a new token, so
joining all chunks gives back the exact input. The same chunk sequence feeds
the CLI's incremental printer and the server's event stream.
"""

from __future__ import annotations

import asyncio
import json
import re
import time
from typing import AsyncIterator, Callable, Iterator, List, Optional, Protocol

END_OF_STREAM = "[DONE]"
SSE_DONE = f"data: {END_OF_STREAM}\n\n"

_BOUNDARY = re.compile(r"(?<=\s)|(?=\n)")


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


def tokenize(text: str) -> List[str]:
    return [token for token in _BOUNDARY.split(text) if token]


def format_sse(batch: str) -> str:
    """One server-sent event carrying a chunk of text."""
    return f"data: {json.dumps({'text': batch}, ensure_ascii=False)}\n\n"


class SummaryStreamer:
    def __init__(
        self,
        batch_size: int = 3,
        interval: float = 0.03,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1.")
        self.batch_size = batch_size
        self.interval = interval
        self.sleep = sleep

    def batches(self, text: str) -> List[str]:
        tokens = tokenize(text)
        return [
            "".join(tokens[i : i + self.batch_size])
            for i in range(0, len(tokens), self.batch_size)
        ]

    def stream(self, text: str, cancel: Optional[CancelToken] = None) -> Iterator[str]:
        """
        Yield batches, pausing `interval` between them, then END_OF_STREAM.

        A set cancel token stops the stream before the next batch; a cancelled
        stream never emits the sentinel.
        """
        batches = self.batches(text)
        for index, batch in enumerate(batches):
            if cancel is not None and cancel.is_set():
                return
            yield batch
            if index < len(batches) - 1:
                self.sleep(self.interval)
        if cancel is not None and cancel.is_set():
            return
        yield END_OF_STREAM

    async def astream(
        self, text: str, cancel: Optional[CancelToken] = None
    ) -> AsyncIterator[str]:
        """Asyncio variant of `stream`; task cancellation also ends it."""
        batches = self.batches(text)
        for index, batch in enumerate(batches):
            if cancel is not None and cancel.is_set():
                return
            yield batch
            if index < len(batches) - 1:
                await asyncio.sleep(self.interval)
        if cancel is not None and cancel.is_set():
            return
        yield END_OF_STREAM
