import asyncio
import json
import threading

from world_briefing.streaming import (
    END_OF_STREAM,
    SSE_DONE,
    SummaryStreamer,
    format_sse,
    tokenize,
)

SAMPLE = (
    "## Today's Briefing: Europe\n\n"
    "**Strike**\n"
    "- Rail strike halts trains — Unions walk out *(DW News)*\n"
    "\n"
    "*Based on 1 articles from DW News.*"
)


def _streamer(sleeps=None, batch_size=3):
    recorded = sleeps if sleeps is not None else []
    return SummaryStreamer(batch_size=batch_size, interval=0.03, sleep=recorded.append)


def test_tokens_keep_trailing_whitespace_and_split_on_newlines():
    assert tokenize("a b\n\nc  d\n") == ["a ", "b", "\n", "\n", "c ", " ", "d", "\n"]


def test_chunks_concatenate_back_to_original_text():
    streamer = _streamer()
    chunks = list(streamer.stream(SAMPLE))
    assert chunks[-1] == END_OF_STREAM
    assert "".join(chunks[:-1]) == SAMPLE
    assert "".join(streamer.batches(SAMPLE)) == SAMPLE


def test_120_words_yield_40_batches_and_one_sentinel():
    sleeps = []
    streamer = _streamer(sleeps)
    text = "word " * 120

    events = list(streamer.stream(text))

    assert len(events) == 41
    assert events[-1] == END_OF_STREAM
    assert all(event == "word word word " for event in events[:-1])
    assert sleeps == [0.03] * 39


def test_cancelled_stream_stops_before_next_batch():
    cancel = threading.Event()
    streamer = _streamer()
    stream = streamer.stream("one two three four five six seven", cancel=cancel)

    first = next(stream)
    cancel.set()

    assert first == "one two three "
    assert list(stream) == []


def test_empty_text_only_emits_sentinel():
    assert list(_streamer().stream("")) == [END_OF_STREAM]


def test_async_stream_matches_sync_stream():
    streamer = SummaryStreamer(batch_size=3, interval=0)

    async def collect():
        return [chunk async for chunk in streamer.astream(SAMPLE)]

    assert asyncio.run(collect()) == list(streamer.stream(SAMPLE))


def test_sse_framing():
    event = format_sse("Tokyo — ")
    assert event.startswith("data: ") and event.endswith("\n\n")
    assert json.loads(event[len("data: "):]) == {"text": "Tokyo — "}
    assert SSE_DONE == "data: [DONE]\n\n"
