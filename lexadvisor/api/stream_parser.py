"""
Incremental Response Stream Parser
==================================

Turns the raw byte stream of the completion endpoint (server-sent events in
the OpenAI chat-completions shape) into a sequence of accumulated-text
snapshots.

Wire format
-----------
Lines separated by ``\\n`` (a trailing ``\\r`` is tolerated)::

    : keep-alive comment
    data: {"choices":[{"delta":{"content":"Hel"}}]}
    data: {"choices":[{"delta":{"content":"lo"}}]}
    data: [DONE]

Rules
-----
- Chunk boundaries are arbitrary; bytes are decoded incrementally so a
  multi-byte UTF-8 character split across chunks survives.
- Comment lines (``:``) and blank lines are skipped; lines without the
  ``data: `` prefix are ignored.
- Each non-empty ``choices[0].delta.content`` is appended to the accumulated
  text and the whole accumulated text is emitted.
- ``[DONE]`` ends parsing; everything after it is ignored.
- A ``data:`` line whose JSON does not parse is pushed back and retried when
  the next chunk arrives. If it still does not parse after ``max_deferrals``
  further chunks it is dropped with a warning. A pending buffer that grows
  past ``max_buffer_chars`` is discarded the same way.
- ``close()`` drops a still-deferred line, parses the complete lines behind
  it and discards an unterminated trailing line.

Example
-------
>>> parser = StreamParser()
>>> parser.feed(b'data: {"choices":[{"delta":{"content":"Hi"}}]}\\n')
['Hi']
"""

import codecs
import json
import logging

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
DEFAULT_MAX_DEFERRALS = 8
DEFAULT_MAX_BUFFER_CHARS = 1024 * 1024


def extract_delta(payload) -> str | None:
    """Return ``choices[0].delta.content`` of a parsed frame, or None."""
    try:
        content = payload["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    return content if isinstance(content, str) else None


class StreamParser:
    """
    Stateful, single-use parser for one completion stream.

    Parameters
    ----------
    max_deferrals : int
        Chunks an unparseable ``data:`` line may wait before it is dropped.
    max_buffer_chars : int
        Upper bound on the pending (not yet newline-terminated) text.

    Attributes
    ----------
    text : str
        Accumulated assistant text so far.
    done : bool
        True once ``[DONE]`` was seen.
    dropped_lines : int
        Lines (or buffers) discarded by the deferral and size bounds.
    """

    def __init__(self, max_deferrals: int = DEFAULT_MAX_DEFERRALS, max_buffer_chars: int = DEFAULT_MAX_BUFFER_CHARS):
        self.max_deferrals = max_deferrals
        self.max_buffer_chars = max_buffer_chars
        self.text = ""
        self.done = False
        self.dropped_lines = 0
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._deferred_line: str | None = None
        self._deferrals = 0

    def feed(self, chunk: bytes) -> list[str]:
        """
        Consume one transport chunk.

        Parameters
        ----------
        chunk : bytes
            Raw bytes as received.

        Returns
        -------
        list[str]
            Accumulated-text snapshots produced by this chunk, in order.
        """
        if self.done:
            return []
        self._buffer += self._decoder.decode(chunk)
        return self._drain()

    def close(self) -> list[str]:
        """
        Signal end of transport.

        A line still waiting for its retry is dropped and the complete lines
        queued behind it are parsed; a partial trailing line is discarded.
        """
        snapshots = []
        if not self.done:
            self._buffer += self._decoder.decode(b"", final=True)
            while self._deferred_line is not None and "\n" in self._buffer and not self.done:
                self._deferrals = self.max_deferrals
                snapshots.extend(self._drain())
        if self._buffer:
            logger.debug(f"Discarding {len(self._buffer)} unterminated characters at end of stream")
        self._buffer = ""
        self._deferred_line = None
        return snapshots

    def _drain(self) -> list[str]:
        snapshots = []
        if self._deferred_line is not None:
            self._deferrals += 1

        while not self.done:
            newline = self._buffer.find("\n")
            if newline == -1:
                break
            line = self._buffer[:newline]
            self._buffer = self._buffer[newline + 1:]
            if line.endswith("\r"):
                line = line[:-1]

            if line.startswith(":") or line.strip() == "":
                continue
            if not line.startswith(DATA_PREFIX):
                continue

            payload = line[len(DATA_PREFIX):].strip()
            if payload == DONE_SENTINEL:
                self.done = True
                self._buffer = ""
                break

            try:
                frame = json.loads(payload)
            except json.JSONDecodeError:
                if self._defer(line):
                    break
                continue

            if line == self._deferred_line:
                self._deferred_line = None
                self._deferrals = 0

            delta = extract_delta(frame)
            if delta:
                self.text += delta
                snapshots.append(self.text)

        if len(self._buffer) > self.max_buffer_chars:
            logger.warning(f"Discarding {len(self._buffer)} buffered characters without a line break")
            self.dropped_lines += 1
            self._buffer = ""
            self._deferred_line = None
        return snapshots

    def _defer(self, line: str) -> bool:
        """
        Push an unparseable line back onto the buffer.

        Returns True when the caller should stop processing this chunk, False
        when the line was dropped and processing may continue.
        """
        if line != self._deferred_line:
            self._deferred_line = line
            self._deferrals = 0
        if self._deferrals >= self.max_deferrals:
            logger.warning(f"Dropping unparseable stream line after {self._deferrals} retries: {line[:120]!r}")
            self.dropped_lines += 1
            self._deferred_line = None
            self._deferrals = 0
            return False
        self._buffer = line + "\n" + self._buffer
        return True
