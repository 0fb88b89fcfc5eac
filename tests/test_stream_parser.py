import pytest

from lexadvisor.api.stream_parser import StreamParser, extract_delta

from tests.conftest import DONE, delta_frame


def feed_all(parser: StreamParser, chunks) -> list[str]:
    snapshots = []
    for chunk in chunks:
        snapshots.extend(parser.feed(chunk))
    return snapshots


def test_single_line_emits_accumulated_text():
    parser = StreamParser()
    assert parser.feed(delta_frame("Hi")) == ["Hi"]
    assert parser.text == "Hi"


def test_snapshots_accumulate():
    parser = StreamParser()
    assert feed_all(parser, [delta_frame("Hel"), delta_frame("lo")]) == ["Hel", "Hello"]


def test_line_split_at_every_offset_gives_same_result():
    stream = delta_frame("Your lease ") + delta_frame("may be void.") + DONE
    for offset in range(1, len(stream)):
        parser = StreamParser()
        snapshots = feed_all(parser, [stream[:offset], stream[offset:]])
        assert snapshots == ["Your lease ", "Your lease may be void."]
        assert parser.done


def test_multibyte_character_split_across_chunks():
    stream = delta_frame("Über §5 ok")
    cut = stream.index("Ü".encode("utf-8")) + 1
    parser = StreamParser()
    assert parser.feed(stream[:cut]) == []
    assert parser.feed(stream[cut:]) == ["Über §5 ok"]


def test_comments_blank_and_foreign_lines_are_skipped():
    parser = StreamParser()
    chunk = b": keep-alive\n\nevent: message\n" + delta_frame("A").replace(b"\n", b"\r\n") + b"\n"
    assert parser.feed(chunk) == ["A"]
    assert parser.dropped_lines == 0


def test_empty_and_role_only_deltas_emit_nothing():
    parser = StreamParser()
    assert parser.feed(b'data: {"choices":[{"delta":{"role":"assistant"}}]}\n') == []
    assert parser.feed(delta_frame("")) == []
    assert parser.feed(b'data: {"choices":[]}\n') == []


def test_done_stops_parsing():
    parser = StreamParser()
    snapshots = parser.feed(delta_frame("A") + DONE + delta_frame("B"))
    assert snapshots == ["A"]
    assert parser.done
    assert parser.feed(delta_frame("C")) == []
    assert parser.text == "A"


def test_close_discards_unterminated_line():
    parser = StreamParser()
    parser.feed(delta_frame("A"))
    parser.feed(b'data: {"choices":[{"delta":{"content":"B"}}]}')
    assert parser.close() == []
    assert parser.text == "A"


def test_unparseable_line_is_dropped_after_max_deferrals():
    parser = StreamParser(max_deferrals=2)
    assert parser.feed(b"data: {not json\n") == []
    assert parser.feed(delta_frame("A")) == []
    assert parser.feed(delta_frame("B")) == ["A", "AB"]
    assert parser.dropped_lines == 1
    assert parser.feed(delta_frame("C")) == ["ABC"]


def test_oversized_buffer_is_discarded():
    parser = StreamParser(max_buffer_chars=16)
    assert parser.feed(b"data: " + b"x" * 32) == []
    assert parser.dropped_lines == 1
    assert parser.feed(b"\n" + delta_frame("ok")) == ["ok"]


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"choices": [{"delta": {"content": "x"}}]}, "x"),
        ({"choices": [{"delta": {}}]}, None),
        ({"choices": [{"delta": {"content": 3}}]}, None),
        ({"error": "boom"}, None),
        ([], None),
    ],
)
def test_extract_delta(payload, expected):
    assert extract_delta(payload) == expected


def test_close_drops_deferred_line_and_parses_the_rest():
    parser = StreamParser(max_deferrals=8)
    assert parser.feed(b"data: {truncated\n" + delta_frame("A") + delta_frame("B")) == []
    assert parser.close() == ["A", "AB"]
    assert parser.dropped_lines == 1
