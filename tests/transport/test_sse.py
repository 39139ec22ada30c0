"""Tests for the incremental SSE frame reader."""

from figmabridge.transport.sse import SseFrame, SseFrameReader


class TestSseFrameReader:
    """SseFrameReader parsing tests."""

    def test_given_complete_frame_when_fed_then_emits_frame(self) -> None:
        """An event line followed by a data line is one frame."""
        # Given
        reader = SseFrameReader()

        # When
        frames = list(reader.feed("event: endpoint\ndata: /messages?sessionId=abc\n\n"))

        # Then
        assert frames == [SseFrame(event="endpoint", data="/messages?sessionId=abc")]

    def test_given_line_split_across_chunks_when_fed_then_joined(self) -> None:
        """Partial lines are buffered until their newline arrives."""
        # Given
        reader = SseFrameReader()

        # When
        first = list(reader.feed('event: mess'))
        second = list(reader.feed('age\ndata: {"result"'))
        third = list(reader.feed(': 1}\n'))

        # Then
        assert first == []
        assert second == []
        assert third == [SseFrame(event="message", data='{"result": 1}')]
        assert reader.buffered == ""

    def test_given_comment_lines_when_fed_then_ignored(self) -> None:
        """Keep-alive comments never break a frame."""
        # Given
        reader = SseFrameReader()

        # When
        frames = list(reader.feed(": ping\nevent: message\n: ping\ndata: {}\n"))

        # Then
        assert frames == [SseFrame(event="message", data="{}")]

    def test_given_data_without_event_when_fed_then_ignored(self) -> None:
        """Data lines need a preceding event line."""
        # Given
        reader = SseFrameReader()

        # When
        frames = list(reader.feed("data: orphan\n\n"))

        # Then
        assert frames == []

    def test_given_crlf_line_endings_when_fed_then_stripped(self) -> None:
        """Carriage returns are not part of the value."""
        # Given
        reader = SseFrameReader()

        # When
        frames = list(reader.feed("event: endpoint\r\ndata: /messages\r\n\r\n"))

        # Then
        assert frames == [SseFrame(event="endpoint", data="/messages")]

    def test_given_no_space_after_colon_when_fed_then_value_kept_whole(self) -> None:
        """Only a single optional space after the colon is dropped."""
        # Given
        reader = SseFrameReader()

        # When
        frames = list(reader.feed("event:message\ndata:  padded\n"))

        # Then
        assert frames == [SseFrame(event="message", data=" padded")]

    def test_given_several_frames_in_one_chunk_when_fed_then_all_emitted(self) -> None:
        """One chunk may complete multiple frames."""
        # Given
        reader = SseFrameReader()
        chunk = "event: endpoint\ndata: /a\n\nevent: message\ndata: {}\n\n"

        # When
        frames = list(reader.feed(chunk))

        # Then
        assert [f.event for f in frames] == ["endpoint", "message"]
