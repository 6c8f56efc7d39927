# tests/engine/test_trace_group.py
"""Tests for the per-trace decode-and-link transform."""

import pickle

import pytest
from structlog.testing import capture_logs

from tracelinks.contracts import DependencyLink, RawRow
from tracelinks.engine.trace_group import TraceGroupLinker, link
from tests.fixtures.stubs import (
    FailingLinker,
    FixedLinkerFactory,
    HalfwayFailingDecoder,
    JsonSpanDecoder,
    encode_span,
)

FIXED_LINKS = [DependencyLink(parent="frontend", child="backend", call_count=2, error_count=1)]


def _rows(trace_id: str, *payloads: str) -> list[RawRow]:
    return [RawRow(trace_id=trace_id, encoded_span=payload) for payload in payloads]


class TestDecodeFailureIsolation:
    """Malformed rows are skipped and recorded, never fatal."""

    def test_malformed_middle_row_is_skipped(self) -> None:
        """Trace T1 has 3 rows and row 2 is malformed."""
        decoder = JsonSpanDecoder()
        factory = FixedLinkerFactory(FIXED_LINKS)
        rows = _rows(
            "T1",
            encode_span("T1", "a", service="frontend"),
            "MALFORMED",
            encode_span("T1", "b", parent_id="a", service="backend"),
        )

        with capture_logs() as logs:
            outcome = TraceGroupLinker(decoder, factory).link_group(rows)

        assert decoder.attempts == 3
        linker = factory.created[0]
        assert [span.span_id for span in linker.received] == ["a", "b"]
        assert list(outcome.links) == FIXED_LINKS
        assert outcome.rows_seen == 3
        assert outcome.spans_decoded == 2

        assert len(outcome.decode_failures) == 1
        failure = outcome.decode_failures[0]
        assert failure.trace_id == "T1"
        assert failure.row_index == 1
        assert failure.error_type == "JSONDecodeError"

        warnings = [entry for entry in logs if entry["log_level"] == "warning"]
        assert len(warnings) == 1
        assert warnings[0]["event"] == "Unable to decode span from trace"
        assert warnings[0]["trace_id"] == "T1"
        assert warnings[0]["row_index"] == 1

    def test_all_rows_failing_yields_empty_links(self) -> None:
        factory = FixedLinkerFactory()
        rows = _rows("T2", "MALFORMED", "{not json", "[]x")

        links = TraceGroupLinker(JsonSpanDecoder(), factory)(rows)

        assert links == []
        assert factory.created[0].received == []
        assert factory.created[0].put_trace_calls == 1

    def test_empty_group_still_consults_linker(self) -> None:
        factory = FixedLinkerFactory(FIXED_LINKS)

        outcome = TraceGroupLinker(JsonSpanDecoder(), factory).link_group([])

        assert outcome.trace_id is None
        assert outcome.rows_seen == 0
        assert list(outcome.links) == FIXED_LINKS

    def test_partial_output_of_failing_row_is_discarded(self) -> None:
        factory = FixedLinkerFactory()

        outcome = TraceGroupLinker(HalfwayFailingDecoder(), factory).link_group(_rows("T3", "x", "y"))

        assert factory.created[0].received == []
        assert outcome.spans_decoded == 0
        assert outcome.rows_skipped == 2

    def test_row_decoding_to_several_spans(self) -> None:
        factory = FixedLinkerFactory()
        payload = "[" + encode_span("T4", "a") + "," + encode_span("T4", "b", parent_id="a") + "]"

        outcome = TraceGroupLinker(JsonSpanDecoder(), factory).link_group(_rows("T4", payload))

        assert outcome.spans_decoded == 2
        assert [span.span_id for span in factory.created[0].received] == ["a", "b"]


class TestLinking:
    def test_links_come_from_linker_verbatim(self) -> None:
        rows = _rows(
            "T5",
            encode_span("T5", "root", service="gateway"),
            encode_span("T5", "c1", parent_id="root", service="orders"),
            encode_span("T5", "c2", parent_id="root", service="orders"),
        )

        links = TraceGroupLinker(JsonSpanDecoder(), FixedLinkerFactory())(rows)

        assert links == [DependencyLink(parent="gateway", child="orders", call_count=2, error_count=0)]

    def test_fresh_linker_per_call(self) -> None:
        factory = FixedLinkerFactory()
        transform = TraceGroupLinker(JsonSpanDecoder(), factory)

        transform(_rows("A", encode_span("A", "1")))
        transform(_rows("B", encode_span("B", "2")))

        assert len(factory.created) == 2
        assert [span.trace_id for span in factory.created[1].received] == ["B"]

    def test_linker_error_propagates(self) -> None:
        transform = TraceGroupLinker(JsonSpanDecoder(), FailingLinker)

        with pytest.raises(RuntimeError, match="linker exploded"):
            transform(_rows("T6", encode_span("T6", "a")))


class TestInitializer:
    def test_initializer_runs_before_decoding(self) -> None:
        order: list[str] = []

        class OrderedDecoder(JsonSpanDecoder):
            def decode_into(self, encoded, out):  # type: ignore[no-untyped-def]
                order.append("decode")
                super().decode_into(encoded, out)

        transform = TraceGroupLinker(OrderedDecoder(), FixedLinkerFactory(), lambda: order.append("init"))
        transform(_rows("T7", encode_span("T7", "a")))

        assert order == ["init", "decode"]

    def test_initializer_invoked_on_every_call(self) -> None:
        """Deduplication is the LazyResource's job, not the transform's."""
        calls: list[int] = []
        transform = TraceGroupLinker(JsonSpanDecoder(), FixedLinkerFactory(), lambda: calls.append(1))

        transform([])
        transform([])

        assert len(calls) == 2

    def test_initializer_error_propagates_before_decoding(self) -> None:
        decoder = JsonSpanDecoder()

        def broken() -> None:
            raise RuntimeError("logging unavailable")

        with pytest.raises(RuntimeError, match="logging unavailable"):
            TraceGroupLinker(decoder, FixedLinkerFactory(), broken)(_rows("T8", encode_span("T8", "a")))
        assert decoder.attempts == 0


class TestModuleFunction:
    def test_link_matches_transform(self) -> None:
        rows = _rows("T9", encode_span("T9", "a"), "MALFORMED")

        links = link(rows, JsonSpanDecoder(), linker_factory=FixedLinkerFactory(FIXED_LINKS))

        assert links == FIXED_LINKS


class TestPickling:
    def test_transform_pickles_with_picklable_collaborators(self) -> None:
        from tracelinks.core.logging import LogInitializer

        transform = TraceGroupLinker(JsonSpanDecoder(), FixedLinkerFactory(), LogInitializer(level="INFO"))

        restored = pickle.loads(pickle.dumps(transform))

        assert isinstance(restored, TraceGroupLinker)
        assert restored.initializer.level == "INFO"  # type: ignore[union-attr]
