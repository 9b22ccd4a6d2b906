"""Tests for the engine invocation tracer."""

import logging
from decimal import Decimal

from billboard_engines.tracer import compute_input_fingerprint, traced_engine


@traced_engine("sample", "2.1", fingerprint_fields=("amount", "options"))
def _sample_engine(amount, options=None, ignored=None):
    return amount


def _traces(caplog) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.getMessage() == "PRICING_ENGINE_TRACE"]


class TestFingerprint:

    def test_deterministic(self):
        args = {"amount": Decimal("10.00"), "options": {"b": 1, "a": 2}}
        assert compute_input_fingerprint(("amount", "options"), args) == compute_input_fingerprint(
            ("amount", "options"), {"options": {"a": 2, "b": 1}, "amount": Decimal("10.00")},
        )

    def test_sixteen_hex_chars(self):
        fp = compute_input_fingerprint(("x",), {"x": 1})
        assert len(fp) == 16
        int(fp, 16)

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(("x",), {"x": None})

    def test_different_inputs_differ(self):
        assert compute_input_fingerprint(("x",), {"x": 1}) != compute_input_fingerprint(("x",), {"x": 2})


class TestTracedEngine:

    def test_emits_trace_record(self, caplog):
        with caplog.at_level(logging.INFO, logger="billboard_pricing"):
            assert _sample_engine(Decimal("5")) == Decimal("5")

        (trace,) = _traces(caplog)
        assert trace.engine_name == "sample"
        assert trace.engine_version == "2.1"
        assert trace.function == "_sample_engine"
        assert trace.duration_ms >= 0

    def test_positional_and_keyword_arguments_fingerprint_alike(self, caplog):
        with caplog.at_level(logging.INFO, logger="billboard_pricing"):
            _sample_engine(Decimal("5"), {"k": 1})
            _sample_engine(amount=Decimal("5"), options={"k": 1}, ignored="x")

        first, second = _traces(caplog)
        assert first.input_fingerprint == second.input_fingerprint
        assert first.input_fingerprint != ""

    def test_preserves_metadata(self):
        assert _sample_engine.__name__ == "_sample_engine"
