"""Tests for response envelope helpers."""

from time import perf_counter

from finance_mcp import SCHEMA_VERSION
from finance_mcp.errors import InvalidSymbolError, NetworkError, QuotaExceededError
from finance_mcp.utils.provenance import (
    build_envelope,
    build_meta,
    build_provenance,
    error_response_for,
    utc_now_iso,
)


class TestBuildProvenance:
    """Tests for build_provenance."""

    def test_minimal(self) -> None:
        assert build_provenance("alpha_vantage") == {
            "source": "alpha_vantage",
            "as_of": None,
            "warnings": [],
        }

    def test_cache_ttl_and_warnings(self) -> None:
        warnings = ["MACD unavailable"]
        prov = build_provenance("alpha_vantage", "2024-06-14", cache_ttl_seconds=300.0, warnings=warnings)
        assert prov["cache_ttl_seconds"] == 300.0
        assert prov["warnings"] == ["MACD unavailable"]
        assert prov["warnings"] is not warnings


class TestBuildEnvelope:
    """Tests for build_meta and build_envelope."""

    def test_meta_without_duration(self) -> None:
        meta = build_meta("error")
        assert meta["schema_version"] == SCHEMA_VERSION
        assert "duration_ms" not in meta

    def test_payload_fields_are_top_level(self) -> None:
        envelope = build_envelope("stock_price", perf_counter(), {"quote": {}}, symbol="AAPL")
        assert envelope["meta"]["tool"] == "stock_price"
        assert envelope["meta"]["duration_ms"] >= 0
        assert envelope["data_provenance"] == {"quote": {}}
        assert envelope["symbol"] == "AAPL"

    def test_utc_now_iso_suffix(self) -> None:
        assert utc_now_iso().endswith("Z")


class TestErrorResponseFor:
    """Tests for mapping errors to envelopes."""

    def test_typed_errors_use_their_error_type(self) -> None:
        assert error_response_for(InvalidSymbolError("nope"), "ZZZZ")["error_type"] == "invalid_symbol"
        assert error_response_for(QuotaExceededError("quota"))["error_type"] == "rate_limited"
        assert error_response_for(NetworkError("down"))["error_type"] == "data_unavailable"

    def test_value_error_is_invalid_request(self) -> None:
        response = error_response_for(ValueError("Compare requires 2-5 distinct symbols, got 1"))
        assert response["error"] is True
        assert response["error_type"] == "invalid_request"
        assert "symbol" not in response

    def test_symbol_included_when_given(self) -> None:
        assert error_response_for(NetworkError("down"), "AAPL")["symbol"] == "AAPL"
