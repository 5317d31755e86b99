"""Response envelopes shared by every tool."""

from datetime import datetime, timezone
from time import perf_counter
from typing import Any

from finance_mcp import SCHEMA_VERSION, SERVER_VERSION
from finance_mcp.errors import FinanceDataError


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with a trailing Z."""
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


def build_meta(tool: str, duration_ms: float | None = None) -> dict[str, Any]:
    """Version and timing block present on every response."""
    meta: dict[str, Any] = {
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
        "tool": tool,
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    return meta


def build_provenance(
    source: str,
    as_of: str | None = None,
    cache_ttl_seconds: float | None = None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    """
    Build the provenance block for one upstream source.

    Args:
        source: Provider name ("alpha_vantage", "newsapi")
        as_of: Freshness of the data as reported by the provider, if known
        cache_ttl_seconds: How long the value may be served from cache
        warnings: Partial-data notes for the caller

    Returns:
        Provenance dict; `warnings` is always a list
    """
    prov: dict[str, Any] = {"source": source, "as_of": as_of}
    if cache_ttl_seconds is not None:
        prov["cache_ttl_seconds"] = cache_ttl_seconds
    prov["warnings"] = list(warnings or [])
    return prov


def build_envelope(
    tool: str,
    started: float,
    provenance: dict[str, dict[str, Any]],
    **payload: Any,
) -> dict[str, Any]:
    """
    Wrap a tool payload with meta and provenance.

    Args:
        tool: Tool name for the meta block
        started: perf_counter() value taken when the tool started
        provenance: Provenance blocks keyed by data section
        **payload: Tool-specific fields, placed at the top level

    Returns:
        Envelope dict
    """
    duration_ms = (perf_counter() - started) * 1000
    return {
        "meta": build_meta(tool, duration_ms),
        "data_provenance": provenance,
        **payload,
    }


def build_error_response(
    error_type: str,
    message: str,
    symbol: str | None = None,
) -> dict[str, Any]:
    """
    Build standardized error response.

    Args:
        error_type: invalid_symbol, invalid_request, rate_limited,
            configuration_error, malformed_response or data_unavailable
        message: Human-readable error message
        symbol: Symbol that caused the error (if applicable)

    Returns:
        Error response dict
    """
    response: dict[str, Any] = {
        "error": True,
        "error_type": error_type,
        "message": message,
        "meta": build_meta("error"),
    }

    if symbol is not None:
        response["symbol"] = symbol

    return response


def error_response_for(error: FinanceDataError | ValueError, symbol: str | None = None) -> dict[str, Any]:
    """Error envelope for a data-layer error or a rejected request argument."""
    if isinstance(error, FinanceDataError):
        return build_error_response(error.error_type, str(error), symbol)
    return build_error_response("invalid_request", str(error), symbol)
