"""Utility modules."""

from finance_mcp.utils.provenance import (
    build_envelope,
    build_error_response,
    build_meta,
    build_provenance,
    error_response_for,
    utc_now_iso,
)
from finance_mcp.utils.sanitize import sanitize_text
from finance_mcp.utils.validators import check_rule, normalize_symbol, normalize_symbol_list

__all__ = [
    "build_envelope",
    "build_error_response",
    "build_meta",
    "build_provenance",
    "error_response_for",
    "utc_now_iso",
    "sanitize_text",
    "check_rule",
    "normalize_symbol",
    "normalize_symbol_list",
]
