"""Structured logging utilities."""

from .audit import JsonlAuditLogger, MaterializeEvent, sanitize_metadata, utc_timestamp

__all__ = ["JsonlAuditLogger", "MaterializeEvent", "sanitize_metadata", "utc_timestamp"]
