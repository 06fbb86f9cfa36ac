"""Notation, schema, transaction and update types for the OVSDB management protocol (RFC 7047)."""

__version__ = "0.1.0"

__all__ = [
    "bindings",
    "condition",
    "errors",
    "monitor_select",
    "mutation",
    "operation",
    "schema",
    "types",
    "updates",
]