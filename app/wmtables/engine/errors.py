from __future__ import annotations


class TableEngineError(Exception):
    """Base class for errors raised by the table engine."""


class UnknownActionError(TableEngineError):
    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"Unknown {kind} action: {key!r}")
