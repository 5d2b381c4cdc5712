"""
Custom exceptions for the moniker engine.

Hierarchy:
- MonikerIndexError (base)
  - UnresolvedSymbolError (non-fatal, occurrence is skipped)
  - InvariantViolationError (fatal, aborts the pass)
    - MonikerConflictError
    - LocalMonikerCollisionError
"""

from __future__ import annotations


class MonikerIndexError(Exception):
    """Base exception for all moniker engine errors."""

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{super().__str__()} [{ctx_str}]"
        return super().__str__()


class UnresolvedSymbolError(MonikerIndexError):
    """The semantic model could not resolve an identifier to a Symbol."""

    def __init__(self, symbol_id: str, document: str | None = None):
        context = {"symbol": symbol_id}
        if document:
            context["document"] = document
        super().__init__("Unresolved symbol", context)
        self.symbol_id = symbol_id
        self.document = document


# ============================================================================
# Fatal errors
# ============================================================================


class InvariantViolationError(MonikerIndexError):
    """An internal invariant of the identity graph was broken."""

    pass


class MonikerConflictError(InvariantViolationError):
    """Two different sources claim the same moniker identifier."""

    def __init__(
        self,
        identifier: str,
        existing_source: str,
        new_source: str,
        document: str | None = None,
    ):
        context = {
            "identifier": identifier,
            "existing": existing_source,
            "new": new_source,
        }
        if document:
            context["document"] = document
        super().__init__("Moniker identifier claimed twice", context)
        self.identifier = identifier
        self.existing_source = existing_source
        self.new_source = new_source


class LocalMonikerCollisionError(InvariantViolationError):
    """Two distinct canonical keys hashed to the same local identifier."""

    def __init__(self, identifier: str, existing_key: tuple, new_key: tuple):
        super().__init__(
            "Local moniker hash collision",
            {"identifier": identifier, "existing_key": existing_key, "new_key": new_key},
        )
        self.identifier = identifier
        self.existing_key = existing_key
        self.new_key = new_key
