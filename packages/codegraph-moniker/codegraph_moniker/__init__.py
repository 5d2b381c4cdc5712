"""
CodeGraph Moniker

Moniker and export-identity resolution for the code-navigation index.
Turns a resolved semantic model into resultSet / moniker / range /
referenceResult vertices with next, moniker, item and references edges.

Used by:
- cross-repository "go to definition" / "find references"
"""

__version__ = "0.1.0"

from .application.index_pass import IndexResult, IndexStats, MonikerIndexPass, index_program
from .domain.builder import Declared, DocumentBuilder, ProgramBuilder
from .domain.elements import MonikerKind, UniquenessLevel
from .domain.models import (
    Declaration,
    Document,
    ExportBinding,
    ExportForm,
    Program,
    Reference,
    Symbol,
    SymbolKind,
    TextRange,
)
from .infrastructure.config import MonikerSettings, get_settings
from .infrastructure.emitter import IdCounter
from .infrastructure.exceptions import (
    InvariantViolationError,
    LocalMonikerCollisionError,
    MonikerConflictError,
    MonikerIndexError,
    UnresolvedSymbolError,
)

__all__ = [
    "Declaration",
    "Declared",
    "Document",
    "DocumentBuilder",
    "ExportBinding",
    "ExportForm",
    "IdCounter",
    "IndexResult",
    "IndexStats",
    "InvariantViolationError",
    "LocalMonikerCollisionError",
    "MonikerConflictError",
    "MonikerIndexError",
    "MonikerIndexPass",
    "MonikerKind",
    "MonikerSettings",
    "Program",
    "ProgramBuilder",
    "Reference",
    "Symbol",
    "SymbolKind",
    "TextRange",
    "UniquenessLevel",
    "UnresolvedSymbolError",
    "get_settings",
    "index_program",
]
