"""
Graph Elements (output side)

Vertices and edges of the definition/export/reference graph.
Every element carries an integer id assigned in emission order.

to_dict() renders the LSIF field names (outV, inV, inVs, fullRange).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .models import TextRange

# ============================================================
# Enums
# ============================================================


class MonikerKind(str, Enum):
    EXPORT = "export"
    LOCAL = "local"
    IMPORT = "import"


class UniquenessLevel(str, Enum):
    """Scope in which a moniker identifier is unique"""

    DOCUMENT = "document"
    GROUP = "group"


class ItemProperty(str, Enum):
    DEFINITIONS = "definitions"
    REFERENCES = "references"


# ============================================================
# Base
# ============================================================


@dataclass
class Element:
    id: int

    type = ""
    label = ""

    def payload(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "label": self.label, **self.payload()}


@dataclass
class Vertex(Element):
    type = "vertex"


@dataclass
class Edge(Element):
    type = "edge"


# ============================================================
# Vertices
# ============================================================


@dataclass
class DocumentVertex(Vertex):
    uri: str
    language_id: str

    label = "document"

    def payload(self) -> dict[str, Any]:
        return {"uri": self.uri, "languageId": self.language_id}


@dataclass
class ResultSetVertex(Vertex):
    """An Identity Node"""

    label = "resultSet"


@dataclass
class MonikerVertex(Vertex):
    scheme: str
    identifier: str
    unique: UniquenessLevel
    kind: MonikerKind

    label = "moniker"

    def payload(self) -> dict[str, Any]:
        return {
            "scheme": self.scheme,
            "identifier": self.identifier,
            "unique": self.unique.value,
            "kind": self.kind.value,
        }


@dataclass(frozen=True)
class DefinitionTag:
    text: str
    kind: int  # LSP SymbolKind
    full_range: TextRange

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "definition",
            "text": self.text,
            "kind": self.kind,
            "fullRange": self.full_range.to_dict(),
        }


@dataclass(frozen=True)
class ReferenceTag:
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "reference", "text": self.text}


@dataclass
class RangeVertex(Vertex):
    range: TextRange
    tag: DefinitionTag | ReferenceTag

    label = "range"

    def payload(self) -> dict[str, Any]:
        return {**self.range.to_dict(), "tag": self.tag.to_dict()}


@dataclass
class ReferenceResultVertex(Vertex):
    """A Reference Aggregate anchor"""

    label = "referenceResult"


# ============================================================
# Edges
# ============================================================


@dataclass
class NextEdge(Edge):
    out_v: int
    in_v: int

    label = "next"

    def payload(self) -> dict[str, Any]:
        return {"outV": self.out_v, "inV": self.in_v}


@dataclass
class MonikerEdge(Edge):
    out_v: int
    in_v: int

    label = "moniker"

    def payload(self) -> dict[str, Any]:
        return {"outV": self.out_v, "inV": self.in_v}


@dataclass
class ReferencesEdge(Edge):
    """Identity Node → referenceResult"""

    out_v: int
    in_v: int

    label = "textDocument/references"

    def payload(self) -> dict[str, Any]:
        return {"outV": self.out_v, "inV": self.in_v}


@dataclass
class ItemEdge(Edge):
    out_v: int
    in_vs: list[int]
    shard: int
    property: ItemProperty

    label = "item"

    def payload(self) -> dict[str, Any]:
        return {
            "outV": self.out_v,
            "inVs": list(self.in_vs),
            "shard": self.shard,
            "property": self.property.value,
        }


@dataclass
class ContainsEdge(Edge):
    out_v: int
    in_vs: list[int] = field(default_factory=list)

    label = "contains"

    def payload(self) -> dict[str, Any]:
        return {"outV": self.out_v, "inVs": list(self.in_vs)}
