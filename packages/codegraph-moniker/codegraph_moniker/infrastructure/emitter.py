"""
Graph Emitter

Single sink for every element of a pass. Ids come from an explicit
IdCounter handed in by the caller, so two emitters never share state.
"""

from typing import Any, TypeVar

from ..domain.elements import (
    ContainsEdge,
    DefinitionTag,
    DocumentVertex,
    Element,
    ItemEdge,
    ItemProperty,
    MonikerEdge,
    MonikerKind,
    MonikerVertex,
    NextEdge,
    RangeVertex,
    ReferencesEdge,
    ReferenceResultVertex,
    ReferenceTag,
    ResultSetVertex,
    UniquenessLevel,
)
from ..domain.models import TextRange

E = TypeVar("E", bound=Element)


class IdCounter:
    """Monotonically increasing element id source"""

    def __init__(self, start: int = 1):
        self._next = start

    def next_id(self) -> int:
        value = self._next
        self._next += 1
        return value

    @property
    def peek(self) -> int:
        return self._next


class GraphEmitter:
    """
    Creates elements, assigns ids and keeps them in emission order.

    Example:
        emitter = GraphEmitter(IdCounter())
        rs = emitter.result_set()
        emitter.next_edge(rs.id, other.id)
    """

    def __init__(self, counter: IdCounter):
        self._counter = counter
        self._elements: list[Element] = []
        self._by_id: dict[int, Element] = {}

    @property
    def elements(self) -> list[Element]:
        return self._elements

    def get(self, element_id: int) -> Element | None:
        return self._by_id.get(element_id)

    def _emit(self, factory: type[E], **fields: Any) -> E:
        element = factory(id=self._counter.next_id(), **fields)
        self._elements.append(element)
        self._by_id[element.id] = element
        return element

    # ============================================================
    # Vertices
    # ============================================================

    def document(self, uri: str, language_id: str) -> DocumentVertex:
        return self._emit(DocumentVertex, uri=uri, language_id=language_id)

    def result_set(self) -> ResultSetVertex:
        return self._emit(ResultSetVertex)

    def moniker(
        self,
        scheme: str,
        identifier: str,
        unique: UniquenessLevel,
        kind: MonikerKind,
    ) -> MonikerVertex:
        return self._emit(MonikerVertex, scheme=scheme, identifier=identifier, unique=unique, kind=kind)

    def definition_range(self, range: TextRange, text: str, kind: int, full_range: TextRange) -> RangeVertex:
        tag = DefinitionTag(text=text, kind=kind, full_range=full_range)
        return self._emit(RangeVertex, range=range, tag=tag)

    def reference_range(self, range: TextRange, text: str) -> RangeVertex:
        return self._emit(RangeVertex, range=range, tag=ReferenceTag(text=text))

    def reference_result(self) -> ReferenceResultVertex:
        return self._emit(ReferenceResultVertex)

    # ============================================================
    # Edges
    # ============================================================

    def next_edge(self, out_v: int, in_v: int) -> NextEdge:
        return self._emit(NextEdge, out_v=out_v, in_v=in_v)

    def moniker_edge(self, out_v: int, in_v: int) -> MonikerEdge:
        return self._emit(MonikerEdge, out_v=out_v, in_v=in_v)

    def references_edge(self, out_v: int, in_v: int) -> ReferencesEdge:
        return self._emit(ReferencesEdge, out_v=out_v, in_v=in_v)

    def item_edge(self, out_v: int, in_vs: list[int], shard: int, property: ItemProperty) -> ItemEdge:
        return self._emit(ItemEdge, out_v=out_v, in_vs=list(in_vs), shard=shard, property=property)

    def contains_edge(self, out_v: int, in_vs: list[int]) -> ContainsEdge:
        return self._emit(ContainsEdge, out_v=out_v, in_vs=list(in_vs))
