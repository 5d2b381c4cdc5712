"""
Moniker Index Pass

Single forward pass over a resolved Program:

    for document in lexical path order:
        1. document vertex (the shard)
        2. module-root resultSet + "<module>:" moniker (modules only)
        3. declarations in source order, members recursively
        4. export bindings (indirection)
        5. references located in the document
        6. contains edge
    finalize reference aggregates

Element ids are a pure function of the input; two passes over the same
Program produce the same graph id-for-id.
"""

from dataclasses import dataclass, field
from typing import Any

from structlog.contextvars import bound_contextvars

from ..domain.elements import Element, MonikerVertex
from ..domain.models import (
    Declaration,
    Document,
    ExportBinding,
    Occurrence,
    OccurrenceRole,
    Program,
    Reference,
    Symbol,
)
from ..infrastructure.config import MonikerSettings, get_settings
from ..infrastructure.emitter import GraphEmitter, IdCounter
from ..infrastructure.exceptions import InvariantViolationError, UnresolvedSymbolError
from ..infrastructure.logging import get_logger
from .export_indirection import ExportIndirectionBuilder
from .identity_resolver import SymbolIdentityResolver
from .moniker_assigner import MonikerAssigner
from .reference_aggregator import ReferenceAggregate, ReferenceAggregator

logger = get_logger(__name__)


@dataclass
class IndexStats:
    documents: int = 0
    symbols: int = 0
    ranges: int = 0
    aggregates: int = 0
    skipped_occurrences: int = 0


@dataclass
class IndexResult:
    """Write-once output of a pass"""

    elements: list[Element]
    aggregates: list[ReferenceAggregate]
    stats: IndexStats
    canonical_nodes: dict[str, int] = field(default_factory=dict)  # symbol_id → vertex id
    monikers: dict[int, list[MonikerVertex]] = field(default_factory=dict)  # vertex id → monikers

    def __post_init__(self):
        self._by_id = {element.id: element for element in self.elements}

    def get(self, element_id: int) -> Element | None:
        return self._by_id.get(element_id)

    def node_for(self, symbol_id: str) -> int | None:
        return self.canonical_nodes.get(symbol_id)

    def monikers_of(self, vertex_id: int) -> list[MonikerVertex]:
        return list(self.monikers.get(vertex_id, []))

    def find_moniker(self, identifier: str) -> MonikerVertex | None:
        for element in self.elements:
            if isinstance(element, MonikerVertex) and element.identifier == identifier:
                return element
        return None

    def aggregate_for(self, symbol_id: str) -> ReferenceAggregate | None:
        for aggregate in self.aggregates:
            if aggregate.symbol_id == symbol_id:
                return aggregate
        return None

    def to_dicts(self) -> list[dict[str, Any]]:
        return [element.to_dict() for element in self.elements]


class MonikerIndexPass:
    """
    Drives resolver, indirection builder, moniker assigner and aggregator.

    Example:
        result = MonikerIndexPass(program).run()
        result.find_moniker("a:x")
    """

    def __init__(
        self,
        program: Program,
        settings: MonikerSettings | None = None,
        counter: IdCounter | None = None,
    ):
        self._program = program
        self._settings = settings or get_settings()
        self._emitter = GraphEmitter(counter or IdCounter())

        self._assigner = MonikerAssigner(program, self._emitter, self._settings, on_skip=self._skip)
        self._resolver = SymbolIdentityResolver(self._emitter, on_canonical=self._assigner.assign)
        self._indirection = ExportIndirectionBuilder(program, self._resolver, self._assigner)
        self._aggregator = ReferenceAggregator(self._resolver, self._emitter, self._settings)

        self._references: dict[str, list[tuple[Reference, Symbol]]] = {}
        self._stats = IndexStats()
        self._ran = False

    def run(self) -> IndexResult:
        if self._ran:
            raise InvariantViolationError("Index pass already ran")
        self._ran = True

        documents = self._program.ordered_documents()
        logger.info("index_pass_started", documents=len(documents), symbols=len(self._program.symbols))

        self._assigner.prepare()
        self._collect_references(documents)

        for document in documents:
            with bound_contextvars(document=document.path):
                self._index_document(document)

        aggregates = self._aggregator.finalize()

        self._stats.documents = len(documents)
        self._stats.symbols = len(self._resolver.canonical_nodes)
        self._stats.aggregates = len(aggregates)

        canonical = {node.symbol_id: node.vertex_id for node in self._resolver.canonical_nodes}
        monikers = {}
        for element in self._emitter.elements:
            found = self._assigner.monikers_of(element.id)
            if found:
                monikers[element.id] = found

        logger.info(
            "index_pass_completed",
            elements=len(self._emitter.elements),
            symbols=self._stats.symbols,
            aggregates=self._stats.aggregates,
            skipped=self._stats.skipped_occurrences,
        )
        return IndexResult(
            elements=list(self._emitter.elements),
            aggregates=aggregates,
            stats=self._stats,
            canonical_nodes=canonical,
            monikers=monikers,
        )

    # ============================================================
    # Preparation
    # ============================================================

    def _collect_references(self, documents: list[Document]) -> None:
        """Bucket every symbol's references by the document they appear in"""
        known = {document.path for document in documents}
        for symbol in self._program.symbols.values():
            for reference in symbol.references:
                if reference.document not in known:
                    self._skip("reference_outside_program", symbol.id, reference.document)
                    continue
                self._references.setdefault(reference.document, []).append((reference, symbol))

        for entries in self._references.values():
            entries.sort(key=lambda entry: entry[0].range)

    # ============================================================
    # Document walk
    # ============================================================

    def _index_document(self, document: Document) -> None:
        shard = self._emitter.document(document.path, self._settings.language_id).id
        range_ids: list[int] = []

        if document.is_module:
            module_node = self._emitter.result_set()
            self._assigner.assign_module(module_node.id, document)

        for declaration in document.declarations:
            self._index_declaration(declaration, document, shard, range_ids)

        for binding in document.exports:
            self._index_export(binding, document)

        for reference, symbol in self._references.get(document.path, []):
            self._index_reference(reference, symbol, document, shard, range_ids)

        if range_ids:
            self._emitter.contains_edge(shard, range_ids)
        self._stats.ranges += len(range_ids)

    def _index_declaration(
        self,
        declaration: Declaration,
        document: Document,
        shard: int,
        range_ids: list[int],
    ) -> None:
        try:
            symbol = self._program.symbol(declaration.symbol_id)
        except UnresolvedSymbolError as exc:
            self._skip("declaration_unresolved", exc.symbol_id, document.path)
            return

        node = self._resolver.resolve_declaration(symbol, declaration)
        range_vertex = self._emitter.definition_range(
            declaration.range,
            symbol.name,
            declaration.kind.lsp_kind,
            declaration.full_range or declaration.range,
        )
        self._emitter.next_edge(range_vertex.id, node.vertex_id)
        range_ids.append(range_vertex.id)

        occurrence = Occurrence(symbol.id, document.path, declaration.range, OccurrenceRole.DEFINITION)
        self._aggregator.record(node, occurrence, range_vertex.id, shard)

        for member in declaration.members:
            self._index_declaration(member, document, shard, range_ids)

    def _index_export(self, binding: ExportBinding, document: Document) -> None:
        try:
            symbol = self._program.symbol(binding.symbol_id)
        except UnresolvedSymbolError as exc:
            self._skip("export_unresolved", exc.symbol_id, document.path)
            return
        self._indirection.build(binding, symbol, document)

    def _index_reference(
        self,
        reference: Reference,
        symbol: Symbol,
        document: Document,
        shard: int,
        range_ids: list[int],
    ) -> None:
        node = self._resolver.resolve(symbol)
        range_vertex = self._emitter.reference_range(reference.range, symbol.name)
        self._emitter.next_edge(range_vertex.id, node.vertex_id)
        range_ids.append(range_vertex.id)

        occurrence = Occurrence(symbol.id, document.path, reference.range, OccurrenceRole.REFERENCE)
        self._aggregator.record(node, occurrence, range_vertex.id, shard)

    def _skip(self, reason: str, symbol_id: str, document: str | None) -> None:
        self._stats.skipped_occurrences += 1
        logger.warning("occurrence_skipped", reason=reason, symbol=symbol_id, document=document)


def index_program(program: Program, settings: MonikerSettings | None = None) -> IndexResult:
    """Run one pass with a fresh id counter"""
    return MonikerIndexPass(program, settings=settings).run()
