"""
Reference Aggregator

Collects definition/reference occurrences per canonical identity node and
emits one referenceResult per node, with item edges grouped by shard.
"""

from dataclasses import dataclass, field

from ..domain.elements import ItemProperty
from ..domain.models import Occurrence
from ..infrastructure.config import MonikerSettings
from ..infrastructure.emitter import GraphEmitter
from ..infrastructure.exceptions import InvariantViolationError
from ..infrastructure.logging import get_logger
from .identity_resolver import IdentityNode, SymbolIdentityResolver

logger = get_logger(__name__)


@dataclass
class ShardOccurrences:
    """Occurrences of one node inside one document"""

    shard: int  # document vertex id
    document: str
    definitions: list[int] = field(default_factory=list)  # range vertex ids
    references: list[int] = field(default_factory=list)


@dataclass
class ReferenceAggregate:
    symbol_id: str
    node_vertex_id: int
    result_vertex_id: int | None = None
    shards: list[ShardOccurrences] = field(default_factory=list)

    @property
    def documents(self) -> list[str]:
        return [shard.document for shard in self.shards]

    @property
    def reference_count(self) -> int:
        return sum(len(shard.references) for shard in self.shards)


class ReferenceAggregator:
    def __init__(
        self,
        resolver: SymbolIdentityResolver,
        emitter: GraphEmitter,
        settings: MonikerSettings,
    ):
        self._resolver = resolver
        self._emitter = emitter
        self._settings = settings
        self._buckets: dict[int, ReferenceAggregate] = {}
        self._shards: dict[tuple[int, int], ShardOccurrences] = {}
        self._finalized = False

    def record(self, node: IdentityNode, occurrence: Occurrence, range_id: int, shard: int) -> None:
        """
        Record an occurrence against the terminal node of `node`.

        A declaration node or an export face resolves to the canonical node,
        so an imported name and its definition share one aggregate.
        """
        if self._finalized:
            raise InvariantViolationError(
                "Occurrence recorded after finalize",
                {"symbol": occurrence.symbol_id, "document": occurrence.document},
            )

        terminal = self._resolver.terminal(node)
        bucket = self._buckets.get(terminal.vertex_id)
        if bucket is None:
            bucket = ReferenceAggregate(symbol_id=terminal.symbol_id, node_vertex_id=terminal.vertex_id)
            self._buckets[terminal.vertex_id] = bucket

        shard_key = (terminal.vertex_id, shard)
        group = self._shards.get(shard_key)
        if group is None:
            group = ShardOccurrences(shard=shard, document=occurrence.document)
            self._shards[shard_key] = group
            bucket.shards.append(group)

        if occurrence.is_definition:
            group.definitions.append(range_id)
        else:
            group.references.append(range_id)

    def finalize(self) -> list[ReferenceAggregate]:
        """Emit referenceResult vertices for nodes with at least one reference"""
        if self._finalized:
            raise InvariantViolationError("Reference aggregator finalized twice")
        self._finalized = True

        aggregates: list[ReferenceAggregate] = []
        for bucket in self._buckets.values():
            if bucket.reference_count == 0:
                continue

            result = self._emitter.reference_result()
            self._emitter.references_edge(bucket.node_vertex_id, result.id)
            bucket.result_vertex_id = result.id

            for group in bucket.shards:
                if group.definitions and self._settings.emit_definition_items:
                    self._emitter.item_edge(result.id, group.definitions, group.shard, ItemProperty.DEFINITIONS)
                if group.references:
                    self._emitter.item_edge(result.id, group.references, group.shard, ItemProperty.REFERENCES)

            aggregates.append(bucket)

        logger.debug("references_aggregated", aggregates=len(aggregates), nodes=len(self._buckets))
        return aggregates
