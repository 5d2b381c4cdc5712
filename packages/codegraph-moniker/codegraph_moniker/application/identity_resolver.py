"""
Symbol Identity Resolver

One canonical Identity Node (resultSet) per logical Symbol.

Declaration merging:
    interface RAL {}     → canonical node C
    namespace RAL {}     → node D2, next D2 → C
    function RAL() {}    → node D3, next D3 → D2

Every chain ends at the canonical node, which carries the monikers.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ..domain.models import Declaration, Symbol
from ..infrastructure.emitter import GraphEmitter
from ..infrastructure.exceptions import InvariantViolationError
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)


class NodeRole(str, Enum):
    CANONICAL = "canonical"
    DECLARATION = "declaration"  # later declaration of a merged symbol
    EXPORT_FACE = "export_face"  # outer node of an export indirection


@dataclass(frozen=True)
class IdentityNode:
    vertex_id: int
    symbol_id: str
    role: NodeRole
    next_vertex_id: int | None = None

    @property
    def is_canonical(self) -> bool:
        return self.role is NodeRole.CANONICAL


CanonicalListener = Callable[[IdentityNode, Symbol], None]


class SymbolIdentityResolver:
    """
    Owns the shared identity-node table of a pass.

    resolve() is idempotent: the first encounter of a Symbol, through a
    declaration or a reference, allocates its canonical node.
    """

    def __init__(
        self,
        emitter: GraphEmitter,
        on_canonical: CanonicalListener | None = None,
    ):
        self._emitter = emitter
        self._on_canonical = on_canonical

        self._nodes: dict[int, IdentityNode] = {}
        self._canonical: dict[str, IdentityNode] = {}
        self._chain_tail: dict[str, IdentityNode] = {}
        self._declared: set[str] = set()
        self._declaration_nodes: dict[tuple, IdentityNode] = {}

    # ============================================================
    # Resolution
    # ============================================================

    def resolve(self, symbol: Symbol) -> IdentityNode:
        node = self._canonical.get(symbol.id)
        if node is not None:
            return node

        vertex = self._emitter.result_set()
        node = IdentityNode(vertex_id=vertex.id, symbol_id=symbol.id, role=NodeRole.CANONICAL)
        self._register(node)
        self._canonical[symbol.id] = node
        self._chain_tail[symbol.id] = node
        logger.debug("identity_allocated", symbol=symbol.id, name=symbol.name, node=node.vertex_id)

        if self._on_canonical is not None:
            self._on_canonical(node, symbol)
        return node

    def resolve_declaration(self, symbol: Symbol, declaration: Declaration) -> IdentityNode:
        """
        Node for one physical declaration.

        The first declaration seen binds to the canonical node; each later one
        gets its own node chained toward the node allocated before it.
        """
        key = (symbol.id, declaration.document, declaration.range)
        existing = self._declaration_nodes.get(key)
        if existing is not None:
            return existing

        if symbol.id not in self._declared:
            self._declared.add(symbol.id)
            node = self.resolve(symbol)
        else:
            previous = self._chain_tail[symbol.id]
            vertex = self._emitter.result_set()
            self._emitter.next_edge(vertex.id, previous.vertex_id)
            node = IdentityNode(
                vertex_id=vertex.id,
                symbol_id=symbol.id,
                role=NodeRole.DECLARATION,
                next_vertex_id=previous.vertex_id,
            )
            self._register(node)
            self._chain_tail[symbol.id] = node
            logger.debug("declaration_chained", symbol=symbol.id, node=node.vertex_id, next=previous.vertex_id)

        self._declaration_nodes[key] = node
        return node

    def allocate_export_face(self, inner: IdentityNode) -> IdentityNode:
        """Outer node linked with `next` to an inner identity node"""
        vertex = self._emitter.result_set()
        self._emitter.next_edge(vertex.id, inner.vertex_id)
        node = IdentityNode(
            vertex_id=vertex.id,
            symbol_id=inner.symbol_id,
            role=NodeRole.EXPORT_FACE,
            next_vertex_id=inner.vertex_id,
        )
        self._register(node)
        return node

    def _register(self, node: IdentityNode) -> None:
        if node.vertex_id in self._nodes:
            raise InvariantViolationError("Identity node registered twice", {"node": node.vertex_id})
        self._nodes[node.vertex_id] = node

    # ============================================================
    # Queries
    # ============================================================

    def node(self, vertex_id: int) -> IdentityNode | None:
        return self._nodes.get(vertex_id)

    @property
    def canonical_nodes(self) -> list[IdentityNode]:
        return list(self._canonical.values())

    def terminal(self, node: IdentityNode) -> IdentityNode:
        """Follow next links to the node that carries identity"""
        seen: set[int] = set()
        current = node
        while current.next_vertex_id is not None:
            if current.vertex_id in seen:
                raise InvariantViolationError("Cycle in next chain", {"node": node.vertex_id})
            seen.add(current.vertex_id)
            following = self._nodes.get(current.next_vertex_id)
            if following is None:
                raise InvariantViolationError(
                    "Dangling next link", {"node": current.vertex_id, "next": current.next_vertex_id}
                )
            current = following

        if not current.is_canonical:
            raise InvariantViolationError("Chain does not end at a canonical node", {"node": node.vertex_id})
        return current
