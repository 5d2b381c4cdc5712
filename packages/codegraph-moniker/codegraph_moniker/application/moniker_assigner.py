"""
Moniker Assigner

Attaches moniker vertices to identity nodes as they are produced.

Decision per canonical node:
1. directly exported (declaration form)  → export, unique=group
2. declared outside the program          → import, unique=group
3. export-indirected or referenced       → local,  unique=document
4. otherwise                             → no moniker
"""

from collections.abc import Callable

from ..domain.elements import MonikerKind, MonikerVertex, UniquenessLevel
from ..domain.models import Document, Program, Symbol
from ..infrastructure.config import MonikerSettings
from ..infrastructure.emitter import GraphEmitter
from ..infrastructure.exceptions import (
    InvariantViolationError,
    LocalMonikerCollisionError,
    MonikerConflictError,
    UnresolvedSymbolError,
)
from ..infrastructure.logging import get_logger
from .id_strategy import (
    CanonicalKey,
    generate_export_identifier,
    generate_import_identifier,
    generate_local_identifier,
    join_path,
)
from .identity_resolver import IdentityNode

logger = get_logger(__name__)

# (reason, symbol_id, document)
SkipListener = Callable[[str, str, str | None], None]


class MonikerAssigner:
    def __init__(
        self,
        program: Program,
        emitter: GraphEmitter,
        settings: MonikerSettings,
        on_skip: SkipListener | None = None,
    ):
        self._program = program
        self._emitter = emitter
        self._settings = settings
        self._on_skip = on_skip

        # Export plan (filled by prepare)
        self._direct_exports: dict[str, str] = {}  # symbol_id → identifier
        self._indirected: set[str] = set()
        self._referenced: set[str] = set()

        # Registries
        self._export_owners: dict[str, tuple[str, int]] = {}  # identifier → (source, vertex_id)
        self._local_keys: dict[str, CanonicalKey] = {}  # identifier → key
        self._local_owners: dict[CanonicalKey, str] = {}  # key → symbol_id
        self._attached: dict[int, dict[MonikerKind, MonikerVertex]] = {}

    # ============================================================
    # Planning
    # ============================================================

    def prepare(self) -> None:
        """
        Scan export bindings and references before the walk.

        Monikers are attached when a node is allocated, so the export surface
        has to be known up front.
        """
        for document in self._program.ordered_documents():
            module_path = self._program.module_path(document.path)
            for binding in document.exports:
                try:
                    symbol = self._program.symbol(binding.symbol_id)
                except UnresolvedSymbolError:
                    # reported by the pass when the binding is walked
                    continue
                if binding.form.is_indirect:
                    self._mark_indirected(symbol, set())
                else:
                    self._mark_direct(symbol, module_path, binding.alias or symbol.name, set())

        for symbol in self._program.symbols.values():
            if symbol.references:
                self._referenced.add(symbol.id)

        logger.debug(
            "export_plan_ready",
            direct=len(self._direct_exports),
            indirected=len(self._indirected),
            referenced=len(self._referenced),
        )

    def _mark_direct(self, symbol: Symbol, module_path: str, path: str, seen: set[str]) -> None:
        if symbol.id in seen:
            return
        seen.add(symbol.id)
        self._direct_exports.setdefault(symbol.id, generate_export_identifier(module_path, path))
        for member in self._program.exported_members(symbol):
            self._mark_direct(member, module_path, join_path(path, member.name), seen)

    def _mark_indirected(self, symbol: Symbol, seen: set[str]) -> None:
        if symbol.id in seen:
            return
        seen.add(symbol.id)
        self._indirected.add(symbol.id)
        for member in self._program.exported_members(symbol):
            self._mark_indirected(member, seen)

    # ============================================================
    # Assignment
    # ============================================================

    def assign(self, node: IdentityNode, symbol: Symbol) -> MonikerVertex | None:
        """Moniker for a freshly allocated canonical node"""
        identifier = self._direct_exports.get(symbol.id)
        if identifier is not None:
            return self.assign_export(node, symbol, identifier)

        if symbol.is_external:
            qualified_name = self._qualified_name(symbol)
            if qualified_name is None:
                return None
            identifier = generate_import_identifier(symbol.external_module, qualified_name)
            return self._attach(node.vertex_id, identifier, UniquenessLevel.GROUP, MonikerKind.IMPORT)

        if symbol.id in self._indirected or symbol.id in self._referenced:
            return self._assign_local(node, symbol)

        return None

    def assign_export(self, node: IdentityNode, symbol: Symbol, identifier: str) -> MonikerVertex:
        owner = self._export_owners.get(identifier)
        if owner is not None and owner[0] != symbol.id:
            raise MonikerConflictError(identifier, owner[0], symbol.id, document=symbol.home_document)
        self._export_owners[identifier] = (symbol.id, node.vertex_id)
        return self._attach(node.vertex_id, identifier, UniquenessLevel.GROUP, MonikerKind.EXPORT)

    def assign_module(self, vertex_id: int, document: Document) -> MonikerVertex:
        """Module-root export moniker "<module>:" """
        identifier = generate_export_identifier(self._program.module_path(document.path))
        source = f"module:{document.path}"
        owner = self._export_owners.get(identifier)
        if owner is not None and owner[0] != source:
            raise MonikerConflictError(identifier, owner[0], source, document=document.path)
        self._export_owners[identifier] = (source, vertex_id)
        return self._attach(vertex_id, identifier, UniquenessLevel.GROUP, MonikerKind.EXPORT)

    def export_node(self, identifier: str) -> tuple[str, int] | None:
        """(source, vertex_id) already holding an export identifier"""
        return self._export_owners.get(identifier)

    def _qualified_name(self, symbol: Symbol) -> str | None:
        """Qualified name, or None when a parent link names an unknown symbol"""
        try:
            return self._program.qualified_name(symbol)
        except UnresolvedSymbolError as exc:
            if self._on_skip is not None:
                self._on_skip("parent_unresolved", symbol.id, symbol.home_document)
            else:
                logger.warning("moniker_skipped", symbol=symbol.id, parent=exc.symbol_id, reason="parent_unresolved")
            return None

    def _assign_local(self, node: IdentityNode, symbol: Symbol) -> MonikerVertex | None:
        document = symbol.home_document
        if document is None:
            logger.debug("local_moniker_skipped", symbol=symbol.id, reason="no_declaration")
            return None

        qualified_name = self._qualified_name(symbol)
        if qualified_name is None:
            return None

        key = CanonicalKey(
            document=self._program.relative_path(document),
            qualified_name=qualified_name,
            kind=symbol.kind,
        )
        identifier = generate_local_identifier(key, self._settings.local_digest_bytes)

        existing_key = self._local_keys.get(identifier)
        if existing_key is not None and existing_key != key:
            raise LocalMonikerCollisionError(identifier, tuple(existing_key), tuple(key))
        owner = self._local_owners.get(key)
        if owner is not None and owner != symbol.id:
            raise MonikerConflictError(identifier, owner, symbol.id, document=document)

        self._local_keys[identifier] = key
        self._local_owners[key] = symbol.id
        return self._attach(node.vertex_id, identifier, UniquenessLevel.DOCUMENT, MonikerKind.LOCAL)

    def _attach(
        self,
        vertex_id: int,
        identifier: str,
        unique: UniquenessLevel,
        kind: MonikerKind,
    ) -> MonikerVertex:
        attached = self._attached.setdefault(vertex_id, {})
        if kind in attached:
            raise InvariantViolationError(
                "Identity node already carries a moniker of this kind",
                {"node": vertex_id, "kind": kind.value, "identifier": identifier},
            )
        if {kind, *attached} >= {MonikerKind.EXPORT, MonikerKind.LOCAL}:
            raise InvariantViolationError(
                "Identity node cannot carry both export and local monikers",
                {"node": vertex_id, "identifier": identifier},
            )

        moniker = self._emitter.moniker(self._settings.scheme, identifier, unique, kind)
        self._emitter.moniker_edge(vertex_id, moniker.id)
        attached[kind] = moniker
        return moniker

    def monikers_of(self, vertex_id: int) -> list[MonikerVertex]:
        return list(self._attached.get(vertex_id, {}).values())
