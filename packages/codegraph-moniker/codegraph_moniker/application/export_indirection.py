"""
Export Indirection Builder

    function _foo() { }
    export { _foo as foo };

    outer resultSet ──next──▶ inner resultSet (canonical node of _foo)
         │                         │
      export "a:foo"            local <hash of (a.ts, _foo, function)>

The outer node is the export face; the inner node keeps the implementation
identity. Members visible from an exported container get their own outer
nodes with the composed path ("a:foo.x").
"""

from ..domain.models import Document, ExportBinding, Program, Symbol
from ..infrastructure.exceptions import MonikerConflictError
from ..infrastructure.logging import get_logger
from .id_strategy import generate_export_identifier, join_path
from .identity_resolver import IdentityNode, SymbolIdentityResolver
from .moniker_assigner import MonikerAssigner

logger = get_logger(__name__)


class ExportIndirectionBuilder:
    def __init__(
        self,
        program: Program,
        resolver: SymbolIdentityResolver,
        assigner: MonikerAssigner,
    ):
        self._program = program
        self._resolver = resolver
        self._assigner = assigner

    def build(self, binding: ExportBinding, symbol: Symbol, document: Document) -> tuple[IdentityNode, IdentityNode]:
        """Apply one export binding of `document`"""
        if not binding.form.is_indirect:
            # export const x = ...; the symbol's own node is the export face
            node = self._resolver.resolve(symbol)
            return node, node
        return self.indirect(symbol, binding.alias or symbol.name, document)

    def indirect(self, symbol: Symbol, exported_as: str, document: Document) -> tuple[IdentityNode, IdentityNode]:
        """
        Create the outer export face for `symbol` exported as `exported_as`.

        Returns:
            (outer, inner) identity nodes
        """
        module_path = self._program.module_path(document.path)
        return self._indirect(symbol, exported_as, module_path, set())

    def _indirect(
        self,
        symbol: Symbol,
        path: str,
        module_path: str,
        seen: set[str],
    ) -> tuple[IdentityNode, IdentityNode]:
        seen.add(symbol.id)
        inner = self._resolver.resolve(symbol)
        identifier = generate_export_identifier(module_path, path)

        owner = self._assigner.export_node(identifier)
        if owner is None:
            outer = self._resolver.allocate_export_face(inner)
            self._assigner.assign_export(outer, symbol, identifier)
            logger.debug("export_face_created", symbol=symbol.id, identifier=identifier, node=outer.vertex_id)
        elif owner[0] == symbol.id:
            # same symbol already exported under this identifier
            outer = self._resolver.node(owner[1]) or inner
        else:
            raise MonikerConflictError(identifier, owner[0], symbol.id, document=symbol.home_document)

        for member in self._program.exported_members(symbol):
            if member.id in seen:
                continue
            self._indirect(member, join_path(path, member.name), module_path, seen)

        return outer, inner
