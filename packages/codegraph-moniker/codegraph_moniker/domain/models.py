"""
Semantic Model (input side)

The fully resolved program handed to the moniker engine:
Program → Document → Declaration, plus the Symbol table.

Binding, alias following and module resolution already happened upstream;
these models only carry the results.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath

from ..infrastructure.exceptions import InvariantViolationError, UnresolvedSymbolError

# ============================================================
# Enums
# ============================================================


class SymbolKind(str, Enum):
    """Declaration kinds (language-agnostic)"""

    MODULE = "module"
    NAMESPACE = "namespace"
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    FUNCTION = "function"
    METHOD = "method"
    PROPERTY = "property"
    FIELD = "field"
    VARIABLE = "variable"
    CONSTANT = "constant"
    TYPE_ALIAS = "type_alias"
    PARAMETER = "parameter"

    @property
    def lsp_kind(self) -> int:
        """LSP SymbolKind number used in definition range tags"""
        return _LSP_SYMBOL_KINDS[self]


_LSP_SYMBOL_KINDS = {
    SymbolKind.MODULE: 2,
    SymbolKind.NAMESPACE: 3,
    SymbolKind.CLASS: 5,
    SymbolKind.METHOD: 6,
    SymbolKind.PROPERTY: 7,
    SymbolKind.FIELD: 8,
    SymbolKind.ENUM: 10,
    SymbolKind.INTERFACE: 11,
    SymbolKind.FUNCTION: 12,
    SymbolKind.VARIABLE: 13,
    SymbolKind.CONSTANT: 14,
    SymbolKind.TYPE_ALIAS: 26,
    SymbolKind.PARAMETER: 13,
}


class ExportForm(str, Enum):
    """How a name leaves its module"""

    DECLARATION = "declaration"  # export const x = 1;
    SPECIFIER = "specifier"  # export { foo } / export { _foo as foo }
    DEFAULT = "default"  # export default foo;
    ASSIGNMENT = "assignment"  # export = foo;

    @property
    def is_indirect(self) -> bool:
        """Forms that expose a separate export face over the implementation"""
        return self is not ExportForm.DECLARATION


class OccurrenceRole(str, Enum):
    DEFINITION = "definition"
    REFERENCE = "reference"


# ============================================================
# Locations
# ============================================================


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based line/character position"""

    line: int
    character: int

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True, order=True)
class TextRange:
    start: Position
    end: Position

    @classmethod
    def of(cls, start_line: int, start_char: int, end_line: int, end_char: int) -> "TextRange":
        return cls(Position(start_line, start_char), Position(end_line, end_char))

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


# ============================================================
# Program entities
# ============================================================


@dataclass
class Declaration:
    """
    One physical declaration of a Symbol.

    Declaration merging (interface + namespace + function sharing a name)
    shows up as several Declarations pointing at one symbol_id.
    """

    symbol_id: str
    document: str
    range: TextRange
    kind: SymbolKind
    full_range: TextRange | None = None
    members: list["Declaration"] = field(default_factory=list)


@dataclass(frozen=True)
class Reference:
    """A source range elsewhere in the program that refers to a Symbol"""

    document: str
    range: TextRange


@dataclass
class Symbol:
    """
    A logical program entity.

    `exported` means visible from the container: module scope for top-level
    symbols, the enclosing namespace/interface/class for members.
    """

    id: str
    name: str
    kind: SymbolKind
    declarations: list[Declaration] = field(default_factory=list)
    exported: bool = False
    parent_id: str | None = None
    references: list[Reference] = field(default_factory=list)
    external_module: str | None = None  # declared outside the program

    @property
    def is_external(self) -> bool:
        return self.external_module is not None and not self.declarations

    @property
    def home_document(self) -> str | None:
        """Document of the first declaration (None for external symbols)"""
        return self.declarations[0].document if self.declarations else None


@dataclass(frozen=True)
class ExportBinding:
    """A module-level export statement"""

    symbol_id: str
    form: ExportForm
    alias: str | None = None


@dataclass
class Document:
    path: str
    declarations: list[Declaration] = field(default_factory=list)
    exports: list[ExportBinding] = field(default_factory=list)
    has_imports: bool = False

    @property
    def is_module(self) -> bool:
        return bool(self.exports) or self.has_imports


@dataclass(frozen=True)
class Occurrence:
    """A definition or reference of a Symbol inside one document (the shard)"""

    symbol_id: str
    document: str
    range: TextRange
    role: OccurrenceRole

    @property
    def is_definition(self) -> bool:
        return self.role is OccurrenceRole.DEFINITION


@dataclass
class Program:
    """Ordered documents plus the symbol table"""

    root: str
    documents: list[Document] = field(default_factory=list)
    symbols: dict[str, Symbol] = field(default_factory=dict)

    def symbol(self, symbol_id: str) -> Symbol:
        """
        Look up a Symbol by id.

        Raises:
            UnresolvedSymbolError: the semantic model has no such symbol
        """
        try:
            return self.symbols[symbol_id]
        except KeyError:
            raise UnresolvedSymbolError(symbol_id) from None

    def relative_path(self, document_path: str) -> str:
        """Root-relative posix path of a document"""
        path = PurePosixPath(document_path)
        root = PurePosixPath(self.root)
        if path.is_absolute() and path.is_relative_to(root):
            return path.relative_to(root).as_posix()
        return path.as_posix()

    def module_path(self, document_path: str) -> str:
        """
        Module path used in export monikers.

        Example: "/@test/lib/a.ts" under root "/@test" → "lib/a"
        """
        relative = PurePosixPath(self.relative_path(document_path))
        return relative.with_suffix("").as_posix()

    def ordered_documents(self) -> list[Document]:
        """Documents in lexical path order (the traversal order)"""
        return sorted(self.documents, key=lambda doc: doc.path)

    def qualified_name(self, symbol: Symbol) -> str:
        """
        Dotted declared names from the top-level container to the symbol.

        Example: member `warn` of `console` of `RAL` → "RAL.console.warn"
        """
        names = [symbol.name]
        seen = {symbol.id}
        parent_id = symbol.parent_id
        while parent_id is not None:
            if parent_id in seen:
                raise InvariantViolationError("Cyclic parent chain", {"symbol": symbol.id})
            seen.add(parent_id)
            parent = self.symbol(parent_id)
            names.append(parent.name)
            parent_id = parent.parent_id
        return ".".join(reversed(names))

    def exported_members(self, symbol: Symbol) -> list[Symbol]:
        """
        Members visible from the container, across all of its declarations.

        Order follows the declarations, then the members inside each one.
        A member merged across several declarations is listed once.
        """
        members: list[Symbol] = []
        seen: set[str] = set()
        for declaration in symbol.declarations:
            for member_decl in declaration.members:
                member = self.symbols.get(member_decl.symbol_id)
                if member is None or member.id in seen or not member.exported:
                    continue
                seen.add(member.id)
                members.append(member)
        return members
