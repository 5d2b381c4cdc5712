"""
Program Builder

Fluent construction of a resolved Program, for semantic-model adapters and
tests.

Example:
    builder = ProgramBuilder("/@test")
    a = builder.document("/@test/a.ts")
    foo = a.declare("foo", SymbolKind.FUNCTION)
    a.export(foo, ExportForm.DEFAULT)
    program = builder.build()
"""

from typing import NamedTuple

from .models import (
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

RangeLike = TextRange | tuple[int, int, int, int]


class Declared(NamedTuple):
    """A symbol together with one of its physical declarations"""

    symbol: Symbol
    declaration: Declaration


def _to_range(value: RangeLike) -> TextRange:
    if isinstance(value, TextRange):
        return value
    return TextRange.of(*value)


class DocumentBuilder:
    def __init__(self, program_builder: "ProgramBuilder", document: Document):
        self._program = program_builder
        self.document = document
        self._next_line = 0

    def _auto_range(self, name: str) -> TextRange:
        line = self._next_line
        self._next_line += 1
        return TextRange.of(line, 0, line, len(name))

    def declare(
        self,
        name: str,
        kind: SymbolKind,
        at: RangeLike | None = None,
        full_range: RangeLike | None = None,
        exported: bool = False,
        merge_with: Declared | Symbol | None = None,
    ) -> Declared:
        """
        Top-level declaration in source order.

        exported=True also adds an `export` declaration-form binding.
        merge_with adds this declaration to an existing symbol.
        """
        declared = self._declare(name, kind, at, full_range, exported, merge_with, parent=None)
        self.document.declarations.append(declared.declaration)
        if exported:
            self.document.exports.append(ExportBinding(declared.symbol.id, ExportForm.DECLARATION))
        return declared

    def member(
        self,
        parent: Declared,
        name: str,
        kind: SymbolKind,
        at: RangeLike | None = None,
        full_range: RangeLike | None = None,
        exported: bool = False,
        merge_with: Declared | Symbol | None = None,
    ) -> Declared:
        """Member declared inside one declaration of `parent`"""
        declared = self._declare(name, kind, at, full_range, exported, merge_with, parent=parent.symbol)
        parent.declaration.members.append(declared.declaration)
        return declared

    def _declare(
        self,
        name: str,
        kind: SymbolKind,
        at: RangeLike | None,
        full_range: RangeLike | None,
        exported: bool,
        merge_with: Declared | Symbol | None,
        parent: Symbol | None,
    ) -> Declared:
        if isinstance(merge_with, Declared):
            merge_with = merge_with.symbol

        if merge_with is not None:
            symbol = merge_with
            symbol.exported = symbol.exported or exported
        else:
            symbol = self._program.new_symbol(
                name,
                kind,
                exported=exported,
                parent_id=parent.id if parent else None,
            )

        name_range = _to_range(at) if at is not None else self._auto_range(name)
        declaration = Declaration(
            symbol_id=symbol.id,
            document=self.document.path,
            range=name_range,
            kind=kind,
            full_range=_to_range(full_range) if full_range is not None else None,
        )
        symbol.declarations.append(declaration)
        return Declared(symbol, declaration)

    def export(
        self,
        target: Declared | Symbol,
        form: ExportForm = ExportForm.SPECIFIER,
        alias: str | None = None,
    ) -> ExportBinding:
        symbol = target.symbol if isinstance(target, Declared) else target
        binding = ExportBinding(symbol.id, form, alias)
        self.document.exports.append(binding)
        return binding

    def export_unresolved(self, symbol_id: str, form: ExportForm = ExportForm.SPECIFIER) -> ExportBinding:
        """Binding whose target the semantic model failed to resolve"""
        binding = ExportBinding(symbol_id, form)
        self.document.exports.append(binding)
        return binding

    def reference(self, target: Declared | Symbol, at: RangeLike | None = None) -> Reference:
        symbol = target.symbol if isinstance(target, Declared) else target
        reference = Reference(self.document.path, _to_range(at) if at is not None else self._auto_range(symbol.name))
        symbol.references.append(reference)
        return reference

    def imports(self) -> "DocumentBuilder":
        self.document.has_imports = True
        return self


class ProgramBuilder:
    def __init__(self, root: str):
        self._program = Program(root=root)
        self._documents: dict[str, DocumentBuilder] = {}
        self._sequence = 0

    def document(self, path: str) -> DocumentBuilder:
        builder = self._documents.get(path)
        if builder is None:
            document = Document(path=path)
            self._program.documents.append(document)
            builder = DocumentBuilder(self, document)
            self._documents[path] = builder
        return builder

    def new_symbol(
        self,
        name: str,
        kind: SymbolKind,
        exported: bool = False,
        parent_id: str | None = None,
        external_module: str | None = None,
    ) -> Symbol:
        self._sequence += 1
        symbol = Symbol(
            id=f"sym:{self._sequence}",
            name=name,
            kind=kind,
            exported=exported,
            parent_id=parent_id,
            external_module=external_module,
        )
        self._program.symbols[symbol.id] = symbol
        return symbol

    def external(self, name: str, module: str, kind: SymbolKind = SymbolKind.FUNCTION) -> Symbol:
        """Symbol declared outside the program (e.g. a library typing)"""
        return self.new_symbol(name, kind, exported=True, external_module=module)

    def build(self) -> Program:
        return self._program
