"""
Tests for domain models, graph elements and the program builder
"""

import pytest

from codegraph_moniker import (
    Declared,
    ExportForm,
    InvariantViolationError,
    MonikerConflictError,
    Program,
    Symbol,
    SymbolKind,
    TextRange,
    UnresolvedSymbolError,
)
from codegraph_moniker.domain.elements import (
    ItemEdge,
    ItemProperty,
    MonikerKind,
    MonikerVertex,
    RangeVertex,
    ReferenceTag,
    UniquenessLevel,
)
from codegraph_moniker.infrastructure.emitter import GraphEmitter, IdCounter

A = "/@test/a.ts"


class TestProgramPaths:
    @pytest.mark.parametrize(
        "path, relative, module",
        [
            ("/@test/a.ts", "a.ts", "a"),
            ("/@test/lib/util.d.ts", "lib/util.d.ts", "lib/util.d"),
            ("/elsewhere/b.ts", "/elsewhere/b.ts", "/elsewhere/b"),
        ],
    )
    def test_relative_and_module_path(self, path, relative, module):
        program = Program(root="/@test")

        assert program.relative_path(path) == relative
        assert program.module_path(path) == module

    def test_ordered_documents(self, builder):
        builder.document("/@test/b.ts")
        builder.document("/@test/a.ts")

        assert [d.path for d in builder.build().ordered_documents()] == ["/@test/a.ts", "/@test/b.ts"]

    def test_unknown_symbol(self):
        with pytest.raises(UnresolvedSymbolError) as exc_info:
            Program(root="/@test").symbol("sym:404")

        assert exc_info.value.symbol_id == "sym:404"


class TestQualifiedName:
    def test_nested_members(self, builder):
        a = builder.document(A)
        ral = a.declare("RAL", SymbolKind.INTERFACE)
        console = a.member(ral, "console", SymbolKind.PROPERTY)
        warn = a.member(console, "warn", SymbolKind.METHOD)

        assert builder.build().qualified_name(warn.symbol) == "RAL.console.warn"

    def test_cyclic_parents(self):
        program = Program(root="/@test")
        left = Symbol(id="s1", name="L", kind=SymbolKind.NAMESPACE, parent_id="s2")
        right = Symbol(id="s2", name="R", kind=SymbolKind.NAMESPACE, parent_id="s1")
        program.symbols.update({left.id: left, right.id: right})

        with pytest.raises(InvariantViolationError, match="Cyclic"):
            program.qualified_name(left)


class TestExportedMembers:
    def test_across_declarations(self, builder):
        a = builder.document(A)
        interface = a.declare("RAL", SymbolKind.INTERFACE)
        y = a.member(interface, "y", SymbolKind.PROPERTY, exported=True)
        namespace = a.declare("RAL", SymbolKind.NAMESPACE, merge_with=interface)
        x = a.member(namespace, "x", SymbolKind.CONSTANT, exported=True)
        a.member(namespace, "hidden", SymbolKind.FUNCTION)
        a.member(namespace, "y", SymbolKind.PROPERTY, exported=True, merge_with=y)

        members = builder.build().exported_members(interface.symbol)

        assert [m.name for m in members] == ["y", "x"]
        assert members[0] is y.symbol
        assert members[1] is x.symbol


class TestBuilder:
    def test_auto_ranges_advance_per_document(self, builder):
        a = builder.document(A)
        first = a.declare("foo", SymbolKind.FUNCTION)
        second = a.declare("bar", SymbolKind.FUNCTION)
        other = builder.document("/@test/b.ts").declare("baz", SymbolKind.FUNCTION)

        assert first.declaration.range == TextRange.of(0, 0, 0, 3)
        assert second.declaration.range == TextRange.of(1, 0, 1, 3)
        assert other.declaration.range == TextRange.of(0, 0, 0, 3)

    def test_exported_declaration_adds_binding(self, builder):
        a = builder.document(A)
        foo = a.declare("foo", SymbolKind.FUNCTION, exported=True)

        (binding,) = a.document.exports
        assert binding.symbol_id == foo.symbol.id
        assert binding.form is ExportForm.DECLARATION
        assert a.document.is_module

    def test_merge_with_shares_symbol(self, builder):
        a = builder.document(A)
        first = a.declare("RAL", SymbolKind.INTERFACE)
        second = a.declare("RAL", SymbolKind.NAMESPACE, merge_with=first, exported=True)

        assert isinstance(second, Declared)
        assert second.symbol is first.symbol
        assert len(first.symbol.declarations) == 2
        assert first.symbol.exported

    def test_member_parent(self, builder):
        a = builder.document(A)
        ns = a.declare("N", SymbolKind.NAMESPACE)
        inner = a.member(ns, "a", SymbolKind.FUNCTION)

        assert inner.symbol.parent_id == ns.symbol.id
        assert ns.declaration.members == [inner.declaration]
        assert a.document.declarations == [ns.declaration]

    def test_external_symbol(self, builder):
        symbol = builder.external("readFile", "fs")

        assert symbol.is_external
        assert symbol.home_document is None
        assert builder.build().symbol(symbol.id) is symbol

    def test_imports_marks_module(self, builder):
        a = builder.document(A)
        assert not a.document.is_module

        a.imports()

        assert a.document.is_module


class TestElements:
    def test_symbol_kind_lsp_numbers(self):
        assert SymbolKind.FUNCTION.lsp_kind == 12
        assert SymbolKind.INTERFACE.lsp_kind == 11
        assert SymbolKind.NAMESPACE.lsp_kind == 3

    def test_moniker_vertex(self):
        vertex = MonikerVertex(7, "tsc", "a:foo", UniquenessLevel.GROUP, MonikerKind.EXPORT)

        assert vertex.to_dict() == {
            "id": 7,
            "type": "vertex",
            "label": "moniker",
            "scheme": "tsc",
            "identifier": "a:foo",
            "unique": "group",
            "kind": "export",
        }

    def test_reference_range(self):
        vertex = RangeVertex(3, TextRange.of(1, 2, 1, 5), ReferenceTag("foo"))

        assert vertex.to_dict() == {
            "id": 3,
            "type": "vertex",
            "label": "range",
            "start": {"line": 1, "character": 2},
            "end": {"line": 1, "character": 5},
            "tag": {"type": "reference", "text": "foo"},
        }

    def test_item_edge(self):
        edge = ItemEdge(9, out_v=4, in_vs=[5, 6], shard=1, property=ItemProperty.REFERENCES)

        assert edge.to_dict() == {
            "id": 9,
            "type": "edge",
            "label": "item",
            "outV": 4,
            "inVs": [5, 6],
            "shard": 1,
            "property": "references",
        }

    def test_emitter_ids_follow_counter(self):
        counter = IdCounter(start=10)
        emitter = GraphEmitter(counter)

        rs = emitter.result_set()
        edge = emitter.references_edge(rs.id, 99)

        assert (rs.id, edge.id) == (10, 11)
        assert counter.peek == 12
        assert emitter.get(11) is edge
        assert edge.to_dict()["label"] == "textDocument/references"


class TestExceptions:
    def test_context_in_message(self):
        error = MonikerConflictError("a:foo", "sym:1", "sym:2", document=A)

        assert str(error) == f"Moniker identifier claimed twice [identifier=a:foo, existing=sym:1, new=sym:2, document={A}]"
        assert isinstance(error, InvariantViolationError)

    def test_unresolved_is_not_fatal_kind(self):
        assert not issubclass(UnresolvedSymbolError, InvariantViolationError)
