"""
Tests for moniker assignment and identifier strategy
"""

import base64

import pytest

from codegraph_moniker import (
    ExportForm,
    InvariantViolationError,
    LocalMonikerCollisionError,
    MonikerConflictError,
    SymbolKind,
)
from codegraph_moniker.application import moniker_assigner
from codegraph_moniker.application.id_strategy import (
    CanonicalKey,
    generate_export_identifier,
    generate_import_identifier,
    generate_local_identifier,
    join_path,
)
from codegraph_moniker.application.identity_resolver import IdentityNode, NodeRole
from codegraph_moniker.application.moniker_assigner import MonikerAssigner
from codegraph_moniker.infrastructure.emitter import GraphEmitter, IdCounter

A = "/@test/a.ts"


class TestIdStrategy:
    def test_export_identifiers(self):
        assert generate_export_identifier("a") == "a:"
        assert generate_export_identifier("a", "N.a") == "a:N.a"
        assert generate_export_identifier("lib/a", "RAL.console.warn") == "lib/a:RAL.console.warn"

    def test_import_identifier(self):
        assert generate_import_identifier("fs", "readFile") == "fs:readFile"

    def test_join_path_skips_empty(self):
        assert join_path("", "foo", "x") == "foo.x"

    def test_local_identifier_deterministic(self):
        key = CanonicalKey("a.ts", "foo", SymbolKind.FUNCTION)

        assert generate_local_identifier(key) == generate_local_identifier(CanonicalKey("a.ts", "foo", SymbolKind.FUNCTION))

    @pytest.mark.parametrize(
        "other",
        [
            CanonicalKey("b.ts", "foo", SymbolKind.FUNCTION),
            CanonicalKey("a.ts", "_foo", SymbolKind.FUNCTION),
            CanonicalKey("a.ts", "foo", SymbolKind.VARIABLE),
        ],
    )
    def test_local_identifier_distinguishes_key_parts(self, other):
        key = CanonicalKey("a.ts", "foo", SymbolKind.FUNCTION)

        assert generate_local_identifier(key) != generate_local_identifier(other)

    def test_digest_length(self):
        key = CanonicalKey("a.ts", "foo", SymbolKind.FUNCTION)

        assert len(base64.b64decode(generate_local_identifier(key, digest_bytes=20))) == 20

    def test_key_serialization_is_unambiguous(self):
        """Dots or separators in names cannot shift fields"""
        left = CanonicalKey("a.ts", "x,y", SymbolKind.FUNCTION)
        right = CanonicalKey("a.ts,x", "y", SymbolKind.FUNCTION)

        assert left.serialize() != right.serialize()


class TestLocalMonikers:
    def test_unreferenced_local_gets_nothing(self, builder, run):
        a = builder.document(A)
        helper = a.declare("helper", SymbolKind.FUNCTION)

        result = run(builder)

        assert result.monikers_of(result.node_for(helper.symbol.id)) == []

    def test_referenced_local_gets_document_moniker(self, builder, run):
        a = builder.document(A)
        tmp = a.declare("tmp", SymbolKind.VARIABLE)
        a.reference(tmp)

        result = run(builder)

        (moniker,) = result.monikers_of(result.node_for(tmp.symbol.id))
        assert moniker.kind.value == "local"
        assert moniker.unique.value == "document"

    def test_nested_local_uses_qualified_name(self, builder_factory, run):
        """f.i and g.i are different canonical keys"""
        builder = builder_factory()
        a = builder.document(A)
        f = a.declare("f", SymbolKind.FUNCTION)
        g = a.declare("g", SymbolKind.FUNCTION)
        fi = a.member(f, "i", SymbolKind.VARIABLE)
        gi = a.member(g, "i", SymbolKind.VARIABLE)
        a.reference(fi)
        a.reference(gi)

        result = run(builder)

        (fi_moniker,) = result.monikers_of(result.node_for(fi.symbol.id))
        (gi_moniker,) = result.monikers_of(result.node_for(gi.symbol.id))
        assert fi_moniker.identifier != gi_moniker.identifier

    def test_scheme_from_settings(self, builder, run):
        a = builder.document(A)
        a.declare("x", SymbolKind.CONSTANT, exported=True)

        result = run(builder, scheme="lsif-py")

        assert result.find_moniker("a:x").scheme == "lsif-py"


class TestImportMonikers:
    def test_external_symbol(self, builder, run):
        read_file = builder.external("readFile", "fs")
        builder.document(A).imports().reference(read_file)

        result = run(builder)

        (moniker,) = result.monikers_of(result.node_for(read_file.id))
        assert moniker.to_dict()["kind"] == "import"
        assert moniker.identifier == "fs:readFile"
        assert moniker.unique.value == "group"


class TestConflicts:
    def test_distinct_members_claiming_one_path(self, builder, run):
        """Two different `y` symbols under one merged RAL is a resolver defect"""
        a = builder.document(A)
        first = a.declare("RAL", SymbolKind.INTERFACE)
        a.member(first, "y", SymbolKind.PROPERTY, exported=True)
        second = a.declare("RAL", SymbolKind.INTERFACE, merge_with=first)
        a.member(second, "y", SymbolKind.PROPERTY, exported=True)
        a.export(first, ExportForm.DEFAULT)

        with pytest.raises(MonikerConflictError) as exc_info:
            run(builder)

        assert exc_info.value.context["document"] == A

    def test_merged_member_first_declaration_wins(self, builder, run):
        """One `y` symbol declared in two merged interfaces chains to its first declaration"""
        a = builder.document(A)
        first = a.declare("RAL", SymbolKind.INTERFACE, exported=True)
        y = a.member(first, "y", SymbolKind.PROPERTY, exported=True)
        second = a.declare("RAL", SymbolKind.INTERFACE, merge_with=first)
        y_again = a.member(second, "y", SymbolKind.PROPERTY, exported=True, merge_with=y)

        result = run(builder)

        assert y_again.symbol is y.symbol
        y_node = result.node_for(y.symbol.id)
        chained = [e for e in result.elements if e.label == "next" and e.to_dict()["inV"] == y_node]
        assert any(result.get(edge.out_v).label == "resultSet" for edge in chained)
        assert sum(1 for e in result.elements if getattr(e, "identifier", None) == "a:RAL.y") == 1

    def test_export_alias_clash(self, builder, run):
        """export { foo as x }; export { bar as x };"""
        a = builder.document(A)
        foo = a.declare("foo", SymbolKind.FUNCTION)
        bar = a.declare("bar", SymbolKind.FUNCTION)
        a.export(foo, ExportForm.SPECIFIER, alias="x")
        a.export(bar, ExportForm.SPECIFIER, alias="x")

        with pytest.raises(MonikerConflictError, match="claimed twice"):
            run(builder)

    def test_same_module_path_twice(self, builder, run):
        builder.document("/@test/a.ts").declare("x", SymbolKind.CONSTANT, exported=True)
        builder.document("/@test/a.js").declare("y", SymbolKind.CONSTANT, exported=True)

        with pytest.raises(MonikerConflictError):
            run(builder)

    def test_hash_collision_is_fatal(self, builder, run, monkeypatch):
        monkeypatch.setattr(moniker_assigner, "generate_local_identifier", lambda key, digest_bytes=16: "AAAA")
        a = builder.document(A)
        one = a.declare("one", SymbolKind.VARIABLE)
        two = a.declare("two", SymbolKind.VARIABLE)
        a.reference(one)
        a.reference(two)

        with pytest.raises(LocalMonikerCollisionError) as exc_info:
            run(builder)

        assert exc_info.value.identifier == "AAAA"


class TestAttachInvariant:
    def test_second_export_on_one_node(self, builder, settings):
        program = builder.build()
        assigner = MonikerAssigner(program, GraphEmitter(IdCounter()), settings)
        foo = builder.document(A).declare("foo", SymbolKind.FUNCTION).symbol
        node = IdentityNode(vertex_id=1, symbol_id=foo.id, role=NodeRole.CANONICAL)

        assigner.assign_export(node, foo, "a:foo")

        with pytest.raises(InvariantViolationError, match="already carries"):
            assigner.assign_export(node, foo, "a:foo2")

    def test_export_and_local_on_one_node(self, builder, settings):
        a = builder.document(A)
        foo = a.declare("foo", SymbolKind.FUNCTION)
        a.export(foo, ExportForm.DEFAULT)
        program = builder.build()
        assigner = MonikerAssigner(program, GraphEmitter(IdCounter()), settings)
        assigner.prepare()
        node = IdentityNode(vertex_id=1, symbol_id=foo.symbol.id, role=NodeRole.CANONICAL)

        assigner.assign(node, foo.symbol)

        with pytest.raises(InvariantViolationError, match="both export and local"):
            assigner.assign_export(node, foo.symbol, "a:foo")
