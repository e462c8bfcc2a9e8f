"""
Unit tests for dump_parser.py

Tests recovery of the type table, signature assignments, imports and
exports from introspection dump text.
"""

import unittest
from pathlib import Path

from wasmbind.dump_parser import (
    DumpParser,
    lex_export_lines,
    lex_import_lines,
    lex_type_lines,
)
from wasmbind.types import FunctionType, ValueType

FIXTURES = Path(__file__).parent / "fixtures"


class TestTypeTable(unittest.TestCase):
    """Test type-table and signature line recognition."""

    def test_parses_params_and_return(self):
        types = DumpParser(" - type[2] (i32, f64) -> i32\n").parse_types()
        self.assertEqual(
            types,
            {2: FunctionType(params=[ValueType.I32, ValueType.F64], returns=ValueType.I32)},
        )

    def test_empty_param_list_and_nil_return(self):
        types = DumpParser(" - type[0] () -> nil\n").parse_types()
        self.assertEqual(types[0].params, [])
        self.assertIs(types[0].returns, ValueType.NIL)

    def test_v128_and_i64_kinds(self):
        types = DumpParser("type[7] (v128, i64) -> f32").parse_types()
        self.assertEqual(types[7].params, [ValueType.V128, ValueType.I64])
        self.assertIs(types[7].returns, ValueType.F32)

    def test_unknown_kind_is_kept(self):
        content = "type[0] (externref, i32) -> funcref\ntype[1] (i32) -> i32\n"
        types = DumpParser(content).parse_types()
        self.assertEqual(list(types), [0, 1])
        self.assertEqual(types[0].params, [ValueType.UNKNOWN, ValueType.I32])
        self.assertIs(types[0].returns, ValueType.UNKNOWN)

    def test_nil_parameter_is_unknown(self):
        types = DumpParser("type[0] (nil) -> nil\n").parse_types()
        self.assertEqual(types[0].params, [ValueType.UNKNOWN])

    def test_export_with_unknown_kind_survives(self):
        content = (
            "type[0] (externref) -> i32\n"
            "func[1] sig=0\n"
            ' - func[1] <f> -> "HAKO_F"\n'
        )
        [export] = DumpParser(content).parse().exports
        self.assertEqual(export.name, "HAKO_F")
        self.assertEqual(export.signature.params, [ValueType.UNKNOWN])

    def test_duplicate_type_index_last_write_wins(self):
        content = "type[3] (i32) -> i32\ntype[3] (f32) -> nil\n"
        types = DumpParser(content).parse_types()
        self.assertEqual(types[3].params, [ValueType.F32])
        self.assertIs(types[3].returns, ValueType.NIL)

    def test_signature_assignments(self):
        content = " - func[5] sig=2 <add>\n - func[6] sig=0\n"
        self.assertEqual(DumpParser(content).parse_signatures(), {5: 2, 6: 0})

    def test_duplicate_signature_last_write_wins(self):
        content = "func[5] sig=2\nfunc[5] sig=4\n"
        self.assertEqual(DumpParser(content).parse_signatures(), {5: 4})

    def test_garbage_is_ignored(self):
        content = "type[x] (i32) -> i32\nfunc[] sig=\nhello world\n"
        parsed = DumpParser(content).parse()
        self.assertEqual(parsed.types, {})
        self.assertEqual(parsed.signatures, {})
        self.assertEqual(parsed.imports, [])
        self.assertEqual(parsed.exports, [])


class TestLexers(unittest.TestCase):
    """Test the per-shape line lexers."""

    def test_type_lexer_yields_in_text_order(self):
        entries = list(lex_type_lines("type[4] () -> nil\ntype[1] () -> i32\n"))
        self.assertEqual([e.index for e in entries], [4, 1])

    def test_import_lexer_splits_origin_at_last_dot(self):
        line = " - func[0] sig=1 <fd_write> <- wasi.snapshot.fd_write"
        [entry] = list(lex_import_lines(line))
        self.assertEqual(entry.name, "fd_write")
        self.assertEqual(entry.module, "wasi.snapshot")
        self.assertEqual(entry.field_name, "fd_write")
        self.assertEqual(entry.type_index, 1)

    def test_export_lexer_with_and_without_alias(self):
        content = ' - func[5] <add> -> "add"\n - func[6] -> "sub"\n'
        entries = list(lex_export_lines(content))
        self.assertEqual([(e.func_index, e.name) for e in entries], [(5, "add"), (6, "sub")])

    def test_export_lexer_ignores_non_function_exports(self):
        self.assertEqual(list(lex_export_lines(' - memory[0] -> "memory"')), [])


class TestImportsAndExports(unittest.TestCase):
    """Test resolution of imports and exports against the type table."""

    def test_scenario_single_export(self):
        content = (
            " - type[2] (i32, f64) -> i32\n"
            " - func[5] sig=2 <add>\n"
            ' - func[5] <add> -> "add"\n'
        )
        [export] = DumpParser(content).parse().exports
        self.assertEqual(export.name, "add")
        self.assertEqual(export.func_index, 5)
        self.assertEqual(export.signature.params, [ValueType.I32, ValueType.F64])
        self.assertIs(export.signature.returns, ValueType.I32)

    def test_malloc_is_always_excluded(self):
        content = (
            "type[0] (i32) -> i32\n"
            "func[1] sig=0\n"
            'func[1] <malloc> -> "malloc"\n'
            'func[1] <free> -> "free"\n'
        )
        self.assertEqual(DumpParser(content).parse().exports, [])

    def test_reserved_names_are_configurable(self):
        content = (
            "type[0] (i32) -> i32\n"
            "func[1] sig=0\n"
            'func[1] -> "malloc"\n'
            'func[1] -> "my_alloc"\n'
        )
        exports = DumpParser(content, reserved_exports=["my_alloc"]).parse().exports
        self.assertEqual([e.name for e in exports], ["malloc"])

    def test_export_without_signature_is_dropped(self):
        content = 'type[0] () -> nil\nfunc[9] -> "orphan"\n'
        self.assertEqual(DumpParser(content).parse().exports, [])

    def test_export_with_unresolved_type_is_dropped(self):
        content = 'type[0] () -> nil\nfunc[9] sig=3\nfunc[9] -> "orphan"\n'
        self.assertEqual(DumpParser(content).parse().exports, [])

    def test_import_with_unresolved_type_is_dropped(self):
        content = "type[0] () -> nil\nfunc[0] sig=7 <env.f> <- env.f\n"
        self.assertEqual(DumpParser(content).parse().imports, [])

    def test_unresolved_signatures_never_leak(self):
        content = (
            "type[0] (i32) -> i32\n"
            "func[0] sig=4 <env.a> <- env.a\n"
            "func[1] sig=0 <env.b> <- env.b\n"
            "func[2] sig=4\n"
            "func[3] sig=0\n"
            'func[2] -> "bad"\n'
            'func[3] -> "good"\n'
        )
        parsed = DumpParser(content).parse()
        self.assertEqual([i.name for i in parsed.imports], ["env.b"])
        self.assertEqual([e.name for e in parsed.exports], ["good"])


class TestSampleDump(unittest.TestCase):
    """Test a full dump in the wasm-objdump -x layout."""

    @classmethod
    def setUpClass(cls):
        content = (FIXTURES / "sample.objdump.txt").read_text()
        cls.parsed = DumpParser(content).parse()

    def test_counts(self):
        self.assertEqual(len(self.parsed.types), 6)
        self.assertEqual(len(self.parsed.imports), 1)
        self.assertEqual(len(self.parsed.exports), 7)

    def test_import_fields(self):
        [imp] = self.parsed.imports
        self.assertEqual(imp.name, "wasi_snapshot_preview1.fd_write")
        self.assertEqual(imp.module, "wasi_snapshot_preview1")
        self.assertEqual(imp.func_index, 0)
        self.assertEqual(imp.signature.params, [ValueType.I32] * 3)

    def test_export_order_follows_text(self):
        self.assertEqual(
            [e.name for e in self.parsed.exports],
            [
                "HAKO_NewRuntime",
                "HAKO_FreeRuntime",
                "HAKO_NewFloat64",
                "HAKO_SetMemoryLimit",
                "HAKO_GetLength",
                "HAKO_Undocumented",
                "HAKO_FreeContext",
            ],
        )

    def test_signature_table_includes_imports(self):
        self.assertEqual(self.parsed.signatures[0], 5)
        self.assertEqual(self.parsed.signatures[1], 9)


if __name__ == "__main__":
    unittest.main()
