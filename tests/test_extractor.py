"""Tests for plugin declaration extraction."""

from plugin_parity.core.extractor import (
    ClassStyleDeclaration,
    ConstConstructibleDeclaration,
    OtherNode,
    classify_node,
    extract_entities,
    extract_surface,
    is_plugin_name,
)
from plugin_parity.core.models import EntityKind
from plugin_parity.frontend import create_program, parse_source
from plugin_parity.frontend.parser import walk


def extracted(write_file, content, name="index.d.ts"):
    return extract_entities(parse_source(write_file(name, content)))


def names_and_kinds(entities):
    return [(e.name, e.kind) for e in entities]


class TestClassifyNode:
    """Tests for classify_node."""

    def test_class_declaration(self, write_file):
        unit = parse_source(write_file("a.d.ts", "export declare class FooPlugin {}\n"))
        node = next(n for n in walk(unit.root) if n.type == "class_declaration")
        declaration = classify_node(node)
        assert isinstance(declaration, ClassStyleDeclaration)
        assert declaration.name == "FooPlugin"

    def test_const_constructible(self, write_file):
        unit = parse_source(write_file(
            "a.d.ts", "export declare const BarPlugin: { new (options: string): {} };\n"
        ))
        node = next(n for n in walk(unit.root) if n.type == "lexical_declaration")
        declaration = classify_node(node)
        assert isinstance(declaration, ConstConstructibleDeclaration)
        assert declaration.name == "BarPlugin"
        assert declaration.construct_signature.type == "construct_signature"

    def test_other(self, write_file):
        unit = parse_source(write_file("a.d.ts", "export declare class Helper {}\n"))
        node = next(n for n in walk(unit.root) if n.type == "class_declaration")
        assert isinstance(classify_node(node), OtherNode)

    def test_is_plugin_name(self):
        assert is_plugin_name("BannerPlugin")
        assert not is_plugin_name("Pluginish")
        assert not is_plugin_name("bannerplugin")


class TestExtractEntities:
    """Tests for extract_entities."""

    def test_class_style(self, write_file):
        entities = extracted(write_file, """
            export declare class FooPlugin {
                constructor(options: string);
            }
            export declare abstract class RspackBuiltinPlugin {}
            declare class Helper {}
            declare class Pluginish {}
        """)
        assert names_and_kinds(entities) == [
            ("FooPlugin", EntityKind.CLASS),
            ("RspackBuiltinPlugin", EntityKind.CLASS),
        ]
        assert entities[0].line == 1
        assert entities[1].line == 4

    def test_const_constructible(self, write_file):
        entities = extracted(write_file, """
            export declare const BarPlugin: {
                new (options: { enabled: boolean }): { apply(): void };
            };
        """)
        assert names_and_kinds(entities) == [("BarPlugin", EntityKind.CONST_CONSTRUCTIBLE)]
        assert entities[0].node.type == "variable_declarator"

    def test_const_requires_export_declare(self, write_file):
        entities = extracted(write_file, """
            declare const LocalPlugin: { new (): {} };
            export declare const ExportedPlugin: { new (): {} };
        """)
        assert [e.name for e in entities] == ["ExportedPlugin"]

    def test_const_requires_construct_signature(self, write_file):
        entities = extracted(write_file, """
            export declare const NoCtorPlugin: { apply(): void };
            export declare const ReferencePlugin: SomeConstructor;
        """)
        assert entities == []

    def test_const_requires_single_declarator(self, write_file):
        entities = extracted(write_file, """
            export declare const APlugin: { new (): {} }, BPlugin: { new (): {} };
        """)
        assert entities == []

    def test_const_inside_namespace_is_skipped(self, write_file):
        entities = extracted(write_file, """
            export declare namespace inner {
                export const InnerPlugin: { new (): {} };
                class NamespacedPlugin {}
            }
        """)
        assert [e.name for e in entities] == ["NamespacedPlugin"]

    def test_matched_class_is_not_descended(self, write_file):
        entities = extracted(write_file, """
            export class OuterPlugin {
                apply() {
                    class InnerHelperPlugin {}
                }
            }
            export class Outer {
                run() {
                    class NestedPlugin {}
                }
            }
        """, name="plugins.ts")
        assert [e.name for e in entities] == ["OuterPlugin", "NestedPlugin"]

    def test_document_order(self, write_file):
        entities = extracted(write_file, """
            export declare class ZPlugin {}
            export declare const APlugin: { new (): {} };
            export declare class MPlugin {}
        """)
        assert [e.name for e in entities] == ["ZPlugin", "APlugin", "MPlugin"]

    def test_names_end_with_suffix(self, write_file):
        entities = extracted(write_file, """
            export declare class FooPlugin {}
            export declare class PluginFoo {}
            export declare const PluginBar: { new (): {} };
        """)
        assert all(e.name.endswith("Plugin") for e in entities)
        assert [e.name for e in entities] == ["FooPlugin"]

    def test_deterministic(self, write_file):
        path = write_file("index.d.ts", """
            export declare class FooPlugin {}
            export declare const BarPlugin: { new (): {} };
        """)
        assert extract_entities(parse_source(path)) == extract_entities(parse_source(path))


class TestExtractSurface:
    """Tests for extract_surface over a whole program."""

    def test_path_filter(self, write_file):
        write_file("node_modules/refpack/index.d.ts", "export declare class FooPlugin {}\n")
        write_file("node_modules/other/index.d.ts", "export declare class OtherPlugin {}\n")
        entry = write_file("entry.d.ts", """
            import { FooPlugin } from "refpack";
            import { OtherPlugin } from "other";
            export declare class EntryPlugin {}
        """)
        program = create_program([entry])

        assert [e.name for e in extract_surface(program, "node_modules/refpack")] == ["FooPlugin"]
        assert [e.name for e in extract_surface(program, "")] == [
            "FooPlugin", "OtherPlugin", "EntryPlugin",
        ]

    def test_filter_matching_nothing(self, write_file):
        entry = write_file("entry.d.ts", "export declare class EntryPlugin {}\n")
        program = create_program([entry])
        assert extract_surface(program, "node_modules/nothing-here") == []
