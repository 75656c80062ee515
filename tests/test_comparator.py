"""Tests for surface comparison."""

from pathlib import Path

from plugin_parity.config import ParityConfig, SurfaceConfig
from plugin_parity.core import run_parity
from plugin_parity.core.comparator import (
    compare_surfaces,
    diff_shapes,
    find_counterpart,
    shapes_match,
)
from plugin_parity.core.models import (
    DifferenceKind,
    Entity,
    EntityKind,
    FieldDescriptor,
    ScalarShape,
    ShapeDifference,
    StructuredShape,
    Verdict,
)

REFERENCE_SOURCE = """
export declare class FooPlugin {
    constructor(options: string);
}
export declare class BarPlugin {
    constructor(options: { enabled: boolean });
}
export declare class BazPlugin {
    constructor(options: string);
}
export declare class QuxPlugin {
    apply(compiler: any): void;
}
export class OuterPlugin {
    constructor(options: string) {}
    apply() {
        class InnerHelperPlugin {}
    }
}
"""

CANDIDATE_SOURCE = """
export declare const BarPlugin: {
    new (options: { enabled: boolean }): { apply(): void };
};
export declare class BazPlugin {
    constructor(options: number);
}
export declare class QuxPlugin {
    apply(compiler: any): void;
}
export declare class OuterPlugin {
    constructor(options: string);
}
export declare class ExtraPlugin {}
"""


def entity(name, options=None, kind=EntityKind.CLASS):
    return Entity(name=name, kind=kind, source_path=Path("types.d.ts"), line=1, options=options)


def structured(*fields):
    return StructuredShape(tuple(FieldDescriptor(name, type_string) for name, type_string in fields))


class TestShapesMatch:
    """Tests for shape equality."""

    def test_absent(self):
        assert shapes_match(None, None)
        assert not shapes_match(None, ScalarShape("string"))
        assert not shapes_match(structured(), None)

    def test_scalar(self):
        assert shapes_match(ScalarShape("string"), ScalarShape("string"))
        assert not shapes_match(ScalarShape("string"), ScalarShape("number"))

    def test_structured_ignores_field_order(self):
        a = structured(("a", "string"), ("b", "number"))
        b = structured(("b", "number"), ("a", "string"))
        assert shapes_match(a, b)

    def test_structured_compares_types(self):
        a = structured(("a", "string"))
        b = structured(("a", "number"))
        assert not shapes_match(a, b)

    def test_scalar_never_equals_structured(self):
        assert not shapes_match(ScalarShape("{}"), structured())


class TestDiffShapes:
    """Tests for diff_shapes."""

    def test_identical(self):
        assert diff_shapes(ScalarShape("string"), ScalarShape("string")) == []

    def test_field_differences(self):
        reference = structured(("a", "string"), ("b", "number"), ("c", "boolean"))
        candidate = structured(("a", "string"), ("b", "string"), ("d", "RegExp"))

        assert diff_shapes(reference, candidate) == [
            ShapeDifference(DifferenceKind.TYPE, "b", expected="number", actual="string"),
            ShapeDifference(DifferenceKind.MISSING, "c", expected="boolean"),
            ShapeDifference(DifferenceKind.EXTRA, "d", actual="RegExp"),
        ]

    def test_whole_shape_difference(self):
        differences = diff_shapes(ScalarShape("string"), None)
        assert differences == [
            ShapeDifference(DifferenceKind.SHAPE, expected="string", actual="(none)"),
        ]
        assert differences[0].describe() == "options: string -> (none)"

    def test_describe(self):
        assert ShapeDifference(DifferenceKind.MISSING, "a", expected="string").describe() == \
            "missing `a: string`"
        assert ShapeDifference(DifferenceKind.EXTRA, "b", actual="number").describe() == \
            "extra `b: number`"
        assert ShapeDifference(DifferenceKind.TYPE, "c", "string", "number").describe() == \
            "`c`: string -> number"


class TestCompareSurfaces:
    """Tests for compare_surfaces on hand-built entities."""

    def test_verdicts_follow_reference_order(self):
        reference = [
            entity("FooPlugin", ScalarShape("string")),
            entity("QuxPlugin"),
            entity("BazPlugin", ScalarShape("string")),
        ]
        candidate = [
            entity("BazPlugin", ScalarShape("number")),
            entity("QuxPlugin"),
            entity("OnlyInCandidatePlugin"),
        ]

        rows = compare_surfaces(reference, candidate)

        assert [(r.entity.name, r.verdict) for r in rows] == [
            ("FooPlugin", Verdict.NOT_IMPLEMENTED),
            ("QuxPlugin", Verdict.FULLY_IMPLEMENTED),
            ("BazPlugin", Verdict.PARTIALLY_IMPLEMENTED),
        ]
        assert rows[0].counterpart is None
        assert rows[2].counterpart.name == "BazPlugin"

    def test_absent_reference_shape_needs_absent_candidate(self):
        rows = compare_surfaces([entity("APlugin")], [entity("APlugin", ScalarShape("string"))])
        assert rows[0].verdict is Verdict.PARTIALLY_IMPLEMENTED

    def test_first_candidate_with_same_name_wins(self):
        candidates = [entity("APlugin", ScalarShape("string")), entity("APlugin")]
        assert find_counterpart("APlugin", candidates).options == ScalarShape("string")
        rows = compare_surfaces([entity("APlugin", ScalarShape("string"))], candidates)
        assert rows[0].verdict is Verdict.FULLY_IMPLEMENTED

    def test_kind_is_ignored(self):
        shape = structured(("enabled", "boolean"))
        rows = compare_surfaces(
            [entity("BarPlugin", shape)],
            [entity("BarPlugin", shape, kind=EntityKind.CONST_CONSTRUCTIBLE)],
        )
        assert rows[0].verdict is Verdict.FULLY_IMPLEMENTED

    def test_empty_reference(self):
        assert compare_surfaces([], [entity("APlugin")]) == []


class TestRunParity:
    """End-to-end comparison of two declaration files."""

    def setup_method(self):
        self.verdicts = {
            "FooPlugin": Verdict.NOT_IMPLEMENTED,
            "BarPlugin": Verdict.FULLY_IMPLEMENTED,
            "BazPlugin": Verdict.PARTIALLY_IMPLEMENTED,
            "QuxPlugin": Verdict.FULLY_IMPLEMENTED,
            "OuterPlugin": Verdict.FULLY_IMPLEMENTED,
        }

    def run(self, write_file):
        reference = write_file("reference/plugins.ts", REFERENCE_SOURCE)
        candidate = write_file("candidate/index.d.ts", CANDIDATE_SOURCE)
        config = ParityConfig(
            reference=SurfaceConfig(label="webpack", entry=reference, path_filter="/reference/"),
            candidate=SurfaceConfig(label="Rspack", entry=candidate, path_filter="/candidate/"),
        )
        return run_parity(config)

    def test_scenarios(self, write_file):
        report = self.run(write_file)

        assert [(r.entity.name, r.verdict) for r in report.rows] == list(self.verdicts.items())

    def test_nested_class_is_not_emitted(self, write_file):
        report = self.run(write_file)

        assert "InnerHelperPlugin" not in report.reference.names()

    def test_partial_differences(self, write_file):
        report = self.run(write_file)
        baz = next(r for r in report.rows if r.entity.name == "BazPlugin")

        assert baz.differences == (
            ShapeDifference(DifferenceKind.SHAPE, expected="string", actual="number"),
        )

    def test_summary(self, write_file):
        report = self.run(write_file)

        assert report.summary() == {
            "total": 5,
            "fully_implemented": 3,
            "partially_implemented": 1,
            "not_implemented": 1,
        }
        assert report.coverage == 0.8
        assert report.candidate.names() == [
            "BarPlugin", "BazPlugin", "QuxPlugin", "OuterPlugin", "ExtraPlugin",
        ]

    def test_deterministic(self, write_file):
        first = self.run(write_file)
        second = self.run(write_file)

        assert [(r.entity, r.verdict) for r in first.rows] == \
            [(r.entity, r.verdict) for r in second.rows]

    def test_progress_callback(self, write_file):
        reference = write_file("reference/plugins.ts", REFERENCE_SOURCE)
        candidate = write_file("candidate/index.d.ts", CANDIDATE_SOURCE)
        stages = []
        config = ParityConfig(
            reference=SurfaceConfig(label="webpack", entry=reference),
            candidate=SurfaceConfig(label="Rspack", entry=candidate),
        )

        run_parity(config, on_progress=lambda stage, message: stages.append(stage))

        assert stages == ["load", "extract", "load", "extract", "compare"]
