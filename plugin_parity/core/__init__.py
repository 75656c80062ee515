"""
Core Layer - 核心层

包含插件声明提取、配置项形状解析和插件集合比较。
"""

from plugin_parity.core.models import (
    PLUGIN_SUFFIX,
    DifferenceKind,
    Entity,
    EntityKind,
    FieldDescriptor,
    OptionShape,
    ParityReport,
    ParityRow,
    ScalarShape,
    ShapeDifference,
    StructuredShape,
    Surface,
    Verdict,
    describe_shape,
)
from plugin_parity.core.extractor import (
    classify_node,
    extract_entities,
    extract_surface,
)
from plugin_parity.core.resolver import resolve_option_shape
from plugin_parity.core.comparator import (
    compare_surfaces,
    diff_shapes,
    shapes_match,
)
from plugin_parity.core.pipeline import build_surface, run_parity

__all__ = [
    # models
    "PLUGIN_SUFFIX",
    "DifferenceKind",
    "Entity",
    "EntityKind",
    "FieldDescriptor",
    "OptionShape",
    "ParityReport",
    "ParityRow",
    "ScalarShape",
    "ShapeDifference",
    "StructuredShape",
    "Surface",
    "Verdict",
    "describe_shape",
    # extractor
    "classify_node",
    "extract_entities",
    "extract_surface",
    # resolver
    "resolve_option_shape",
    # comparator
    "compare_surfaces",
    "diff_shapes",
    "shapes_match",
    # pipeline
    "build_surface",
    "run_parity",
]
