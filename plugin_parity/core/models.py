"""
数据模型定义

插件实体、配置项形状、比较结论等核心数据类。
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from tree_sitter import Node

# 插件命名约定
PLUGIN_SUFFIX = "Plugin"


class EntityKind(Enum):
    CLASS = "class"
    CONST_CONSTRUCTIBLE = "const-constructible"


@dataclass(frozen=True)
class FieldDescriptor:
    """结构化配置项中的一个字段"""
    name: str
    type_string: str


@dataclass(frozen=True)
class ScalarShape:
    """
    无法分解为具名字段的配置项类型

    Attributes:
        type_string: 类型的规范字符串
    """
    type_string: str

    def describe(self) -> str:
        return self.type_string


@dataclass(frozen=True)
class StructuredShape:
    """
    接口 / 类 / 类型字面量形式的配置项

    Attributes:
        fields: 字段列表（类型检查器的属性枚举顺序）
    """
    fields: tuple[FieldDescriptor, ...] = ()

    def describe(self) -> str:
        if not self.fields:
            return "{}"
        return "{ " + "; ".join(f"{f.name}: {f.type_string}" for f in self.fields) + " }"


OptionShape = Union[ScalarShape, StructuredShape]


def describe_shape(shape: Optional[OptionShape]) -> str:
    if shape is None:
        return "(none)"
    return shape.describe()


@dataclass(frozen=True)
class Entity:
    """
    一个插件声明

    Attributes:
        name: 插件名（以 Plugin 结尾）
        kind: 声明形式
        source_path: 所在声明文件
        line: 行号 (1-based)
        options: 解析后的配置项形状，None 表示无法解析
        node: 声明节点（class 声明或 variable_declarator）
    """
    name: str
    kind: EntityKind
    source_path: Path
    line: int
    options: Optional[OptionShape] = None
    node: Optional[Node] = field(default=None, compare=False, repr=False)


@dataclass
class Surface:
    """
    一个生态的插件集合

    Attributes:
        label: 显示名称，例如 webpack
        entry: 入口文件
        path_filter: 源文件路径过滤子串
        entities: 按发现顺序排列的插件
    """
    label: str
    entry: Path
    path_filter: str
    entities: list[Entity] = field(default_factory=list)

    def names(self) -> list[str]:
        return [e.name for e in self.entities]


class Verdict(Enum):
    NOT_IMPLEMENTED = "not_implemented"
    FULLY_IMPLEMENTED = "fully_implemented"
    PARTIALLY_IMPLEMENTED = "partially_implemented"

    @property
    def label(self) -> str:
        return VERDICT_LABELS[self]


VERDICT_LABELS = {
    Verdict.NOT_IMPLEMENTED: "🔴 Not implemented",
    Verdict.FULLY_IMPLEMENTED: "🟢 Implemented",
    Verdict.PARTIALLY_IMPLEMENTED: "🟡 Partially implemented",
}


class DifferenceKind(Enum):
    MISSING = "missing"
    EXTRA = "extra"
    TYPE = "type"
    SHAPE = "shape"


@dataclass(frozen=True)
class ShapeDifference:
    """
    配置项形状的一处差异

    Attributes:
        kind: 差异类型
        field: 字段名（整体形状差异时为 None）
        expected: 参考生态中的类型
        actual: 候选生态中的类型
    """
    kind: DifferenceKind
    field: Optional[str] = None
    expected: Optional[str] = None
    actual: Optional[str] = None

    def describe(self) -> str:
        if self.kind is DifferenceKind.MISSING:
            return f"missing `{self.field}: {self.expected}`"
        if self.kind is DifferenceKind.EXTRA:
            return f"extra `{self.field}: {self.actual}`"
        if self.kind is DifferenceKind.TYPE:
            return f"`{self.field}`: {self.expected} -> {self.actual}"
        return f"options: {self.expected} -> {self.actual}"


@dataclass(frozen=True)
class ParityRow:
    """参考生态中一个插件的比较结论"""
    entity: Entity
    verdict: Verdict
    counterpart: Optional[Entity] = None
    differences: tuple[ShapeDifference, ...] = ()


@dataclass
class ParityReport:
    """
    一次完整比较的结果

    Attributes:
        reference: 参考生态
        candidate: 候选生态
        rows: 每个参考插件一行，保持参考生态顺序
    """
    reference: Surface
    candidate: Surface
    rows: list[ParityRow] = field(default_factory=list)

    def count(self, verdict: Verdict) -> int:
        return sum(1 for row in self.rows if row.verdict is verdict)

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.rows),
            "fully_implemented": self.count(Verdict.FULLY_IMPLEMENTED),
            "partially_implemented": self.count(Verdict.PARTIALLY_IMPLEMENTED),
            "not_implemented": self.count(Verdict.NOT_IMPLEMENTED),
        }

    @property
    def coverage(self) -> float:
        """候选生态已提供（完全或部分）的参考插件比例"""
        if not self.rows:
            return 0.0
        present = len(self.rows) - self.count(Verdict.NOT_IMPLEMENTED)
        return present / len(self.rows)
