"""
类型模型

TypeChecker 解析出的类型都是这里的数据类。对象类型（接口 / 类 / 类型字面量）
只记录声明位置，成员由 TypeChecker 按需展开。
"""

from dataclasses import dataclass, field
from typing import Optional

from tree_sitter import Node

from plugin_parity.frontend.parser import SourceUnit


@dataclass(frozen=True, eq=False)
class Declaration:
    """
    一个具名声明

    Attributes:
        name: 声明名称
        kind: interface / class / alias / enum / namespace / module / type_parameter
        unit: 所在源文件
        node: 声明节点
    """
    name: str
    kind: str
    unit: SourceUnit = field(repr=False)
    node: Node = field(repr=False)

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.unit.posix_path(), self.node.start_byte, self.node.end_byte)


class Type:
    """所有类型的基类"""
    alias: Optional[str] = None


@dataclass(frozen=True)
class IntrinsicType(Type):
    """string / number / boolean / any / unknown / void / never / undefined / null ..."""
    name: str
    alias: Optional[str] = None


@dataclass(frozen=True)
class LiteralType(Type):
    text: str
    alias: Optional[str] = None


@dataclass(frozen=True)
class UnionType(Type):
    types: tuple[Type, ...]
    alias: Optional[str] = None


@dataclass(frozen=True)
class IntersectionType(Type):
    types: tuple[Type, ...]
    alias: Optional[str] = None


@dataclass(frozen=True)
class ArrayType(Type):
    element: Type
    readonly: bool = False
    alias: Optional[str] = None


@dataclass(frozen=True)
class TupleType(Type):
    elements: tuple[Type, ...]
    alias: Optional[str] = None


@dataclass(frozen=True)
class EnumType(Type):
    name: str
    alias: Optional[str] = None


@dataclass(frozen=True)
class TypeParameterType(Type):
    name: str
    alias: Optional[str] = None


@dataclass(frozen=True)
class OpaqueType(Type):
    """
    不再分解的类型：泛型实例、函数类型、条件类型、无法解析的引用等

    text 是规范化后的源码文本。
    """
    text: str
    is_function: bool = False
    alias: Optional[str] = None


@dataclass(frozen=True, eq=False)
class ObjectType(Type):
    """
    接口 / 类 / 类型字面量

    Attributes:
        name: 接口或类名，类型字面量为 None
        declarations: 接口或类的全部声明（声明合并）
        literal: 类型字面量的 (源文件, object_type 节点)
    """
    name: Optional[str] = None
    declarations: tuple[Declaration, ...] = ()
    literal: Optional[tuple[SourceUnit, Node]] = field(default=None, repr=False)
    alias: Optional[str] = None


@dataclass(eq=False)
class Symbol:
    """对象类型上的一个属性"""
    name: str
    declarations: list[tuple[SourceUnit, Node]] = field(default_factory=list, repr=False)
