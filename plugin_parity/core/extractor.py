"""
插件声明提取

按命名约定（名称以 Plugin 结尾）先序遍历语法树，识别两种声明形式：

- 类声明:
    export declare class XxxPlugin extends RspackBuiltinPlugin {
      constructor(options: XxxPluginOptions);
    }
- 可 new 的常量:
    export declare const XxxPlugin: {
      new (options: XxxPluginOptions): { ... }
    }

命中的节点不再向下遍历，避免把插件类内部的声明重复计入。
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from tree_sitter import Node

from plugin_parity.core.models import PLUGIN_SUFFIX, Entity, EntityKind
from plugin_parity.frontend.parser import (
    SourceUnit,
    modifiers_of,
    named_children,
    node_text,
    outermost_wrapper,
)
from plugin_parity.frontend.program import Program

logger = logging.getLogger(__name__)

CLASS_NODE_TYPES = ("class_declaration", "abstract_class_declaration")
VARIABLE_STATEMENT_TYPES = ("lexical_declaration", "variable_declaration")
EXPORTED_AMBIENT = ("export", "declare")


@dataclass(frozen=True)
class ClassStyleDeclaration:
    name: str
    node: Node


@dataclass(frozen=True)
class ConstConstructibleDeclaration:
    name: str
    node: Node
    declarator: Node
    construct_signature: Node


@dataclass(frozen=True)
class OtherNode:
    node: Node


DeclarationNode = Union[ClassStyleDeclaration, ConstConstructibleDeclaration, OtherNode]


def is_plugin_name(name: str) -> bool:
    return name.endswith(PLUGIN_SUFFIX)


def construct_signature_of(declarator: Node) -> Optional[Node]:
    """变量声明的类型注解若是内联类型字面量，返回其中第一个构造签名"""
    annotation = declarator.child_by_field_name("type")
    if annotation is None:
        return None
    types = named_children(annotation)
    if not types or types[0].type != "object_type":
        return None
    for member in named_children(types[0]):
        if member.type == "construct_signature":
            return member
    return None


def _is_top_level(statement: Node) -> bool:
    wrapper = outermost_wrapper(statement)
    return wrapper.parent is not None and wrapper.parent.type == "program"


def _classify_class(node: Node) -> Optional[ClassStyleDeclaration]:
    name_node = node.child_by_field_name("name")
    if name_node is None or name_node.type != "type_identifier":
        return None
    name = node_text(name_node)
    if not is_plugin_name(name):
        return None
    return ClassStyleDeclaration(name, node)


def _classify_variable_statement(node: Node) -> Optional[ConstConstructibleDeclaration]:
    if not _is_top_level(node) or modifiers_of(node) != EXPORTED_AMBIENT:
        return None
    declarators = [c for c in named_children(node) if c.type == "variable_declarator"]
    if len(declarators) != 1:
        return None
    declarator = declarators[0]
    name_node = declarator.child_by_field_name("name")
    if name_node is None or name_node.type != "identifier":
        return None
    name = node_text(name_node)
    if not is_plugin_name(name):
        return None
    signature = construct_signature_of(declarator)
    if signature is None:
        logger.debug(f"Skipping {name}: type annotation has no construct signature")
        return None
    return ConstConstructibleDeclaration(name, node, declarator, signature)


def classify_node(node: Node) -> DeclarationNode:
    """把节点归入 类声明 / 可 new 常量 / 其他 三种之一（类声明优先）"""
    if node.type in CLASS_NODE_TYPES:
        declaration = _classify_class(node)
        if declaration is not None:
            return declaration
    if node.type in VARIABLE_STATEMENT_TYPES:
        declaration = _classify_variable_statement(node)
        if declaration is not None:
            return declaration
    return OtherNode(node)


def extract_entities(unit: SourceUnit) -> list[Entity]:
    """
    提取一个源文件中的全部插件

    Args:
        unit: 已解析的源文件

    Returns:
        按先序遍历顺序排列的 Entity 列表
    """
    found: list[Entity] = []
    stack = [unit.root]
    while stack:
        node = stack.pop()
        declaration = classify_node(node)
        if isinstance(declaration, ClassStyleDeclaration):
            found.append(_entity(declaration.name, EntityKind.CLASS, declaration.node, unit))
            continue
        if isinstance(declaration, ConstConstructibleDeclaration):
            found.append(_entity(
                declaration.name,
                EntityKind.CONST_CONSTRUCTIBLE,
                declaration.declarator,
                unit,
            ))
            continue
        stack.extend(reversed(named_children(node)))
    return found


def _entity(name: str, kind: EntityKind, node: Node, unit: SourceUnit) -> Entity:
    return Entity(
        name=name,
        kind=kind,
        source_path=unit.path,
        line=node.start_point[0] + 1,
        node=node,
    )


def extract_surface(program: Program, path_filter: str) -> list[Entity]:
    """遍历路径包含 path_filter 的源文件，按程序顺序汇总插件"""
    entities: list[Entity] = []
    units = program.units_matching(path_filter)
    for unit in units:
        found = extract_entities(unit)
        if found:
            logger.debug(f"{len(found)} plugins in {unit.path}")
        entities.extend(found)
    logger.debug(f"Scanned {len(units)} files matching '{path_filter}', {len(entities)} plugins")
    return entities
