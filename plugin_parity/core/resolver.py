"""
配置项形状解析

插件的配置项 = 构造函数（或构造签名）的第一个形参的类型：
- 可枚举属性的类型（接口 / 类 / 类型字面量）-> StructuredShape
- 其他类型（基本类型、联合类型、无法解析的引用等）-> ScalarShape
- 没有构造函数、没有形参或形参没有类型注解 -> None
"""

import logging
from typing import Optional

from tree_sitter import Node

from plugin_parity.core.extractor import construct_signature_of
from plugin_parity.core.models import (
    Entity,
    EntityKind,
    FieldDescriptor,
    OptionShape,
    ScalarShape,
    StructuredShape,
)
from plugin_parity.frontend.checker import TypeChecker, first_parameter
from plugin_parity.frontend.parser import named_children, node_text

logger = logging.getLogger(__name__)

CONSTRUCTOR_MEMBER_TYPES = ("method_signature", "method_definition")


def find_constructor(class_node: Node) -> Optional[Node]:
    """类中第一个构造函数成员（重载时取第一个）"""
    body = class_node.child_by_field_name("body")
    if body is None:
        return None
    for member in named_children(body):
        if member.type not in CONSTRUCTOR_MEMBER_TYPES:
            continue
        name_node = member.child_by_field_name("name")
        if name_node is not None and node_text(name_node) == "constructor":
            return member
    return None


def config_parameter(entity: Entity) -> Optional[Node]:
    """插件的主配置形参节点"""
    if entity.node is None:
        return None
    if entity.kind is EntityKind.CLASS:
        signature = find_constructor(entity.node)
    else:
        signature = construct_signature_of(entity.node)
    if signature is None:
        return None
    return first_parameter(signature.child_by_field_name("parameters"))


def resolve_option_shape(entity: Entity, checker: TypeChecker) -> Optional[OptionShape]:
    """
    解析插件的配置项形状

    Args:
        entity: 插件实体
        checker: 插件所在 Program 的类型检查器

    Returns:
        ScalarShape / StructuredShape，无法解析时返回 None
    """
    parameter = config_parameter(entity)
    if parameter is None:
        logger.debug(f"{entity.name}: no constructor parameter")
        return None
    annotation = parameter.child_by_field_name("type")
    if annotation is None:
        logger.debug(f"{entity.name}: constructor parameter has no type annotation")
        return None
    unit = checker.program.get_source_unit(entity.source_path)
    if unit is None:
        return None

    resolved = checker.get_type_at_node(annotation, unit)
    if checker.is_class_or_interface_like(resolved):
        fields = tuple(
            FieldDescriptor(symbol.name, checker.type_to_string(checker.get_type_of_symbol(symbol)))
            for symbol in checker.get_properties_of_type(resolved)
        )
        return StructuredShape(fields)
    return ScalarShape(checker.type_to_string(resolved))
