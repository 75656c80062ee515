"""
TypeChecker - 声明级别的静态类型解析

只覆盖比较插件配置项所需的部分：
- 名称查找：类型参数、命名空间 / 模块块、文件级声明、import 绑定、全局声明
- 限定名：ns.Name，命名空间 import，export { A as B } / export * from 转发
- 对象类型成员展开（声明合并 + 继承）
- 规范化的类型字符串渲染

泛型实例、条件类型、映射类型等不做展开，统一作为 OpaqueType 处理。
"""

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Optional

from tree_sitter import Node

from plugin_parity.frontend.parser import (
    SourceUnit,
    has_token,
    modifiers_of,
    named_children,
    node_text,
    normalize_string_literal,
    render_tokens,
    unquote,
)
from plugin_parity.frontend.types import (
    ArrayType,
    Declaration,
    EnumType,
    IntersectionType,
    IntrinsicType,
    LiteralType,
    ObjectType,
    OpaqueType,
    Symbol,
    TupleType,
    Type,
    TypeParameterType,
    UnionType,
)

if TYPE_CHECKING:
    from plugin_parity.frontend.program import Program

logger = logging.getLogger(__name__)

# 语句节点类型 -> 声明种类
DECLARATION_KINDS = {
    "interface_declaration": "interface",
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "type_alias_declaration": "alias",
    "enum_declaration": "enum",
    "internal_module": "namespace",
    "module": "namespace",
}

ANNOTATION_TYPES = frozenset({
    "type_annotation",
    "opting_type_annotation",
    "omitting_type_annotation",
    "adding_type_annotation",
})

MEMBER_TYPES = frozenset({
    "property_signature",
    "public_field_definition",
    "method_signature",
    "method_definition",
    "abstract_method_signature",
})

PARAMETER_TYPES = ("required_parameter", "optional_parameter")

ARRAY_GENERICS = {"Array": False, "ReadonlyArray": True}

# 未声明但按内置类型处理的名称
BUILTIN_NAMES = frozenset({"undefined", "null"})

# `export = X` 在导出表中的键
EXPORT_EQUALS = "export="

ScopeKey = tuple[str, int, int]


def _key(unit: SourceUnit, node: Node) -> ScopeKey:
    return (unit.posix_path(), node.start_byte, node.end_byte)


def unwrap_statement(statement: Node) -> Node:
    """去掉 export / declare / 表达式语句包裹，返回真正的声明节点"""
    node = statement
    while True:
        if node.type == "export_statement":
            inner = node.child_by_field_name("declaration")
        elif node.type in ("ambient_declaration", "expression_statement"):
            children = named_children(node)
            inner = children[0] if children else None
        else:
            return node
        if inner is None:
            return node
        node = inner


def first_parameter(parameters: Optional[Node]) -> Optional[Node]:
    """formal_parameters 中的第一个形参"""
    if parameters is None:
        return None
    for child in named_children(parameters):
        if child.type in PARAMETER_TYPES:
            return child
    return None


def property_name(name_node: Node) -> str:
    if name_node.type == "string":
        return unquote(node_text(name_node))
    if name_node.type == "computed_property_name":
        return render_tokens(name_node)
    return node_text(name_node)


class TypeChecker:
    """
    绑定到一个 Program 的类型解析服务

    对外接口与 TypeScript 的 TypeChecker 对应：
    get_type_at_node / get_properties_of_type / get_type_of_symbol / type_to_string
    """

    def __init__(self, program: "Program"):
        self.program = program
        self._scope_cache: dict[ScopeKey, dict[str, list[Declaration]]] = {}
        self._import_cache: dict[ScopeKey, dict[str, tuple[str, str]]] = {}
        self._export_cache: dict[ScopeKey, dict[str, list[Declaration]]] = {}
        self._globals: Optional[dict[str, list[Declaration]]] = None
        self._resolving: set[ScopeKey] = set()

    # ============================================================
    # 公共接口
    # ============================================================

    def get_type_at_node(self, node: Node, unit: SourceUnit) -> Type:
        """把语法上的类型节点（或类型注解）解析为 Type"""
        kind = node.type
        if kind in ANNOTATION_TYPES or kind in ("type", "primary_type", "parenthesized_type"):
            inner = named_children(node)
            if not inner:
                return IntrinsicType("any")
            return self.get_type_at_node(inner[0], unit)
        if kind == "predefined_type":
            return IntrinsicType(" ".join(node_text(node).split()))
        if kind == "literal_type":
            return self._literal_type(node)
        if kind == "union_type":
            return UnionType(self._flatten(node, unit, UnionType))
        if kind == "intersection_type":
            return IntersectionType(self._flatten(node, unit, IntersectionType))
        if kind == "array_type":
            return ArrayType(self.get_type_at_node(named_children(node)[0], unit))
        if kind == "readonly_type":
            inner_type = self.get_type_at_node(named_children(node)[0], unit)
            if isinstance(inner_type, ArrayType):
                return replace(inner_type, readonly=True)
            return inner_type
        if kind == "tuple_type":
            return TupleType(tuple(self._tuple_member(m, unit) for m in named_children(node)))
        if kind == "object_type":
            return ObjectType(literal=(unit, node))
        if kind == "type_identifier":
            return self._type_from_reference([node_text(node)], node, unit)
        if kind == "nested_type_identifier":
            return self._type_from_reference(render_tokens(node).split("."), node, unit)
        if kind == "generic_type":
            return self._generic_type(node, unit)
        if kind in ("function_type", "constructor_type"):
            return OpaqueType(render_tokens(node), is_function=True)
        if kind == "this_type":
            return IntrinsicType("this")
        return OpaqueType(render_tokens(node))

    def is_class_or_interface_like(self, type_: Type) -> bool:
        """类型是否有可枚举的属性集合（接口、类、类型字面量）"""
        return isinstance(type_, ObjectType)

    def get_properties_of_type(self, type_: Type) -> list[Symbol]:
        """
        枚举对象类型的属性

        自身成员在前（声明顺序），随后是未被覆盖的继承成员。
        静态成员、构造函数、索引 / 调用 / 构造签名不计入。
        """
        if not isinstance(type_, ObjectType):
            return []
        return self._collect_properties(type_, set())

    def get_type_of_symbol(self, symbol: Symbol) -> Type:
        unit, node = symbol.declarations[0]
        if node.type in ("property_signature", "public_field_definition"):
            annotation = node.child_by_field_name("type")
            if annotation is None:
                return IntrinsicType("any")
            return self.get_type_at_node(annotation, unit)
        if has_token(node, "get"):
            return_type = node.child_by_field_name("return_type")
            if return_type is None:
                return IntrinsicType("any")
            return self.get_type_at_node(return_type, unit)
        if has_token(node, "set"):
            parameter = first_parameter(node.child_by_field_name("parameters"))
            annotation = parameter.child_by_field_name("type") if parameter else None
            if annotation is None:
                return IntrinsicType("any")
            return self.get_type_at_node(annotation, unit)
        return OpaqueType(self._signature_text(node, " => "), is_function=True)

    def type_to_string(self, type_: Type) -> str:
        """类型的规范字符串；结构相同的类型总是得到相同的字符串"""
        if type_.alias:
            return type_.alias
        if isinstance(type_, IntrinsicType):
            return type_.name
        if isinstance(type_, LiteralType):
            return type_.text
        if isinstance(type_, (EnumType, TypeParameterType)):
            return type_.name
        if isinstance(type_, OpaqueType):
            return type_.text
        if isinstance(type_, UnionType):
            return " | ".join(self._wrapped(t, (OpaqueType,)) for t in type_.types)
        if isinstance(type_, IntersectionType):
            return " & ".join(self._wrapped(t, (OpaqueType, UnionType)) for t in type_.types)
        if isinstance(type_, ArrayType):
            element = self._wrapped(type_.element, (OpaqueType, UnionType, IntersectionType))
            prefix = "readonly " if type_.readonly else ""
            return f"{prefix}{element}[]"
        if isinstance(type_, TupleType):
            return "[" + ", ".join(self.type_to_string(t) for t in type_.elements) + "]"
        if isinstance(type_, ObjectType):
            if type_.name:
                return type_.name
            return self._literal_to_string(type_)
        return "any"

    # ============================================================
    # 类型构造
    # ============================================================

    def _literal_type(self, node: Node) -> Type:
        children = named_children(node)
        if children and children[0].type in ("null", "undefined"):
            return IntrinsicType(children[0].type)
        if children and children[0].type == "string":
            return LiteralType(normalize_string_literal(node_text(children[0])))
        return LiteralType(render_tokens(node))

    def _flatten(self, node: Node, unit: SourceUnit, container: type) -> tuple[Type, ...]:
        """
        展开嵌套的联合 / 交叉类型并去重

        `A | B | C` 在语法树中是左嵌套的链，用显式栈展开，只解析叶子操作数。
        """
        members: list[Type] = []
        seen: set[str] = set()
        stack = list(reversed(named_children(node)))
        while stack:
            child = stack.pop()
            if child.type == node.type or child.type in ("type", "primary_type"):
                stack.extend(reversed(named_children(child)))
                continue
            resolved = self.get_type_at_node(child, unit)
            parts = resolved.types if isinstance(resolved, container) and not resolved.alias else (resolved,)
            for part in parts:
                rendered = self.type_to_string(part)
                if rendered not in seen:
                    seen.add(rendered)
                    members.append(part)
        return tuple(members)

    def _tuple_member(self, node: Node, unit: SourceUnit) -> Type:
        if node.type in ("tuple_parameter", "optional_tuple_parameter", "optional_type", "rest_type"):
            return OpaqueType(render_tokens(node))
        return self.get_type_at_node(node, unit)

    def _generic_type(self, node: Node, unit: SourceUnit) -> Type:
        name_node = node.child_by_field_name("name")
        arguments = node.child_by_field_name("type_arguments")
        name = node_text(name_node) if name_node is not None else ""
        if name in ARRAY_GENERICS and arguments is not None:
            args = named_children(arguments)
            if len(args) == 1:
                return ArrayType(self.get_type_at_node(args[0], unit), readonly=ARRAY_GENERICS[name])
        return OpaqueType(render_tokens(node))

    def _type_from_reference(self, parts: list[str], node: Node, unit: SourceUnit) -> Type:
        text = ".".join(parts)
        if len(parts) == 1:
            declarations = self._resolve_name(parts[0], node, unit)
        else:
            declarations = self._resolve_qualified(parts, node, unit)
        if not declarations:
            if text in BUILTIN_NAMES:
                return IntrinsicType(text)
            logger.debug(f"Unresolved type reference '{text}' in {unit.path}")
            return OpaqueType(text)
        return self._type_from_declarations(declarations)

    def _type_from_declarations(self, declarations: list[Declaration]) -> Type:
        first = declarations[0]
        if first.kind == "type_parameter":
            return TypeParameterType(first.name)
        if first.kind == "enum":
            return EnumType(first.name)
        objects = tuple(d for d in declarations if d.kind in ("interface", "class"))
        if objects:
            if any(d.node.child_by_field_name("type_parameters") is not None for d in objects):
                return OpaqueType(first.name)
            return ObjectType(name=objects[0].name, declarations=objects)
        aliases = [d for d in declarations if d.kind == "alias"]
        if aliases:
            return self._type_of_alias(aliases[0])
        return OpaqueType(first.name)

    def _type_of_alias(self, declaration: Declaration) -> Type:
        node = declaration.node
        value = node.child_by_field_name("value")
        if value is None or node.child_by_field_name("type_parameters") is not None:
            return OpaqueType(declaration.name)
        key = declaration.key
        if key in self._resolving:
            return OpaqueType(declaration.name)
        self._resolving.add(key)
        try:
            target = self.get_type_at_node(value, declaration.unit)
        finally:
            self._resolving.discard(key)
        if target.alias is None and (
            isinstance(target, (UnionType, IntersectionType, TupleType, OpaqueType))
            or (isinstance(target, ObjectType) and target.name is None)
        ):
            return replace(target, alias=declaration.name)
        return target

    # ============================================================
    # 成员展开
    # ============================================================

    def _collect_properties(self, type_: ObjectType, visiting: set[ScopeKey]) -> list[Symbol]:
        symbols: dict[str, Symbol] = {}
        if type_.literal is not None:
            unit, node = type_.literal
            self._add_members(symbols, node, unit, is_class=False)
        bases: list[Type] = []
        for declaration in type_.declarations:
            if declaration.key in visiting:
                continue
            visiting.add(declaration.key)
            body = declaration.node.child_by_field_name("body")
            if body is not None:
                self._add_members(symbols, body, declaration.unit, is_class=declaration.kind == "class")
            bases.extend(self._base_types(declaration))
        for base in bases:
            if not isinstance(base, ObjectType):
                continue
            for symbol in self._collect_properties(base, visiting):
                symbols.setdefault(symbol.name, symbol)
        return list(symbols.values())

    def _add_members(
        self,
        symbols: dict[str, Symbol],
        body: Node,
        unit: SourceUnit,
        is_class: bool,
    ) -> None:
        for member in named_children(body):
            if member.type not in MEMBER_TYPES:
                continue
            if is_class and has_token(member, "static"):
                continue
            name_node = member.child_by_field_name("name")
            if name_node is None:
                continue
            name = property_name(name_node)
            if is_class and name == "constructor":
                continue
            existing = symbols.get(name)
            if existing is None:
                symbols[name] = Symbol(name, [(unit, member)])
            else:
                # 重载或 get / set 成对声明
                existing.declarations.append((unit, member))

    def _base_types(self, declaration: Declaration) -> list[Type]:
        unit, node = declaration.unit, declaration.node
        bases: list[Type] = []
        for child in named_children(node):
            if child.type == "extends_type_clause":
                for base in named_children(child):
                    bases.append(self.get_type_at_node(base, unit))
            elif child.type == "class_heritage":
                for clause in named_children(child):
                    if clause.type != "extends_clause":
                        continue
                    if clause.child_by_field_name("type_arguments") is not None:
                        continue
                    value = clause.child_by_field_name("value")
                    if value is not None:
                        parts = render_tokens(value).split(".")
                        bases.append(self._type_from_reference(parts, node, unit))
        return bases

    # ============================================================
    # 渲染
    # ============================================================

    def _wrapped(self, type_: Type, parenthesize: tuple[type, ...]) -> str:
        rendered = self.type_to_string(type_)
        if type_.alias or not isinstance(type_, parenthesize):
            return rendered
        if isinstance(type_, OpaqueType) and not type_.is_function:
            return rendered
        return f"({rendered})"

    def _signature_text(self, node: Node, separator: str) -> str:
        type_parameters = node.child_by_field_name("type_parameters")
        parameters = node.child_by_field_name("parameters")
        return_type = node.child_by_field_name("return_type")
        head = render_tokens(type_parameters) if type_parameters is not None else ""
        head += render_tokens(parameters) if parameters is not None else "()"
        if return_type is None:
            return f"{head}{separator}any"
        inner = named_children(return_type)
        rendered = render_tokens(inner[0]) if inner else render_tokens(return_type)
        return f"{head}{separator}{rendered}"

    def _literal_to_string(self, type_: ObjectType) -> str:
        if type_.literal is None:
            return "{}"
        unit, node = type_.literal
        parts: list[str] = []
        for member in named_children(node):
            name_node = member.child_by_field_name("name")
            if member.type == "property_signature" and name_node is not None:
                readonly = "readonly " if has_token(member, "readonly") else ""
                optional = "?" if has_token(member, "?") else ""
                annotation = member.child_by_field_name("type")
                rendered = (
                    self.type_to_string(self.get_type_at_node(annotation, unit))
                    if annotation is not None else "any"
                )
                parts.append(f"{readonly}{property_name(name_node)}{optional}: {rendered};")
            elif member.type == "method_signature" and name_node is not None:
                optional = "?" if has_token(member, "?") else ""
                signature = self._signature_text(member, ": ")
                parts.append(f"{property_name(name_node)}{optional}{signature};")
            else:
                parts.append(render_tokens(member).rstrip(";,") + ";")
        if not parts:
            return "{}"
        return "{ " + " ".join(parts) + " }"

    # ============================================================
    # 名称查找
    # ============================================================

    def _resolve_name(self, name: str, at_node: Node, unit: SourceUnit) -> list[Declaration]:
        parameter = self._type_parameter(name, at_node, unit)
        if parameter is not None:
            return [parameter]
        node = at_node.parent
        while node is not None:
            if node.type == "statement_block" and node.parent is not None \
                    and node.parent.type in ("internal_module", "module"):
                found = self._declarations_in(node, unit).get(name)
                if found:
                    return found
                found = self._import_binding(name, node, unit)
                if found:
                    return found
            node = node.parent
        found = self._declarations_in(unit.root, unit).get(name)
        if found:
            return found
        found = self._import_binding(name, unit.root, unit)
        if found:
            return found
        return self._global_declarations().get(name, [])

    def _resolve_qualified(self, parts: list[str], at_node: Node, unit: SourceUnit) -> list[Declaration]:
        declarations = self._resolve_name(parts[0], at_node, unit)
        for part in parts[1:]:
            if not declarations:
                return []
            declarations = self._members_of(declarations).get(part, [])
        return declarations

    def _type_parameter(self, name: str, at_node: Node, unit: SourceUnit) -> Optional[Declaration]:
        node: Optional[Node] = at_node
        while node is not None:
            parameters = node.child_by_field_name("type_parameters") if node.is_named else None
            if parameters is not None:
                for parameter in named_children(parameters):
                    name_node = parameter.child_by_field_name("name")
                    if name_node is not None and node_text(name_node) == name:
                        return Declaration(name, "type_parameter", unit, parameter)
            node = node.parent
        return None

    def _declarations_in(self, container: Node, unit: SourceUnit) -> dict[str, list[Declaration]]:
        """容器（文件根或命名空间块）中直接声明的名称"""
        key = _key(unit, container)
        table = self._scope_cache.get(key)
        if table is not None:
            return table
        table = {}
        for statement in named_children(container):
            declaration = self._declaration_of(statement, unit)
            if declaration is not None:
                table.setdefault(declaration.name, []).append(declaration)
        self._scope_cache[key] = table
        return table

    def _declaration_of(self, statement: Node, unit: SourceUnit) -> Optional[Declaration]:
        node = unwrap_statement(statement)
        kind = DECLARATION_KINDS.get(node.type)
        if kind is None:
            return None
        name_node = node.child_by_field_name("name")
        if name_node is None or name_node.type in ("string", "nested_identifier"):
            return None
        return Declaration(node_text(name_node), kind, unit, node)

    def _members_of(self, declarations: list[Declaration]) -> dict[str, list[Declaration]]:
        """命名空间 / 模块的成员表（多个声明合并）"""
        members: dict[str, list[Declaration]] = {}
        for declaration in declarations:
            if declaration.kind == "namespace":
                body = declaration.node.child_by_field_name("body")
                if body is None:
                    continue
                table = self._exports_of_block(body, declaration.unit)
            elif declaration.kind == "module":
                table = self._exports_of_block(declaration.node, declaration.unit)
            else:
                continue
            for name, found in table.items():
                members.setdefault(name, found)
        return members

    def _implicit_exports(self, container: Node, unit: SourceUnit) -> bool:
        """声明文件和 ambient 块中，未加 export 的声明同样对外可见"""
        if container.type == "program":
            return unit.is_declaration_file
        owner = container.parent
        if owner is not None and owner.type == "module":
            return True
        return unit.is_declaration_file or (owner is not None and "declare" in modifiers_of(owner))

    def _exports_of_block(self, container: Node, unit: SourceUnit) -> dict[str, list[Declaration]]:
        key = _key(unit, container)
        cached = self._export_cache.get(key)
        if cached is not None:
            return cached
        exports: dict[str, list[Declaration]] = {}
        # 先占位，打断 export * 的循环引用
        self._export_cache[key] = exports

        explicit_empty = False
        wildcard_sources: list[str] = []
        for statement in named_children(container):
            if statement.type != "export_statement":
                continue
            source_node = statement.child_by_field_name("source")
            source = unquote(node_text(source_node)) if source_node is not None else None

            if statement.child_by_field_name("declaration") is not None:
                declaration = self._declaration_of(statement, unit)
                if declaration is not None:
                    exports.setdefault(declaration.name, []).append(declaration)
                continue

            children = named_children(statement)
            clause = next((c for c in children if c.type == "export_clause"), None)
            namespace_export = next((c for c in children if c.type == "namespace_export"), None)
            if clause is not None:
                specifiers = [c for c in named_children(clause) if c.type == "export_specifier"]
                if not specifiers and source is None:
                    explicit_empty = True
                for specifier in specifiers:
                    name = unquote(node_text(specifier.child_by_field_name("name")))
                    alias_node = specifier.child_by_field_name("alias")
                    exported = unquote(node_text(alias_node)) if alias_node is not None else name
                    if source is not None:
                        found = self._resolve_import(source, name, unit, exported)
                    else:
                        found = self._resolve_name(name, statement, unit)
                    if found:
                        exports.setdefault(exported, []).extend(found)
            elif namespace_export is not None and source is not None:
                alias_nodes = named_children(namespace_export)
                if alias_nodes:
                    alias = unquote(node_text(alias_nodes[0]))
                    exports.setdefault(alias, self._resolve_import(source, "*", unit, alias))
            elif source is not None:
                wildcard_sources.append(source)
            elif has_token(statement, "=") or has_token(statement, "default"):
                target = children[-1] if children else None
                if target is None or target.type not in ("identifier", "member_expression"):
                    continue
                found = self._resolve_qualified(render_tokens(target).split("."), statement, unit)
                if has_token(statement, "="):
                    exports[EXPORT_EQUALS] = found
                    for name, members in self._members_of(found).items():
                        exports.setdefault(name, members)
                else:
                    exports["default"] = found

        for source in wildcard_sources:
            for name, found in self._module_exports(source, unit).items():
                if name not in (EXPORT_EQUALS, "default"):
                    exports.setdefault(name, found)

        if self._implicit_exports(container, unit) and not explicit_empty:
            for name, found in self._declarations_in(container, unit).items():
                exports.setdefault(name, found)
        return exports

    def _module_containers(self, specifier: str, unit: SourceUnit) -> list[tuple[SourceUnit, Node]]:
        containers: list[tuple[SourceUnit, Node]] = []
        target = self.program.resolve_module(specifier, unit)
        if target is not None:
            containers.append((target, target.root))
        for ambient_unit, module_node in self.program.ambient_module(specifier):
            body = module_node.child_by_field_name("body")
            if body is not None:
                containers.append((ambient_unit, body))
        return containers

    def _module_exports(self, specifier: str, unit: SourceUnit) -> dict[str, list[Declaration]]:
        merged: dict[str, list[Declaration]] = {}
        for target_unit, container in self._module_containers(specifier, unit):
            for name, found in self._exports_of_block(container, target_unit).items():
                merged.setdefault(name, found)
        return merged

    def _imports_in(self, container: Node, unit: SourceUnit) -> dict[str, tuple[str, str]]:
        """容器中的 import 绑定: 本地名 -> (模块说明符, 导入名 | default | * | =)"""
        key = _key(unit, container)
        bindings = self._import_cache.get(key)
        if bindings is not None:
            return bindings
        bindings = {}
        for statement in named_children(container):
            if statement.type != "import_statement":
                continue
            source_node = statement.child_by_field_name("source")
            source = unquote(node_text(source_node)) if source_node is not None else None
            for child in named_children(statement):
                if child.type == "import_require_clause":
                    identifiers = [c for c in named_children(child) if c.type == "identifier"]
                    require_source = child.child_by_field_name("source")
                    if identifiers and require_source is not None:
                        bindings[node_text(identifiers[0])] = (unquote(node_text(require_source)), "=")
                elif child.type == "import_clause" and source is not None:
                    self._bind_import_clause(child, source, bindings)
        self._import_cache[key] = bindings
        return bindings

    @staticmethod
    def _bind_import_clause(clause: Node, source: str, bindings: dict[str, tuple[str, str]]) -> None:
        for part in named_children(clause):
            if part.type == "identifier":
                bindings[node_text(part)] = (source, "default")
            elif part.type == "namespace_import":
                identifiers = [c for c in named_children(part) if c.type == "identifier"]
                if identifiers:
                    bindings[node_text(identifiers[0])] = (source, "*")
            elif part.type == "named_imports":
                for specifier in named_children(part):
                    if specifier.type != "import_specifier":
                        continue
                    name_node = specifier.child_by_field_name("name")
                    alias_node = specifier.child_by_field_name("alias")
                    if name_node is None:
                        continue
                    local = node_text(alias_node if alias_node is not None else name_node)
                    bindings[unquote(local)] = (source, unquote(node_text(name_node)))

    def _import_binding(self, name: str, container: Node, unit: SourceUnit) -> list[Declaration]:
        binding = self._imports_in(container, unit).get(name)
        if binding is None:
            return []
        source, imported = binding
        return self._resolve_import(source, imported, unit, name)

    def _resolve_import(
        self,
        source: str,
        imported: str,
        unit: SourceUnit,
        local_name: str,
    ) -> list[Declaration]:
        containers = self._module_containers(source, unit)
        if not containers:
            logger.debug(f"Import '{imported}' from unresolved module '{source}' in {unit.path}")
            return []
        module_declarations = [
            Declaration(local_name, "module", target_unit, container)
            for target_unit, container in containers
        ]
        if imported == "*":
            return module_declarations
        exports = self._module_exports(source, unit)
        if imported in ("=", "default"):
            found = exports.get(EXPORT_EQUALS) or exports.get("default")
            if found:
                return found
            return module_declarations if imported == "=" else []
        return exports.get(imported, [])

    def _global_declarations(self) -> dict[str, list[Declaration]]:
        """脚本文件（无 import / export）和 declare global 块中的声明"""
        if self._globals is not None:
            return self._globals
        table: dict[str, list[Declaration]] = {}
        for unit in self.program.source_units:
            containers: list[Node] = []
            statements = named_children(unit.root)
            if not any(s.type in ("import_statement", "export_statement") for s in statements):
                containers.append(unit.root)
            for statement in statements:
                if statement.type == "ambient_declaration" and has_token(statement, "global"):
                    containers.extend(c for c in named_children(statement) if c.type == "statement_block")
            for container in containers:
                for name, found in self._declarations_in(container, unit).items():
                    table.setdefault(name, []).extend(found)
        self._globals = table
        return table
