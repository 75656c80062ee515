"""
TypeScript 声明文件解析

使用 tree-sitter (tree-sitter-typescript 语法) 解析 .d.ts / .ts 文件，
并提供遍历语法树时常用的小工具函数。
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from plugin_parity.exceptions import SourceNotFoundError, SourceParseError

logger = logging.getLogger(__name__)

TS_LANGUAGE = Language(tree_sitter_typescript.language_typescript())

# 语法树中包裹声明的节点，按由内向外的顺序贡献修饰符
MODIFIER_WRAPPERS = {
    "ambient_declaration": "declare",
    "export_statement": "export",
}

# 作为整体渲染的叶子类节点（字符串内部的子节点不单独拼接）
ATOMIC_NODE_TYPES = frozenset({
    "string",
    "template_string",
    "template_literal_type",
    "number",
    "regex",
})

_SPACE_BEFORE = re.compile(r"\s+([,;:)\]<>]|\.(?!\.))")
_EMPTY_BRACKETS = re.compile(r"\s*\[\s*\]")
_SPACE_AFTER = re.compile(r"([(\[<.])\s+")
_OPTIONAL_MARK = re.compile(r"\s+\?(?=[:)\],])")


@dataclass(eq=False)
class SourceUnit:
    """
    一个已解析的源文件

    Attributes:
        path: 文件绝对路径
        text: 文件内容
        tree: tree-sitter 语法树
        is_declaration_file: 是否为 .d.ts 声明文件
    """
    path: Path
    text: str
    tree: Tree = field(repr=False)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def is_declaration_file(self) -> bool:
        return self.path.name.endswith((".d.ts", ".d.mts", ".d.cts"))

    @property
    def has_syntax_errors(self) -> bool:
        return self.root.has_error

    def first_error_position(self) -> Optional[tuple[int, int]]:
        """返回第一个语法错误的位置 (1-based 行, 0-based 列)"""
        for node in walk(self.root):
            if node.is_error or node.is_missing:
                return node.start_point[0] + 1, node.start_point[1]
        return None

    def posix_path(self) -> str:
        return self.path.as_posix()


def create_parser() -> Parser:
    return Parser(TS_LANGUAGE)


def parse_text(text: str, path: Path) -> SourceUnit:
    """解析内存中的源码文本"""
    tree = create_parser().parse(text.encode("utf-8"))
    return SourceUnit(path=path, text=text, tree=tree)


def parse_source(path: Path) -> SourceUnit:
    """
    读取并解析一个声明文件

    Args:
        path: 文件路径

    Returns:
        SourceUnit 对象

    Raises:
        SourceNotFoundError: 文件不存在
        SourceParseError: 文件无法以 UTF-8 解码
    """
    path = Path(path).resolve()
    if not path.is_file():
        raise SourceNotFoundError(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise SourceParseError(path, f"not valid UTF-8 ({e.reason})")
    logger.debug(f"Parsing {path}")
    return parse_text(text, path)


# ============================================================
# 节点工具函数
# ============================================================

def node_text(node: Node) -> str:
    return node.text.decode("utf-8")


def named_children(node: Node) -> list[Node]:
    """具名子节点（跳过注释）"""
    return [child for child in node.named_children if child.type != "comment"]


def has_token(node: Node, token: str) -> bool:
    """节点的直接子节点中是否包含某个匿名关键字，例如 static / ? / get"""
    return any(not child.is_named and child.type == token for child in node.children)


def walk(node: Node) -> Iterator[Node]:
    """先序深度优先遍历"""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'`":
        return text[1:-1]
    return text


def outermost_wrapper(node: Node) -> Node:
    """向上跳过 export / declare 包裹节点，返回完整的语句节点"""
    current = node
    while current.parent is not None and current.parent.type in MODIFIER_WRAPPERS:
        current = current.parent
    return current


def modifiers_of(node: Node) -> tuple[str, ...]:
    """
    计算声明节点的修饰符序列

    tree-sitter 把 `export declare const X` 表示为
    export_statement > ambient_declaration > lexical_declaration，
    这里按源码顺序还原为 ("export", "declare")。
    """
    modifiers: list[str] = []
    current = node.parent
    while current is not None and current.type in MODIFIER_WRAPPERS:
        if current.type == "export_statement" and has_token(current, "default"):
            modifiers.insert(0, "default")
        modifiers.insert(0, MODIFIER_WRAPPERS[current.type])
        current = current.parent
    return tuple(modifiers)


def render_tokens(node: Node) -> str:
    """
    以规范化的形式渲染节点源码

    逐个拼接叶子 token（忽略注释），再统一空白，保证格式不同但结构相同的
    两段源码得到完全一致的字符串。
    """
    tokens: list[str] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "comment":
            continue
        if current.type == "string":
            tokens.append(normalize_string_literal(node_text(current)))
            continue
        if current.type in ATOMIC_NODE_TYPES or current.child_count == 0:
            text = " ".join(node_text(current).split())
            if text:
                tokens.append(text)
            continue
        stack.extend(reversed(current.children))
    rendered = " ".join(tokens)
    rendered = _EMPTY_BRACKETS.sub("[]", rendered)
    rendered = _SPACE_BEFORE.sub(r"\1", rendered)
    rendered = _SPACE_AFTER.sub(r"\1", rendered)
    rendered = _OPTIONAL_MARK.sub("?", rendered)
    return rendered


def normalize_string_literal(text: str) -> str:
    """字符串字面量统一为双引号形式"""
    if len(text) >= 2 and text[0] == "'" and text[-1] == "'":
        inner = text[1:-1].replace("\\'", "'").replace('"', '\\"')
        return f'"{inner}"'
    return text
