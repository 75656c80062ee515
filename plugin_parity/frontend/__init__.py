"""
Frontend Layer - 类型解析前端

基于 tree-sitter 的 TypeScript 声明文件解析、Program 加载与类型检查。
"""

from plugin_parity.frontend.parser import SourceUnit, parse_source, parse_text
from plugin_parity.frontend.program import CompilerOptions, Program, create_program
from plugin_parity.frontend.checker import TypeChecker
from plugin_parity.frontend.types import (
    Declaration,
    ObjectType,
    OpaqueType,
    Symbol,
    Type,
)

__all__ = [
    "SourceUnit",
    "parse_source",
    "parse_text",
    "CompilerOptions",
    "Program",
    "create_program",
    "TypeChecker",
    "Declaration",
    "ObjectType",
    "OpaqueType",
    "Symbol",
    "Type",
]
