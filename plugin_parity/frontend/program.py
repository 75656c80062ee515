"""
Program - 从入口文件出发加载完整的声明文件闭包

类似 TypeScript 的 ts.createProgram：解析入口文件，沿 import / export from /
三斜线指令递归加载依赖，源文件按「依赖在前」的顺序排列。
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from tree_sitter import Node

from plugin_parity.exceptions import SourceParseError
from plugin_parity.frontend.modules import is_relative_specifier, resolve_module_path
from plugin_parity.frontend.parser import (
    SourceUnit,
    named_children,
    node_text,
    parse_source,
    unquote,
    walk,
)

if TYPE_CHECKING:
    from plugin_parity.frontend.checker import TypeChecker

logger = logging.getLogger(__name__)

# /// <reference path="..." /> 与 /// <reference types="..." />
TRIPLE_SLASH_PATTERN = re.compile(
    r'^///\s*<reference\s+(path|types)\s*=\s*["\']([^"\']+)["\']'
)
# 类型位置上的 import("x").Foo
IMPORT_TYPE_PATTERN = re.compile(r'\bimport\(\s*["\']([^"\']+)["\']\s*\)')


@dataclass(frozen=True)
class CompilerOptions:
    """
    编译选项

    Attributes:
        follow_imports: 是否递归加载被引用的模块
        type_roots: 额外的类型搜索根目录（相当于 tsconfig 的 typeRoots）
    """
    follow_imports: bool = True
    type_roots: tuple[Path, ...] = ()


@dataclass(frozen=True)
class ModuleReference:
    """源文件中的一处模块引用"""
    specifier: str
    kind: str  # "import" | "path" | "types"


def collect_module_references(unit: SourceUnit) -> list[ModuleReference]:
    """收集源文件中所有的模块引用（按出现顺序，去重）"""
    references: list[ModuleReference] = []
    seen: set[tuple[str, str]] = set()

    def add(specifier: str, kind: str) -> None:
        if specifier and (specifier, kind) not in seen:
            seen.add((specifier, kind))
            references.append(ModuleReference(specifier, kind))

    for node in walk(unit.root):
        if node.type == "comment":
            match = TRIPLE_SLASH_PATTERN.match(node_text(node))
            if match:
                add(match.group(2), match.group(1))
        elif node.type in ("import_statement", "export_statement", "import_require_clause"):
            source = node.child_by_field_name("source")
            if source is not None:
                add(unquote(node_text(source)), "import")

    for match in IMPORT_TYPE_PATTERN.finditer(unit.text):
        add(match.group(1), "import")
    return references


def collect_ambient_modules(unit: SourceUnit) -> list[tuple[str, Node]]:
    """收集 `declare module "name" { ... }` 声明"""
    modules: list[tuple[str, Node]] = []
    for statement in named_children(unit.root):
        node = statement
        if node.type == "export_statement":
            node = node.child_by_field_name("declaration") or node
        if node.type == "ambient_declaration":
            inner = named_children(node)
            node = inner[0] if inner else node
        if node.type != "module":
            continue
        name = node.child_by_field_name("name")
        if name is not None and name.type == "string":
            modules.append((unquote(node_text(name)), node))
    return modules


class Program:
    """一次加载得到的源文件集合，以及绑定在其上的类型检查器"""

    def __init__(
        self,
        entry_paths: list[Path],
        options: CompilerOptions,
        units: list[SourceUnit],
        resolutions: dict[tuple[Path, str], Optional[Path]],
    ):
        self.entry_paths = entry_paths
        self.options = options
        self._units = units
        self._by_path = {unit.path: unit for unit in units}
        self._resolutions = resolutions
        self._ambient_modules: dict[str, list[tuple[SourceUnit, Node]]] = {}
        for unit in units:
            for name, node in collect_ambient_modules(unit):
                self._ambient_modules.setdefault(name, []).append((unit, node))
        self._checker: Optional["TypeChecker"] = None

    @property
    def source_units(self) -> list[SourceUnit]:
        return list(self._units)

    def get_source_unit(self, path: Path) -> Optional[SourceUnit]:
        return self._by_path.get(Path(path).resolve())

    def units_matching(self, path_filter: str) -> list[SourceUnit]:
        """路径中包含 path_filter 子串的源文件（保持程序顺序）"""
        return [unit for unit in self._units if path_filter in unit.posix_path()]

    def resolve_module(self, specifier: str, from_unit: SourceUnit) -> Optional[SourceUnit]:
        """把 import 说明符解析为已加载的源文件"""
        key = (from_unit.path, specifier)
        if key in self._resolutions:
            path = self._resolutions[key]
        else:
            path = resolve_module_path(specifier, from_unit.path, self.options.type_roots)
            self._resolutions[key] = path
        if path is None:
            return None
        return self._by_path.get(path)

    def ambient_module(self, name: str) -> list[tuple[SourceUnit, Node]]:
        return self._ambient_modules.get(name, [])

    def get_type_checker(self) -> "TypeChecker":
        from plugin_parity.frontend.checker import TypeChecker

        if self._checker is None:
            self._checker = TypeChecker(self)
        return self._checker


class _ProgramLoader:
    """递归加载源文件（后序：依赖先于引用方入列）"""

    def __init__(self, options: CompilerOptions):
        self.options = options
        self.units: dict[Path, SourceUnit] = {}
        self.resolutions: dict[tuple[Path, str], Optional[Path]] = {}
        self._in_progress: set[Path] = set()

    def load(self, path: Path, is_entry: bool = False) -> None:
        path = Path(path).resolve()
        if path in self.units or path in self._in_progress:
            return
        unit = parse_source(path)
        if unit.has_syntax_errors:
            line, column = unit.first_error_position() or (None, None)
            if is_entry:
                raise SourceParseError(path, "syntax error", line, column)
            logger.warning(f"Syntax errors in {path} (line {line}), continuing with partial tree")

        self._in_progress.add(path)
        for reference in collect_module_references(unit):
            target = self._resolve(reference, unit)
            self.resolutions[(unit.path, reference.specifier)] = target
            if target is None:
                logger.debug(f"Cannot resolve '{reference.specifier}' from {unit.path}")
                continue
            if self.options.follow_imports:
                self.load(target)
        self._in_progress.discard(path)
        self.units[path] = unit

    def _resolve(self, reference: ModuleReference, unit: SourceUnit) -> Optional[Path]:
        specifier = reference.specifier
        if reference.kind == "path" and not is_relative_specifier(specifier):
            specifier = f"./{specifier}"
        return resolve_module_path(specifier, unit.path, self.options.type_roots)


def create_program(
    entry_paths: Iterable[Path],
    options: Optional[CompilerOptions] = None,
) -> Program:
    """
    创建 Program

    Args:
        entry_paths: 入口文件列表
        options: 编译选项

    Returns:
        Program 对象

    Raises:
        SourceNotFoundError: 入口文件不存在
        SourceParseError: 入口文件无法解析
    """
    options = options or CompilerOptions()
    entries = [Path(path).resolve() for path in entry_paths]
    loader = _ProgramLoader(options)
    for entry in entries:
        loader.load(entry, is_entry=True)
    logger.debug(f"Program loaded {len(loader.units)} source files from {len(entries)} entries")
    return Program(entries, options, list(loader.units.values()), loader.resolutions)
