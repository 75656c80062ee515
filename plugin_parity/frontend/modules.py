"""
模块解析 - 把 import 说明符映射到磁盘上的声明文件

支持：
- 相对路径: ./foo, ../bar/index, ./baz.js (映射到 .d.ts)
- 包名: webpack, @rspack/core, @rspack/core/dist/index
  (逐级向上查找 node_modules，读取 package.json 的 types / typings 字段)
- @types 回退: node_modules/@types/<name>
"""

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# 候选扩展名（按优先级）
DECLARATION_EXTENSIONS = (
    ".d.ts",
    ".ts",
    ".tsx",
    ".d.mts",
    ".mts",
    ".d.cts",
    ".cts",
)

# 运行时扩展名 -> 对应的声明扩展名
RUNTIME_EXTENSIONS = {
    ".js": (".d.ts", ".ts", ".tsx"),
    ".jsx": (".d.ts", ".tsx"),
    ".mjs": (".d.mts", ".mts"),
    ".cjs": (".d.cts", ".cts"),
}


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith(("./", "../", "/")) or specifier in (".", "..")


def split_package_specifier(specifier: str) -> tuple[str, str]:
    """
    拆分包名与子路径

    >>> split_package_specifier("@rspack/core/dist/index")
    ('@rspack/core', 'dist/index')
    """
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) >= 2:
        return "/".join(parts[:2]), "/".join(parts[2:])
    return parts[0], "/".join(parts[1:])


def types_package_name(package_name: str) -> str:
    """@scope/name -> scope__name (DefinitelyTyped 命名规则)"""
    if package_name.startswith("@"):
        return package_name[1:].replace("/", "__")
    return package_name


def _try_file(candidate: Path) -> Optional[Path]:
    if candidate.is_file():
        return candidate.resolve()
    return None


def _try_extensions(base: Path) -> Optional[Path]:
    """按声明扩展名顺序尝试 base 对应的文件"""
    if base.name.endswith(DECLARATION_EXTENSIONS):
        found = _try_file(base)
        if found:
            return found
    suffix = base.suffix
    if suffix in RUNTIME_EXTENSIONS:
        stem = base.with_suffix("")
        for ext in RUNTIME_EXTENSIONS[suffix]:
            found = _try_file(stem.with_name(stem.name + ext))
            if found:
                return found
    for ext in DECLARATION_EXTENSIONS:
        found = _try_file(base.with_name(base.name + ext))
        if found:
            return found
    return None


def _read_package_types(package_dir: Path) -> Optional[str]:
    """读取 package.json 中的类型入口"""
    manifest = package_dir / "package.json"
    if not manifest.is_file():
        return None
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to read {manifest}: {e}")
        return None
    for key in ("types", "typings"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    main = data.get("main")
    if isinstance(main, str) and main:
        return main
    return None


def _resolve_in_directory(base: Path) -> Optional[Path]:
    """把 base 当作文件或目录解析"""
    found = _try_extensions(base)
    if found:
        return found
    if base.is_dir():
        types_entry = _read_package_types(base)
        if types_entry:
            found = _try_extensions(base / types_entry)
            if found:
                return found
            if (base / types_entry).is_dir():
                found = _try_extensions(base / types_entry / "index")
                if found:
                    return found
        return _try_extensions(base / "index")
    return None


def _resolve_package(root: Path, package_name: str, subpath: str) -> Optional[Path]:
    package_dir = root / package_name
    if not package_dir.is_dir():
        return None
    if subpath:
        return _resolve_in_directory(package_dir / subpath)
    return _resolve_in_directory(package_dir)


def resolve_module_path(
    specifier: str,
    containing_file: Path,
    type_roots: tuple[Path, ...] = (),
) -> Optional[Path]:
    """
    解析 import 说明符

    Args:
        specifier: import 语句中的模块说明符
        containing_file: 发起 import 的文件
        type_roots: 额外的类型搜索根目录

    Returns:
        解析到的文件绝对路径，无法解析时返回 None
    """
    if is_relative_specifier(specifier):
        return _resolve_in_directory(containing_file.parent / specifier)

    package_name, subpath = split_package_specifier(specifier)
    for directory in containing_file.parents:
        node_modules = directory / "node_modules"
        if not node_modules.is_dir():
            continue
        found = _resolve_package(node_modules, package_name, subpath)
        if found:
            return found
        found = _resolve_package(node_modules / "@types", types_package_name(package_name), subpath)
        if found:
            return found

    for root in type_roots:
        found = _resolve_package(Path(root), package_name, subpath)
        if found:
            return found
        found = _resolve_package(Path(root), types_package_name(package_name), subpath)
        if found:
            return found
    return None
