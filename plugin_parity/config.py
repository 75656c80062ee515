"""
配置 - 预设生态与 TOML 配置文件

配置来源优先级：命令行参数 > 配置文件 > 预设。

配置文件可以是独立的 plugin-parity.toml：

    details = true

    [reference]
    preset = "webpack"
    entry = "types/webpack.ts"

    [candidate]
    preset = "rspack"
    entry = "types/rspack.ts"
    filter = "@rspack/core"

    [compiler]
    follow_imports = true
    type_roots = ["node_modules/@types"]

也可以写在 pyproject.toml 的 [tool.plugin-parity] 表中。
"""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from plugin_parity.exceptions import ConfigError
from plugin_parity.frontend.program import CompilerOptions

# Handle tomllib/tomli for different Python versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)


CONFIG_FILENAME = "plugin-parity.toml"
PYPROJECT_TABLE = "plugin-parity"

DEFAULT_REFERENCE_PRESET = "webpack"
DEFAULT_CANDIDATE_PRESET = "rspack"


# ============================================================
# 预设
# ============================================================

@dataclass(frozen=True)
class EcosystemPreset:
    """
    生态预设

    Attributes:
        name: 预设名
        label: 报告中的显示名称
        path_filter: 源文件路径过滤子串
        description: 说明
    """
    name: str
    label: str
    path_filter: str
    description: str = ""


class PresetRegistry:
    """Registry for ecosystem presets."""

    _presets: dict[str, EcosystemPreset] = {}

    @classmethod
    def register(cls, preset: EcosystemPreset) -> None:
        """Register a preset by name (prevents duplicates)."""
        if preset.name not in cls._presets:
            cls._presets[preset.name] = preset

    @classmethod
    def get(cls, name: str) -> EcosystemPreset:
        preset = cls._presets.get(name)
        if preset is None:
            available = ", ".join(sorted(cls._presets))
            raise ConfigError(f"Unknown preset '{name}' (available: {available})")
        return preset

    @classmethod
    def all(cls) -> list[EcosystemPreset]:
        return list(cls._presets.values())


PresetRegistry.register(EcosystemPreset(
    name="webpack",
    label="webpack",
    path_filter="webpack",
    description="webpack types.d.ts (class XxxPlugin declarations)",
))
PresetRegistry.register(EcosystemPreset(
    name="rspack",
    label="Rspack",
    path_filter="@rspack/core",
    description="@rspack/core declarations (classes and `export declare const XxxPlugin`)",
))


# ============================================================
# 配置模型
# ============================================================

@dataclass
class SurfaceConfig:
    """
    一个生态的加载配置

    Attributes:
        label: 显示名称
        entry: 入口声明文件
        path_filter: 只遍历路径包含该子串的源文件
    """
    label: str
    entry: Path
    path_filter: str = ""


@dataclass
class ParityConfig:
    reference: SurfaceConfig
    candidate: SurfaceConfig
    compiler: CompilerOptions = field(default_factory=CompilerOptions)
    show_details: bool = False


# ============================================================
# 读取配置文件
# ============================================================

def find_config(directory: Path) -> Optional[Path]:
    """在目录中查找配置文件（plugin-parity.toml 优先）"""
    candidate = directory / CONFIG_FILENAME
    if candidate.is_file():
        return candidate
    pyproject = directory / "pyproject.toml"
    if not pyproject.is_file():
        return None
    try:
        data = _read_toml(pyproject)
    except ConfigError as e:
        logger.warning(f"Ignoring unreadable {pyproject}: {e}")
        return None
    if PYPROJECT_TABLE in data.get("tool", {}):
        return pyproject
    return None


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}", path)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML: {e}", path)


def read_config_table(path: Path) -> dict[str, Any]:
    """读取配置表；pyproject.toml 只取 [tool.plugin-parity]"""
    data = _read_toml(path)
    if path.name == "pyproject.toml":
        table = data.get("tool", {}).get(PYPROJECT_TABLE)
        if table is None:
            raise ConfigError(f"Missing [tool.{PYPROJECT_TABLE}] table", path)
        data = table
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a table", path)
    return data


def _table(data: dict[str, Any], key: str, source: Optional[Path]) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{key}] must be a table", source)
    return value


def _string(table: dict[str, Any], key: str, section: str, source: Optional[Path]) -> Optional[str]:
    value = table.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"{section}.{key} must be a string", source)
    return value


def _surface(
    role: str,
    table: dict[str, Any],
    base_dir: Path,
    source: Optional[Path],
    entry: Optional[Path],
    path_filter: Optional[str],
    preset_name: Optional[str],
    default_preset: str,
) -> SurfaceConfig:
    preset = PresetRegistry.get(preset_name or _string(table, "preset", role, source) or default_preset)

    if entry is None:
        configured = _string(table, "entry", role, source)
        if configured is None:
            raise ConfigError(f"No entry file configured for the {role} surface", source)
        entry = base_dir / configured
    if path_filter is None:
        path_filter = _string(table, "filter", role, source)
    if path_filter is None:
        path_filter = preset.path_filter
    label = _string(table, "label", role, source) or preset.label
    return SurfaceConfig(label=label, entry=Path(entry), path_filter=path_filter)


def build_config(
    data: Optional[dict[str, Any]] = None,
    base_dir: Optional[Path] = None,
    source: Optional[Path] = None,
    reference: Optional[Path] = None,
    candidate: Optional[Path] = None,
    reference_filter: Optional[str] = None,
    candidate_filter: Optional[str] = None,
    reference_preset: Optional[str] = None,
    candidate_preset: Optional[str] = None,
    follow_imports: Optional[bool] = None,
    details: Optional[bool] = None,
) -> ParityConfig:
    """
    合并配置文件内容与命令行参数

    Args:
        data: 配置表（read_config_table 的结果），可为空
        base_dir: 相对路径的基准目录（通常为配置文件所在目录）
        source: 配置文件路径，仅用于错误信息
        其余参数: 命令行覆盖值，None 表示未指定

    Returns:
        ParityConfig 对象

    Raises:
        ConfigError: 配置不完整或类型错误
    """
    data = data or {}
    base_dir = base_dir or Path.cwd()

    reference_config = _surface(
        "reference", _table(data, "reference", source), base_dir, source,
        reference, reference_filter, reference_preset, DEFAULT_REFERENCE_PRESET,
    )
    candidate_config = _surface(
        "candidate", _table(data, "candidate", source), base_dir, source,
        candidate, candidate_filter, candidate_preset, DEFAULT_CANDIDATE_PRESET,
    )

    compiler_table = _table(data, "compiler", source)
    if follow_imports is None:
        follow_imports = compiler_table.get("follow_imports", True)
    if not isinstance(follow_imports, bool):
        raise ConfigError("compiler.follow_imports must be a boolean", source)
    type_roots = compiler_table.get("type_roots", [])
    if not isinstance(type_roots, list) or not all(isinstance(r, str) for r in type_roots):
        raise ConfigError("compiler.type_roots must be a list of strings", source)

    if details is None:
        details = data.get("details", False)
    if not isinstance(details, bool):
        raise ConfigError("details must be a boolean", source)

    return ParityConfig(
        reference=reference_config,
        candidate=candidate_config,
        compiler=CompilerOptions(
            follow_imports=follow_imports,
            type_roots=tuple(base_dir / root for root in type_roots),
        ),
        show_details=details,
    )


def load_config(path: Path) -> ParityConfig:
    """从配置文件加载完整配置"""
    path = Path(path)
    return build_config(read_config_table(path), base_dir=path.parent.resolve(), source=path)
