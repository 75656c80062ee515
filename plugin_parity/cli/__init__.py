"""
CLI Layer - 命令行接口层

提供命令行入口。
"""

from plugin_parity.cli.app import app, compare, presets, surface, version

__all__ = [
    "app",
    "compare",
    "presets",
    "surface",
    "version",
]
