"""plugin-parity 自定义异常"""

from pathlib import Path
from typing import Optional


class PluginParityError(Exception):
    """Base exception for plugin-parity errors."""
    pass


class FrontendError(PluginParityError):
    """声明文件加载或解析失败（致命错误，整个运行中止）"""
    pass


class SourceNotFoundError(FrontendError):
    """Raised when an entry declaration file does not exist."""
    def __init__(self, path: Path):
        super().__init__(f"Source file not found: {path}")
        self.path = path


class SourceParseError(FrontendError):
    """Raised when a source unit cannot be decoded or parsed."""
    def __init__(
        self,
        path: Path,
        reason: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        location = f"{path}:{line}:{column}" if line is not None else str(path)
        super().__init__(f"Failed to parse {location}: {reason}")
        self.path = path
        self.reason = reason
        self.line = line
        self.column = column


class ConfigError(PluginParityError):
    """Raised when the configuration is invalid or incomplete."""
    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.message = message
        self.path = path
