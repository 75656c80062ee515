"""
Reporters Layer - 报告层

Rich 终端报告器。
"""

from plugin_parity.reporters.base import Reporter
from plugin_parity.reporters.rich_reporter import RichReporter

__all__ = [
    "Reporter",
    "RichReporter",
]
