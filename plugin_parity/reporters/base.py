"""
报告器基类 - 定义报告器接口
"""

from typing import Protocol

from plugin_parity.core.models import ParityReport


class Reporter(Protocol):
    """报告器协议"""

    def report(self, report: ParityReport) -> None:
        """生成报告"""
        ...
