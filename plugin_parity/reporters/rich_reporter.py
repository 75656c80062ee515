"""
Rich 终端报告器 - 使用 Rich 库输出插件对照表
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from plugin_parity.core.models import (
    ParityReport,
    ParityRow,
    Surface,
    Verdict,
    describe_shape,
)

VERDICT_STYLES = {
    Verdict.FULLY_IMPLEMENTED: "green",
    Verdict.PARTIALLY_IMPLEMENTED: "yellow",
    Verdict.NOT_IMPLEMENTED: "red",
}

# 覆盖率评级
RATINGS = [
    (90, "Near parity", "green"),
    (70, "Mostly covered", "cyan"),
    (40, "Partially covered", "yellow"),
    (0, "Early stage", "red"),
]

# 每个插件最多展示的差异条数
MAX_DIFFERENCES = 5


class RichReporter:
    """Rich 终端报告器"""

    def __init__(self, console: Console | None = None, show_details: bool = False):
        self.console = console or Console()
        self.show_details = show_details

    def report(self, report: ParityReport) -> None:
        """输出对照表和总结"""
        self.console.print()
        self.console.print(
            f"{report.reference.label} → {report.candidate.label} plugin parity",
            style="bold cyan",
            justify="center",
        )
        self.console.print("─" * 80, style="dim")
        self.console.print(self._parity_table(report))
        self._print_summary(report)

    def report_surface(self, surface: Surface) -> None:
        """列出一个生态的全部插件"""
        table = Table(show_header=True, header_style="bold cyan", title=surface.label)
        table.add_column("plugin", style="cyan")
        table.add_column("kind")
        table.add_column("location", style="dim")
        table.add_column("options")
        for entity in surface.entities:
            table.add_row(
                entity.name,
                entity.kind.value,
                f"{entity.source_path.name}:{entity.line}",
                Text(describe_shape(entity.options)),
            )
        self.console.print(table)
        self.console.print(f"[dim]{len(surface.entities)} plugins[/dim]")

    def _parity_table(self, report: ParityReport) -> Table:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("plugin", style="cyan")
        table.add_column("status")
        if self.show_details:
            table.add_column("details")
        for row in report.rows:
            cells: list = [row.entity.name, Text(row.verdict.label, style=VERDICT_STYLES[row.verdict])]
            if self.show_details:
                cells.append(Text(self._details(row), style="dim"))
            table.add_row(*cells)
        return table

    def _details(self, row: ParityRow) -> str:
        if not row.differences:
            return ""
        lines = [d.describe() for d in row.differences[:MAX_DIFFERENCES]]
        if len(row.differences) > MAX_DIFFERENCES:
            lines.append(f"... {len(row.differences) - MAX_DIFFERENCES} more")
        return "\n".join(lines)

    def _print_summary(self, report: ParityReport) -> None:
        summary = report.summary()
        coverage = report.coverage * 100
        title, color = self._get_rating(coverage)

        # 覆盖率进度条
        bar_width = 30
        filled = int(coverage / 100 * bar_width)
        bar = "█" * filled + "░" * (bar_width - filled)

        content = Text()
        content.append("Coverage: ", style="bold")
        content.append(f"{coverage:.1f}%", style=f"bold {color}")
        content.append(f"  [{bar}]\n\n", style=color)
        content.append(f"{summary['fully_implemented']} implemented", style="green")
        content.append(" · ", style="dim")
        content.append(f"{summary['partially_implemented']} partially implemented", style="yellow")
        content.append(" · ", style="dim")
        content.append(f"{summary['not_implemented']} not implemented", style="red")
        content.append(f"\n{summary['total']} {report.reference.label} plugins, ", style="dim")
        content.append(f"{len(report.candidate.entities)} {report.candidate.label} plugins", style="dim")

        self.console.print(Panel(content, title=f"[bold]{title}[/bold]", border_style=color))
        self.console.print()

    def _get_rating(self, coverage: float) -> tuple[str, str]:
        for threshold, title, color in RATINGS:
            if coverage >= threshold:
                return title, color
        return RATINGS[-1][1], RATINGS[-1][2]
