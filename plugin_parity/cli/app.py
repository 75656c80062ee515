"""
CLI 入口模块 - 使用 Typer 构建命令行界面

比较流程：
1. 合并配置（命令行参数 / 配置文件 / 预设）
2. 加载参考生态与候选生态的声明文件
3. 提取插件并解析配置项
4. 输出对照表
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from plugin_parity.config import (
    PresetRegistry,
    SurfaceConfig,
    build_config,
    find_config,
    read_config_table,
)
from plugin_parity.core import build_surface, run_parity
from plugin_parity.exceptions import PluginParityError
from plugin_parity.frontend import CompilerOptions
from plugin_parity.reporters import RichReporter

# 创建 Typer 应用实例
app = typer.Typer(
    name="plugin-parity",
    help="plugin-parity: compare the plugin surface of two build tools from their type declarations.",
    add_completion=False,
)

# Rich Console 用于输出
console = Console()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def compare(
    reference: Optional[Path] = typer.Argument(
        None,
        help="Entry declaration file of the reference ecosystem (e.g. webpack.ts)",
    ),
    candidate: Optional[Path] = typer.Argument(
        None,
        help="Entry declaration file of the candidate ecosystem (e.g. rspack.ts)",
    ),
    reference_filter: Optional[str] = typer.Option(
        None,
        "--reference-filter",
        "-r",
        help="Only scan reference files whose path contains this substring",
    ),
    candidate_filter: Optional[str] = typer.Option(
        None,
        "--candidate-filter",
        "-c",
        help="Only scan candidate files whose path contains this substring",
    ),
    reference_preset: Optional[str] = typer.Option(
        None,
        "--reference-preset",
        help="Preset for the reference ecosystem (default: webpack)",
    ),
    candidate_preset: Optional[str] = typer.Option(
        None,
        "--candidate-preset",
        help="Preset for the candidate ecosystem (default: rspack)",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-C",
        help="Config file (plugin-parity.toml or pyproject.toml)",
    ),
    details: bool = typer.Option(
        False,
        "--details",
        "-d",
        help="Show option shape differences for partially implemented plugins",
    ),
    no_follow_imports: bool = typer.Option(
        False,
        "--no-follow-imports",
        help="Only load the entry files, not the modules they reference",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed output",
    ),
) -> None:
    """
    Compare the plugins of a reference and a candidate ecosystem.

    Examples:
        plugin-parity compare types/webpack.ts types/rspack.ts
        plugin-parity compare --config plugin-parity.toml --details
        plugin-parity compare a.d.ts b.d.ts -r node_modules/a -c node_modules/b
    """
    configure_logging(verbose)

    try:
        config_path = config or find_config(Path.cwd())
        data = read_config_table(config_path) if config_path else None
        if verbose and config_path:
            console.print(f"[dim]Using config: {config_path}[/dim]")

        parity_config = build_config(
            data,
            base_dir=config_path.parent.resolve() if config_path else None,
            source=config_path,
            reference=reference,
            candidate=candidate,
            reference_filter=reference_filter,
            candidate_filter=candidate_filter,
            reference_preset=reference_preset,
            candidate_preset=candidate_preset,
            follow_imports=False if no_follow_imports else None,
            details=True if details else None,
        )

        def on_progress(stage: str, message: str) -> None:
            if verbose:
                console.print(f"[dim]  ({stage}) {message}[/dim]")

        report = run_parity(parity_config, on_progress=on_progress)
    except PluginParityError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    reporter = RichReporter(console, show_details=parity_config.show_details)
    reporter.report(report)


@app.command()
def surface(
    entry: Path = typer.Argument(
        ...,
        help="Entry declaration file",
    ),
    path_filter: str = typer.Option(
        "",
        "--filter",
        "-f",
        help="Only scan files whose path contains this substring",
    ),
    label: Optional[str] = typer.Option(
        None,
        "--label",
        help="Display name of the ecosystem",
    ),
    follow_imports: bool = typer.Option(
        True,
        "--follow-imports/--no-follow-imports",
        help="Load modules referenced by the entry file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed output",
    ),
) -> None:
    """
    List the plugins found in one ecosystem with their option shapes.
    """
    configure_logging(verbose)
    surface_config = SurfaceConfig(
        label=label or entry.name,
        entry=entry,
        path_filter=path_filter,
    )
    try:
        result = build_surface(surface_config, CompilerOptions(follow_imports=follow_imports))
    except PluginParityError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    RichReporter(console).report_surface(result)


@app.command()
def presets() -> None:
    """List the built-in ecosystem presets."""
    for preset in PresetRegistry.all():
        console.print(
            f"[bold cyan]{preset.name}[/bold cyan]  "
            f"filter=[green]{preset.path_filter}[/green]  [dim]{preset.description}[/dim]"
        )


@app.command()
def version() -> None:
    """Show the version of plugin-parity."""
    from plugin_parity import __version__
    console.print(f"[bold]plugin-parity[/bold] v{__version__}")


if __name__ == "__main__":
    app()
