"""
比较流程

1. 加载参考生态 Program，提取插件并解析配置项
2. 加载候选生态 Program（独立的类型检查会话），同上
3. 比较两个插件集合
"""

import logging
from dataclasses import replace
from typing import Callable, Optional

from plugin_parity.config import ParityConfig, SurfaceConfig
from plugin_parity.core.comparator import compare_surfaces
from plugin_parity.core.extractor import extract_surface
from plugin_parity.core.models import ParityReport, Surface
from plugin_parity.core.resolver import resolve_option_shape
from plugin_parity.frontend.program import CompilerOptions, create_program

logger = logging.getLogger(__name__)

# 进度回调类型: (阶段, 描述)
ProgressCallback = Callable[[str, str], None]


def build_surface(
    config: SurfaceConfig,
    options: Optional[CompilerOptions] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> Surface:
    """加载一个生态的声明文件，返回带配置项形状的插件集合"""
    if on_progress:
        on_progress("load", f"{config.label}: {config.entry}")
    program = create_program([config.entry], options)
    checker = program.get_type_checker()

    entities = extract_surface(program, config.path_filter)
    if on_progress:
        on_progress("extract", f"{config.label}: {len(entities)} plugins")

    resolved = [replace(e, options=resolve_option_shape(e, checker)) for e in entities]
    logger.debug(
        f"{config.label}: {sum(1 for e in resolved if e.options is not None)}"
        f"/{len(resolved)} plugins with resolved options"
    )
    return Surface(
        label=config.label,
        entry=config.entry,
        path_filter=config.path_filter,
        entities=resolved,
    )


def run_parity(
    config: ParityConfig,
    on_progress: Optional[ProgressCallback] = None,
) -> ParityReport:
    """
    执行完整比较

    Args:
        config: 比较配置
        on_progress: 可选的进度回调

    Returns:
        ParityReport 对象

    Raises:
        FrontendError: 任一入口文件缺失或无法解析
    """
    reference = build_surface(config.reference, config.compiler, on_progress)
    candidate = build_surface(config.candidate, config.compiler, on_progress)
    rows = compare_surfaces(reference.entities, candidate.entities)
    if on_progress:
        on_progress("compare", f"{len(rows)} reference plugins compared")
    return ParityReport(reference=reference, candidate=candidate, rows=rows)
