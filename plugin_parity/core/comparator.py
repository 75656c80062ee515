"""
插件集合比较

以参考生态为基准逐个查找候选生态中的同名插件，并比较配置项形状。
"""

from typing import Optional, Sequence

from plugin_parity.core.models import (
    DifferenceKind,
    Entity,
    OptionShape,
    ParityRow,
    ScalarShape,
    ShapeDifference,
    StructuredShape,
    Verdict,
    describe_shape,
)


def find_counterpart(name: str, candidates: Sequence[Entity]) -> Optional[Entity]:
    """候选生态中第一个同名插件"""
    return next((c for c in candidates if c.name == name), None)


def shapes_match(reference: Optional[OptionShape], candidate: Optional[OptionShape]) -> bool:
    """
    判断两个配置项形状是否一致

    - 标量：类型字符串逐字符相同
    - 结构化：字段集合相同（与枚举顺序无关）
    - None 只与 None 相等；标量与结构化永不相等
    """
    if reference is None or candidate is None:
        return reference is None and candidate is None
    if isinstance(reference, ScalarShape) and isinstance(candidate, ScalarShape):
        return reference.type_string == candidate.type_string
    if isinstance(reference, StructuredShape) and isinstance(candidate, StructuredShape):
        return set(reference.fields) == set(candidate.fields)
    return False


def diff_shapes(
    reference: Optional[OptionShape],
    candidate: Optional[OptionShape],
) -> list[ShapeDifference]:
    """列出两个配置项形状之间的差异，一致时返回空列表"""
    if shapes_match(reference, candidate):
        return []
    if not (isinstance(reference, StructuredShape) and isinstance(candidate, StructuredShape)):
        return [ShapeDifference(
            DifferenceKind.SHAPE,
            expected=describe_shape(reference),
            actual=describe_shape(candidate),
        )]

    differences: list[ShapeDifference] = []
    candidate_fields = {f.name: f.type_string for f in candidate.fields}
    reference_names = set()
    for expected in reference.fields:
        reference_names.add(expected.name)
        actual = candidate_fields.get(expected.name)
        if actual is None:
            differences.append(ShapeDifference(
                DifferenceKind.MISSING, expected.name, expected=expected.type_string,
            ))
        elif actual != expected.type_string:
            differences.append(ShapeDifference(
                DifferenceKind.TYPE, expected.name, expected=expected.type_string, actual=actual,
            ))
    for extra in candidate.fields:
        if extra.name not in reference_names:
            differences.append(ShapeDifference(
                DifferenceKind.EXTRA, extra.name, actual=extra.type_string,
            ))
    return differences


def compare_entity(entity: Entity, candidates: Sequence[Entity]) -> ParityRow:
    counterpart = find_counterpart(entity.name, candidates)
    if counterpart is None:
        return ParityRow(entity, Verdict.NOT_IMPLEMENTED)
    if shapes_match(entity.options, counterpart.options):
        return ParityRow(entity, Verdict.FULLY_IMPLEMENTED, counterpart)
    return ParityRow(
        entity,
        Verdict.PARTIALLY_IMPLEMENTED,
        counterpart,
        tuple(diff_shapes(entity.options, counterpart.options)),
    )


def compare_surfaces(
    reference: Sequence[Entity],
    candidate: Sequence[Entity],
) -> list[ParityRow]:
    """
    比较两个插件集合

    Args:
        reference: 参考生态插件（决定输出顺序）
        candidate: 候选生态插件

    Returns:
        每个参考插件一行 ParityRow
    """
    return [compare_entity(entity, candidate) for entity in reference]
