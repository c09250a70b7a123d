"""
新挂载组件的默认配置生成。
"""

from __future__ import annotations

import logging
from typing import List, Optional

from api.schemas.widget import TypeConstraint, WidgetConfig
from services.config import WidgetEngineConfig, get_widget_engine_config
from services.widget.constraint_registry import ConstraintRegistry, registry as default_registry
from services.widget.errors import NoEligibleField
from services.widget.field_resolver import FieldResolver
from services.widget.schema_index import SchemaIndex

logger = logging.getLogger(__name__)


class ConfigFactory:
    """根据 Schema 与组件类型约束计算默认配置。"""

    def __init__(
        self,
        constraint_registry: Optional[ConstraintRegistry] = None,
        config: Optional[WidgetEngineConfig] = None,
    ):
        self.registry = constraint_registry or default_registry
        self.config = config or get_widget_engine_config()

    def default_config(self, widget_id: str, kind: str, schema: SchemaIndex) -> WidgetConfig:
        """
        选择第一个可用字段作为根字段。

        Raises:
            UnknownWidgetKind: 组件类型未注册
            NoEligibleField: Schema 中没有可用字段，调用方不应挂载该组件
        """
        constraint = self.registry.constraint_for(kind)
        eligible = FieldResolver(schema).eligible_fields(constraint)
        if not eligible:
            logger.warning("组件 %s (%s) 没有可绑定的字段", widget_id, kind)
            raise NoEligibleField(kind)

        field_weights = [self.config.default_field_weight] if constraint.weighted else None
        widget_config = WidgetConfig(
            widget_id=widget_id,
            kind=kind,
            root_fields=[eligible[0]],
            field_weights=field_weights,
        )
        logger.debug("组件 %s 默认绑定字段 %s", widget_id, eligible[0])
        return widget_config


def invariant_violations(
    widget_config: WidgetConfig,
    constraint: TypeConstraint,
    resolver: FieldResolver,
) -> List[str]:
    """检查已提交配置需满足的约束，返回违规描述（空列表表示合法）。"""
    problems: List[str] = []
    roots = widget_config.root_fields
    if not roots:
        problems.append("root_fields 为空")
    if not constraint.multiple and len(roots) > 1:
        problems.append(f"{constraint.kind} 只允许一个根字段，实际 {len(roots)} 个")
    if len(set(roots)) != len(roots):
        problems.append("root_fields 存在重复字段")

    eligible = set(resolver.schema.fields(constraint.accepted_types))
    for root in roots:
        if root not in eligible:
            problems.append(f"字段 {root} 的类型不在 {sorted(constraint.accepted_types)} 中")

    weights = widget_config.field_weights
    if constraint.weighted and weights is None and roots:
        problems.append(f"{constraint.kind} 需要 field_weights，实际缺失")
    if constraint.weighted and weights is not None:
        if len(weights) != len(roots):
            problems.append(f"field_weights 长度 {len(weights)} 与 root_fields 长度 {len(roots)} 不一致")
        elif any(weight < 1 for weight in weights):
            problems.append("field_weights 必须为正整数")
        else:
            expanded = resolver.expand(roots, constraint)
            if len(resolver.expand_weights(roots, weights, constraint)) != len(expanded or []):
                problems.append("展开后的权重与字段数量不一致")

    undeclared = set(widget_config.aux_values) - set(constraint.aux_properties)
    if undeclared:
        problems.append(f"未声明的属性: {sorted(undeclared)}")
    return problems
