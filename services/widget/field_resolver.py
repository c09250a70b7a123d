"""
字段展开器（Field Resolver）

职责：
  把用户选择的根字段展开为组件实际查询的字段列表，并计算对应的相关性权重。

展开规则：
  1. 多字段组件：每个根字段后紧跟其类型命中的子字段，按输入顺序拼接
  2. 单字段组件：只取根字段的第一个命中子字段，没有则为 None
  3. 权重：根字段使用用户权重；名为 keyword 的子字段继承该权重，其余子字段为 1
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Union

from api.schemas.widget import TypeConstraint
from services.widget.constants import DefaultConfig
from services.widget.errors import InvalidWeight
from services.widget.schema_index import SchemaIndex

logger = logging.getLogger(__name__)


def parse_weight(raw: Any) -> int:
    """
    按十进制整数解析权重。

    Raises:
        InvalidWeight: 非整数或不是正数
    """
    if isinstance(raw, bool):
        raise InvalidWeight(raw)
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        text = raw.strip()
        # int() 也接受 "1_0" 与全角数字，这里只允许 ASCII 十进制
        digits = text[1:] if text[:1] in ("+", "-") else text
        if not (text.isascii() and digits.isdigit()):
            raise InvalidWeight(raw)
        value = int(text, 10)
    else:
        raise InvalidWeight(raw)
    if value < 1:
        raise InvalidWeight(raw)
    return value


class FieldResolver:
    """基于 SchemaIndex 的字段展开与权重计算。"""

    def __init__(self, schema: SchemaIndex):
        self.schema = schema

    def eligible_fields(self, constraint: TypeConstraint) -> List[str]:
        return self.schema.fields(
            constraint.accepted_types,
            include_sub_field_types=constraint.match_sub_field_types,
        )

    def expand(
        self,
        root_fields: Union[str, Sequence[str]],
        constraint: TypeConstraint,
    ) -> Union[List[str], Optional[str]]:
        """
        生成组件的 dataField。

        Returns:
            多字段组件返回字段列表；单字段组件返回单个字段名或 None
        """
        if isinstance(root_fields, str):
            root_fields = [root_fields]

        if constraint.multiple:
            result: List[str] = []
            for root in root_fields:
                result.append(root)
                result.extend(self.schema.sub_fields(root, constraint.accepted_types))
            return result

        if not root_fields:
            return None
        valid = self.schema.sub_fields(root_fields[0], constraint.accepted_types)
        if not valid:
            logger.debug("字段 %s 没有可用子字段，dataField 为空", root_fields[0])
            return None
        return valid[0]

    def expand_weights(
        self,
        root_fields: Sequence[str],
        per_root_weights: Sequence[Any],
        constraint: TypeConstraint,
    ) -> List[int]:
        """
        生成与 expand() 结果一一对应的权重列表。

        Raises:
            InvalidWeight: 任一根字段权重无法解析为整数
        """
        weights: List[int] = []
        for index, root in enumerate(root_fields):
            root_weight = parse_weight(per_root_weights[index])
            weights.append(root_weight)
            for sub in self.schema.matching_sub_fields(root, constraint.accepted_types):
                if sub.name == DefaultConfig.KEYWORD_SUB_FIELD:
                    weights.append(root_weight)
                else:
                    weights.append(DefaultConfig.SUB_FIELD_WEIGHT)
        return weights
