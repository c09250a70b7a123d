"""
索引 Schema 的查询结构。

把原始 mapping（字段名 -> {type, fields?, originalFields?}）规范化为
有序、不可变的 SchemaField 集合，并提供按类型筛选字段与子字段的能力。
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from api.schemas.widget import MappingEntry, SchemaField, SubField


class SchemaIndex:
    """规范化后的字段集合，保持 Schema 中的声明顺序。"""

    def __init__(self, fields: Iterable[SchemaField]):
        self._fields: Dict[str, SchemaField] = {}
        for item in fields:
            self._fields[item.name] = item

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SchemaIndex":
        return cls(
            MappingEntry.model_validate(raw).to_schema_field(name)
            for name, raw in mapping.items()
        )

    def __contains__(self, name: str) -> bool:
        return name in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def get(self, name: str) -> Optional[SchemaField]:
        return self._fields.get(name)

    def names(self) -> List[str]:
        return list(self._fields)

    def fields(self, accepted_types: Iterable[str], *, include_sub_field_types: bool = True) -> List[str]:
        """
        返回类型与 accepted_types 相交的字段名。

        Args:
            accepted_types: 可接受的类型标签
            include_sub_field_types: 为 True 时子字段类型命中也算可选；
                多字段搜索组件只检查字段自身声明的类型

        Returns:
            按 Schema 声明顺序排列的字段名列表
        """
        types = set(accepted_types)
        eligible: List[str] = []
        for name, item in self._fields.items():
            candidates = [item.type]
            if include_sub_field_types:
                candidates.extend(sub.type for sub in item.sub_fields)
            if any(candidate in types for candidate in candidates):
                eligible.append(name)
        return eligible

    def matching_sub_fields(self, field: str, accepted_types: Iterable[str]) -> List[SubField]:
        item = self._fields.get(field)
        if item is None:
            return []
        types = set(accepted_types)
        return [sub for sub in item.sub_fields if sub.type in types]

    def sub_fields(self, field: str, accepted_types: Iterable[str]) -> List[str]:
        """返回类型命中的子字段，格式为 "field.subFieldName"。"""
        return [f"{field}.{sub.name}" for sub in self.matching_sub_fields(field, accepted_types)]
