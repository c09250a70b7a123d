"""
搜索/列表组件字段绑定相关 Schema 定义。
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PropertyKind(str, Enum):
    """辅助属性的输入类型"""

    BOOL = "bool"
    NUMBER = "number"
    TEXT = "text"


class SubField(BaseModel):
    """索引期分析产生的子字段（如 text 字段下的 keyword 变体）。"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Local sub-field name, e.g. keyword")
    type: str = Field(..., description="Indexed type tag of the sub-field")


class SchemaField(BaseModel):
    """索引 Schema 中的单个字段。"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Field name, unique within the schema")
    type: str = Field(..., description="Declared type tag")
    sub_fields: List[SubField] = Field(
        default_factory=list, description="Ordered normalized variants"
    )


class OriginalField(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = Field(..., description="Type tag of the sub-field")


class MappingEntry(BaseModel):
    """原始 mapping 中单个字段的结构，对应 {type, fields?, originalFields?}。"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str = Field(..., description="Declared type tag")
    sub_field_names: List[str] = Field(
        default_factory=list, alias="fields", description="Sub-field local names"
    )
    original_fields: Dict[str, OriginalField] = Field(
        default_factory=dict,
        alias="originalFields",
        description="Sub-field local name -> type descriptor",
    )

    def to_schema_field(self, name: str) -> SchemaField:
        # fields 决定顺序；缺少类型描述的子字段无法参与类型匹配，直接忽略
        sub_fields = [
            SubField(name=item, type=self.original_fields[item].type)
            for item in self.sub_field_names
            if item in self.original_fields
        ]
        return SchemaField(name=name, type=self.type, sub_fields=sub_fields)


class AuxProperty(BaseModel):
    """组件可配置的辅助属性声明。"""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Form label")
    description: str = Field("", description="Help text shown under the label")
    kind: PropertyKind = Field(PropertyKind.TEXT, description="Input kind")
    default: Any = Field(None, description="Value used when none is stored")


class TypeConstraint(BaseModel):
    """
    单一组件类型的字段约束。

    accepted_types 决定哪些字段类型合法；multiple 决定是否允许多个根字段；
    weighted 表示该组件是否携带相关性权重；match_sub_field_types 表示
    判定字段是否可选时是否同时检查子字段类型。
    """

    model_config = ConfigDict(frozen=True)

    kind: str = Field(..., description="Widget kind tag")
    label: str = Field(..., description="Label of the data field selector")
    description: str = Field("", description="Help text of the data field selector")
    component_id: str = Field(..., description="Widget component rendered for this kind")
    accepted_types: FrozenSet[str] = Field(..., description="Acceptable field type tags")
    multiple: bool = Field(False, description="Allow more than one root field")
    weighted: bool = Field(False, description="Carry per-field relevance weights")
    match_sub_field_types: bool = Field(
        True, description="Eligibility also checks sub-field types"
    )
    aux_properties: Dict[str, AuxProperty] = Field(
        default_factory=dict, description="Ordered auxiliary property declarations"
    )


class WidgetConfig(BaseModel):
    """已挂载组件的配置；field_weights 与 root_fields 一一对应。"""

    widget_id: str = Field(..., description="Unique id of the attached widget")
    kind: str = Field(..., description="Widget kind tag")
    root_fields: List[str] = Field(default_factory=list, description="Chosen schema fields")
    field_weights: Optional[List[int]] = Field(
        None, description="Per root field weight, only for weighted kinds"
    )
    aux_values: Dict[str, Any] = Field(
        default_factory=dict, description="Auxiliary property name -> value"
    )

    def clone(self) -> "WidgetConfig":
        """结构化深拷贝，保证草稿与基线互不引用。"""
        return WidgetConfig.model_validate(copy.deepcopy(self.model_dump()))


class Notification(BaseModel):
    """当前展示的校验提示。"""

    message: str = Field("", description="Empty string means no message")
    expires_at: Optional[float] = Field(None, description="Monotonic expiry timestamp")
