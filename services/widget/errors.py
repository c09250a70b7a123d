"""
组件字段绑定的错误类型。

所有错误都在检测到问题的操作中同步抛出：
- 配置错误（UnknownWidgetKind / NoEligibleField）阻止组件被创建；
- 输入错误（IneligibleField / InvalidWeight）通过提示器展示，草稿保持不变；
- 契约错误（IndexOutOfRange / UnknownProperty）属于调用方编程错误。
"""

from typing import Any, List

from services.widget.constants import ErrorMessages


class WidgetConfigError(ValueError):
    """组件配置错误基类。"""

    code = "WIDGET_CONFIG_ERROR"


class UnknownWidgetKind(WidgetConfigError):
    code = "UNKNOWN_WIDGET_KIND"

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(ErrorMessages.UNKNOWN_WIDGET_KIND.format(kind=kind))


class NoEligibleField(WidgetConfigError):
    code = "NO_ELIGIBLE_FIELD"

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(ErrorMessages.NO_ELIGIBLE_FIELD.format(kind=kind))


class IneligibleField(WidgetConfigError):
    code = "INELIGIBLE_FIELD"

    def __init__(self, field: str):
        self.field = field
        super().__init__(ErrorMessages.INELIGIBLE_FIELD.format(field=field))


class IndexOutOfRange(WidgetConfigError):
    code = "INDEX_OUT_OF_RANGE"

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(ErrorMessages.INDEX_OUT_OF_RANGE.format(index=index, size=size))


class InvalidWeight(WidgetConfigError):
    code = "INVALID_WEIGHT"

    def __init__(self, value: Any):
        self.value = value
        super().__init__(ErrorMessages.INVALID_WEIGHT.format(value=value))


class UnknownProperty(WidgetConfigError):
    code = "UNKNOWN_PROPERTY"

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(ErrorMessages.UNKNOWN_PROPERTY.format(kind=kind, name=name))


class InvalidConfig(WidgetConfigError):
    """提交的配置不满足约束（字段数量、字段类型、权重长度等）。"""

    code = "INVALID_CONFIG"

    def __init__(self, widget_id: str, problems: List[str]):
        self.widget_id = widget_id
        self.problems = list(problems)
        super().__init__(
            ErrorMessages.INVALID_CONFIG.format(widget_id=widget_id, problems="; ".join(problems))
        )


class SessionStateError(WidgetConfigError):
    """在错误的会话状态下调用操作（未打开即修改，或重复打开）。"""

    code = "SESSION_STATE"


class WidgetDeleted(WidgetConfigError):
    code = "WIDGET_DELETED"

    def __init__(self, widget_id: str):
        self.widget_id = widget_id
        super().__init__(ErrorMessages.WIDGET_DELETED.format(widget_id=widget_id))


# 调用方编程错误：严格模式下抛出，否则记录并拒绝
CONTRACT_ERRORS = (IndexOutOfRange, UnknownProperty)

__all__ = [
    "WidgetConfigError",
    "UnknownWidgetKind",
    "NoEligibleField",
    "IneligibleField",
    "IndexOutOfRange",
    "InvalidWeight",
    "UnknownProperty",
    "InvalidConfig",
    "SessionStateError",
    "WidgetDeleted",
    "CONTRACT_ERRORS",
]
