"""
组件字段绑定常量定义

定义组件类型、会话状态、错误消息与默认值，避免魔法字符串。
"""

from enum import Enum


class WidgetKind(str, Enum):
    """内置组件类型"""

    SEARCH = "search"  # 多字段搜索框（带权重）
    MULTI_LIST = "multi_list"  # 单字段筛选列表
    RESULT_LIST = "result_list"  # 结果列表


class SessionState(str, Enum):
    """编辑会话状态"""

    IDLE = "idle"  # 无打开的会话
    EDITING = "editing"  # 会话打开，可修改草稿


# 异常消息常量
class ErrorMessages:
    """错误消息常量"""

    UNKNOWN_WIDGET_KIND = "未注册的组件类型: {kind}"
    NO_ELIGIBLE_FIELD = "Schema 中没有适用于 {kind} 的字段"
    INELIGIBLE_FIELD = "字段 {field} 不可用于当前组件"
    INDEX_OUT_OF_RANGE = "索引 {index} 超出范围（共 {size} 项）"
    INVALID_WEIGHT = "权重必须是正整数，收到: {value!r}"
    INVALID_CONFIG = "组件 {widget_id} 的配置不满足约束: {problems}"
    UNKNOWN_PROPERTY = "组件类型 {kind} 未声明属性 {name}"
    SESSION_NOT_OPEN = "组件 {widget_id} 没有打开的编辑会话"
    SESSION_ALREADY_OPEN = "组件 {widget_id} 已有打开的编辑会话"
    WIDGET_DELETED = "组件 {widget_id} 已被删除"


# 配置默认值
class DefaultConfig:
    """默认配置常量"""

    SUB_FIELD_WEIGHT = 1  # 普通子字段权重
    KEYWORD_SUB_FIELD = "keyword"  # 继承根字段权重的子字段名
