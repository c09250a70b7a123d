"""
服务层配置

统一管理组件字段绑定引擎的配置项（提示时长、默认权重、契约检查模式），
避免环境变量硬编码分散在多处。
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class WidgetEngineConfig(BaseSettings):
    """
    组件字段绑定引擎配置

    控制 TransientNotifier 与 EditSession 的行为。
    """

    # 校验提示自动清除间隔
    notice_ttl_seconds: float = Field(
        default=3.0,
        alias="WIDGET_NOTICE_TTL_SECONDS",
        gt=0,
        description="校验提示的展示时长（秒）",
    )

    # 新提示是否取消旧提示的清除定时器
    notice_cancel_on_replace: bool = Field(
        default=True,
        alias="WIDGET_NOTICE_CANCEL_ON_REPLACE",
        description="新提示替换旧提示时是否取消旧的清除定时器（0=保留旧定时器）",
    )

    default_field_weight: int = Field(
        default=2,
        alias="WIDGET_DEFAULT_FIELD_WEIGHT",
        ge=1,
        description="新增根字段时使用的默认权重",
    )

    # 开发环境直接抛出契约错误，生产环境记录后拒绝
    strict_contracts: bool = Field(
        default=True,
        alias="WIDGET_STRICT_CONTRACTS",
        description="是否对调用方契约错误（越界索引、未知属性）直接抛出异常",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # 忽略不属于此配置的环境变量
    )


# 全局单例
_config_instance = None


def get_widget_engine_config() -> WidgetEngineConfig:
    """
    获取组件字段绑定引擎配置单例

    Returns:
        WidgetEngineConfig 实例
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = WidgetEngineConfig()
    return _config_instance


def reset_widget_engine_config():
    """
    重置配置单例（主要用于测试）
    """
    global _config_instance
    _config_instance = None
