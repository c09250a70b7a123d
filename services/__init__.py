"""
Service层 - 业务逻辑服务
职责：
1. WidgetEngineConfig - 引擎配置（环境变量 / .env）
2. widget - 组件字段绑定引擎（Schema 索引、类型约束、字段展开、编辑会话）
"""
