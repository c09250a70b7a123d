"""
组件字段绑定（调用方边界）

每个挂载的组件实例对应一个 WidgetBinding：
- 创建时若存储中的配置没有根字段，则由 ConfigFactory 生成默认配置；
- begin_edit() 打开唯一的 EditSession，commit 时整体替换基线并回调 on_commit；
- render_props() 生成组件实际接收的属性（展开后的 dataField 与 fieldWeights）；
- delete() 回调 on_delete，并释放对编辑会话的引用。
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from api.schemas.widget import TypeConstraint, WidgetConfig
from services.config import WidgetEngineConfig, get_widget_engine_config
from services.widget.config_factory import ConfigFactory, invariant_violations
from services.widget.constants import ErrorMessages, SessionState
from services.widget.constraint_registry import ConstraintRegistry, registry as default_registry
from services.widget.edit_session import EditSession
from services.widget.errors import SessionStateError, WidgetDeleted
from services.widget.field_resolver import FieldResolver
from services.widget.notifier import Scheduler, TransientNotifier
from services.widget.schema_index import SchemaIndex

logger = logging.getLogger(__name__)

OnCommit = Callable[[str, WidgetConfig], None]
OnDelete = Callable[[str], None]


class WidgetBinding:
    """单个已挂载组件的配置边界。"""

    def __init__(
        self,
        widget_id: str,
        kind: str,
        schema: Union[SchemaIndex, Mapping[str, Any]],
        stored: Optional[Union[WidgetConfig, Mapping[str, Any]]] = None,
        *,
        on_commit: Optional[OnCommit] = None,
        on_delete: Optional[OnDelete] = None,
        constraint_registry: Optional[ConstraintRegistry] = None,
        config: Optional[WidgetEngineConfig] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.widget_id = widget_id
        self.config = config or get_widget_engine_config()
        registry = constraint_registry or default_registry
        self.schema = schema if isinstance(schema, SchemaIndex) else SchemaIndex.from_mapping(schema)
        self.constraint: TypeConstraint = registry.constraint_for(kind)
        self.resolver = FieldResolver(self.schema)
        self._on_commit = on_commit
        self._on_delete = on_delete
        self._scheduler = scheduler
        self._session: Optional[EditSession] = None
        self._deleted = False

        baseline = self._load_stored(stored, kind)
        problems = invariant_violations(baseline, self.constraint, self.resolver)
        if baseline.root_fields and problems:
            logger.warning("组件 %s 存储的配置不满足约束: %s", widget_id, "; ".join(problems))
        if not baseline.root_fields:
            baseline = ConfigFactory(registry, self.config).default_config(widget_id, kind, self.schema)
            self.seeded = True
        else:
            self.seeded = False
        self._baseline = baseline

    def _load_stored(
        self, stored: Optional[Union[WidgetConfig, Mapping[str, Any]]], kind: str
    ) -> WidgetConfig:
        if stored is None:
            return WidgetConfig(widget_id=self.widget_id, kind=kind)
        if isinstance(stored, WidgetConfig):
            data = stored.model_dump()
        else:
            data = dict(stored)
        data.update(widget_id=self.widget_id, kind=kind)
        declared = self.constraint.aux_properties
        data["aux_values"] = {
            name: value for name, value in (data.get("aux_values") or {}).items() if name in declared
        }
        loaded = WidgetConfig.model_validate(data)
        if self.constraint.weighted and loaded.root_fields:
            loaded.field_weights = self._align_weights(loaded)
        return loaded.clone()

    def _align_weights(self, loaded: WidgetConfig) -> List[int]:
        """带权重的组件：缺失的权重按默认值补齐，多余的截断，与根字段一一对应。"""
        default = self.config.default_field_weight
        weights = list(loaded.field_weights or [])
        if len(weights) != len(loaded.root_fields):
            logger.warning(
                "组件 %s 存储的权重数量 %d 与根字段数量 %d 不一致，按默认权重 %d 补齐",
                self.widget_id,
                len(weights),
                len(loaded.root_fields),
                default,
            )
        weights = weights[: len(loaded.root_fields)]
        weights.extend([default] * (len(loaded.root_fields) - len(weights)))
        return weights

    # ------------------------------------------------------------------
    # 状态查询
    # ------------------------------------------------------------------

    @property
    def config_snapshot(self) -> WidgetConfig:
        """最近一次提交的配置（副本）。"""
        self._require_alive()
        return self._baseline.clone()

    @property
    def state(self) -> SessionState:
        if self._session is not None and self._session.is_open:
            return SessionState.EDITING
        return SessionState.IDLE

    @property
    def session(self) -> Optional[EditSession]:
        return self._session

    @property
    def deleted(self) -> bool:
        return self._deleted

    # ------------------------------------------------------------------
    # 编辑会话
    # ------------------------------------------------------------------

    def begin_edit(self) -> EditSession:
        self._require_alive()
        if self.state is SessionState.EDITING:
            raise SessionStateError(ErrorMessages.SESSION_ALREADY_OPEN.format(widget_id=self.widget_id))
        notifier = TransientNotifier(config=self.config, scheduler=self._scheduler)
        self._session = EditSession(
            self._baseline,
            self.constraint,
            self.resolver,
            notifier=notifier,
            on_commit=self._apply_commit,
            on_close=self._release_session,
            config=self.config,
        )
        logger.debug("组件 %s 打开编辑会话", self.widget_id)
        return self._session

    def _apply_commit(self, finalized: WidgetConfig) -> None:
        if self._on_commit is not None:
            self._on_commit(self.widget_id, finalized.clone())
        self._baseline = finalized

    def _release_session(self, session: EditSession) -> None:
        if self._session is session:
            self._session = None

    # ------------------------------------------------------------------
    # 渲染辅助
    # ------------------------------------------------------------------

    def aux_values(self) -> Dict[str, Any]:
        """已声明属性的有效值：存储值优先，否则为声明的默认值。"""
        self._require_alive()
        stored = self._baseline.aux_values
        return {
            name: stored[name] if name in stored else prop.default
            for name, prop in self.constraint.aux_properties.items()
        }

    def aux_form(self) -> List[Dict[str, Any]]:
        self._require_alive()
        values = self.aux_values()
        return [
            {
                "name": name,
                "label": prop.label,
                "description": prop.description,
                "kind": prop.kind.value,
                "value": values[name],
            }
            for name, prop in self.constraint.aux_properties.items()
        ]

    def render_props(self) -> Dict[str, Any]:
        """生成组件实际接收的属性。"""
        self._require_alive()
        props: Dict[str, Any] = {
            "componentId": self.widget_id,
            "component": self.constraint.component_id,
        }
        props.update(self.aux_values())
        props["dataField"] = self.resolver.expand(self._baseline.root_fields, self.constraint)
        if self.constraint.weighted and self._baseline.field_weights is not None:
            props["fieldWeights"] = self.resolver.expand_weights(
                self._baseline.root_fields, self._baseline.field_weights, self.constraint
            )
        return props

    # ------------------------------------------------------------------
    # 删除
    # ------------------------------------------------------------------

    def delete(self) -> None:
        """转发删除请求，并释放编辑会话。"""
        self._require_alive()
        session = self._session
        self._session = None
        if session is not None and session.is_open:
            session.discard()
        self._deleted = True
        logger.info("组件 %s 已删除", self.widget_id)
        if self._on_delete is not None:
            self._on_delete(self.widget_id)

    def _require_alive(self) -> None:
        if self._deleted:
            raise WidgetDeleted(self.widget_id)
