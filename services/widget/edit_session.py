"""
组件配置编辑会话

职责：
  持有组件配置的草稿副本，所有修改只作用于草稿；commit 时整体替换
  基线配置，discard 时丢弃草稿、基线保持不变。

错误处理：
  - 输入错误（IneligibleField / InvalidWeight）：写入提示器后抛出，草稿不变
  - 契约错误（IndexOutOfRange / UnknownProperty）：严格模式抛出，否则记录并拒绝
  - 提交前检查配置约束，不满足时写入提示器并抛出 InvalidConfig，会话保持打开
  - 会话已关闭时调用任何操作抛出 SessionStateError
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Union

from api.schemas.widget import TypeConstraint, WidgetConfig
from services.config import WidgetEngineConfig, get_widget_engine_config
from services.widget.constants import ErrorMessages, SessionState
from services.widget.config_factory import invariant_violations
from services.widget.errors import (
    CONTRACT_ERRORS,
    IndexOutOfRange,
    IneligibleField,
    InvalidConfig,
    SessionStateError,
    UnknownProperty,
    WidgetConfigError,
)
from services.widget.field_resolver import FieldResolver, parse_weight
from services.widget.notifier import TransientNotifier

logger = logging.getLogger(__name__)

CommitHandler = Callable[[WidgetConfig], None]
CloseHandler = Callable[["EditSession"], None]


class EditSession:
    """单个组件的编辑会话；打开时草稿是基线的完整深拷贝。"""

    def __init__(
        self,
        baseline: WidgetConfig,
        constraint: TypeConstraint,
        resolver: FieldResolver,
        notifier: Optional[TransientNotifier] = None,
        on_commit: Optional[CommitHandler] = None,
        on_close: Optional[CloseHandler] = None,
        config: Optional[WidgetEngineConfig] = None,
    ):
        self._baseline = baseline
        self._draft = baseline.clone()
        self.constraint = constraint
        self.resolver = resolver
        self.config = config or get_widget_engine_config()
        self.notifier = notifier or TransientNotifier(config=self.config)
        self._on_commit = on_commit
        self._on_close = on_close
        self._open = True

    # ------------------------------------------------------------------
    # 状态
    # ------------------------------------------------------------------

    @property
    def widget_id(self) -> str:
        return self._baseline.widget_id

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def state(self) -> SessionState:
        return SessionState.EDITING if self._open else SessionState.IDLE

    @property
    def baseline(self) -> WidgetConfig:
        return self._baseline

    @property
    def draft(self) -> WidgetConfig:
        return self._draft

    def eligible_fields(self) -> List[str]:
        return self.resolver.eligible_fields(self.constraint)

    def row_choices(self, index: int) -> List[str]:
        """第 index 行可选的字段：当前所选字段或尚未被选中的字段。"""
        self._require_open()
        selected = self._draft.root_fields
        if not 0 <= index < len(selected):
            self._reject(IndexOutOfRange(index, len(selected)))
            return []
        current = selected[index]
        return [item for item in self.eligible_fields() if item == current or item not in selected]

    def can_add_row(self) -> bool:
        return self.constraint.multiple and self._next_unselected_field() is not None

    def expanded_fields(self) -> Union[List[str], Optional[str]]:
        return self.resolver.expand(self._draft.root_fields, self.constraint)

    def expanded_weights(self) -> Optional[List[int]]:
        if not self.constraint.weighted or self._draft.field_weights is None:
            return None
        return self.resolver.expand_weights(
            self._draft.root_fields, self._draft.field_weights, self.constraint
        )

    # ------------------------------------------------------------------
    # 草稿修改
    # ------------------------------------------------------------------

    def select_root_field(self, field: str) -> bool:
        """替换唯一的根字段；多字段组件等价于替换第 0 行。"""
        self._require_open()
        if self.constraint.multiple:
            return self.select_root_field_at(0, field)
        if self._draft.root_fields and self._draft.root_fields[0] == field:
            return False
        if field not in self.eligible_fields():
            self._fail(IneligibleField(field))
        self._draft.root_fields = [field]
        logger.debug("组件 %s 草稿根字段 -> %s", self.widget_id, field)
        return True

    def select_root_field_at(self, index: int, field: str) -> bool:
        self._require_open()
        selected = self._draft.root_fields
        if not 0 <= index < len(selected):
            return self._reject(IndexOutOfRange(index, len(selected)))
        if selected[index] == field:
            return False
        # 同一字段不能出现在两行
        if field not in self.eligible_fields() or field in selected:
            self._fail(IneligibleField(field))
        selected[index] = field
        logger.debug("组件 %s 草稿第 %d 行根字段 -> %s", self.widget_id, index, field)
        return True

    def add_root_field_row(self) -> bool:
        self._require_open()
        if not self.constraint.multiple:
            logger.warning("组件 %s 只允许一个根字段，忽略新增行", self.widget_id)
            return False
        field = self._next_unselected_field()
        if field is None:
            logger.debug("组件 %s 所有可用字段均已选中", self.widget_id)
            return False
        self._draft.root_fields.append(field)
        if self.constraint.weighted:
            weights = self._draft.field_weights
            if weights is None:
                weights = [self.config.default_field_weight] * (len(self._draft.root_fields) - 1)
            weights.append(self.config.default_field_weight)
            self._draft.field_weights = weights
        logger.debug("组件 %s 草稿新增根字段 %s", self.widget_id, field)
        return True

    def remove_root_field_row(self, index: int) -> bool:
        self._require_open()
        selected = self._draft.root_fields
        if not 0 <= index < len(selected):
            return self._reject(IndexOutOfRange(index, len(selected)))
        if len(selected) == 1:
            logger.warning("组件 %s 至少保留一个根字段，忽略删除", self.widget_id)
            return False
        removed = selected.pop(index)
        if self._draft.field_weights is not None and index < len(self._draft.field_weights):
            self._draft.field_weights.pop(index)
        logger.debug("组件 %s 草稿删除根字段 %s", self.widget_id, removed)
        return True

    def set_weight(self, index: int, raw_value: Any) -> bool:
        self._require_open()
        weights = self._draft.field_weights
        if not self.constraint.weighted or weights is None:
            return self._reject(UnknownProperty(self.constraint.kind, "field_weights"))
        if not 0 <= index < len(weights):
            return self._reject(IndexOutOfRange(index, len(weights)))
        try:
            value = parse_weight(raw_value)
        except WidgetConfigError as exc:
            self._fail(exc)
        weights[index] = value
        logger.debug("组件 %s 草稿第 %d 行权重 -> %d", self.widget_id, index, value)
        return True

    def set_aux_value(self, name: str, value: Any) -> bool:
        self._require_open()
        if name not in self.constraint.aux_properties:
            return self._reject(UnknownProperty(self.constraint.kind, name))
        self._draft.aux_values[name] = value
        logger.debug("组件 %s 草稿属性 %s -> %r", self.widget_id, name, value)
        return True

    # ------------------------------------------------------------------
    # 提交 / 放弃
    # ------------------------------------------------------------------

    def commit(self) -> WidgetConfig:
        """把草稿整体提交给调用方，返回最终配置。"""
        self._require_open()
        problems = invariant_violations(self._draft, self.constraint, self.resolver)
        if problems:
            # 草稿保持不变，会话保持打开，调用方修正后可再次提交
            self._fail(InvalidConfig(self.widget_id, problems))
        finalized = self._draft.clone()
        if self._on_commit is not None:
            self._on_commit(finalized)
        self._baseline = finalized
        self._close()
        logger.info("组件 %s 配置已提交: %s", self.widget_id, finalized.root_fields)
        return finalized

    def discard(self) -> None:
        self._require_open()
        self._draft = self._baseline.clone()
        self._close()
        logger.info("组件 %s 编辑已取消", self.widget_id)

    def _close(self) -> None:
        self._open = False
        self.notifier.close()
        if self._on_close is not None:
            self._on_close(self)

    # ------------------------------------------------------------------
    # 内部工具
    # ------------------------------------------------------------------

    def _next_unselected_field(self) -> Optional[str]:
        selected = self._draft.root_fields
        return next((item for item in self.eligible_fields() if item not in selected), None)

    def _require_open(self) -> None:
        if not self._open:
            raise SessionStateError(ErrorMessages.SESSION_NOT_OPEN.format(widget_id=self.widget_id))

    def _fail(self, exc: WidgetConfigError) -> None:
        self.notifier.report(str(exc))
        logger.info("组件 %s 输入被拒绝: %s", self.widget_id, exc)
        raise exc

    def _reject(self, exc: WidgetConfigError) -> bool:
        if self.config.strict_contracts or not isinstance(exc, CONTRACT_ERRORS):
            raise exc
        logger.error("组件 %s 契约错误（已拒绝）: %s", self.widget_id, exc)
        return False
