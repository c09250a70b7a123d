"""
搜索/列表组件字段绑定引擎。
"""

from .binding import WidgetBinding
from .config_factory import ConfigFactory, invariant_violations
from .constants import SessionState, WidgetKind
from .constraint_registry import ConstraintRegistry, default_constraints, registry
from .edit_session import EditSession
from .errors import (
    IndexOutOfRange,
    IneligibleField,
    InvalidConfig,
    InvalidWeight,
    NoEligibleField,
    SessionStateError,
    UnknownProperty,
    UnknownWidgetKind,
    WidgetConfigError,
    WidgetDeleted,
)
from .field_resolver import FieldResolver, parse_weight
from .notifier import TransientNotifier
from .schema_index import SchemaIndex

__all__ = [
    "WidgetBinding",
    "ConfigFactory",
    "invariant_violations",
    "SessionState",
    "WidgetKind",
    "ConstraintRegistry",
    "default_constraints",
    "registry",
    "EditSession",
    "WidgetConfigError",
    "UnknownWidgetKind",
    "NoEligibleField",
    "IneligibleField",
    "InvalidConfig",
    "IndexOutOfRange",
    "InvalidWeight",
    "UnknownProperty",
    "SessionStateError",
    "WidgetDeleted",
    "FieldResolver",
    "parse_weight",
    "TransientNotifier",
    "SchemaIndex",
]
