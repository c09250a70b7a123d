"""
组件类型约束注册器，声明每种组件可绑定的字段类型与可配置属性。
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from api.schemas.widget import AuxProperty, PropertyKind, TypeConstraint
from services.widget.constants import WidgetKind
from services.widget.errors import UnknownWidgetKind


class ConstraintRegistry:
    """组件类型约束查询表，进程启动时加载一次，之后只读。"""

    def __init__(self, constraints: Optional[Iterable[TypeConstraint]] = None):
        self._constraints: Dict[str, TypeConstraint] = {
            c.kind: c for c in (constraints if constraints is not None else default_constraints())
        }

    def constraint_for(self, kind: str) -> TypeConstraint:
        constraint = self._constraints.get(kind)
        if constraint is None:
            raise UnknownWidgetKind(kind)
        return constraint

    def get(self, kind: str) -> Optional[TypeConstraint]:
        return self._constraints.get(kind)

    def kinds(self) -> List[str]:
        return list(self._constraints)

    def all(self) -> List[TypeConstraint]:
        return list(self._constraints.values())

    def __contains__(self, kind: str) -> bool:
        return kind in self._constraints


def default_constraints() -> List[TypeConstraint]:
    """返回内置组件类型约束。"""
    return [
        TypeConstraint(
            kind=WidgetKind.SEARCH.value,
            label="Data Fields",
            description="Fields to search on, with a relevance weight for each field.",
            component_id="DataSearch",
            accepted_types=frozenset({"text", "keyword", "string"}),
            multiple=True,
            weighted=True,
            # 多字段搜索只按字段自身声明的类型判断是否可选
            match_sub_field_types=False,
            aux_properties={
                "placeholder": AuxProperty(
                    label="Placeholder",
                    description="Text shown when the search box is empty.",
                    kind=PropertyKind.TEXT,
                    default="Search",
                ),
                "autosuggest": AuxProperty(
                    label="Auto Suggest",
                    description="Show suggestions while typing.",
                    kind=PropertyKind.BOOL,
                    default=True,
                ),
                "highlight": AuxProperty(
                    label="Highlight",
                    description="Highlight matched terms in results.",
                    kind=PropertyKind.BOOL,
                    default=False,
                ),
                "fuzziness": AuxProperty(
                    label="Fuzziness",
                    description="Maximum edit distance allowed when matching.",
                    kind=PropertyKind.NUMBER,
                    default=0,
                ),
                "queryFormat": AuxProperty(
                    label="Query Format",
                    description="Combine terms with 'or' / 'and'.",
                    kind=PropertyKind.TEXT,
                    default="or",
                ),
            },
        ),
        TypeConstraint(
            kind=WidgetKind.MULTI_LIST.value,
            label="Data Field",
            description="Aggregatable field whose values become the list items.",
            component_id="MultiList",
            accepted_types=frozenset({"keyword", "string"}),
            multiple=False,
            weighted=False,
            match_sub_field_types=True,
            aux_properties={
                "title": AuxProperty(
                    label="Title",
                    description="Title shown above the list.",
                    kind=PropertyKind.TEXT,
                    default="",
                ),
                "size": AuxProperty(
                    label="Size",
                    description="Number of list items to show.",
                    kind=PropertyKind.NUMBER,
                    default=100,
                ),
                "showSearch": AuxProperty(
                    label="Show Search",
                    description="Show a search box above the list.",
                    kind=PropertyKind.BOOL,
                    default=True,
                ),
                "showCheckbox": AuxProperty(
                    label="Show Checkbox",
                    description="Render a checkbox next to each item.",
                    kind=PropertyKind.BOOL,
                    default=True,
                ),
                "queryFormat": AuxProperty(
                    label="Query Format",
                    description="Combine selected items with 'or' / 'and'.",
                    kind=PropertyKind.TEXT,
                    default="or",
                ),
            },
        ),
        TypeConstraint(
            kind=WidgetKind.RESULT_LIST.value,
            label="Sort Field",
            description="Field used to sort the results.",
            component_id="ReactiveList",
            accepted_types=frozenset({"keyword", "long", "integer", "float", "date"}),
            multiple=False,
            weighted=False,
            match_sub_field_types=True,
            aux_properties={
                "size": AuxProperty(
                    label="Page Size",
                    description="Number of results per page.",
                    kind=PropertyKind.NUMBER,
                    default=10,
                ),
                "pagination": AuxProperty(
                    label="Pagination",
                    description="Use pages instead of infinite loading.",
                    kind=PropertyKind.BOOL,
                    default=False,
                ),
                "sortBy": AuxProperty(
                    label="Sort Order",
                    description="'asc' or 'desc'.",
                    kind=PropertyKind.TEXT,
                    default="asc",
                ),
                "showResultStats": AuxProperty(
                    label="Show Result Stats",
                    description="Show the number of results and time taken.",
                    kind=PropertyKind.BOOL,
                    default=True,
                ),
            },
        ),
    ]


registry = ConstraintRegistry()

__all__ = ["ConstraintRegistry", "default_constraints", "registry"]
