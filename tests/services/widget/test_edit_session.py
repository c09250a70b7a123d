"""
测试组件配置编辑会话（草稿修改、提交与放弃）
"""

import pytest

from services.config import WidgetEngineConfig
from services.widget.binding import WidgetBinding
from services.widget.constants import SessionState
from services.widget.errors import (
    IndexOutOfRange,
    IneligibleField,
    InvalidConfig,
    InvalidWeight,
    SessionStateError,
    UnknownProperty,
)

SCENARIO_MAPPING = {
    "title": {
        "type": "text",
        "fields": ["keyword"],
        "originalFields": {"keyword": {"type": "keyword"}},
    }
}


@pytest.fixture
def commits():
    return []


@pytest.fixture
def make_binding(mapping, fake_loop, commits):
    def _make(kind="search", schema=None, config=None, stored=None):
        return WidgetBinding(
            kind,
            kind,
            schema if schema is not None else mapping,
            stored,
            on_commit=lambda widget_id, config: commits.append((widget_id, config)),
            scheduler=fake_loop.call_later,
            config=config,
        )

    return _make


class TestScenarios:
    """端到端场景"""

    def test_search_weight_inherited_by_keyword_sub_field(self, make_binding, commits):
        binding = make_binding("search", schema=SCENARIO_MAPPING)
        assert binding.config_snapshot.root_fields == ["title"]

        session = binding.begin_edit()
        session.set_weight(0, "3")
        finalized = session.commit()

        assert finalized.field_weights == [3]
        props = binding.render_props()
        assert props["dataField"] == ["title", "title.keyword"]
        assert props["fieldWeights"] == [3, 3]
        assert len(commits) == 1

    def test_single_field_filter_binds_keyword_variant(self, make_binding):
        binding = make_binding("multi_list", schema=SCENARIO_MAPPING)
        assert binding.config_snapshot.root_fields == ["title"]
        assert binding.render_props()["dataField"] == "title.keyword"

    def test_remove_last_row_is_noop(self, make_binding):
        session = make_binding("search").begin_edit()
        before = session.draft.model_dump()

        assert session.remove_root_field_row(0) is False
        assert session.draft.model_dump() == before

    def test_invalid_weight_keeps_previous_draft(self, make_binding, commits):
        binding = make_binding("search")
        session = binding.begin_edit()
        session.set_weight(0, "4")

        with pytest.raises(InvalidWeight):
            session.set_weight(0, "abc")

        assert session.draft.field_weights == [4]
        assert session.notifier.message
        session.commit()
        assert commits[-1][1].field_weights == [4]


def test_discard_without_mutation_leaves_store_identical(make_binding, commits):
    binding = make_binding("search")
    before = binding.config_snapshot.model_dump_json()

    session = binding.begin_edit()
    session.discard()

    assert binding.config_snapshot.model_dump_json() == before
    assert binding.state is SessionState.IDLE
    assert commits == []


def test_draft_never_aliases_baseline(make_binding):
    binding = make_binding("search")
    session = binding.begin_edit()
    session.add_root_field_row()
    session.set_aux_value("placeholder", "Find")

    assert binding.config_snapshot.root_fields == ["title"]
    assert session.baseline.root_fields == ["title"]
    assert session.baseline.aux_values == {}
    session.discard()
    assert binding.config_snapshot.aux_values == {}


def test_reopen_starts_from_committed_baseline(make_binding):
    binding = make_binding("search")
    session = binding.begin_edit()
    session.add_root_field_row()
    session.discard()

    session = binding.begin_edit()
    assert session.draft.root_fields == ["title"]
    assert session.draft.field_weights == [2]


class TestRootFields:
    def test_select_root_field_single(self, make_binding):
        session = make_binding("multi_list").begin_edit()
        assert session.select_root_field("category") is True
        assert session.draft.root_fields == ["category"]
        assert session.select_root_field("category") is False

    def test_select_ineligible_field_reports_and_raises(self, make_binding):
        session = make_binding("multi_list").begin_edit()
        with pytest.raises(IneligibleField):
            session.select_root_field("price")
        assert session.draft.root_fields == ["title"]
        assert "price" in session.notifier.message

    def test_select_root_field_at(self, make_binding):
        session = make_binding("search").begin_edit()
        session.add_root_field_row()
        assert session.select_root_field_at(1, "body") is True
        assert session.draft.root_fields == ["title", "body"]
        assert session.select_root_field_at(1, "body") is False

    def test_select_root_field_at_rejects_duplicate(self, make_binding):
        session = make_binding("search").begin_edit()
        session.add_root_field_row()
        with pytest.raises(IneligibleField):
            session.select_root_field_at(1, "title")
        assert session.draft.root_fields == ["title", "description"]

    def test_select_root_field_on_multi_kind_replaces_first_row(self, make_binding):
        session = make_binding("search").begin_edit()
        session.select_root_field("body")
        assert session.draft.root_fields == ["body"]

    def test_add_rows_until_exhausted(self, make_binding):
        session = make_binding("search").begin_edit()
        added = 0
        while session.can_add_row():
            assert session.add_root_field_row() is True
            added += 1

        assert added == 3
        assert session.draft.root_fields == ["title", "description", "category", "body"]
        assert session.draft.field_weights == [2, 2, 2, 2]
        assert session.add_root_field_row() is False

    def test_add_row_uses_configured_weight(self, make_binding, monkeypatch):
        monkeypatch.setenv("WIDGET_DEFAULT_FIELD_WEIGHT", "7")
        session = make_binding("search", config=WidgetEngineConfig()).begin_edit()
        session.add_root_field_row()
        assert session.draft.field_weights == [7, 7]

    def test_add_row_on_single_kind_is_noop(self, make_binding):
        session = make_binding("multi_list").begin_edit()
        assert session.can_add_row() is False
        assert session.add_root_field_row() is False
        assert session.draft.root_fields == ["title"]

    def test_remove_row_drops_paired_weight(self, make_binding):
        session = make_binding("search").begin_edit()
        session.add_root_field_row()
        session.set_weight(1, 9)

        assert session.remove_root_field_row(0) is True
        assert session.draft.root_fields == ["description"]
        assert session.draft.field_weights == [9]

    def test_row_choices(self, make_binding):
        session = make_binding("search").begin_edit()
        session.add_root_field_row()
        assert session.row_choices(0) == ["title", "category", "body"]
        assert session.row_choices(1) == ["description", "category", "body"]


class TestContractErrors:
    """调用方契约错误：严格模式抛出，否则拒绝"""

    def test_strict_mode_raises(self, make_binding):
        session = make_binding("search").begin_edit()
        with pytest.raises(IndexOutOfRange):
            session.remove_root_field_row(3)
        with pytest.raises(IndexOutOfRange):
            session.set_weight(1, "2")
        with pytest.raises(IndexOutOfRange):
            session.select_root_field_at(-1, "body")
        with pytest.raises(UnknownProperty):
            session.set_aux_value("color", "red")

    def test_lenient_mode_rejects(self, make_binding, monkeypatch):
        monkeypatch.setenv("WIDGET_STRICT_CONTRACTS", "0")
        session = make_binding("search", config=WidgetEngineConfig()).begin_edit()
        before = session.draft.model_dump()

        assert session.remove_root_field_row(3) is False
        assert session.set_aux_value("color", "red") is False
        assert session.row_choices(5) == []
        assert session.draft.model_dump() == before

    def test_weight_on_unweighted_kind(self, make_binding):
        session = make_binding("multi_list").begin_edit()
        with pytest.raises(UnknownProperty):
            session.set_weight(0, "2")


def test_set_aux_value(make_binding, commits):
    binding = make_binding("multi_list")
    session = binding.begin_edit()
    assert session.set_aux_value("showSearch", False) is True
    session.commit()
    assert commits[0][1].aux_values == {"showSearch": False}
    assert binding.render_props()["showSearch"] is False


def test_closed_session_rejects_operations(make_binding):
    session = make_binding("search").begin_edit()
    session.commit()

    assert session.is_open is False
    with pytest.raises(SessionStateError):
        session.add_root_field_row()
    with pytest.raises(SessionStateError):
        session.commit()
    with pytest.raises(SessionStateError):
        session.discard()


def test_commit_closes_notifier(make_binding, fake_loop):
    session = make_binding("search").begin_edit()
    with pytest.raises(InvalidWeight):
        session.set_weight(0, "x")
    assert len(fake_loop.timers) == 1

    session.commit()
    assert fake_loop.timers[0].cancelled is True
    assert session.notifier.message == ""


class TestStoredInput:
    """存储中的配置不完整或不合法时的提交行为"""

    def test_missing_weights_are_filled_before_editing(self, make_binding, commits):
        binding = make_binding("search", stored={"root_fields": ["title"]})
        assert binding.config_snapshot.field_weights == [2]

        session = binding.begin_edit()
        session.add_root_field_row()
        finalized = session.commit()

        assert finalized.root_fields == ["title", "description"]
        assert finalized.field_weights == [2, 2]
        assert binding.render_props()["fieldWeights"] == [2, 2, 2, 2, 1]

    def test_invalid_stored_config_is_not_committed(self, make_binding, commits):
        binding = make_binding("multi_list", stored={"root_fields": ["price", "body"]})
        session = binding.begin_edit()

        with pytest.raises(InvalidConfig) as exc_info:
            session.commit()

        assert len(exc_info.value.problems) == 3
        assert exc_info.value.code == "INVALID_CONFIG"
        assert session.is_open is True
        assert session.notifier.message
        assert commits == []
        assert binding.config_snapshot.root_fields == ["price", "body"]

        session.select_root_field("category")
        assert session.commit().root_fields == ["category"]
        assert commits[-1][1].root_fields == ["category"]


def test_select_ineligible_field_at_index(make_binding):
    session = make_binding("search").begin_edit()
    session.add_root_field_row()

    with pytest.raises(IneligibleField):
        session.select_root_field_at(1, "price")

    assert session.draft.root_fields == ["title", "description"]
    assert "price" in session.notifier.message


def test_expanded_draft_fields_and_weights(make_binding):
    session = make_binding("search").begin_edit()
    session.add_root_field_row()
    session.set_weight(1, "4")

    assert session.expanded_fields() == [
        "title",
        "title.keyword",
        "description",
        "description.keyword",
        "description.search",
    ]
    assert session.expanded_weights() == [2, 2, 4, 4, 1]


def test_expanded_weights_absent_for_unweighted_kind(make_binding):
    session = make_binding("multi_list").begin_edit()
    assert session.expanded_fields() == "title.keyword"
    assert session.expanded_weights() is None


def test_lenient_mode_rejects_weight_on_unweighted_kind(make_binding, monkeypatch):
    monkeypatch.setenv("WIDGET_STRICT_CONTRACTS", "0")
    session = make_binding("multi_list", config=WidgetEngineConfig()).begin_edit()
    assert session.set_weight(0, "2") is False
    assert session.draft.field_weights is None
