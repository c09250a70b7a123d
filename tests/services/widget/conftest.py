"""
组件字段绑定测试的共享 fixtures
"""

import pytest

from services.config import reset_widget_engine_config
from services.widget.schema_index import SchemaIndex


SAMPLE_MAPPING = {
    "title": {
        "type": "text",
        "fields": ["keyword"],
        "originalFields": {"keyword": {"type": "keyword"}},
    },
    "description": {
        "type": "text",
        "fields": ["keyword", "search"],
        "originalFields": {"keyword": {"type": "keyword"}, "search": {"type": "text"}},
    },
    "category": {"type": "keyword"},
    "price": {"type": "long"},
    "body": {"type": "text"},
}


class FakeTimer:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """手动推进的时钟 + 定时器，替代 asyncio 事件循环。"""

    def __init__(self):
        self.now = 0.0
        self.timers = []

    def clock(self):
        return self.now

    def call_later(self, delay, callback):
        timer = FakeTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds):
        self.now += seconds
        for timer in sorted(self.timers, key=lambda item: item.due):
            if timer.due <= self.now:
                self.timers.remove(timer)
                if not timer.cancelled:
                    timer.callback()


@pytest.fixture(autouse=True)
def reset_config():
    """每个测试前后重置配置单例"""
    reset_widget_engine_config()
    yield
    reset_widget_engine_config()


@pytest.fixture
def mapping():
    return {name: dict(entry) for name, entry in SAMPLE_MAPPING.items()}


@pytest.fixture
def schema(mapping):
    return SchemaIndex.from_mapping(mapping)


@pytest.fixture
def fake_loop():
    return FakeLoop()
