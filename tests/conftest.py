"""Pytest configuration and shared fixtures."""

from typing import Any, Callable, Dict, List, Optional

import pytest

from confbind import (
    AbstractBindHandler,
    Binder,
    BindHandler,
    MapPropertySource,
)

# =============================================================================
# Fixtures: Sources and Binders
# =============================================================================


@pytest.fixture
def make_source() -> Callable[..., MapPropertySource]:
    """Build a MapPropertySource from a mapping."""

    def factory(data: Dict[str, Any], name: str = "test") -> MapPropertySource:
        return MapPropertySource(data, name)

    return factory


@pytest.fixture
def make_binder() -> Callable[..., Binder]:
    """Build a Binder (with placeholder resolution) over one mapping per source."""

    def factory(*data: Dict[str, Any], **kwargs: Any) -> Binder:
        sources = [MapPropertySource(mapping, f"source{i}") for i, mapping in enumerate(data)]
        return Binder.from_sources(sources, **kwargs)

    return factory


# =============================================================================
# Fixtures: Handlers
# =============================================================================


class RecordingBindHandler(AbstractBindHandler):
    """Records every hook call as ``(hook, name, depth)``."""

    def __init__(self, parent: Optional[BindHandler] = None):
        super().__init__(parent)
        self.calls: List[tuple] = []
        self.contexts: List[Any] = []

    def on_start(self, name, target, context):
        self.calls.append(("start", str(name), context.depth))
        self.contexts.append(context)
        return super().on_start(name, target, context)

    def on_success(self, name, target, context, result):
        self.calls.append(("success", str(name), context.depth))
        return super().on_success(name, target, context, result)

    def on_create(self, name, target, context, result):
        self.calls.append(("create", str(name), context.depth))
        return super().on_create(name, target, context, result)

    def on_failure(self, name, target, context, error):
        self.calls.append(("failure", str(name), context.depth))
        return super().on_failure(name, target, context, error)

    def on_finish(self, name, target, context, result):
        self.calls.append(("finish", str(name), context.depth))
        super().on_finish(name, target, context, result)

    def hooks_for(self, name: str) -> List[str]:
        return [hook for hook, called_name, _ in self.calls if called_name == name]


@pytest.fixture
def recording_handler() -> RecordingBindHandler:
    """A handler recording every hook invocation."""
    return RecordingBindHandler()
