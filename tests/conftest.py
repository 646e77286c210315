"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from filter_builder.filters.models import Condition, FilterConfig, FilterGroup, LogicalOperator

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""[catalog]
default_entity = "deals"

[preview]
debounce_ms = 150

[display]
colored_output = false
""")
    return config_path


@pytest.fixture
def sample_fields_file(temp_dir: Path) -> Path:
    """Create an extra field catalog with one custom entity."""
    path = temp_dir / "fields.toml"
    path.write_text("""[[entities.tickets]]
key = "subject"
label = "Subject"
type = "text"

[[entities.tickets]]
key = "priority"
label = "Priority"
type = "select"
options = [{ label = "High", value = "high" }, { label = "Low", value = "low" }]
""")
    return path


@pytest.fixture
def company_filter() -> FilterConfig:
    """Two groups: (name contains Acme OR industry in tech/health) AND size > 10."""
    return FilterConfig(
        groups=(
            FilterGroup(
                id="g1",
                conditions=(
                    Condition(
                        id="c1",
                        field="name",
                        operator="contains",
                        value="Acme",
                        logical_operator=LogicalOperator.OR,
                    ),
                    Condition(
                        id="c2",
                        field="industry",
                        operator="in",
                        value=("technology", "healthcare"),
                    ),
                ),
                logical_operator=LogicalOperator.AND,
            ),
            FilterGroup(
                id="g2",
                conditions=(
                    Condition(
                        id="c3",
                        field="_count.contacts",
                        operator="greater_than",
                        value=10,
                    ),
                ),
            ),
        ),
        name="Big Acme",
        is_public=True,
    )


@pytest.fixture
def incomplete_filter() -> FilterConfig:
    """One group whose only condition has a field but no operator."""
    return FilterConfig(
        groups=(FilterGroup(id="g1", conditions=(Condition(id="c1", field="name"),)),)
    )


class _Timer:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock for debounce tests; nothing fires until ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[_Timer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _Timer:
        timer = _Timer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[_Timer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted(
            (t for t in self.timers if not t.cancelled and t.due <= self.now),
            key=lambda t: t.due,
        )
        for timer in due:
            if timer.cancelled:
                continue
            self.timers.remove(timer)
            timer.callback()


@pytest.fixture
def fake_scheduler() -> FakeScheduler:
    return FakeScheduler()
