"""Unit tests for debounced preview requests."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace

import pytest

from filter_builder.config import Config, load_config
from filter_builder.debounce import AsyncioScheduler, ThreadingScheduler
from filter_builder.filters.models import FilterConfig
from filter_builder.filters.params import FILTER_HASH_PARAM, filter_hash
from filter_builder.preview import DEFAULT_PREVIEW_DEBOUNCE_MS, PreviewCoordinator


def _renamed(config: FilterConfig, name: str) -> FilterConfig:
    return replace(config, name=name)


class TestPreviewCoordinator:
    def test_fetches_once_after_quiet_period(self, fake_scheduler, company_filter) -> None:
        requests: list[dict[str, str]] = []
        results: list = []

        def fetch(params: dict[str, str]) -> int:
            requests.append(params)
            return 42

        preview = PreviewCoordinator(fetch, results.append, 300, fake_scheduler)
        preview.update(_renamed(company_filter, "a"))
        preview.update(_renamed(company_filter, "b"))
        preview.update(company_filter)
        assert preview.pending
        assert requests == []

        fake_scheduler.advance(0.31)
        assert len(requests) == 1
        assert requests[0][FILTER_HASH_PARAM] == filter_hash(company_filter)
        assert results == [42]
        assert preview.latest_hash == filter_hash(company_filter)

    def test_incomplete_config_clears_preview(
        self, fake_scheduler, company_filter, incomplete_filter
    ) -> None:
        requests: list = []
        results: list = []
        preview = PreviewCoordinator(requests.append, results.append, 300, fake_scheduler)

        preview.update(company_filter)
        preview.update(incomplete_filter)
        assert results == [None]
        assert not preview.pending
        assert preview.latest_hash is None

        fake_scheduler.advance(1)
        assert requests == []

    def test_stale_result_is_dropped(self, fake_scheduler, company_filter, caplog) -> None:
        results: list = []
        newer = _renamed(company_filter, "newer")
        preview: PreviewCoordinator

        def fetch(params: dict[str, str]) -> str:
            # Another edit lands while the request is in flight.
            preview.update(newer)
            return params[FILTER_HASH_PARAM]

        preview = PreviewCoordinator(fetch, results.append, 300, fake_scheduler)
        with caplog.at_level(logging.DEBUG, logger="filter_builder"):
            preview.update(company_filter)
            fake_scheduler.advance(0.31)
        assert results == []
        assert "Discarding stale preview" in caplog.text
        assert preview.pending

    def test_failing_fetch_reports_none(self, fake_scheduler, company_filter, caplog) -> None:
        results: list = []

        def fetch(params: dict[str, str]) -> None:
            raise ConnectionError("backend down")

        preview = PreviewCoordinator(fetch, results.append, 300, fake_scheduler)
        with caplog.at_level(logging.ERROR):
            preview.update(company_filter)
            fake_scheduler.advance(0.31)
        assert results == [None]
        assert "Failed to load filter preview: backend down" in caplog.text

    def test_flush_and_cancel(self, fake_scheduler, company_filter) -> None:
        results: list = []
        preview = PreviewCoordinator(lambda params: "ok", results.append, 300, fake_scheduler)

        preview.update(company_filter)
        preview.cancel()
        assert not preview.flush()

        preview.update(company_filter)
        assert preview.flush()
        assert results == ["ok"]


class TestAsyncPreview:
    def test_only_latest_async_result_delivered(self, company_filter) -> None:
        results: list = []
        newer = _renamed(company_filter, "newer")

        async def main() -> None:
            gate = asyncio.Event()

            async def fetch(params: dict[str, str]) -> str:
                await gate.wait()
                return params[FILTER_HASH_PARAM]

            preview = PreviewCoordinator(fetch, results.append, 10, AsyncioScheduler())
            preview.update(company_filter)
            await asyncio.sleep(0.05)
            preview.update(newer)
            await asyncio.sleep(0.05)
            gate.set()
            await asyncio.sleep(0.05)

        asyncio.run(main())
        assert results == [filter_hash(newer)]

    def test_async_failure_reports_none(self, company_filter, caplog) -> None:
        results: list = []

        async def main() -> None:
            async def fetch(params: dict[str, str]) -> None:
                raise TimeoutError("slow")

            preview = PreviewCoordinator(fetch, results.append, 10, AsyncioScheduler())
            preview.update(company_filter)
            await asyncio.sleep(0.1)

        with caplog.at_level(logging.ERROR):
            asyncio.run(main())
        assert results == [None]
        assert "Failed to load filter preview: slow" in caplog.text

    def test_in_flight_tasks_are_held_until_done(self, company_filter) -> None:
        results: list = []

        async def main() -> None:
            gate = asyncio.Event()

            async def fetch(params: dict[str, str]) -> str:
                await gate.wait()
                return "done"

            preview = PreviewCoordinator(fetch, results.append, 10, AsyncioScheduler())
            preview.update(company_filter)
            await asyncio.sleep(0.05)
            assert len(preview._tasks) == 1
            gate.set()
            await asyncio.sleep(0.05)
            assert not preview._tasks

        asyncio.run(main())
        assert results == ["done"]

    @pytest.mark.parametrize("scheduler", [None, ThreadingScheduler()])
    def test_async_fetch_rejects_thread_timers(self, scheduler) -> None:
        async def fetch(params: dict[str, str]) -> None:
            return None

        with pytest.raises(ValueError, match="event-loop scheduler"):
            PreviewCoordinator(fetch, lambda result: None, 10, scheduler)

    def test_awaitable_without_running_loop_reports_none(
        self, fake_scheduler, company_filter, caplog
    ) -> None:
        results: list = []

        async def load() -> str:
            return "never"

        preview = PreviewCoordinator(lambda params: load(), results.append, 10, fake_scheduler)
        preview.update(company_filter)
        with caplog.at_level(logging.ERROR):
            fake_scheduler.advance(0.05)

        assert results == [None]
        assert "off the event loop" in caplog.text


class TestPreviewFromConfig:
    def test_uses_configured_debounce(self, fake_scheduler, company_filter) -> None:
        requests: list = []
        config = Config(preview_debounce_ms=50)
        preview = PreviewCoordinator.from_config(
            config, requests.append, lambda result: None, fake_scheduler
        )
        assert preview.wait_ms == pytest.approx(50)

        preview.update(company_filter)
        fake_scheduler.advance(0.04)
        assert requests == []
        fake_scheduler.advance(0.02)
        assert len(requests) == 1

    def test_loaded_setting_reaches_coordinator(self, temp_dir) -> None:
        path = temp_dir / "config.toml"
        path.write_text("[preview]\ndebounce_ms = 750\n")
        config, _ = load_config(path)

        preview = PreviewCoordinator.from_config(config, lambda params: None, lambda result: None)
        assert preview.wait_ms == pytest.approx(750)
        assert DEFAULT_PREVIEW_DEBOUNCE_MS != 750
