"""pytest integration — run each compiled test case as its own pytest test.

Select scripts with ``--screentest PATTERN`` (or the ``screentest_glob`` ini
key) and request the ``screentest_case`` fixture::

    def test_screens(screentest_case, screentest_runner):
        screentest_runner.run(screentest_case)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import pytest
from playwright.async_api import Browser, Playwright, async_playwright

from screentest.executor.diff import run_diff
from screentest.models.config import RunnerConfig
from screentest.models.script import TestCase
from screentest.orchestrator import Coordinator
from screentest.utils.browser import launch_browser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScriptCase:
    script: Path
    test_case: TestCase

    @property
    def id(self) -> str:
        return f"{self.script.name}::{self.test_case.name}"


def collect_cases(coordinator: Coordinator, pattern: str) -> list[ScriptCase]:
    """Compile every script matched by ``pattern`` into per-test units."""
    return [
        ScriptCase(script=path, test_case=tc)
        for path, tests in coordinator.compile_all(pattern, require_tests=False)
        for tc in tests
    ]


class CaseRunner:
    """Runs script cases on a private event loop.

    Cases arrive in script order; a new browser is launched whenever the
    script changes and the previous one is closed.
    """

    def __init__(self, coordinator: Coordinator):
        self.coordinator = coordinator
        self._loop = asyncio.Runner()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._script: Path | None = None
        self._out_dirs: dict[Path, Path] = {}

    def run(self, case: ScriptCase) -> None:
        """Run one case, raising the engine error if it does not pass."""
        self._loop.run(self._run(case))

    async def _run(self, case: ScriptCase) -> None:
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        if self._browser is None or case.script != self._script:
            await self._close_browser()
            logger.debug("Launching browser for %s...", case.script)
            self._browser = await launch_browser(self._playwright, self.coordinator.config)
            self._script = case.script
        out_dir = self._out_dirs.get(case.script)
        if out_dir is None:
            out_dir = self.coordinator.prepare_output_dir(case.script)
            self._out_dirs[case.script] = out_dir
        await run_diff(case.test_case, self._browser, out_dir, self.coordinator.config)

    async def _close_browser(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None

    async def _shutdown(self) -> None:
        await self._close_browser()
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    def close(self) -> None:
        try:
            self._loop.run(self._shutdown())
        finally:
            self._loop.close()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("screentest")
    group.addoption(
        "--screentest", action="store", dest="screentest_glob", default=None,
        metavar="PATTERN", help="glob of screentest scripts to run",
    )
    group.addoption(
        "--screentest-config", action="store", dest="screentest_config", default=None,
        metavar="PATH", help="screentest JSON config file",
    )
    parser.addini("screentest_glob", "glob of screentest scripts to run", default="")


def _load_config(config: pytest.Config) -> RunnerConfig:
    path = config.getoption("screentest_config")
    return RunnerConfig.load(path) if path else RunnerConfig()


def pytest_generate_tests(metafunc: pytest.Metafunc) -> None:
    if "screentest_case" not in metafunc.fixturenames:
        return
    pattern = metafunc.config.getoption("screentest_glob") or metafunc.config.getini("screentest_glob")
    if not pattern:
        raise pytest.UsageError(
            "screentest_case needs --screentest PATTERN or the screentest_glob ini option"
        )
    cases = collect_cases(Coordinator(_load_config(metafunc.config)), pattern)
    metafunc.parametrize("screentest_case", cases, ids=[c.id for c in cases])


@pytest.fixture(scope="session")
def screentest_runner(pytestconfig: pytest.Config):
    runner = CaseRunner(Coordinator(_load_config(pytestconfig)))
    yield runner
    runner.close()
