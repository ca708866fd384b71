"""Run coordinator — discovers scripts, manages browsers and output dirs."""

from __future__ import annotations

import asyncio
import glob
import logging
import shutil
import time
from pathlib import Path
from typing import Protocol

from playwright.async_api import Browser, async_playwright

from screentest.compiler.parser import read_script
from screentest.errors import CheckFailure, DiscoveryError, MismatchError, ScreentestError
from screentest.executor.diff import run_diff
from screentest.models.config import RunnerConfig
from screentest.models.script import TestCase
from screentest.models.test_result import CaseResult, RunResult, ScriptResult
from screentest.reporter import format_failure_report
from screentest.url_utils import sanitized
from screentest.utils.browser import launch_browser

logger = logging.getLogger(__name__)


class CaseReporter(Protocol):
    """Receives each test case outcome in per-test mode."""

    def case_started(self, script: Path, test_case: TestCase) -> None: ...

    def case_finished(self, script: Path, result: CaseResult) -> None: ...


class Coordinator:
    """Coordinates compile and diff runs over a set of script files."""

    def __init__(self, config: RunnerConfig):
        self.config = config
        self.output_root = Path(config.output_root)

    def discover(self, pattern: str) -> list[Path]:
        """Return the script files matched by ``pattern``, sorted."""
        files = sorted(glob.glob(pattern, recursive=True))
        if not files:
            raise DiscoveryError(f"no files match {pattern!r}")
        return [Path(f) for f in files]

    def compile_all(
        self, pattern: str, require_tests: bool = True,
    ) -> list[tuple[Path, list[TestCase]]]:
        """Compile every matched script before anything runs.

        Raises CompileError for the first invalid script. With
        ``require_tests`` a script that defines no test cases is a
        DiscoveryError.
        """
        scripts = []
        for path in self.discover(pattern):
            tests = read_script(path)
            if require_tests and not tests:
                raise DiscoveryError(f"no tests found in {str(path)!r}")
            logger.info("Loaded %d test cases from %s", len(tests), path)
            scripts.append((path, tests))
        return scripts

    def output_dir_for(self, script: Path) -> Path:
        return self.output_root / sanitized(script.name)

    def prepare_output_dir(self, script: Path) -> Path:
        """Create an empty artifact directory for ``script``.

        Anything left there by a previous run is removed first.
        """
        out = self.output_dir_for(script)
        if out.exists():
            logger.debug("Removing previous artifacts in %s", out)
            shutil.rmtree(out)
        out.mkdir(parents=True, exist_ok=True)
        return out

    def check(self, pattern: str) -> RunResult:
        """Batch mode: run every script and raise CheckFailure on any failure."""
        run_result = asyncio.run(self.run_scripts(pattern))
        if not run_result.ok:
            raise CheckFailure(format_failure_report(run_result), run_result)
        return run_result

    def run_each(self, pattern: str, reporter: CaseReporter) -> RunResult:
        """Per-test mode: report every test case to ``reporter`` as it finishes."""
        return asyncio.run(self.run_scripts(pattern, reporter=reporter, require_tests=False))

    async def run_scripts(
        self,
        pattern: str,
        reporter: CaseReporter | None = None,
        require_tests: bool = True,
    ) -> RunResult:
        """Run all scripts matched by ``pattern`` and collect their results.

        One Playwright driver serves the whole run and each script gets its
        own browser, closed when the script finishes or the run is cancelled.
        """
        scripts = self.compile_all(pattern, require_tests=require_tests)
        started_at = time.strftime("%Y-%m-%dT%H:%M:%SZ")
        start_time = time.time()
        script_results: list[ScriptResult] = []

        async with async_playwright() as p:
            for path, tests in scripts:
                out_dir = self.prepare_output_dir(path)
                script_result = ScriptResult(script=str(path), output_dir=str(out_dir))
                logger.debug("Launching browser for %s...", path)
                browser = await launch_browser(p, self.config)
                try:
                    for tc in tests:
                        if reporter:
                            reporter.case_started(path, tc)
                        result = await self.run_case(browser, tc, out_dir)
                        script_result.case_results.append(result)
                        if reporter:
                            reporter.case_finished(path, result)
                finally:
                    await browser.close()
                script_results.append(script_result)

        case_results = [r for s in script_results for r in s.case_results]
        run_result = RunResult(
            pattern=pattern,
            started_at=started_at,
            completed_at=time.strftime("%Y-%m-%dT%H:%M:%SZ"),
            total_tests=len(case_results),
            passed=sum(1 for r in case_results if r.result == "pass"),
            failed=sum(1 for r in case_results if r.result == "fail"),
            errors=sum(1 for r in case_results if r.result == "error"),
            duration_seconds=round(time.time() - start_time, 2),
            script_results=script_results,
        )
        logger.info(
            "Run complete: %d passed, %d failed, %d errors (%.1fs)",
            run_result.passed, run_result.failed, run_result.errors,
            run_result.duration_seconds,
        )
        return run_result

    async def run_case(self, browser: Browser, test_case: TestCase, out_dir: Path) -> CaseResult:
        """Run one test case; failures are recorded, never raised."""
        start = time.time()
        status = "pass"
        reason = None
        try:
            await run_diff(test_case, browser, out_dir, self.config)
        except MismatchError as e:
            status, reason = "fail", str(e)
        except ScreentestError as e:
            logger.warning("Test %s errored: %s", test_case.name, e)
            status, reason = "error", str(e)
        except Exception as e:
            logger.error("Test %s crashed: %s", test_case.name, e)
            status, reason = "error", f"{type(e).__name__}: {e}"
        return CaseResult(
            test_name=test_case.name,
            url_a=test_case.url_a,
            url_b=test_case.url_b,
            result=status,
            failure_reason=reason,
            duration_seconds=round(time.time() - start, 2),
        )
