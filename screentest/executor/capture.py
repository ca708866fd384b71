"""Screenshot capture — one isolated browser context per screenshot."""

from __future__ import annotations

import asyncio
import logging

from playwright.async_api import Browser, Error as PlaywrightError

from screentest.errors import CaptureError
from screentest.models.config import RunnerConfig
from screentest.models.script import TestCase
from screentest.utils.browser import create_capture_context

from .action_runner import run_action

logger = logging.getLogger(__name__)


async def capture_screenshot(
    browser: Browser, url: str, test_case: TestCase, config: RunnerConfig,
) -> bytes:
    """Load ``url``, replay the test's actions and return PNG bytes.

    The whole capture is bounded by ``config.capture_timeout_seconds``.
    Any driver failure is raised as CaptureError.
    """
    timeout = config.capture_timeout_seconds
    try:
        return await asyncio.wait_for(
            _capture(browser, url, test_case, config), timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise CaptureError(url, TimeoutError(f"timed out after {timeout:g}s")) from e
    except (PlaywrightError, ValueError) as e:
        raise CaptureError(url, e) from e


async def _capture(
    browser: Browser, url: str, test_case: TestCase, config: RunnerConfig,
) -> bytes:
    context = await create_capture_context(browser, test_case, config)
    try:
        page = await context.new_page()
        logger.debug("Navigating to %s...", url)
        await page.goto(url)
        logger.debug("Waiting for network idle...")
        await page.wait_for_load_state("networkidle")

        for action in test_case.actions:
            await run_action(page, action)

        capture = test_case.capture
        match capture.kind:
            case "fullpage":
                return await page.screenshot(full_page=True)
            case "viewport":
                return await page.screenshot()
            case "element":
                return await page.locator(capture.selector).first.screenshot()
            case _:
                raise ValueError(f"Unknown capture kind: {capture.kind}")
    finally:
        await context.close()
