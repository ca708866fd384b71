"""Browser helpers — launch Chromium and open isolated capture contexts."""

from __future__ import annotations

from playwright.async_api import Browser, BrowserContext, Playwright

from screentest.models.config import RunnerConfig
from screentest.models.script import TestCase


async def launch_browser(playwright: Playwright, config: RunnerConfig) -> Browser:
    """Launch Chromium with the configured default window size."""
    return await playwright.chromium.launch(
        headless=config.headless,
        args=[
            f"--window-size={config.browser_width},{config.browser_height}",
            *config.browser_args,
        ],
    )


async def create_capture_context(
    browser: Browser,
    test_case: TestCase,
    config: RunnerConfig,
) -> BrowserContext:
    """Create a fresh browser context sized for one capture.

    A zero viewport dimension on the test case falls back to the configured
    browser window size for that dimension.
    """
    width, height = test_case.resolved_viewport(config.browser_width, config.browser_height)
    viewport = {"width": width, "height": height}
    context = await browser.new_context(viewport=viewport)
    context.set_default_timeout(config.capture_timeout_seconds * 1000)
    return context
