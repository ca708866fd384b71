"""Action runner — translates script actions to Playwright calls."""

from __future__ import annotations

import logging

from playwright.async_api import Page

from screentest.models.script import BrowserAction

logger = logging.getLogger(__name__)


async def run_action(page: Page, action: BrowserAction) -> None:
    """Execute a single click or wait action on the page.

    Timeouts come from the context default set for the capture.
    """
    match action.kind:
        case "click":
            logger.debug("Clicking: %s", action.selector)
            await page.click(action.selector)

        case "wait":
            logger.debug("Waiting for selector: %s", action.selector)
            await page.wait_for_selector(action.selector, state="attached")

        case _:
            raise ValueError(f"Unknown action kind: {action.kind}")
