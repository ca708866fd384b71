"""Tests for screenshot capture."""

import asyncio
from unittest.mock import AsyncMock, Mock, call

import pytest
from playwright.async_api import Error as PlaywrightError

from screentest.errors import CaptureError
from screentest.executor.capture import capture_screenshot

URL = "https://go.dev/about"


@pytest.mark.asyncio
class TestCaptureScreenshot:

    async def test_viewport_capture(self, mock_browser, mock_context, mock_page, viewport_case, runner_config):
        mock_page.screenshot.return_value = b"png-bytes"

        data = await capture_screenshot(mock_browser, URL, viewport_case, runner_config)

        assert data == b"png-bytes"
        mock_browser.new_context.assert_called_once_with(viewport={"width": 540, "height": 1080})
        mock_context.set_default_timeout.assert_called_once_with(5000)
        mock_page.goto.assert_called_once_with(URL)
        mock_page.wait_for_load_state.assert_called_once_with("networkidle")
        mock_page.screenshot.assert_called_once_with()
        mock_context.close.assert_called_once()

    async def test_fullpage_capture_uses_default_window(self, mock_browser, mock_page, fullpage_case, runner_config):
        mock_page.screenshot.return_value = b"full"

        data = await capture_screenshot(mock_browser, URL, fullpage_case, runner_config)

        assert data == b"full"
        mock_browser.new_context.assert_called_once_with(viewport={"width": 1536, "height": 960})
        mock_page.screenshot.assert_called_once_with(full_page=True)

    async def test_element_capture_runs_actions_first(self, mock_browser, mock_page, element_case, runner_config):
        locator = Mock()
        locator.first.screenshot = AsyncMock(return_value=b"element")
        mock_page.locator.return_value = locator

        data = await capture_screenshot(mock_browser, URL, element_case, runner_config)

        assert data == b"element"
        mock_page.locator.assert_called_once_with("header")
        mock_page.click.assert_called_once_with("button.menu")
        mock_page.wait_for_selector.assert_called_once_with("nav.open", state="attached")
        mock_page.screenshot.assert_not_called()

    async def test_driver_error_becomes_capture_error(self, mock_browser, mock_context, mock_page, viewport_case, runner_config):
        mock_page.goto.side_effect = PlaywrightError("net::ERR_CONNECTION_REFUSED")

        with pytest.raises(CaptureError) as exc_info:
            await capture_screenshot(mock_browser, URL, viewport_case, runner_config)

        assert exc_info.value.url == URL
        assert "ERR_CONNECTION_REFUSED" in str(exc_info.value)
        mock_context.close.assert_called_once()

    async def test_missing_element_becomes_capture_error(self, mock_browser, mock_page, element_case, runner_config):
        mock_page.wait_for_selector.side_effect = PlaywrightError("Timeout 5000ms exceeded")

        with pytest.raises(CaptureError, match="Timeout"):
            await capture_screenshot(mock_browser, URL, element_case, runner_config)

    async def test_overall_timeout(self, mock_browser, mock_context, mock_page, viewport_case, runner_config):
        async def hang(*args, **kwargs):
            await asyncio.sleep(10)

        mock_page.wait_for_load_state.side_effect = hang
        config = runner_config.model_copy(update={"capture_timeout_seconds": 0.05})

        with pytest.raises(CaptureError, match="timed out after 0.05s"):
            await capture_screenshot(mock_browser, URL, viewport_case, config)

        mock_context.close.assert_called_once()

    async def test_each_capture_gets_its_own_context(self, mock_browser, mock_page, viewport_case, runner_config):
        mock_page.screenshot.return_value = b"x"

        await capture_screenshot(mock_browser, URL, viewport_case, runner_config)
        await capture_screenshot(mock_browser, "http://localhost:6060/about", viewport_case, runner_config)

        assert mock_browser.new_context.call_count == 2
        assert mock_page.goto.call_args_list == [call(URL), call("http://localhost:6060/about")]

    async def test_zero_dimension_falls_back_per_axis(self, mock_browser, mock_page, viewport_case, runner_config):
        mock_page.screenshot.return_value = b"x"
        tall = viewport_case.model_copy(update={"viewport_width": 0, "viewport_height": 500})

        await capture_screenshot(mock_browser, URL, tall, runner_config)

        mock_browser.new_context.assert_called_once_with(viewport={"width": 1536, "height": 500})
