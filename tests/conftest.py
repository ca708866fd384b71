"""Pytest configuration and shared fixtures."""

import io
from unittest.mock import AsyncMock, Mock

import pytest
from PIL import Image

from screentest.models.config import RunnerConfig
from screentest.models.script import (
    ClickAction,
    ElementCapture,
    FullPageCapture,
    TestCase,
    ViewportCapture,
    WaitAction,
)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def runner_config(tmp_path) -> RunnerConfig:
    """Create a runner config writing artifacts under tmp_path."""
    return RunnerConfig(
        browser_width=1536,
        browser_height=960,
        capture_timeout_seconds=5,
        diff_threshold=0.1,
        output_root=str(tmp_path / "screentest"),
    )


# ============================================================================
# Script Fixtures
# ============================================================================


@pytest.fixture
def viewport_case() -> TestCase:
    return TestCase(
        name="homepage",
        pathname="/",
        origin_a="https://go.dev",
        origin_b="http://localhost:6060",
        viewport_width=540,
        viewport_height=1080,
        capture=ViewportCapture(),
    )


@pytest.fixture
def element_case() -> TestCase:
    return TestCase(
        name="about header",
        pathname="/about",
        origin_a="https://go.dev",
        origin_b="http://localhost:6060",
        actions=(ClickAction(selector="button.menu"), WaitAction(selector="nav.open")),
        capture=ElementCapture(selector="header"),
    )


@pytest.fixture
def fullpage_case() -> TestCase:
    return TestCase(
        name="/doc",
        pathname="/doc",
        origin_a="https://go.dev",
        origin_b="http://localhost:6060",
        capture=FullPageCapture(),
    )


@pytest.fixture
def sample_script() -> str:
    return "\n".join([
        "# Compare the homepage at two sizes",
        "windowsize 1536x960",
        "compare https://go.dev http://localhost:6060",
        "",
        "test homepage",
        "pathname /",
        "capture viewport",
        "capture viewport 540x1080",
        "",
        "pathname /about",
        "click button.menu",
        "wait nav.open",
        "capture element header",
        "",
    ])


# ============================================================================
# Image Fixtures
# ============================================================================


@pytest.fixture
def make_png():
    """Factory for small PNG encodings."""
    def _make(color=(255, 255, 255), size=(8, 8)) -> bytes:
        buf = io.BytesIO()
        Image.new("RGB", size, color).save(buf, format="PNG")
        return buf.getvalue()
    return _make


# ============================================================================
# Playwright Fixtures
# ============================================================================


@pytest.fixture
def mock_page():
    """Create a mock Playwright page."""
    page = AsyncMock()
    page.url = "https://go.dev/"
    page.locator = Mock()
    return page


@pytest.fixture
def mock_context(mock_page):
    """Create a mock browser context returning mock_page."""
    context = AsyncMock()
    context.new_page = AsyncMock(return_value=mock_page)
    context.set_default_timeout = Mock()
    return context


@pytest.fixture
def mock_browser(mock_context):
    """Create a mock browser whose contexts all share mock_page."""
    browser = AsyncMock()
    browser.new_context = AsyncMock(return_value=mock_context)
    return browser
