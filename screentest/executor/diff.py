"""Diff engine — captures both origins for a test case and compares them."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from playwright.async_api import Browser

from screentest.errors import ArtifactWriteError, CaptureError, MismatchError
from screentest.models.config import RunnerConfig
from screentest.models.script import TestCase
from screentest.url_utils import parse_url

from .artifacts import write_diff_artifacts
from .capture import capture_screenshot

logger = logging.getLogger(__name__)


def _resolve_url(origin: str, pathname: str) -> str:
    url = origin + pathname
    try:
        return parse_url(url)
    except ValueError as e:
        raise CaptureError(url, e) from e


def _decode(data: bytes, url: str) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, UnidentifiedImageError) as e:
        raise CaptureError(url, e) from e
    return image


async def run_diff(
    test_case: TestCase, browser: Browser, out_dir: Path, config: RunnerConfig,
) -> None:
    """Screenshot both origins and write diff artifacts if they differ.

    Returns normally when the two PNG encodings are byte-identical. Raises
    CaptureError when either capture fails and MismatchError when the
    screenshots differ; a failed artifact write is attached to the
    MismatchError rather than replacing it.
    """
    logger.info("test %s", test_case.name)
    url_a = _resolve_url(test_case.origin_a, test_case.pathname)
    url_b = _resolve_url(test_case.origin_b, test_case.pathname)

    # One navigation at a time per browser.
    screen_a = await capture_screenshot(browser, url_a, test_case, config)
    screen_b = await capture_screenshot(browser, url_b, test_case, config)

    if screen_a == screen_b:
        logger.info("%s == %s", url_a, url_b)
        return

    logger.info("%s != %s", url_a, url_b)
    img_a = _decode(screen_a, url_a)
    img_b = _decode(screen_b, url_b)
    try:
        await write_diff_artifacts(
            img_a, img_b, out_dir, test_case.name, url_a, url_b, config.diff_threshold,
        )
    except ArtifactWriteError as e:
        logger.error("Writing diff artifacts for %s failed: %s", test_case.name, e)
        raise MismatchError(url_a, url_b, artifact_error=e) from e
    logger.info("wrote diff to %s", out_dir)
    raise MismatchError(url_a, url_b)
