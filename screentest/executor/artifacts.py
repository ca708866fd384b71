"""Diff artifact sink — writes the diff and both screenshots as PNG files."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from PIL import Image

from screentest.errors import ArtifactWriteError
from screentest.url_utils import artifact_host, sanitized

from .image_diff import diff_images

logger = logging.getLogger(__name__)


def write_png(image: Image.Image, path: Path) -> None:
    """Write image data to a PNG file."""
    try:
        image.save(path, format="PNG")
    except (OSError, ValueError) as e:
        raise ArtifactWriteError(str(path), e) from e
    logger.debug("Wrote %s", path)


def artifact_paths(out_dir: Path, test_name: str, url_a: str, url_b: str) -> tuple[Path, Path, Path]:
    """Return the diff, A and B artifact paths for a test case."""
    prefix = sanitized(test_name)
    return (
        out_dir / f"{prefix}.diff.png",
        out_dir / f"{prefix}.{artifact_host(url_a)}.png",
        out_dir / f"{prefix}.{artifact_host(url_b)}.png",
    )


async def write_diff_artifacts(
    img_a: Image.Image,
    img_b: Image.Image,
    out_dir: Path,
    test_name: str,
    url_a: str,
    url_b: str,
    threshold: float,
) -> tuple[Path, Path, Path]:
    """Render the diff and write all three artifacts concurrently.

    Waits for every write to finish, then raises the first failure.
    Artifacts that were written successfully are left in place.
    """
    diff_path, path_a, path_b = artifact_paths(out_dir, test_name, url_a, url_b)

    def _write_diff() -> None:
        result = diff_images(img_a, img_b, threshold)
        logger.debug("%d of %d pixels differ (%.2f%%)",
                     result.changed_pixels, result.total_pixels, result.ratio * 100)
        write_png(result.image, diff_path)

    results = await asyncio.gather(
        asyncio.to_thread(_write_diff),
        asyncio.to_thread(write_png, img_a, path_a),
        asyncio.to_thread(write_png, img_b, path_b),
        return_exceptions=True,
    )
    for path, result in zip((diff_path, path_a, path_b), results):
        if isinstance(result, ArtifactWriteError):
            raise result
        if isinstance(result, Exception):
            raise ArtifactWriteError(str(path), result) from result
    return diff_path, path_a, path_b
