"""Pixel comparator — renders a diff image from two screenshots."""

from __future__ import annotations

from dataclasses import dataclass

from PIL import Image, ImageChops, ImageOps

DIFF_COLOR = (255, 0, 0)
# How far unchanged pixels are faded toward white in the diff image
BACKGROUND_FADE = 0.9


@dataclass
class ImageDiff:
    image: Image.Image
    changed_pixels: int
    total_pixels: int

    @property
    def ratio(self) -> float:
        return self.changed_pixels / self.total_pixels if self.total_pixels else 0.0


def _on_canvas(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Flatten onto a white canvas of ``size`` so both inputs line up."""
    canvas = Image.new("RGB", size, (255, 255, 255))
    rgba = image.convert("RGBA")
    canvas.paste(rgba, (0, 0), rgba)
    return canvas


def diff_images(img_a: Image.Image, img_b: Image.Image, threshold: float = 0.1) -> ImageDiff:
    """Compare two images pixel by pixel.

    A pixel counts as changed when any channel differs by more than
    ``threshold`` (a fraction of the full channel range), which lets
    anti-aliasing noise through. Images of different sizes are compared on a
    canvas covering both. The returned image is a faded grayscale copy of
    ``img_a`` with changed pixels painted red.
    """
    size = (max(img_a.width, img_b.width), max(img_a.height, img_b.height))
    a = _on_canvas(img_a, size)
    b = _on_canvas(img_b, size)

    red, green, blue = ImageChops.difference(a, b).split()
    delta = ImageChops.lighter(ImageChops.lighter(red, green), blue)
    cutoff = int(threshold * 255)
    mask = delta.point(lambda v: 255 if v > cutoff else 0)

    background = ImageOps.grayscale(a).convert("RGB")
    white = Image.new("RGB", size, (255, 255, 255))
    background = Image.blend(background, white, BACKGROUND_FADE)
    marks = Image.new("RGB", size, DIFF_COLOR)
    rendered = Image.composite(marks, background, mask)

    return ImageDiff(
        image=rendered,
        changed_pixels=mask.histogram()[255],
        total_pixels=size[0] * size[1],
    )
