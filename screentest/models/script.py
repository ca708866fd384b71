"""Compiled script data structures consumed by the executor."""

from __future__ import annotations

from typing import Annotated, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ClickAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["click"] = "click"
    selector: str


class WaitAction(BaseModel):
    """Wait until an element matching ``selector`` is present in the DOM."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["wait"] = "wait"
    selector: str


BrowserAction = Annotated[Union[ClickAction, WaitAction], Field(discriminator="kind")]


class FullPageCapture(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["fullpage"] = "fullpage"


class ViewportCapture(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["viewport"] = "viewport"


class ElementCapture(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["element"] = "element"
    selector: str


Capture = Annotated[
    Union[FullPageCapture, ViewportCapture, ElementCapture],
    Field(discriminator="kind"),
]


class TestCase(BaseModel):
    """One fully resolved screenshot comparison.

    Origins, pathname and actions are copied out of the parse state when the
    ``capture`` line is read, so a TestCase never changes after compilation.
    A zero viewport dimension means the browser's default window size is
    used for that dimension.
    """
    model_config = ConfigDict(frozen=True)
    __test__: ClassVar[bool] = False  # not a pytest class

    name: str
    pathname: str
    origin_a: str
    origin_b: str
    actions: tuple[BrowserAction, ...] = ()
    viewport_width: int = 0
    viewport_height: int = 0
    capture: Capture = Field(default_factory=ViewportCapture)

    @property
    def url_a(self) -> str:
        return self.origin_a + self.pathname

    @property
    def url_b(self) -> str:
        return self.origin_b + self.pathname

    @property
    def element_selector(self) -> str | None:
        if isinstance(self.capture, ElementCapture):
            return self.capture.selector
        return None

    @property
    def uses_default_viewport(self) -> bool:
        return self.viewport_width == 0 and self.viewport_height == 0

    def resolved_viewport(self, default_width: int, default_height: int) -> tuple[int, int]:
        """Viewport size, falling back per dimension to the given defaults."""
        return (
            self.viewport_width or default_width,
            self.viewport_height or default_height,
        )
