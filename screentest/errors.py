"""Exception taxonomy for compiling and running screentest scripts."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from screentest.models.test_result import RunResult


class ScreentestError(Exception):
    """Base class for all screentest failures."""


class CompileError(ScreentestError):
    """A script could not be compiled. Carries the 1-based line number."""

    def __init__(self, message: str, line: int | None = None, script: str | None = None):
        self.message = message
        self.line = line
        self.script = script
        super().__init__(str(self))

    def __str__(self) -> str:
        text = self.message
        if self.line is not None:
            text = f"{text} on line {self.line}"
        if self.script:
            text = f"{self.script}: {text}"
        return text


class DiscoveryError(ScreentestError):
    """No scripts (or no tests) were found for a glob pattern."""


class CaptureError(ScreentestError):
    """The browser failed to produce a screenshot for one URL."""

    def __init__(self, url: str, cause: BaseException):
        self.url = url
        self.cause = cause
        detail = str(cause) or type(cause).__name__
        super().__init__(f"capture {url}: {detail}")


class ArtifactWriteError(ScreentestError):
    """A diff artifact could not be written to disk."""

    def __init__(self, path: str, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"write {path}: {cause}")


class MismatchError(ScreentestError):
    """Screenshots of the two origins differ."""

    def __init__(self, url_a: str, url_b: str, artifact_error: ArtifactWriteError | None = None):
        self.url_a = url_a
        self.url_b = url_b
        self.artifact_error = artifact_error
        message = f"{url_a} != {url_b}"
        if artifact_error is not None:
            message = f"{message} ({artifact_error})"
        super().__init__(message)


class CheckFailure(ScreentestError):
    """Raised by batch mode when any test case did not pass."""

    def __init__(self, report: str, run_result: "RunResult"):
        self.report = report
        self.run_result = run_result
        super().__init__(report)
