"""Script compiler — turns screentest scripts into TestCase records.

A script is a sequence of test blocks separated by blank lines. ``windowsize``
and ``compare`` persist for the rest of the file once set, while ``test``,
``pathname``, ``click`` and ``wait`` only last until the next blank line.
Each ``capture`` line emits one TestCase built from the current state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Optional

from screentest.errors import CompileError
from screentest.models.script import (
    BrowserAction,
    Capture,
    ClickAction,
    ElementCapture,
    FullPageCapture,
    TestCase,
    ViewportCapture,
    WaitAction,
)
from screentest.url_utils import parse_origin, parse_url

from .tokens import split_dimensions, split_one_field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseState:
    # Script-global once set
    window_width: int = 0
    window_height: int = 0
    origin_a: str = ""
    origin_b: str = ""
    # Reset by a blank line
    test_name: str = ""
    pathname: str = ""
    actions: tuple[BrowserAction, ...] = ()
    # Names of every TestCase emitted so far
    names: frozenset[str] = field(default_factory=frozenset)

    def end_block(self) -> "ParseState":
        return replace(self, test_name="", pathname="", actions=())


Handler = Callable[[ParseState, str, int], tuple[ParseState, Optional[TestCase]]]


def _windowsize(state: ParseState, args: str, line: int) -> tuple[ParseState, None]:
    try:
        width, height = split_dimensions(args)
    except ValueError as e:
        raise CompileError(str(e), line) from e
    return replace(state, window_width=width, window_height=height), None


def _compare(state: ParseState, args: str, line: int) -> tuple[ParseState, None]:
    origins = args.split(" ")
    if len(origins) != 2:
        raise CompileError(f"compare requires exactly two origins, got {args!r}", line)
    origin_a, origin_b = origins
    for origin in origins:
        try:
            parse_origin(origin)
        except ValueError as e:
            raise CompileError(f"invalid origin {origin!r}: {e}", line) from e
    return replace(state, origin_a=origin_a, origin_b=origin_b), None


def _test(state: ParseState, args: str, line: int) -> tuple[ParseState, None]:
    if args in state.names:
        raise CompileError(f"duplicate test name {args!r}", line)
    return replace(state, test_name=args), None


def _pathname(state: ParseState, args: str, line: int) -> tuple[ParseState, None]:
    if not state.origin_a or not state.origin_b:
        raise CompileError("missing compare for pathname", line)
    for origin in (state.origin_a, state.origin_b):
        try:
            parse_url(origin + args)
        except ValueError as e:
            raise CompileError(f"invalid url {origin + args!r}: {e}", line) from e
    test_name = state.test_name or args
    if test_name in state.names:
        raise CompileError(f"duplicate test with pathname {args!r}", line)
    return replace(state, pathname=args, test_name=test_name), None


def _click(state: ParseState, args: str, line: int) -> tuple[ParseState, None]:
    if not args:
        raise CompileError("click requires a selector", line)
    return replace(state, actions=state.actions + (ClickAction(selector=args),)), None


def _wait(state: ParseState, args: str, line: int) -> tuple[ParseState, None]:
    if not args:
        raise CompileError("wait requires a selector", line)
    return replace(state, actions=state.actions + (WaitAction(selector=args),)), None


def _capture(state: ParseState, args: str, line: int) -> tuple[ParseState, TestCase]:
    if not state.origin_a or not state.origin_b:
        raise CompileError("missing compare for capture", line)
    if not state.pathname:
        raise CompileError("missing pathname for capture", line)

    name = state.test_name
    width, height = state.window_width, state.window_height
    kind, rest = split_one_field(args)
    capture: Capture
    match kind.upper():
        case "" | "VIEWPORT" | "FULLSCREEN":
            capture = FullPageCapture() if kind.upper() == "FULLSCREEN" else ViewportCapture()
            if rest:
                try:
                    width, height = split_dimensions(rest)
                except ValueError as e:
                    raise CompileError(str(e), line) from e
                name = f"{name} {width}x{height}"
        case "ELEMENT":
            if not rest:
                raise CompileError("capture element requires a selector", line)
            capture = ElementCapture(selector=rest)
            name = f"{name} {rest}"
        case _:
            raise CompileError(f"unknown capture kind {kind!r}", line)
    if name in state.names:
        raise CompileError(f"duplicate test name {name!r}", line)

    test_case = TestCase(
        name=name,
        pathname=state.pathname,
        origin_a=state.origin_a,
        origin_b=state.origin_b,
        actions=state.actions,
        viewport_width=width,
        viewport_height=height,
        capture=capture,
    )
    return replace(state, names=state.names | {name}), test_case


_DIRECTIVES: dict[str, Handler] = {
    "WINDOWSIZE": _windowsize,
    "COMPARE": _compare,
    "TEST": _test,
    "PATHNAME": _pathname,
    "CLICK": _click,
    "WAIT": _wait,
    "CAPTURE": _capture,
}


def process_line(state: ParseState, raw: str, line: int) -> tuple[ParseState, Optional[TestCase]]:
    """Apply one script line to ``state``.

    Returns the new state and the TestCase emitted by the line, if any.
    """
    text = raw.strip()
    if text.startswith("#"):
        return state, None
    directive, args = split_one_field(text)
    if not directive:
        return state.end_block(), None
    handler = _DIRECTIVES.get(directive.upper())
    if handler is None:
        raise CompileError(f"invalid syntax {text!r}", line)
    return handler(state, args, line)


def compile_script(text: str, script: str | None = None) -> list[TestCase]:
    """Compile script text into an ordered list of test cases.

    Raises CompileError (tagged with ``script`` when given) on the first
    invalid line; no partial list is returned.
    """
    state = ParseState()
    tests: list[TestCase] = []
    # Only \n ends a line; other Unicode line breaks may appear in selectors.
    for line_no, raw in enumerate(text.split("\n"), start=1):
        raw = raw.removesuffix("\r")
        try:
            state, test_case = process_line(state, raw, line_no)
        except CompileError as e:
            e.script = script
            raise
        if test_case is not None:
            tests.append(test_case)
    logger.debug("Compiled %d test cases from %s", len(tests), script or "<script>")
    return tests


def read_script(path: str | Path) -> list[TestCase]:
    """Read and compile the script file at ``path``."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CompileError(f"cannot read script: {e}", script=str(path)) from e
    return compile_script(text, script=str(path))
