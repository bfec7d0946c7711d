"""
Schemargs faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain (schema, tokens, queries,
  warnings) to keep copy consistent and make logs/searches predictable.
- ArgsException / ArgsWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- ArgsExit: a group of exceptions collected while parsing in deferred mode.
- trigger(): central entry point to surface any fault (respecting shell/deferred/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: every token or descriptor message includes its ordinal
  position (“at third position”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.

Integration
- The parser builds a fault with title/code/hint/context and calls trigger(fault, **ctx).
- In non-shell mode, exceptions are raised and warnings go through the warnings module;
  in shell mode, both are rendered via rich on stderr.
"""
import copy
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)

# runtime options every fault can rely on, even when triggered outside of a parser
_defaults = {
    "shell": False,
    "fancy": False,
    "colorful": True,
    "deferred": False,
}


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping
    - schema (1110x)
      • EMPTY_DESCRIPTOR, OVERLONG_DESCRIPTOR, INVALID_FLAG_NAME,
        INVALID_FLAG_TYPE, DUPLICATED_FLAG
    - tokens (1111x)
      • MALFORMED_TOKEN, UNKNOWN_FLAG, INVALID_INTEGER
    - queries (1112x)
      • OUT_OF_RANGE
    - warnings (12xxx)
      • IGNORED_VALUE, OVERRIDDEN_FLAG
    """
    # --- schema errors (11xxx) ---
    EMPTY_DESCRIPTOR    = 11101
    OVERLONG_DESCRIPTOR = 11102
    INVALID_FLAG_NAME   = 11103
    INVALID_FLAG_TYPE   = 11104
    DUPLICATED_FLAG     = 11105

    # --- token errors (11xxx) ---
    MALFORMED_TOKEN     = 11111
    UNKNOWN_FLAG        = 11112
    INVALID_INTEGER     = 11113

    # --- query errors (11xxx) ---
    OUT_OF_RANGE        = 11121

    # --- warnings (12xxx) ---
    IGNORED_VALUE       = 12111
    OVERRIDDEN_FLAG     = 12112

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _styles(**defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _prog(options):
    main = __import__("__main__")
    return getattr(main, "__prog__", getattr(options.get("tool"), "name", "args"))


def _text(fragment, style, options):
    if not fragment:
        return Text("")
    if not options["colorful"]:
        return Text(str(fragment))
    if isinstance(fragment, Text):
        return fragment
    return Text(str(fragment), style)


def _render(fault, kind):
    """
    render a single exception or warning as a header, message and hint.

    kind selects the "<kind>-title"/"<kind>-message" style names, so hosts can
    restyle errors and warnings independently through __styles__.
    """
    options = fault.options
    styles = _styles(**fault.__styles__)

    def styler(style):
        return styles[style] if options["colorful"] else ""

    def text(fragment, style=""):
        return _text(fragment, style, options)

    header = Text.assemble(
        "[ ",
        text(_prog(options), styler("prog-name")),
        " — ",
        text(options["code"].normalize(), styler("code")),
        " | ",
        text(options["title"].title(), styler(kind + "-title")),
        " ]"
    )
    message = text(fault.message, styler(kind + "-message"))
    hint = Text.assemble(text(" → ", styler("hint-arrow")), text(options["hint"], styler("hint")))

    if options["fancy"]:
        width = console.width - 4
        try:
            width = int(width * options["ratio"])
        except KeyError:
            width = None
        return Panel(Group(message, hint), title=header, title_align="left", width=width)

    return Group(header, message, hint)


class ArgsException(Exception):
    __styles__ = {
        # header parts
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #00E5FF",  # neon cyan fault code
        "error-title": "bold #FF4DA6",  # friendly pinky title

        # body
        "error-message": "#C8C8D0",  # soft light gray message
        "hint-arrow": "#9CE19C dim",  # gentle green arrow
        "hint": "italic #9CE19C",  # gentle green hint text
    }

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(_defaults | options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        return _render(self, "error")

    def __trigger__(self) -> None:
        if not self.options["shell"]:
            raise self from None
        console.print(self)
        if self.options["deferred"]:
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class SchemaError(ArgsException): ...
class MalformedTokenError(ArgsException): ...
class UnknownFlagError(ArgsException): ...
class FormatError(ArgsException): ...
class OutOfRangeError(ArgsException): ...


class ArgsWarning(ABC, Warning):
    __styles__ = {
        # header parts
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #FFB400",  # amber fault code for warnings
        "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

        # body
        "warning-message": "#D6D6DE",  # slightly lighter gray body
        "hint-arrow": "#B8EFAF dim",  # softer green arrow
        "hint": "italic #B8EFAF",  # softer green hint text
    }

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(_defaults | options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        return _render(self, "warning")

    def __trigger__(self) -> None:
        if not self.options["shell"]:
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class IgnoredValueWarning(ArgsWarning): ...
class OverriddenFlagWarning(ArgsWarning): ...


class ArgsExit(ExceptionGroup[ArgsException]):
    __styles__ = {
        "prog-name": "bold #E6E6F0",  # near-white program name
        "title": "bold #FF4DA6",  # friendly pinky group title (Bad Exit)
    }

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", exceptions)

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(_defaults | options)

    def __rich__(self):
        styles = _styles(**self.__styles__)

        def styler(style):
            return styles[style] if self.options["colorful"] else ""

        def text(fragment, style=""):
            return _text(fragment, style, self.options)

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), styler("prog-name")),
            " — ",
            text(self.message.title(), styler("title")),
            " ]"
        )

        renders = [copy.replace(exception, ratio=2/3) for exception in self.exceptions]

        if self.options["fancy"]:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options["shell"]:
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised
      and warnings are emitted through the warnings module.

    typical options
    - tool, shell, fancy, colorful, deferred, title, code, hint, docs, and any other
      context the reporter may want to show (e.g., token/index/flag).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ArgsException",
    "SchemaError",
    "MalformedTokenError",
    "UnknownFlagError",
    "FormatError",
    "OutOfRangeError",
    "ArgsWarning",
    "IgnoredValueWarning",
    "OverriddenFlagWarning",
    "ArgsExit",
    "FaultCode",
    "trigger",
    "getdoc",
)
