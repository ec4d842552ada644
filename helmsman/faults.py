"""
Helmsman faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (registration errors, parsing errors, warnings). Codes are grouped by domain
  to keep copy consistent and make logs/searches predictable.
- OptionException / OptionWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- OptionExit: a group of OptionException raised (or printed) once per run.
- trigger(): central entry point to surface any fault (respecting shell/deferred/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: parsing faults name the option keyword and its
  ordinal position in the input (“at third position”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.

Integration
- The parser collects faults during a pass (it never raises for user input) and
  surfaces them afterwards through trigger().
- In non-shell mode, exceptions are raised and warnings go through warnings.warn;
  in shell mode, both are rendered on stderr via rich.
"""
import copy
import os.path
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


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - registration (211xx): problems in a descriptor table, found before any parse
      • INVALID_DESCRIPTOR, MALFORMED_NAME, DUPLICATED_NAME, NAMELESS_OPTION,
        REPEAT_WITHOUT_ARGUMENT
    - parsing (221xx): problems in the user's input
      • MISSING_ARGUMENT, INVALID_CHOICE, REJECTED_ARGUMENT, DELEGATED_ERROR,
        MISSING_REQUIRED
    - warnings (231xx)
      • OVERWRITTEN_OPTION

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- registration errors (211xx) ---
    INVALID_DESCRIPTOR          = 21101
    MALFORMED_NAME              = 21102
    DUPLICATED_NAME             = 21103
    NAMELESS_OPTION             = 21104
    REPEAT_WITHOUT_ARGUMENT     = 21105

    # --- parsing errors (221xx) ---
    MISSING_ARGUMENT            = 22101
    INVALID_CHOICE              = 22102
    REJECTED_ARGUMENT           = 22103
    DELEGATED_ERROR             = 22104
    MISSING_REQUIRED            = 22105

    # --- warnings (231xx) ---
    OVERWRITTEN_OPTION          = 23101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog(options):
    main = __import__("__main__")
    return getattr(main, "__prog__", options.get("prog") or os.path.basename(sys.argv[0]) or "helmsman")


def _render(fault, palette, title_style, message_style):
    """
    shared rich rendering for single faults (errors and warnings).

    recognized options: colorful, fancy, ratio, title, code, hint, prog.
    """
    options = fault.options
    styles = defaultdict(str, palette | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if options.get("colorful") else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not options.get("colorful"):
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    code = options.get("code")
    header = Text.assemble(
        "[ ",
        text(_prog(options), styler("prog-name")),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "", styler("code")),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), styler(title_style)),
        " ]"
    )
    message = text(fault.message, styler(message_style))
    parts = [message]
    if hint := options.get("hint"):
        parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if options.get("fancy"):
        width = console.width - 4
        try:
            width = int(width * options["ratio"])
        except KeyError:
            width = None
        return Panel(Group(*parts), title=header, title_align="left", width=width)

    return Group(header, *parts)


class OptionException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, "error-title", "error-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        if self.options.get("deferred"):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


# registration
class InvalidDescriptorError(OptionException): ...
class MalformedNameError(OptionException): ...
class DuplicatedNameError(OptionException): ...
class NamelessOptionError(OptionException): ...
class RepeatWithoutArgumentError(OptionException): ...

# parsing
class MissingArgumentError(OptionException): ...
class InvalidChoiceError(OptionException): ...
class RejectedArgumentError(OptionException): ...
class DelegatedCallbackError(OptionException): ...
class MissingRequiredError(OptionException): ...


class OptionWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        }, "warning-title", "warning-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=3)
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class OverwrittenOptionWarning(OptionWarning): ...


class OptionExit(ExceptionGroup[OptionException]):
    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title (Bad Exit)
        } | getattr(__import__("__main__"), "__styles__", {}))

        colorful = self.options.get("colorful")
        prog = Text(_prog(self.options), styles["prog-name"] if colorful else "")
        title = Text(self.message.title(), styles["title"] if colorful else "")
        header = Text.assemble("[ ", prog, " — ", title, " ]")

        renders = [copy.replace(exception, ratio=2/3) for exception in self.exceptions]

        if self.options.get("fancy"):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        if self.options.get("deferred"):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are
      raised and warnings are emitted through the warnings module.

    typical options
    - prog, shell, fancy, colorful, deferred, title, code, hint, and any other
      context the reporter may want to show (e.g., keyword/position/candidates).
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
    "OptionException",
    "InvalidDescriptorError",
    "MalformedNameError",
    "DuplicatedNameError",
    "NamelessOptionError",
    "RepeatWithoutArgumentError",
    "MissingArgumentError",
    "InvalidChoiceError",
    "RejectedArgumentError",
    "DelegatedCallbackError",
    "MissingRequiredError",
    "OptionWarning",
    "OverwrittenOptionWarning",
    "OptionExit",
    "FaultCode",
    "trigger",
    "getdoc",
)
