"""
Argosy faults (user-facing errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing fault, grouped by domain so
  logs and searches stay predictable.
- CommandException: base type carrying a message plus context options; knows how to
  render itself (rich) and how to surface itself (raise, or print and exit in shell mode).
- trigger(): central entry point to surface a fault with runtime switches merged in.
- getdoc(): optional documentation lookup for a code from the host application.

What is NOT a fault
- Declaration defects (duplicate keys, alias chains, clashing option spellings, bad
  defaults) are programming errors and raise TypeError/ValueError where they are found.
- “Not found” during resolution is a normal outcome (None / an unmatched Location).
- Exceptions raised by user factories or command bodies propagate unchanged.

Host integration (read from __main__)
- __styles__: rich style overrides, keyed by style slot (e.g. "code", "hint").
- __codes__: FaultCode → label remapping.
- __docs__: FaultCode → short documentation line shown under the hint.
- __prog__: program name displayed in fault headers.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x)
      • UNKNOWN_COMMAND: first token matches nothing under the root namespace.
      • UNKNOWN_SUBCOMMAND: a token matches nothing under a nested namespace.
    - inputs (1112x)
      • MISSING_INPUT: a required positional input was not given.
      • INVALID_INPUT: a positional input was rejected by one of its validators.
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND     = 11101
    UNKNOWN_SUBCOMMAND  = 11102

    # --- input errors (11xxx) ---
    MISSING_INPUT       = 11121
    INVALID_INPUT       = 11122

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to override
        numeric ids with friendlier labels; otherwise the numeric value is used.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    Base of every user-facing fault.

    Options
    - code, title, hint: what to show (subclasses provide defaults via __defaults__).
    - shell: when true, __trigger__ prints and exits instead of raising.
    - colorful / fancy: rendering switches (plain text vs styled, group vs panel).
    - prog: program name fallback when __main__ defines no __prog__.
    Any other option is kept as context (e.g. token, namespace, input, index).
    """

    __defaults__ = {
        "title": "command error",
        "hint": Unset,
        "shell": False,
        "colorful": True,
        "fancy": False,
        "prog": "argosy",
    }

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(CommandException.__defaults__ | type(self).__defaults__ | options)

    def __str__(self):
        return coalesce(self.message, "")

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "docs": "dim",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if self.options["colorful"] else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self.options["colorful"]:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options["prog"]), styler("prog-name"))

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            prog,
            " · ",
            text(code.normalize() if code is not None else "", styler("code")),
            " | ",
            text(self.options["title"].title(), styler("error-title")),
            " ]"
        )
        body = [text(self.message, styler("error-message"))]
        if self.options["hint"]:
            body.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.options["hint"], styler("hint"))))
        if code is not None and (docs := getdoc(code)):
            body.append(text(docs, styler("docs")))

        if self.options["fancy"]:
            return Panel(Group(*body), title=header, title_align="left")

        return Group(header, *body)

    def __trigger__(self):
        if not self.options["shell"]:
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownCommandError(CommandException):
    """
    A token could not be matched to any namespace or command.

    Context: token, namespace (the deepest namespace reached), suggestions.
    """
    __defaults__ = {
        "code": FaultCode.UNKNOWN_COMMAND,
        "title": "unknown command",
        "suggestions": (),
    }

    def __init__(self, message=Unset, /, **options):
        super().__init__(message, **options)
        if not self.options["hint"] and self.options["suggestions"]:
            suggestions = ", ".join(map(repr, self.options["suggestions"]))
            self.options = MappingProxyType(self.options | {"hint": f"did you mean {suggestions}?"})


class InputValidationError(CommandException):
    """
    A positional input was rejected by one of its validators.

    Context: input (name), index (position), value.
    """
    __defaults__ = {
        "code": FaultCode.INVALID_INPUT,
        "title": "invalid input",
    }


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode the fault is printed on stderr and the process exits with status 1;
      otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys are
    FaultCode instances and values are short documentation strings. returns None when
    no entry exists.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "UnknownCommandError",
    "InputValidationError",
    "FaultCode",
    "trigger",
    "getdoc",
)
