"""
clasp faults (error kinds, exceptions) and rendering.

Scope
- ErrorKind: canonical, stable identifiers for every parse outcome, each with a
  literal description (see describe()).
- ParseFault: base type carrying a message + options, one subclass per failing kind.
  Faults know how to render themselves with rich in a short, lowercased, actionable way.
- ResourceExhaustedError: the only unconditionally fatal condition (allocation failure).
- trigger(): central entry point to surface a fault (raise, or print and exit in shell mode).

Integration
- The token scanner and the config validator raise faults; Schema.parse catches them,
  stores them on the failing schema and returns that schema.
- invoke() hands the stored fault to trigger() so command-line front ends can exit.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class ErrorKind(IntEnum):
    """
    canonical outcome kinds of a parse call (stable identifiers).

    - OK: the call succeeded (or an exit flag stopped it early).
    - INVALID_CONFIG: the schema itself is malformed; detected once, statically.
    - INVALID_VALUE: a token could not be converted to the declared value type.
    - INVALID_OPTION: unknown/malformed option or flag, or a missing option value.
    - TOO_MANY_ARGUMENTS: more positional tokens than declared positionals.
    - TOO_FEW_ARGUMENTS: required positionals left unsatisfied at end of input.
    """
    OK                 = 0
    INVALID_CONFIG     = 1
    INVALID_VALUE      = 2
    INVALID_OPTION     = 3
    TOO_MANY_ARGUMENTS = 4
    TOO_FEW_ARGUMENTS  = 5

    def describe(self):
        """
        return the literal description of this kind.
        """
        return _descriptions[self]

    def normalize(self):
        """
        return a host-normalized label for this kind.

        the host application can provide a __codes__ mapping in __main__
        to override the lowercased names with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.name.lower().replace("_", "-")))


_descriptions = {
    ErrorKind.OK:                 "no error",
    ErrorKind.INVALID_CONFIG:     "configuration is invalid",
    ErrorKind.INVALID_VALUE:      "argument value does not match expected type or criteria",
    ErrorKind.INVALID_OPTION:     "unrecognized option or flag syntax",
    ErrorKind.TOO_MANY_ARGUMENTS: "too many positional arguments provided",
    ErrorKind.TOO_FEW_ARGUMENTS:  "required positional arguments missing",
}


def describe(kind, /):
    """
    return the literal description of an error kind.

    unknown values (not members of ErrorKind) describe as "unknown error".
    """
    try:
        return ErrorKind(kind).describe()
    except ValueError:
        return "unknown error"


class ParseFault(Exception):
    """
    base class of every representable parse failure.

    a fault carries a human message and a read-only mapping of options such as
    schema, argument, token, index, title and hint. options are merged with
    copy.replace(fault, **options) before rendering.
    """
    kind = ErrorKind.OK

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if isinstance(self.message, str) else ""

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        schema = self.options.get("schema")
        route = " ".join(step.name or "" for step in schema.path) if schema is not None else ""

        header = Text.assemble(
            "[ ",
            text(getattr(main, "__prog__", route) or "clasp", styler("prog-name")),
            " — ",
            text(self.kind.normalize(), styler("code")),
            " | ",
            text(self.options.get("title", self.kind.describe()).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidConfigError(ParseFault):
    kind = ErrorKind.INVALID_CONFIG


class InvalidValueError(ParseFault):
    kind = ErrorKind.INVALID_VALUE


class InvalidOptionError(ParseFault):
    kind = ErrorKind.INVALID_OPTION


class TooManyArgumentsError(ParseFault):
    kind = ErrorKind.TOO_MANY_ARGUMENTS


class TooFewArgumentsError(ParseFault):
    kind = ErrorKind.TOO_FEW_ARGUMENTS


class ResourceExhaustedError(MemoryError):
    """
    allocation failure while growing a buffer; never caught by parse().
    """


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParseFault).
    - options are merged into the fault via copy.replace before triggering.
    - in shell mode the fault is printed to stderr and the process exits with 1;
      otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "ErrorKind",
    "describe",
    "ParseFault",
    "InvalidConfigError",
    "InvalidValueError",
    "InvalidOptionError",
    "TooManyArgumentsError",
    "TooFewArgumentsError",
    "ResourceExhaustedError",
    "trigger",
)
