r"""
clasp argument definitions.

Overview
- Definitions
  • Positional: value matched by position (scalar or list, required or optional,
    subcommand-selecting when typed ValueType.SUBCOMMAND).
  • Option: named, value-bearing argument (-o VALUE, -oVALUE, --output VALUE,
    --output=VALUE); list options append one value per occurrence.
  • Flag: named, presence-only switch whose effect depends on its FlagKind.

- Targets
  Every definition owns its binding target, exposed as `.value`:
  • scalar definitions hold their last bound value (initially `default`);
  • list definitions hold a ListAccumulator;
  • flags hold False (bool), 0 (count) or None (config capture); callback flags hold None.
  The schema reads the same value by destination key (see `.dest`).

- Extension payload
  The payload is tagged by the value type: `choices=` goes with ValueType.CHOICE,
  `verify=` with ValueType.CUSTOM and `subcommands=` with ValueType.SUBCOMMAND.
  Passing a payload to a definition of another type is a TypeError; omitting a
  required payload is reported by the schema validator.

- Classifier
  classify(arguments) partitions an ordered sequence of definitions into
  positionals/options/flags, preserving declaration order, and counts the
  required positionals.

Quick example:
    >>> from clasp.arguments import Positional, Option, Flag
    >>> source = Positional("SOURCE", "file to read", ValueType.FILE)
    >>> jobs = Option("j", "jobs", "N", "worker count", ValueType.UINT8, default=1)
    >>> verbose = Flag("v", "verbose", "print more", FlagKind.COUNT)
"""
import functools
import operator
import re
from typing import NamedTuple

from .kinds import *
from .lists import ListAccumulator
from .utils import *


class ArgumentType(type):
    """
    Metaclass that makes definitions introspectable.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and usage output.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(short='o', long='output', name='FILE', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield a sequence of (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


_payloads = {
    "choices": ValueType.CHOICE,
    "verify": ValueType.CUSTOM,
    "subcommands": ValueType.SUBCOMMAND,
}


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the fields shared by every definition.

    - descr: optional short description; trimmed, must not be empty when provided.
    - dest: optional destination key; must be a non-empty string when provided.
    """
    if not isinstance(descr := metadata["descr"], str | None | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(dest := metadata["dest"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'dest' must be a string")
    elif isinstance(dest, str) and not dest:
        raise ValueError(f"{cls.__typename__} 'dest' cannot be empty")


def _sanitize_named_metadata(cls, metadata, /):
    """
    Internal: validate the identifiers of named definitions (Option, Flag).

    - short: a single character (the letter after '-'), or None.
    - long: the word after '--', or None. A leading '--' is accepted here and
      reported as a configuration warning by the validator.

    A definition without identifiers is legal but unreachable; the validator
    warns about it.
    """
    if not isinstance(short := metadata["short"], str | None | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and len(short) != 1:
        raise ValueError(f"{cls.__typename__} 'short' must be a single character")
    metadata["short"] = coalesce(short)

    if not isinstance(long := metadata["long"], str | None | Unset):
        raise TypeError(f"{cls.__typename__} 'long' must be a string")
    elif isinstance(long, str) and (not long or any(char.isspace() for char in long)):
        raise ValueError(f"{cls.__typename__} 'long' must be a non-empty word")
    metadata["long"] = coalesce(long)


def _sanitize_parametric_metadata(cls, metadata, payloads, /):
    """
    Internal: validate value type, list-ness and the tagged payload of
    value-bearing definitions (Positional, Option).

    - type: must be a ValueType member.
    - payloads: mapping of payload keyword -> provided object (or Unset). At most
      one may be provided and it must match the value type. Iterables are wrapped
      in Choices/Subcommands; custom verifiers must be callable.

    Side effects
    - Sets metadata["payload"] (None when absent).
    """
    if not isinstance(type := metadata["type"], ValueType):
        raise TypeError(f"{cls.__typename__} 'type' must be a value type")

    payload = None
    for keyword, object in payloads.items():
        if object is Unset:
            continue
        if type is not _payloads[keyword]:
            raise TypeError(f"{cls.__typename__} {keyword!r} requires type {_payloads[keyword].value!r}, not {type.value!r}")
        match keyword:
            case "choices":
                payload = object if isinstance(object, Choices) else Choices(*object)
            case "subcommands":
                payload = object if isinstance(object, Subcommands) else Subcommands(*object)
            case "verify":
                if not callable(object):
                    raise TypeError(f"{cls.__typename__} 'verify' must be callable")
                payload = object
    metadata["payload"] = payload


class Positional(metaclass=ArgumentType):
    """
    Positional, value-bearing argument definition.

    Positionals are filled in declaration order. A list positional keeps
    consuming tokens until the schema's list terminator (or the end of input).
    A subcommand positional hands every remaining token to the selected child
    schema and must be the only positional of its schema.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes.
    """

    __introspectable__ = (
        "name",
        "descr",
        "type",
        "list",
        "optional",
        "default",
        "payload",
        "dest",
        "value",
    )

    def __init__(
            self,
            name,
            descr=Unset,
            type=ValueType.STRING,
            *,
            list=False,
            optional=False,
            default=None,
            choices=Unset,
            verify=Unset,
            subcommands=Unset,
            dest=Unset
    ):
        """
        Construct a positional definition.

        Parameters
        - name: str
          Name shown in usage (<name>) and in messages; also the default dest.
        - descr: Unset | str
          Short description for usage output.
        - type: ValueType
          Value type of every bound value.
        - list: bool
          Accumulate every matched token into a ListAccumulator.
        - optional: bool
          The positional may be omitted; optionals must follow every required one.
        - default: Any
          Initial target value for scalar positionals.
        - choices / verify / subcommands:
          Payload for CHOICE / CUSTOM / SUBCOMMAND typed positionals.
          A custom verifier is called as verify(schema, name, token); it rejects
          a token by raising ValueError/TypeError or by returning False.
        - dest: Unset | str
          Destination key used by schema[...] (defaults to name).
        """
        if not isinstance(name, str):
            raise TypeError(f"{Positional.__typename__} 'name' must be a string")
        if not (name := name.strip()):
            raise ValueError(f"{Positional.__typename__} 'name' cannot be empty")

        metadata = {
            "name": name,
            "descr": descr,
            "type": type,
            "list": bool(list),
            "optional": bool(optional),
            "default": default,
            "dest": dest,
        }
        _sanitize_metadata(Positional, metadata)
        _sanitize_parametric_metadata(Positional, metadata, {
            "choices": choices,
            "verify": verify,
            "subcommands": subcommands,
        })
        metadata["dest"] = coalesce(metadata["dest"], name)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._value = ListAccumulator(self._type) if self._list else default

    @property
    def label(self):
        """
        name used in messages ('<name>' in usage).
        """
        return self._name

    def _bind(self, value, /):
        if self._list:
            self._value.append(value)
        else:
            self._value = value


class Option(metaclass=ArgumentType):
    """
    Named, value-bearing argument definition.

    An option is matched by its short identifier (-o) or its long identifier
    (--output). The value is either attached (-oVALUE, --output=VALUE) or taken
    from the next token that is not ignored. List options append one value per
    occurrence.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes.
    """

    __introspectable__ = (
        "short",
        "long",
        "name",
        "descr",
        "type",
        "list",
        "default",
        "payload",
        "dest",
        "value",
    )

    def __init__(
            self,
            short=Unset,
            long=Unset,
            name=Unset,
            descr=Unset,
            type=ValueType.STRING,
            *,
            list=False,
            default=None,
            choices=Unset,
            verify=Unset,
            dest=Unset
    ):
        """
        Construct an option definition.

        Parameters
        - short: Unset | None | str
          Single-character identifier (e.g. "o" for -o).
        - long: Unset | None | str
          Long identifier (e.g. "output" for --output).
        - name: Unset | str
          Label of the value in usage (e.g. "FILE").
        - descr: Unset | str
          Short description for usage output.
        - type: ValueType
          Value type of every bound value. SUBCOMMAND is rejected by the validator.
        - list: bool
          Append one value per occurrence into a ListAccumulator.
        - default: Any
          Initial target value for scalar options.
        - choices / verify:
          Payload for CHOICE / CUSTOM typed options.
          Custom verifiers reject a token as for Positional.
        - dest: Unset | str
          Destination key used by schema[...] (defaults to long, then short).
        """
        if not isinstance(name, str | None | Unset):
            raise TypeError(f"{Option.__typename__} 'name' must be a string")

        metadata = {
            "short": short,
            "long": long,
            "name": coalesce(name),
            "descr": descr,
            "type": type,
            "list": bool(list),
            "default": default,
            "dest": dest,
        }
        _sanitize_metadata(Option, metadata)
        _sanitize_named_metadata(Option, metadata)
        _sanitize_parametric_metadata(Option, metadata, {
            "choices": choices,
            "verify": verify,
        })
        metadata["dest"] = coalesce(metadata["dest"], metadata["long"] or metadata["short"])

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._value = ListAccumulator(self._type) if self._list else default

    @property
    def label(self):
        """
        identifier used in messages: '--long', else '-s', else '(unnamed)'.
        """
        return _label(self)

    def _bind(self, value, /):
        if self._list:
            self._value.append(value)
        else:
            self._value = value


class Flag(metaclass=ArgumentType):
    """
    Named, presence-only argument definition.

    Effects per kind
    - FlagKind.BOOL: the target becomes True.
    - FlagKind.COUNT: the target counts occurrences.
    - FlagKind.CONFIG: the target captures the schema in which the flag occurred.
    - FlagKind.CALLBACK: callback(schema) is called on every occurrence.

    An exit flag stops the whole parse (including enclosing subcommand
    recursion) with success right after its effect.
    """

    __introspectable__ = (
        "short",
        "long",
        "descr",
        "kind",
        "exit",
        "callback",
        "dest",
        "value",
    )

    def __init__(
            self,
            short=Unset,
            long=Unset,
            descr=Unset,
            kind=FlagKind.BOOL,
            *,
            exit=False,
            callback=Unset,
            dest=Unset
    ):
        """
        Construct a flag definition.

        Parameters
        - short / long: identifiers, as for Option.
        - descr: Unset | str
          Short description for usage output.
        - kind: FlagKind
          Effect of an occurrence; anything else is rejected by the validator.
        - exit: bool
          Stop parsing with success right after the effect.
        - callback: Unset | Callable[[Schema], Any]
          Procedure called by FlagKind.CALLBACK flags.
        - dest: Unset | str
          Destination key used by schema[...] (defaults to long, then short).
        """
        if callback is not Unset and not callable(callback):
            raise TypeError(f"{Flag.__typename__} 'callback' must be callable")

        metadata = {
            "short": short,
            "long": long,
            "descr": descr,
            "kind": kind,
            "exit": bool(exit),
            "callback": coalesce(callback),
            "dest": dest,
        }
        _sanitize_metadata(Flag, metadata)
        _sanitize_named_metadata(Flag, metadata)
        metadata["dest"] = coalesce(metadata["dest"], metadata["long"] or metadata["short"])

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._value = {FlagKind.BOOL: False, FlagKind.COUNT: 0}.get(kind if isinstance(kind, FlagKind) else None)

    @property
    def label(self):
        """
        identifier used in messages: '--long', else '-s', else '(unnamed)'.
        """
        return _label(self)

    def _apply(self, schema, /):
        match self._kind:
            case FlagKind.BOOL:
                self._value = True
            case FlagKind.COUNT:
                self._value += 1
            case FlagKind.CONFIG:
                self._value = schema
            case FlagKind.CALLBACK:
                self._callback(schema)


def _label(argument):
    if argument.long is not None:
        return "--" + argument.long
    if argument.short is not None:
        return "-" + argument.short
    return "(unnamed)"


class Groups(NamedTuple):
    """
    classified view of a schema's definitions (declaration order kept).
    """
    positionals: tuple
    options: tuple
    flags: tuple
    required: int


def classify(arguments, /):
    """
    partition definitions into positionals, options and flags.

    the required count is the number of non-optional positionals.

    raises
    - TypeError: when an element is not a Positional, Option or Flag.
    """
    positionals, options, flags = [], [], []
    for argument in arguments:
        match argument:
            case Positional():
                positionals.append(argument)
            case Option():
                options.append(argument)
            case Flag():
                flags.append(argument)
            case _:
                raise TypeError("schema arguments must be positionals, options or flags, not %r" % type(argument).__name__)
    return Groups(
        tuple(positionals),
        tuple(options),
        tuple(flags),
        sum(not positional.optional for positional in positionals),
    )


def help_flag(kind=FlagKind.BOOL, /, *, dest=Unset):
    """
    build the conventional -h/--help exit flag.

    with FlagKind.CONFIG the target captures the (sub)schema that asked for
    help, so the caller can print the matching usage.
    """
    if kind not in (FlagKind.BOOL, FlagKind.CONFIG):
        raise ValueError("help_flag() kind must be FlagKind.BOOL or FlagKind.CONFIG")
    return Flag("h", "help", "print this help dialog", kind, exit=True, dest=dest)


__all__ = (
    # Classes
    "Positional",
    "Option",
    "Flag",
    "Groups",

    # Functions
    "classify",
    "help_flag",
)

del ArgumentType
