"""
clasp schemas.

A Schema is the static declaration of one (sub)command: its ordered argument
definitions plus the parse options. It also carries the state of the last run
(resolved program name, outcome, stored fault, duplicated strings) and a weak
link to the schema whose subcommand positional selected it.

Entry points
- Schema.parse(tokens) / parse(tokens, schema): run the scanner; tokens[0] is the
  program (or subcommand) name. Returns None on success, or the schema where
  parsing failed with its `error` and `fault` set.
- validate(schema): static checks, run once per schema before the first scan.
  A schema that fails them stays invalid; every later parse returns it
  immediately with ErrorKind.INVALID_CONFIG.
- invoke(schema, prompt): command-line front end that parses and triggers the
  stored fault (printing and exiting in shell mode).
"""
import copy
import os
import shlex
import sys
import weakref
from collections.abc import Iterable

from .arguments import *
from .faults import *
from .kinds import FlagKind, ValueType
from .lists import ListAccumulator
from .logs import LogLevel, log
from .scanner import TOGGLE, Scanner
from .utils import *


class Schema:
    """
    declaration of a command's arguments and parse options.

    options
    - descr: description printed by usage().
    - ignore_prefix: tokens starting with it are skipped.
    - ignored: ListAccumulator receiving the remainder of every ignored token.
    - list_terminator: token closing an open positional list (never "--").
    - toggle: allow "--" to re-enable option parsing after disabling it.
    - duplicate_strings: bind copies of string tokens and track them in `allocations`.
    - log_level: messages below this level are dropped.
    - log_handler: callable(level, message) replacing the default sink.
    - notes: print the Notes section in usage().
    """

    arguments = mirror("arguments")
    descr = mirror("descr")
    ignore_prefix = mirror("ignore_prefix")
    ignored = mirror("ignored")
    list_terminator = mirror("list_terminator")
    toggle = mirror("toggle")
    duplicate_strings = mirror("duplicate_strings")
    log_level = mirror("log_level")
    log_handler = mirror("log_handler")
    notes = mirror("notes")
    groups = mirror("groups")

    name = mirror("name")
    error = mirror("error")
    fault = mirror("fault")
    invalid = mirror("invalid")
    allocations = mirror("allocations")

    def __init__(
            self,
            *arguments,
            descr=Unset,
            ignore_prefix=None,
            ignored=None,
            list_terminator=None,
            toggle=False,
            duplicate_strings=False,
            log_level=LogLevel.INFO,
            log_handler=None,
            notes=True
    ):
        if not isinstance(descr, str | None | Unset):
            raise TypeError("schema 'descr' must be a string")
        for option, object in (("ignore_prefix", ignore_prefix), ("list_terminator", list_terminator)):
            if not isinstance(object, str | None):
                raise TypeError("schema %r must be a string" % option)
            if object == "":
                raise ValueError("schema %r cannot be empty" % option)
        if not isinstance(ignored, ListAccumulator | None):
            raise TypeError("schema 'ignored' must be a list accumulator")
        if ignored is not None and ignored.type is not ValueType.STRING:
            raise TypeError("schema 'ignored' must accumulate strings")
        if log_handler is not None and not callable(log_handler):
            raise TypeError("schema 'log_handler' must be callable")

        self._arguments = arguments
        self._groups = classify(arguments)
        self._descr = coalesce(descr)
        self._ignore_prefix = ignore_prefix
        self._ignored = ignored
        self._list_terminator = list_terminator
        self._toggle = bool(toggle)
        self._duplicate_strings = bool(duplicate_strings)
        self._log_level = LogLevel(log_level)
        self._log_handler = log_handler
        self._notes = bool(notes)

        self._name = None
        self._parent = None
        self._error = ErrorKind.OK
        self._fault = None
        self._invalid = False
        self._validated = False
        self._allocations = []

    @property
    def parent(self):
        """
        schema whose subcommand positional selected this one (None at the root
        or once the parent has been collected).
        """
        return self._parent() if self._parent is not None else None

    @property
    def path(self):
        """
        ancestry from the root schema to this one.
        """
        path = [schema := self]
        while schema.parent is not None:
            path.append(schema := schema.parent)
        return tuple(reversed(path))

    @property
    def positionals(self):
        return self._groups.positionals

    @property
    def options(self):
        return self._groups.options

    @property
    def flags(self):
        return self._groups.flags

    @property
    def required(self):
        return self._groups.required

    def __getitem__(self, dest):
        """
        return the bound value of the definition whose destination key is 'dest'.
        """
        for argument in self._arguments:
            if argument.dest == dest:
                return argument.value
        raise KeyError(dest)

    def __contains__(self, dest):
        return any(argument.dest == dest for argument in self._arguments)

    def __repr__(self):
        return "schema(name=%r, arguments=%d, error=%s)" % (self._name, len(self._arguments), self._error.name)

    def __rich_repr__(self):
        yield "name", self._name
        yield "descr", self._descr
        yield "positionals", self.positionals
        yield "options", self.options
        yield "flags", self.flags
        yield "error", self._error

    def _link(self, parent, /):
        self._parent = weakref.ref(parent)

    def log(self, level, message, /):
        """
        log a message through this schema's threshold and handler.
        """
        log(self, level, message)

    def duplicate(self, string, /):
        """
        return a private copy of 'string' when duplicate_strings is set (tracked
        in `allocations`), otherwise the string itself.
        """
        if not self._duplicate_strings:
            return string
        duplicate = string.encode("utf-8", "surrogatepass").decode("utf-8", "surrogatepass")
        try:
            self._allocations.append(duplicate)
        except MemoryError:
            raise ResourceExhaustedError("out of memory while duplicating a string") from None
        return duplicate

    def release_allocations(self):
        """
        drop every string duplicated by this schema.
        """
        self._allocations = []

    def release(self):
        """
        free the accumulator of every list definition and every duplicated
        string. child schemas are not released.
        """
        for argument in self._arguments:
            if isinstance(argument, Positional | Option) and argument.list:
                argument.value.free()
        self.release_allocations()

    def parse(self, tokens, /):
        """
        parse argv-like tokens against this schema.

        returns
        - None: every token was accepted (or an exit flag stopped the run).
        - Schema: the schema where parsing failed (this one or a descendant),
          with `error` and `fault` describing the failure.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")

        try:
            validate(self)
        except InvalidConfigError:
            return self

        self._name = self.duplicate(tokens[0]) if tokens else None
        self._error = ErrorKind.OK
        self._fault = None

        try:
            return Scanner(self, tokens[1:]).run()
        except ParseFault as fault:
            fault = copy.replace(fault, schema=self)
            self.log(LogLevel.ERROR, fault.message)
            self._error = fault.kind
            self._fault = fault
            return self

    def __invoke__(self, prompt=Unset, /, **options):
        """
        parse a prompt as a command line and surface any failure.

        - prompt: Unset (sys.argv), a shell-like string (split with shlex) or an
          iterable of string tokens (without the program name).
        - options: program (name used as tokens[0]), shell, fancy, colorful; the
          last three are forwarded to trigger().

        returns None on success; otherwise triggers the failing schema's fault.
        """
        program = options.pop("program", Unset)
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        program = coalesce(program, os.path.basename(sys.argv[0]) if sys.argv else "clasp")
        if (failed := self.parse([program, *tokens])) is not None:
            trigger(failed.fault, **options)


def _warn_identifiers(schema, argument):
    if argument.short is None and argument.long is None:
        schema.log(
            LogLevel.CONFIG_WARNING,
            "%s argument is unreachable. Define at least one of `short` and `long`." % type(argument).__typename__,
        )
    if argument.long is not None and argument.long.startswith(TOGGLE):
        schema.log(
            LogLevel.CONFIG_WARNING,
            "%slong flag '%s' should not start with '--'. The parser automatically handles leading '--' "
            "for long flags, so including it in the config may cause incorrect parsing." % ("option " * isinstance(argument, Option), argument.long),
        )


def _payload_fault(argument, name):
    match argument.type:
        case ValueType.SUBCOMMAND if argument.payload is None:
            return "incomplete subcommand definition for argument '%s'! Define `subcommands` for subcommand verification!" % name
        case ValueType.CHOICE if argument.payload is None:
            return "incomplete choice definition for argument '%s'! Define `choices` for choice verification!" % name
        case ValueType.CUSTOM if argument.payload is None:
            return "incomplete custom verifier definition for argument '%s'! Define `verify` for custom verification!" % name
    return None


def _check(schema):
    """
    walk the declarations once; return the first configuration error message,
    or None. configuration warnings are logged on the way.
    """
    if schema.list_terminator == TOGGLE:
        return "'list_terminator' may not be '--' because '--' is reserved for toggling option and flag parsing!"
    if schema.ignore_prefix == TOGGLE:
        return "'ignore_prefix' may not be '--' since this conflicts with the long option and flag prefix!"

    last_was_list = False
    subcommand_found = False
    optional_found = False
    last_name = None
    for argument in schema.arguments:
        match argument:
            case Positional():
                if message := _payload_fault(argument, argument.name):
                    return message
                if optional_found and not argument.optional:
                    return "invalid positional argument order: required argument '%s' appears after optional argument '%s'" % (
                        argument.name, last_name
                    )
                optional_found = argument.optional
                if argument.type is ValueType.SUBCOMMAND:
                    subcommand_found = True
                    if last_name is not None:
                        return "subcommand '%s' must be the only positional argument in its config!" % argument.name
                elif subcommand_found:
                    return "trailing positional argument after subcommand: '%s'!" % argument.name
                if last_was_list and schema.list_terminator is None:
                    message = "positional argument '%s' is unreachable after list '%s'! Define 'list_terminator' in the schema to separate them" % (
                        argument.name, last_name
                    )
                    if not argument.list:
                        message += " or make '%s' option" % argument.name
                    return message + "."
                last_was_list = argument.list
                last_name = argument.name
            case Option():
                _warn_identifiers(schema, argument)
                if argument.type is ValueType.SUBCOMMAND:
                    return "option argument '%s' may not be a subcommand!" % argument.label
                if message := _payload_fault(argument, argument.label):
                    return message
            case Flag():
                _warn_identifiers(schema, argument)
                if not isinstance(argument.kind, FlagKind):
                    return "invalid flag type: %r!" % (argument.kind,)
                if argument.kind is FlagKind.CALLBACK and argument.callback is None:
                    return "callback flag '%s' requires a callback!" % argument.label
    return None


def validate(schema, /):
    """
    check a schema's static invariants, once.

    - the list terminator and the ignore prefix must not be the toggle token;
    - CHOICE/CUSTOM/SUBCOMMAND definitions need their payload;
    - required positionals precede optional ones;
    - a subcommand positional is the only positional of its schema;
    - a positional after a list needs a list terminator to be reachable;
    - options cannot be subcommands; flags need a valid kind (and a callback
      for FlagKind.CALLBACK).

    definitions without identifiers and long identifiers starting with '--'
    only produce configuration warnings.

    raises
    - InvalidConfigError: the schema is (or already was) invalid. the first
      failure is logged at CONFIG_ERROR and marks the schema invalid for good;
      later calls raise the stored fault again without logging.
    """
    if schema._invalid:
        raise schema._fault
    if schema._validated:
        return

    if (message := _check(schema)) is not None:
        fault = InvalidConfigError(message, schema=schema, title="invalid configuration")
        schema.log(LogLevel.CONFIG_ERROR, message)
        schema._invalid = True
        schema._error = ErrorKind.INVALID_CONFIG
        schema._fault = fault
        raise fault
    schema._validated = True


def parse(tokens, schema, /):
    """
    parse argv-like tokens against 'schema' (see Schema.parse).
    """
    if not isinstance(schema, Schema):
        raise TypeError("parse() second argument must be a schema")
    return schema.parse(tokens)


def invoke(object, prompt=Unset, /, **options):
    """
    convenience runner for schemas.

    parameters
    - object: an instance providing __invoke__(prompt, **options).
    - prompt:
      • Unset: read sys.argv[1:] (program name from sys.argv[0]).
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens.
    - options: program, shell, fancy, colorful.

    raises
    - TypeError: when 'object' cannot be invoked.
    - ParseFault: when parsing fails outside shell mode.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt, **options)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Schema",
    "validate",
    "parse",
    "invoke",
)
