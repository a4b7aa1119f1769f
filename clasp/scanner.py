"""
clasp token scanner.

The Scanner walks one token list for one schema, left to right, and binds
every token it accepts. Dispatch per token, first match wins:

1. the toggle token ("--") flips option parsing while options are accepted, or
   at any time when the schema allows toggling back;
2. tokens starting with the ignore prefix are skipped (their remainder may be
   recorded in the schema's `ignored` accumulator);
3. the list terminator closes an open positional list;
4. "--name", "--name=value": long options, then long flags;
5. "-abc", "-oVALUE": short flags and options (not when a digit follows the
   dash, so negative numbers stay positionals);
6. everything else fills the next pending positional. A subcommand positional
   hands the remaining tokens over to the selected child schema.

Failures are raised as ParseFault subclasses; Schema.parse turns them into the
returned failing schema. run() itself returns None on success (or when an exit
flag fired) and the child's result after a subcommand hand-over.
"""
from collections import deque

from .faults import *
from .kinds import ValueType
from .logs import LogLevel
from .verifiers import verify

TOGGLE = "--"

_digits = frozenset("0123456789")


class Scanner:
    """
    per-run state machine over the tokens following the program name.

    state
    - accept: option/flag parsing is enabled (flipped by the toggle token).
    - open: a list positional is collecting tokens.
    - optionals: the last matched positional was optional.
    - positionals / required: satisfied positional slots / satisfied required slots.
    - ignored: at least one token was skipped by the ignore prefix.
    """

    def __init__(self, schema, tokens, /):
        self._schema = schema
        self._groups = schema.groups
        self._tokens = deque(tokens)
        self._index = 0

        self._accept = True
        self._open = False
        self._optionals = False
        self._positionals = 0
        self._required = 0
        self._ignored = False

    def run(self):
        """
        consume every token, then check the end-of-input conditions.
        """
        schema = self._schema
        while self._tokens:
            token = self._next()

            if token == TOGGLE and (self._accept or schema.toggle):
                self._accept = not self._accept
                continue

            if self._ignores(token):
                self._ignore(token)
                continue

            if schema.list_terminator is not None and token == schema.list_terminator:
                if self._open:
                    self._close()
                continue

            if self._accept and token.startswith("--"):
                if self._parse_long(token[2:]):
                    return None
            elif self._accept and token.startswith("-") and token[1:2] not in _digits:
                if self._parse_short(token[1:]):
                    return None
            else:
                positional = self._pending(token)
                if positional.type is ValueType.SUBCOMMAND:
                    return self._delegate(positional, token)
                self._parse_positional(positional, token)

        return self._finish()

    def _next(self):
        self._index += 1
        return self._tokens.popleft()

    def _ignores(self, token):
        prefix = self._schema.ignore_prefix
        return prefix is not None and token.startswith(prefix)

    def _ignore(self, token):
        schema = self._schema
        self._ignored = True
        if schema.ignored is not None:
            schema.ignored.append(schema.duplicate(token[len(schema.ignore_prefix):]))

    def _close(self):
        self._open = False
        self._positionals += 1
        if not self._optionals:
            self._required += 1

    def _value(self, label):
        # the value of a spaced option is the next token that is not ignored
        while True:
            if not self._tokens:
                raise InvalidOptionError(
                    "Option flag %s requires argument!" % label,
                    title="missing option value",
                    argument=label,
                    index=self._index,
                    hint="pass a value right after %s" % label,
                )
            if not self._ignores(value := self._next()):
                return value
            self._ignore(value)

    def _bind(self, argument, token):
        argument._bind(verify(argument.type, self._schema, argument.label, token, argument.payload))

    def _apply(self, flag):
        flag._apply(self._schema)
        return flag.exit

    def _parse_long(self, name):
        """
        handle '--name', '--name=value' and '--name value'; return True on exit.
        """
        if not name:
            raise InvalidOptionError("Missing flag or option name: '--'!", title="missing name", index=self._index)

        for option in self._groups.options:
            if option.long is None or not name.startswith(option.long):
                continue
            rest = name[len(option.long):]
            if not rest:
                value = self._value("--" + name)
            elif rest.startswith("="):
                if not (value := rest[1:]):
                    raise InvalidOptionError(
                        "Designated option assignment may not have an empty value: '%s'!" % name,
                        title="empty option value",
                        argument=option.label,
                        index=self._index,
                        hint="write --%s=VALUE or --%s VALUE" % (option.long, option.long),
                    )
            else:
                continue
            self._bind(option, value)
            return False

        for flag in self._groups.flags:
            if flag.long is not None and flag.long == name:
                return self._apply(flag)

        raise InvalidOptionError(
            "Unknown long flag or option: '--%s'!" % name,
            title="unknown option",
            token="--" + name,
            index=self._index,
        )

    def _parse_short(self, group):
        """
        handle a group of short flags, possibly ending in a value-bearing short
        option; return True on exit.
        """
        if not group:
            raise InvalidOptionError("Missing flag or option name: '-'!", title="missing name", index=self._index)

        for position, char in enumerate(group):
            for option in self._groups.options:
                if option.short == char:
                    # a value-bearing short option consumes the rest of the group
                    value = group[position + 1:] or self._value("-" + group)
                    self._bind(option, value)
                    return False

            matched = False
            for flag in self._groups.flags:
                if flag.short == char:
                    matched = True
                    if self._apply(flag):
                        return True

            if not matched:
                if len(group) > 1:
                    message = "Unknown short flag '-%s' in combination '-%s'!" % (char, group)
                else:
                    message = "Unknown short flag '-%s'!" % char
                raise InvalidOptionError(message, title="unknown flag", token="-" + group, index=self._index)

        return False

    def _pending(self, token):
        positionals = self._groups.positionals
        if self._positionals >= len(positionals):
            raise TooManyArgumentsError(
                "Unknown additional argument (%d/%d): '%s'!" % (self._positionals + 1, len(positionals), token),
                title="unexpected argument",
                token=token,
                index=self._index,
                hint="remove the extra value",
            )
        return positionals[self._positionals]

    def _parse_positional(self, positional, token):
        if positional.list:
            self._open = True
        else:
            self._positionals += 1
            if not positional.optional:
                self._required += 1
        self._optionals = positional.optional
        self._bind(positional, token)

    def _delegate(self, positional, token):
        subcommand = verify(positional.type, self._schema, positional.label, token, positional.payload)
        positional._bind(subcommand)
        if subcommand.schema is None:
            return None
        # the child sees the subcommand name as its program name
        return subcommand.schema.parse([token, *self._tokens])

    def _finish(self):
        schema = self._schema
        if self._open:
            self._close()

        if self._ignored:
            schema.log(LogLevel.WARNING, "Arguments were ignored because they were prefixed with '%s'" % schema.ignore_prefix)

        if self._required < (required := self._groups.required):
            missing = self._groups.positionals[self._positionals:required]
            raise TooFewArgumentsError(
                "Missing required arguments (%d/%d):%s!" % (
                    self._required, required, "".join(" <%s>" % positional.name for positional in missing)
                ),
                title="missing arguments",
                missing=tuple(positional.name for positional in missing),
            )
        return None


__all__ = (
    "Scanner",
    "TOGGLE",
)
