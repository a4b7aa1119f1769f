"""
clasp value verifiers.

verify(type, schema, name, token, payload) converts one raw token into the typed
value of a definition, or raises InvalidValueError with a message naming the
argument and the offending token. Dispatch is an exhaustive match over the
closed ValueType enumeration; custom definitions carry their own function in
the payload, so nothing is registered at runtime.

Accepted syntax per type
- string: any token (copied into the schema when duplicate_strings is set).
- bool: true/yes/y and false/no/n, case-insensitive.
- int8 .. uint64: decimal, 0x hexadecimal, 0b binary, leading-0 octal; optional sign;
  unsigned types reject a leading minus; bounds are checked.
- double: decimal or scientific literal (inf/nan spelled as such); overflow and
  underflow are rejected.
- choice: exact (or case-folded) match against the Choices payload; binds the entry.
- path / file / dir: the path must exist (as a regular file / as a directory).
- size: unsigned magnitude + unit from B, KiB, KB, MiB, MB, GiB, GB, TiB, TB
  (case-insensitive except bare "B").
- time_s: float magnitude + s/m/h/d, truncated to whole seconds.
- time_ns: float magnitude + ns/us/ms/s/m/h/d, rounded to whole nanoseconds.
- custom: the payload function decides; raising ValueError/TypeError or returning
  False means "no match".
- subcmd: exact name lookup in the Subcommands payload; links the child schema.
"""
import math
import os
import re
import stat
import sys

from .faults import InvalidValueError
from .kinds import ValueType

UINT64_MAX = (1 << 64) - 1

_bounds = {
    ValueType.INT8: (-(1 << 7), (1 << 7) - 1),
    ValueType.UINT8: (0, (1 << 8) - 1),
    ValueType.INT32: (-(1 << 31), (1 << 31) - 1),
    ValueType.UINT32: (0, (1 << 32) - 1),
    ValueType.INT64: (-(1 << 63), (1 << 63) - 1),
    ValueType.UINT64: (0, UINT64_MAX),
}

_integer = re.compile(r"(?P<sign>[+-]?)(?:0[xX](?P<hex>[0-9a-fA-F]+)|0[bB](?P<bin>[01]+)|(?P<oct>0[0-7]*)|(?P<dec>[1-9][0-9]*))")
_double = re.compile(r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[iI][nN][fF](?:[iI][nN][iI][tT][yY])?|[nN][aA][nN])")
_magnitude = re.compile(r"[+-]?[0-9]+")
_float = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

_sizes = {
    "kib": 1 << 10,
    "kb": 1000,
    "mib": 1 << 20,
    "mb": 1000 ** 2,
    "gib": 1 << 30,
    "gb": 1000 ** 3,
    "tib": 1 << 40,
    "tb": 1000 ** 4,
}

_seconds = {
    "": 1,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 24 * 3600,
}

_nanoseconds = {
    "": 1,
    "ns": 1,
    "us": 1000,
    "ms": 1000 ** 2,
    "s": 1000 ** 3,
    "m": 60 * 1000 ** 3,
    "h": 3600 * 1000 ** 3,
    "d": 24 * 3600 * 1000 ** 3,
}

_true = frozenset(("true", "yes", "y"))
_false = frozenset(("false", "no", "n"))


def _fail(message, name, token, **options):
    return InvalidValueError(message, title="invalid value", argument=name, token=token, **options)


def _underflows(literal, value):
    # a non-zero literal that collapses to zero or to a subnormal is out of range
    mantissa = re.split(r"[eE]", literal, maxsplit=1)[0]
    if value == 0.0:
        return any(digit in "123456789" for digit in mantissa)
    return abs(value) < sys.float_info.min


def _verify_string(schema, name, token):
    return schema.duplicate(token)


def _verify_bool(schema, name, token):
    if token.lower() in _true:
        return True
    if token.lower() in _false:
        return False
    raise _fail("Invalid boolean value for argument '%s': '%s'!" % (name, token), name, token,
                hint="use one of true/false, yes/no or y/n")


def _verify_integer(type, name, token):
    minimum, maximum = _bounds[type]
    if not (match := _integer.fullmatch(token)):
        raise _fail("Invalid %s value for argument '%s': '%s'!" % (type.value, name, token), name, token,
                    hint="use a decimal, 0x hexadecimal, 0b binary or 0-prefixed octal integer")
    if match["hex"] is not None:
        value = int(match["hex"], 16)
    elif match["bin"] is not None:
        value = int(match["bin"], 2)
    elif match["oct"] is not None:
        value = int(match["oct"], 8)
    else:
        value = int(match["dec"], 10)
    if match["sign"] == "-":
        if minimum == 0:
            value = None
        else:
            value = -value
    if value is None or not minimum <= value <= maximum:
        raise _fail("%s value out of range (%d to %d) for argument '%s': '%s'!" % (type.value, minimum, maximum, name, token),
                    name, token, hint="pick a value between %d and %d" % (minimum, maximum))
    return value


def _verify_double(name, token):
    if not _double.fullmatch(token):
        raise _fail("Invalid double value for argument '%s': '%s'!" % (name, token), name, token,
                    hint="use a decimal or scientific literal such as 3.14 or 2e10")
    value = float(token)
    if math.isinf(value) or _underflows(token, value):
        raise _fail("double value out of range (%g to %g) for argument '%s': '%s'!" % (-sys.float_info.max, sys.float_info.max, name, token),
                    name, token)
    return value


def _verify_choice(name, token, choices):
    if (choice := choices.match(token)) is None:
        raise _fail("Invalid choice for argument '%s': '%s'!" % (name, token), name, token,
                    hint="use one of %s" % ", ".join(repr(choice.value) for choice in choices))
    return choice


def _verify_path(schema, name, token, type):
    try:
        mode = os.stat(token).st_mode
    except OSError as exception:
        raise _fail("Invalid path for argument '%s': '%s' : %s!" % (name, token, exception.strerror), name, token) from None
    if type is ValueType.FILE and not stat.S_ISREG(mode):
        raise _fail("Path for argument '%s' is not a file: '%s'!" % (name, token), name, token)
    if type is ValueType.DIR and not stat.S_ISDIR(mode):
        raise _fail("Path for argument '%s' is not a dir: '%s'!" % (name, token), name, token)
    return schema.duplicate(token)


def _verify_size(name, token):
    if not (match := _magnitude.match(token)):
        raise _fail("No leading number in size argument '%s': '%s'!" % (name, token), name, token)
    unit = token[match.end():]
    if unit in ("", "B"):
        factor = 1
    elif unit.lower() in _sizes:
        factor = _sizes[unit.lower()]
    else:
        raise _fail("Invalid size unit for argument '%s': '%s'!" % (name, unit), name, token,
                    hint="use one of B, KiB, KB, MiB, MB, GiB, GB, TiB or TB")
    value = int(match[0])
    if token.startswith("-") or value > UINT64_MAX // factor:
        raise _fail("size value out of range (0 to %d) for argument '%s': '%s'!" % (UINT64_MAX, name, token), name, token)
    return value * factor


def _leading_float(name, token):
    if not (match := _float.match(token)):
        raise _fail("No leading number in time argument '%s': '%s'!" % (name, token), name, token)
    value = float(match[0])
    return value, token[match.end():], math.isinf(value) or _underflows(match[0], value)


def _verify_time(name, token, units, suffix):
    value, unit, overflow = _leading_float(name, token)
    try:
        factor = units[unit.lower()]
    except KeyError:
        raise _fail("Invalid time unit for argument '%s': '%s'!" % (name, unit), name, token,
                    hint="use one of %s" % ", ".join(unit for unit in units if unit)) from None
    # float(UINT64_MAX) rounds up to 2**64, so the integer result is checked again
    if not overflow and 0 <= value <= UINT64_MAX / factor:
        result = int(value * factor) if units is _seconds else int(value * factor + 0.5)
        if result <= UINT64_MAX:
            return result
    raise _fail("time value out of range (0%s to %d%s) for argument '%s': '%s'!" % (suffix, UINT64_MAX, suffix, name, token),
                name, token)


def _verify_custom(schema, name, token, function):
    message = "Value for argument '%s' does not match custom criteria: '%s'!" % (name, token)
    try:
        value = function(schema, name, token)
    except (ValueError, TypeError) as exception:
        raise _fail(message, name, token, exception=exception) from exception
    # predicates reject by returning False
    if value is False:
        raise _fail(message, name, token)
    return value


def _verify_subcommand(schema, name, token, subcommands):
    if (subcommand := subcommands.match(token)) is None:
        raise _fail("Unknown subcommand '%s' for argument '%s'!" % (token, name), name, token,
                    title="unknown subcommand",
                    hint="use one of %s" % ", ".join(repr(subcommand.name) for subcommand in subcommands))
    if subcommand.schema is not None:
        subcommand.schema._link(schema)
    return subcommand


def verify(type, schema, name, token, payload=None, /):
    """
    convert a token into the typed value for 'type', or raise InvalidValueError.

    parameters
    - type: ValueType of the definition.
    - schema: the schema being parsed (string duplication, subcommand linking,
      custom verifier context).
    - name: display name of the argument (used in messages).
    - token: the raw token.
    - payload: Choices, custom function or Subcommands, as selected by 'type'.
    """
    match type:
        case ValueType.STRING:
            return _verify_string(schema, name, token)
        case ValueType.BOOL:
            return _verify_bool(schema, name, token)
        case ValueType.INT8 | ValueType.UINT8 | ValueType.INT32 | ValueType.UINT32 | ValueType.INT64 | ValueType.UINT64:
            return _verify_integer(type, name, token)
        case ValueType.DOUBLE:
            return _verify_double(name, token)
        case ValueType.CHOICE:
            return _verify_choice(name, token, payload)
        case ValueType.PATH | ValueType.FILE | ValueType.DIR:
            return _verify_path(schema, name, token, type)
        case ValueType.SIZE:
            return _verify_size(name, token)
        case ValueType.TIME_S:
            return _verify_time(name, token, _seconds, "s")
        case ValueType.TIME_NS:
            return _verify_time(name, token, _nanoseconds, "ns")
        case ValueType.CUSTOM:
            return _verify_custom(schema, name, token, payload)
        case ValueType.SUBCOMMAND:
            return _verify_subcommand(schema, name, token, payload)
    raise TypeError("verify() argument must be a value type")


__all__ = (
    "verify",
    "UINT64_MAX",
)
