"""
clasp usage renderer.

usage(schema, program) prints the help dialog of a schema with rich:

    Usage: prog sub [OPTIONS] [FLAGS] <input> [extra] <files..> :: <last>
    <description>

      Arguments:
        input                            : what to read (file)
      Options:
        -o, --output(=)FILE              : where to write
      Flags:
        -h, --help                       : print this help dialog and exit

      Notes:
        '::' terminates a list argument.

Left-hand columns are padded to USAGE_ALIGNMENT - 4 characters; longer names are
cut with '..' and a configuration warning is logged. Invalid schemas render
nothing. The route is the program name followed by the names of every
subcommand schema leading to this one.
"""
from collections import defaultdict

from rich.text import Text

from . import logs
from .kinds import ValueType
from .logs import LogLevel
from .utils import *

USAGE_ALIGNMENT = 36

_width = USAGE_ALIGNMENT - 4


def _cut(short, long, name):
    """
    build the left-hand column of an option or flag; return (text, cut).
    """
    if short is not None and long is not None:
        text = "-%s, --%s(=)%s" % (short, long, name) if name else "-%s, --%s" % (short, long)
    elif short is not None:
        text = "-%s %s" % (short, name) if name else "-%s" % short
    elif long is not None:
        text = "--%s(=)%s" % (long, name) if name else "--%s" % long
    else:
        text = ""

    if len(text) <= _width:
        return text, False
    if long is None:
        return text[:_width], True

    suffix = name or ""
    prefix = "-%s, --" % short if short is not None else "--"
    if (room := _width - len(prefix) - len(suffix) - 3) > 0:
        trimmed = long[:room - 2] + ".." if room >= 2 else "."
        return (prefix + trimmed + ("(=)" if name else "") + suffix)[:_width], True
    return (prefix + suffix)[:_width], True


def _route(schema, program):
    names = [program]
    names.extend(step.name or "" for step in schema.path[1:])
    return " ".join(names)


def _describe(type, payload, list):
    """
    return (inline annotation, extra lines) describing a value type.
    """
    brackets = "[]" if list else ""
    match type:
        case ValueType.CHOICE if payload is not None:
            if not payload.details and len(payload) < 6:
                return " (%s%s: %s)" % (type.value, brackets, " | ".join(choice.value for choice in payload)), []
            lines = ["        Choices%s:" % (" (case-insensitive)" if payload.case_insensitive else "")]
            lines.extend("          - %s : %s" % (choice.value.ljust(_width - 8), choice.descr or "") for choice in payload)
            lines.append("")
            return " (%s%s)" % (type.value, brackets), lines
        case ValueType.SUBCOMMAND if payload is not None:
            lines = ["      Subcommands:"]
            lines.extend("        - %s : %s" % (subcommand.name.ljust(_width - 6), subcommand.descr or "") for subcommand in payload)
            lines.append("")
            return " (%s)" % type.value, lines
        case ValueType.STRING:
            return " ([])" if list else "", []
    return " (%s%s)" % (type.value, brackets), []


def usage(schema, program=Unset, /, *, console=Unset, colorful=False):
    """
    print the usage dialog of 'schema'.

    parameters
    - program: name shown after "Usage:"; defaults to the root schema's parsed
      name (or "clasp" when it has not been parsed yet).
    - console: rich Console to print to (defaults to stdout).
    - colorful: style names, types and section titles.
    """
    if schema.invalid:
        return

    main = __import__("__main__")
    console = coalesce(console, logs.stdout)
    program = coalesce(program, schema.path[0].name or "clasp")

    styles = defaultdict(str, {
        "usage": "bold #E6E6F0",  # near-white usage line
        "section": "bold #FFB400",  # amber section titles
        "name": "bold #36C5F0",  # cyan argument names
        "type": "#9CE19C",  # soft green type annotations
        "descr": "#C8C8D0",  # light gray descriptions
        "note": "italic #9CE19C",  # green notes
    } | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    lines = []
    cut = False

    head = "Usage: " + _route(schema, program)
    if schema.options:
        head += " [OPTIONS]"
    if schema.flags:
        head += " [FLAGS]"
    last_was_list = False
    for positional in schema.positionals:
        if last_was_list and schema.list_terminator is not None:
            head += " " + schema.list_terminator
        last_was_list = positional.list
        opening, closing = "[]" if positional.optional else "<>"
        head += " %s%s%s%s" % (opening, positional.name, ".." if positional.list else "", closing)
    lines.append(Text(head, styler("usage")))

    if schema.descr:
        lines.extend(Text(line, styler("descr")) for line in schema.descr.split("\n"))
        lines.append(Text(""))

    def row(left, descr, annotation, extra):
        lines.append(Text.assemble(
            "    ",
            (left.ljust(_width), styler("name")),
            " : ",
            (descr or "", styler("descr")),
            (annotation, styler("type")),
        ))
        lines.extend(Text(line, styler("type")) for line in extra)

    if schema.positionals:
        lines.append(Text("  Arguments:", styler("section")))
        for positional in schema.positionals:
            left = "%s %s" % (positional.name, "(optional)" if positional.optional else "")
            row(left[:_width], positional.descr, *_describe(positional.type, positional.payload, positional.list))

    if schema.options:
        lines.append(Text("  Options:", styler("section")))
        for option in schema.options:
            left, trimmed = _cut(option.short, option.long, option.name)
            cut |= trimmed
            row(left, option.descr, *_describe(option.type, option.payload, option.list))

    if schema.flags:
        lines.append(Text("  Flags:", styler("section")))
        for flag in schema.flags:
            left, trimmed = _cut(flag.short, flag.long, None)
            cut |= trimmed
            row(left, (flag.descr or "") + (" and exit" if flag.exit else ""), "", [])

    if schema.notes and (schema.list_terminator or schema.ignore_prefix or schema.toggle):
        lines.append(Text(""))
        lines.append(Text("  Notes:", styler("section")))
        if schema.toggle:
            lines.append(Text("    '--' toggles option and flag parsing and can re-enable parsing when provided again.", styler("note")))
        if schema.list_terminator:
            lines.append(Text("    '%s' terminates a list argument." % schema.list_terminator, styler("note")))
        if schema.ignore_prefix:
            lines.append(Text("    Arguments prefixed with '%s' are ignored." % schema.ignore_prefix, styler("note")))

    for line in lines:
        console.print(line, soft_wrap=True, highlight=False)

    if cut:
        schema.log(LogLevel.CONFIG_WARNING, "Some flag names were too long and were cut off! Increase `USAGE_ALIGNMENT` to give them more space.")


__all__ = (
    "usage",
    "USAGE_ALIGNMENT",
)
