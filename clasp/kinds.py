"""
clasp value kinds and extension payloads.

- ValueType: the closed set of value types; each maps 1:1 to a verifier.
- FlagKind: what a matched flag does to its target.
- Choice / Choices: ordered (value, descr) pairs plus case-sensitivity, the payload
  of ValueType.CHOICE definitions.
- Subcommand / Subcommands: ordered (name, descr, schema) triples, the payload of
  ValueType.SUBCOMMAND positionals.
- index_of(): position of a bound entry inside its set, by identity.
"""
from enum import Enum
from typing import NamedTuple


class ValueType(Enum):
    """
    closed enumeration of the supported value types.

    the value of every member is the name shown in usage output.
    """
    STRING     = "string"
    BOOL       = "bool"
    INT8       = "int8"
    UINT8      = "uint8"
    INT32      = "int32"
    UINT32     = "uint32"
    INT64      = "int64"
    UINT64     = "uint64"
    DOUBLE     = "double"
    CHOICE     = "choice"
    PATH       = "path"
    FILE       = "file"
    DIR        = "dir"
    SIZE       = "size"
    TIME_S     = "time_s"
    TIME_NS    = "time_ns"
    CUSTOM     = "custom"
    SUBCOMMAND = "subcmd"


class FlagKind(Enum):
    """
    behavior of a flag when it occurs.

    - BOOL: the target becomes True.
    - COUNT: the target counts occurrences.
    - CONFIG: the target captures the schema in which the flag occurred.
    - CALLBACK: the flag callback is invoked with that schema.
    """
    BOOL     = "bool"
    COUNT    = "count"
    CONFIG   = "config"
    CALLBACK = "callback"


class Choice(NamedTuple):
    value: str
    descr: str | None = None


class Subcommand(NamedTuple):
    name: str
    descr: str | None = None
    schema: object = None


class Choices:
    """
    ordered set of accepted values for a choice-typed definition.

    entries may be Choice objects, (value, descr) pairs or bare strings.
    matching is exact unless case_insensitive is set; details=False asks the
    usage renderer for the compact one-line form when there are few entries.
    """
    __slots__ = ("_items", "case_insensitive", "details")

    def __init__(self, *entries, case_insensitive=False, details=True):
        items = []
        for entry in entries:
            if isinstance(entry, str):
                entry = Choice(entry)
            elif not isinstance(entry, Choice):
                entry = Choice(*entry)
            if not isinstance(entry.value, str) or not entry.value:
                raise ValueError("choice values must be non-empty strings")
            items.append(entry)
        self._items = tuple(items)
        self.case_insensitive = bool(case_insensitive)
        self.details = bool(details)

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __repr__(self):
        return "choices(%s)" % ", ".join(repr(choice.value) for choice in self._items)

    def match(self, token):
        """
        return the first entry matching the token, or None.
        """
        for choice in self._items:
            if choice.value == token:
                return choice
            if self.case_insensitive and choice.value.lower() == token.lower():
                return choice
        return None


class Subcommands:
    """
    ordered set of subcommands selectable by a subcommand positional.

    entries may be Subcommand objects or (name, descr, schema) triples.
    """
    __slots__ = ("_items",)

    def __init__(self, *entries):
        items = []
        for entry in entries:
            if not isinstance(entry, Subcommand):
                entry = Subcommand(*entry)
            if not isinstance(entry.name, str) or not entry.name:
                raise ValueError("subcommand names must be non-empty strings")
            items.append(entry)
        self._items = tuple(items)

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __repr__(self):
        return "subcommands(%s)" % ", ".join(repr(subcommand.name) for subcommand in self._items)

    def match(self, token):
        """
        return the entry whose name equals the token exactly, or None.
        """
        for subcommand in self._items:
            if subcommand.name == token:
                return subcommand
        return None


def index_of(entries, entry, /):
    """
    return the index of a bound entry inside its Choices/Subcommands, or None.

    lookup is by identity: the verifiers bind the entry object itself, so a
    value-equal but distinct tuple is not found.
    """
    if entries is None or entry is None:
        return None
    for index, candidate in enumerate(entries):
        if candidate is entry:
            return index
    return None


__all__ = (
    "ValueType",
    "FlagKind",
    "Choice",
    "Choices",
    "Subcommand",
    "Subcommands",
    "index_of",
)
