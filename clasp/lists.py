"""
clasp list accumulator.

A ListAccumulator is the target of a list-valued definition: a homogeneous,
growable buffer that keeps count <= capacity at all times. Capacity starts at
INITIAL_CAPACITY on first use and doubles on demand; it never shrinks until the
owner calls free(). Not safe for concurrent use.
"""
from .faults import ResourceExhaustedError
from .kinds import ValueType

INITIAL_CAPACITY = 8


class ListAccumulator:
    """
    growable buffer bound to one list-valued definition (or to a schema's
    ignored-arguments option).

    - type: the ValueType of every element (homogeneous by contract).
    - count / capacity: number of bound elements / allocated slots.
    - behaves as a read-only sequence over the bound elements.
    """
    __slots__ = ("_type", "_items", "_count")

    def __init__(self, type=ValueType.STRING, /):
        if not isinstance(type, ValueType):
            raise TypeError("list accumulator 'type' must be a value type")
        self._type = type
        self._items = []
        self._count = 0

    @property
    def type(self):
        return self._type

    @property
    def count(self):
        return self._count

    @property
    def capacity(self):
        return len(self._items)

    def reserve(self, capacity, /):
        """
        grow the buffer so that at least 'capacity' slots exist.

        growth starts at INITIAL_CAPACITY and doubles; new slots are zeroed (None).
        on allocation failure the buffer is left untouched.
        """
        if capacity <= len(self._items):
            return
        target = len(self._items) or INITIAL_CAPACITY
        while target < capacity:
            target *= 2
        try:
            self._items.extend([None] * (target - len(self._items)))
        except MemoryError:
            raise ResourceExhaustedError("out of memory while growing a list of %d elements" % self._count) from None

    def append(self, value, /):
        """
        store one value in the next free slot, growing the buffer if needed.
        """
        if self._count >= len(self._items):
            self.reserve(self._count + 1)
        self._items[self._count] = value
        self._count += 1

    def free(self):
        """
        release the buffer; count and capacity drop to zero.
        """
        self._items = []
        self._count = 0

    def __len__(self):
        return self._count

    def __iter__(self):
        return iter(self._items[:self._count])

    def __getitem__(self, index):
        return self._items[:self._count][index]

    def __eq__(self, other):
        if isinstance(other, ListAccumulator):
            return self._type is other._type and list(self) == list(other)
        if isinstance(other, list | tuple):
            return list(self) == list(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return "list-accumulator(type=%s, items=%r)" % (self._type.value, list(self))

    def __rich_repr__(self):
        yield "type", self._type.value
        yield "count", self._count
        yield "capacity", len(self._items)
        yield "items", list(self)


__all__ = (
    "ListAccumulator",
    "INITIAL_CAPACITY",
)
