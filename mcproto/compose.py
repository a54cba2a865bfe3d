"""Composite wire fields: arrays, optional values and tuples of fields."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, BinaryIO, Optional

from .fields import Boolean, Field, VarInt


@dataclass
class Ary(Field):
    """An array of fields prefixed with its element count.

    The count is encoded with ``len_type``.  When reading, the list held in
    ``items`` is replaced in place by freshly decoded elements of
    ``elem_type``; if ``elem_type`` is not given it is taken from the first
    element already in ``items``.
    """

    items: list
    len_type: type = VarInt
    elem_type: Optional[type] = None

    def _element_type(self) -> type:
        if self.elem_type is not None:
            return self.elem_type
        if self.items:
            return type(self.items[0])
        raise TypeError("cannot decode array elements: no element type given")

    def write_to(self, w: BinaryIO) -> int:
        n = self.len_type(len(self.items)).write_to(w)
        for item in self.items:
            if not isinstance(item, Field):
                raise TypeError(f"array element {item!r} is not a field")
            n += item.write_to(w)
        return n

    def read_from(self, r: BinaryIO) -> int:
        length = self.len_type()
        n = length.read_from(r)
        if length.value < 0:
            raise ValueError("array length less than zero")
        elements = []
        if length.value:
            elem_type = self._element_type()
            for _ in range(length.value):
                elem = elem_type()
                n += elem.read_from(r)
                elements.append(elem)
        self.items[:] = elements
        return n


def array(items: list, elem_type: Optional[type] = None) -> Ary:
    """An array whose length is encoded as a VarInt."""
    return Ary(items, VarInt, elem_type)


@dataclass
class Opt(Field):
    """A field that is transferred only when ``has`` says so.

    ``has`` is a bool, a :class:`Boolean` field (read when needed, so it may
    be filled by an earlier field of the same packet) or a callable returning
    a bool.  ``field`` is a field or a callable returning one.  Unlike
    :class:`Option`, the presence flag itself is never read or written.
    """

    has: Any
    field: Any

    def _present(self) -> bool:
        if isinstance(self.has, Boolean):
            return bool(self.has.value)
        if isinstance(self.has, bool):
            return self.has
        if callable(self.has):
            return bool(self.has())
        raise TypeError(f"unsupported has value: {self.has!r}")

    def _resolve(self) -> Field:
        target = self.field
        if not isinstance(target, Field) and callable(target):
            target = target()
        if not isinstance(target, Field):
            raise TypeError(f"unsupported field type: {type(self.field).__name__}")
        return target

    def write_to(self, w: BinaryIO) -> int:
        if not self._present():
            return 0
        return self._resolve().write_to(w)

    def read_from(self, r: BinaryIO) -> int:
        if not self._present():
            return 0
        return self._resolve().read_from(r)


@dataclass
class Option(Field):
    """A Boolean presence flag followed by ``val`` when the flag is true."""

    val: Field
    has: bool = False

    def write_to(self, w: BinaryIO) -> int:
        n = Boolean(self.has).write_to(w)
        if not self.has:
            return n
        return n + self.val.write_to(w)

    def read_from(self, r: BinaryIO) -> int:
        flag = Boolean()
        n = flag.read_from(r)
        self.has = flag.value
        if not self.has:
            return n
        return n + self.val.read_from(r)


class Tuple(list, Field):
    """A sequence of fields transferred one after another."""

    def write_to(self, w: BinaryIO) -> int:
        n = 0
        for item in self:
            if not isinstance(item, Field):
                raise TypeError(f"tuple element {item!r} is not a field")
            n += item.write_to(w)
        return n

    def read_from(self, r: BinaryIO) -> int:
        n = 0
        for item in self:
            if not isinstance(item, Field):
                raise TypeError(f"tuple element {item!r} is not a field")
            n += item.read_from(r)
        return n