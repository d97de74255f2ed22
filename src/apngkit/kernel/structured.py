import struct
from collections.abc import Callable, Sequence
from operator import attrgetter
from typing import IO, Any, Generic, TypeVar

T = TypeVar('T')


class StructuredTuple(Generic[T]):
    """Fixed-layout binary record mapped onto named fields of a factory type."""

    __slots__ = ('_fields', '_struct', '_factory')

    def __init__(
        self,
        fields: Sequence[str],
        structure: struct.Struct,
        factory: Callable[..., T],
    ) -> None:
        self._fields = tuple(fields)
        self._struct = structure
        self._factory = factory

    @property
    def size(self) -> int:
        return self._struct.size

    def unpack_from(self, data: bytes | memoryview, offset: int = 0) -> T:
        values = self._struct.unpack_from(data, offset)
        return self._factory(**dict(zip(self._fields, values, strict=True)))

    def unpack(self, stream: IO[bytes]) -> T:
        data = stream.read(self.size)
        if len(data) != self.size:
            raise ValueError(f'expected {self.size} bytes but got {len(data)}')  # noqa: TRY003
        return self.unpack_from(data)

    def pack(self, data: Any) -> bytes:
        values = attrgetter(*self._fields)(data)
        if len(self._fields) == 1:
            values = (values,)
        return self._struct.pack(*values)
