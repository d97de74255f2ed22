import os
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from types import TracebackType
from typing import IO, cast

import numpy as np
from numpy.typing import ArrayLike


class TruncatedChunkError(OSError):
    def __init__(self, expected: int, got: int) -> None:
        super().__init__(f'unexpected end of stream: expected {expected} bytes, got {got}')
        self.expected = expected
        self.got = got


class ResourceFile(AbstractContextManager[memoryview]):
    __slots__ = ('buffer', 'closed')

    def __init__(self, buffer: ArrayLike) -> None:
        self.buffer = memoryview(buffer)  # type: ignore[arg-type]
        self.closed = False

    def __buffer__(self, _flags: int) -> memoryview:
        return self.buffer

    def __exit__(
        self,
        __exc_type: type[BaseException] | None,
        __exc_value: BaseException | None,
        __traceback: TracebackType | None,
    ) -> bool | None:
        self.close()
        return None

    @classmethod
    @contextmanager
    def load(cls, file_path: str | os.PathLike[str]) -> Iterator[memoryview]:
        data = np.memmap(file_path, dtype='u1', mode='r')
        with cls(data) as res:
            yield cast(memoryview, res)

    def close(self) -> None:
        self.closed = True


def read_file(file_path: str | os.PathLike[str]) -> bytes:
    if not Path(file_path).stat().st_size:
        return b''
    with ResourceFile.load(file_path) as res:
        return bytes(res)


class PushbackReader:
    """Binary stream reader able to return bytes already consumed.

    Reads are exact: a short read raises `TruncatedChunkError`.
    """

    __slots__ = ('stream', '_pending', 'limit')

    def __init__(self, stream: IO[bytes], limit: int = 8) -> None:
        self.stream = stream
        self.limit = limit
        self._pending = bytearray()

    def read(self, size: int) -> bytes:
        head = bytes(self._pending[:size])
        del self._pending[:size]
        rest = size - len(head)
        data = head
        while rest:
            part = self.stream.read(rest)
            if not part:
                break
            data += part
            rest -= len(part)
        if len(data) != size:
            raise TruncatedChunkError(size, len(data))
        return data

    def skip(self, size: int) -> None:
        self.read(size)

    def unread(self, data: bytes) -> None:
        if len(self._pending) + len(data) > self.limit:
            raise OSError(f'pushback buffer overflow: limit is {self.limit} bytes')  # noqa: TRY003
        self._pending[:0] = data


def write_file(file_path: str | os.PathLike[str], data: bytes) -> int:
    with Path(file_path).open('wb') as res:
        return res.write(data)
