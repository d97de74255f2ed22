import zlib
from abc import ABC
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from operator import attrgetter
from typing import (
    ClassVar,
    Generic,
    Protocol,
    Self,
    TypedDict,
    TypeVar,
    cast,
)

import numpy as np
from numpy.typing import NDArray

ArrayBuffer = NDArray[np.uint8] | memoryview | bytes

CRC_SIZE = 4


class HeaderDType(Protocol):
    itemsize: ClassVar[int]
    names: ClassVar[tuple[str, str]]

    def tobytes(self) -> bytes: ...


T = TypeVar('T')


class ChunkHeaderDict(TypedDict):
    tag: bytes
    size: int


@dataclass(frozen=True, slots=True)
class ChunkHeaderData:
    tag: bytes
    size: int


class StructuredHeader(ABC, Generic[T]):
    __slots__ = ('_header',)
    dtype: ClassVar[type[HeaderDType]]

    def __init__(self, header: HeaderDType) -> None:
        self._header = header

    @classmethod
    def itemsize(cls) -> int:
        return cls.dtype.itemsize

    @classmethod
    def from_buffer(cls, buffer: ArrayBuffer) -> Self:
        chunk_header = np.frombuffer(buffer, dtype=cls.dtype, count=1)[0]
        return cls(chunk_header)

    def __bytes__(self) -> bytes:
        return self._header.tobytes()

    @classmethod
    def create(cls, data: T) -> Self:
        assert cls.dtype.names
        assert set(cls.dtype.names) == set(data.__class__.__annotations__)
        htuple = attrgetter(*cls.dtype.names)(data)
        header = np.array([htuple], dtype=cls.dtype)[0]
        return cls(header)


class ChunkHeader(StructuredHeader[ChunkHeaderData]):
    @property
    def tag(self) -> bytes:
        return cast(ChunkHeaderDict, self._header)['tag']

    @property
    def size(self) -> int:
        return int(cast(ChunkHeaderDict, self._header)['size'])


class PNGChunkHeader(ChunkHeader):
    dtype = cast(
        type[HeaderDType],
        np.dtype(
            [
                ('size', '>u4'),  # 4-byte unsigned int for the data length
                ('tag', 'S4'),  # 4-byte string for the chunk type
            ],
        ),
    )


@dataclass(frozen=True)
class ChunkSettings:
    header_dtype: type[ChunkHeader]
    alignment: int
    checksum: bool = True


def crc32(tag: bytes, data: ArrayBuffer) -> int:
    """CRC-32 of chunk type followed by chunk data, as stored in PNG trailers."""
    return zlib.crc32(memoryview(data).tobytes(), zlib.crc32(tag)) & 0xFFFFFFFF


@dataclass(frozen=True, slots=True)
class Chunk:
    header: ChunkHeader
    data: ArrayBuffer
    crc: int | None = None

    @property
    def tag(self) -> str:
        return self.header.tag.decode('ascii')

    def __len__(self) -> int:
        return len(self.data)

    def __bytes__(self) -> bytes:
        trailer = b'' if self.crc is None else self.crc.to_bytes(CRC_SIZE, 'big')
        return bytes(self.header) + memoryview(self.data).tobytes() + trailer

    def __repr__(self) -> str:
        return f'Chunk<{self.tag}>[{len(self)}]'


def read_chunk_header(
    cfg: ChunkSettings,
    buffer: ArrayBuffer,
    offset: int = 0,
) -> tuple[int, ChunkHeader]:
    header_data = nslice(buffer, offset, offset + cfg.header_dtype.itemsize())
    chunk_header = cfg.header_dtype.from_buffer(header_data)
    return offset + cfg.header_dtype.itemsize(), chunk_header


def nslice(buffer: ArrayBuffer, start: int, end: int) -> ArrayBuffer:
    res = buffer[start:end]
    if len(res) != end - start:
        raise ValueError(f'chunk data size mismatch: {len(res)} != {end - start}')  # noqa: TRY003
    return res


def untag(
    cfg: ChunkSettings,
    buffer: ArrayBuffer,
    offset: int = 0,
) -> tuple[int, Chunk]:
    offset, chunk_header = read_chunk_header(cfg, buffer, offset)
    end = offset + chunk_header.size
    chunk_data = nslice(buffer, offset, end)

    crc = None
    if cfg.checksum:
        crc = int.from_bytes(nslice(buffer, end, end + CRC_SIZE), 'big')
        end += CRC_SIZE
    return end, Chunk(chunk_header, chunk_data, crc)


def calc_align(offset: int, align: int) -> int:
    """Calculate difference from given offset to next aligned offset."""
    return (align - offset) % align


def read_chunks(
    cfg: ChunkSettings,
    buffer: ArrayBuffer,
    offset: int = 0,
) -> Iterator[tuple[int, Chunk]]:
    while offset < len(buffer):
        noffset, chunk = untag(cfg, buffer, offset)
        yield offset, chunk
        offset = noffset + calc_align(noffset, cfg.alignment)


def mktag(
    cfg: ChunkSettings,
    tag: str,
    buffer: ArrayBuffer,
) -> Chunk:
    btag = tag.encode('ascii')
    header = cfg.header_dtype.create(ChunkHeaderData(tag=btag, size=len(buffer)))
    crc = crc32(btag, buffer) if cfg.checksum else None
    return Chunk(header, buffer, crc)


def write_chunks(cfg: ChunkSettings, chunks: Iterable[Chunk]) -> bytes:
    stream = bytearray()
    for chunk in chunks:
        content = bytes(chunk)
        stream += content + bytes(calc_align(len(content), cfg.alignment))
    return bytes(stream)
