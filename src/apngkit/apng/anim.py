import io
import os
from collections.abc import Iterator
from typing import IO

from apngkit.graphics.image import decode_png
from apngkit.kernel.chunk import CRC_SIZE, Chunk, ChunkHeader
from apngkit.kernel.fileio import PushbackReader, read_file
from apngkit.kernel.preset import Preset

from .chunks import (
    derive_frame_header,
    read_animation_control,
    read_frame_header,
    read_image_header,
    strip_frame_data,
)
from .frame import (
    NO_ANIMATION,
    AnimationControl,
    AnimationStream,
    FrameDescriptor,
    FrameRecord,
    InvalidSignatureError,
    MissingImageHeaderError,
)
from .preset import png
from .schema import SIGNATURE, ChunkType


class AnimationParser:
    """Pull-based scanner turning an APNG stream into frame records.

    A frame ends where the chunk type changes, so the header following a run
    of `IDAT`/`fdAT` chunks is read ahead and pushed back into the stream.
    """

    def __init__(self, stream: IO[bytes], cfg: Preset = png) -> None:
        self.cfg = cfg
        self.reader = PushbackReader(stream, limit=cfg.header_dtype.itemsize())
        self.header: bytes | None = None
        self.ancillary = bytearray()
        self.control: AnimationControl = NO_ANIMATION
        self._descriptor: FrameDescriptor | None = None
        self._frame_header: Chunk | None = None

    def read_chunk_header(self) -> tuple[bytes, ChunkHeader]:
        raw = self.reader.read(self.cfg.header_dtype.itemsize())
        return raw, self.cfg.header_dtype.from_buffer(raw)

    def read_data(self, header: ChunkHeader) -> bytes:
        data = self.reader.read(header.size)
        self.reader.skip(CRC_SIZE)
        return data

    def read_record(self, raw: bytes, header: ChunkHeader) -> bytes:
        return raw + self.reader.read(header.size + CRC_SIZE)

    def base_header(self, tag: str) -> bytes:
        if self.header is None:
            raise MissingImageHeaderError(tag)
        return self.header

    def __iter__(self) -> Iterator[FrameRecord]:
        signature = self.reader.read(len(SIGNATURE))
        if signature != SIGNATURE:
            if self.cfg.errors == 'strict':
                raise InvalidSignatureError(signature)
            self.cfg.logger.warning(f'not a PNG stream, signature {signature!r}')
            return

        while True:
            raw, header = self.read_chunk_header()
            tag = header.tag.decode('latin-1')
            match ChunkType.classify(tag, self.cfg.passthrough):
                case ChunkType.IHDR:
                    self.header = self.read_record(raw, header)
                case ChunkType.ANCILLARY:
                    self.ancillary += self.read_record(raw, header)
                case ChunkType.ACTL:
                    self.control = read_animation_control(self.read_data(header))
                case ChunkType.FCTL:
                    self._descriptor = read_frame_header(self.read_data(header))
                    self._frame_header = derive_frame_header(
                        self.base_header(tag),
                        self._descriptor,
                        self.cfg,
                    )
                case ChunkType.IDAT | ChunkType.FDAT:
                    yield self.make_frame(tag, self.read_run(tag, header))
                case ChunkType.IEND:
                    self.reader.skip(header.size + CRC_SIZE)
                    return
                case _:
                    self.cfg.logger.debug(f'skipping {tag} chunk of {header.size} bytes')
                    self.reader.skip(header.size + CRC_SIZE)

    def read_run(self, tag: str, header: ChunkHeader) -> list[Chunk]:
        run = []
        while True:
            data = self.reader.read(header.size)
            crc = int.from_bytes(self.reader.read(CRC_SIZE), 'big')
            if tag == 'fdAT':
                run.append(strip_frame_data(data))
            else:
                run.append(Chunk(header, data, crc))
            raw, header = self.read_chunk_header()
            if header.tag != tag.encode('latin-1'):
                self.reader.unread(raw)
                return run

    def make_frame(self, tag: str, run: list[Chunk]) -> FrameRecord:
        base = self.base_header(tag)
        descriptor = self._descriptor
        frame_header = self._frame_header
        if descriptor is None or frame_header is None:
            _, base_chunk = self.cfg.untag(base)
            ihdr = read_image_header(base_chunk.data)
            descriptor = FrameDescriptor(width=ihdr.width, height=ihdr.height)
            frame_header = base_chunk

        image = decode_png(
            SIGNATURE
            + bytes(frame_header)
            + bytes(self.ancillary)
            + self.cfg.write_chunks(run)
            + bytes(self.cfg.mktag('IEND', b''))
        )
        self.cfg.logger.debug(
            f'decoded frame {descriptor.width}x{descriptor.height}'
            f' at {descriptor.x},{descriptor.y} from {len(run)} {tag} chunks'
        )
        return FrameRecord(descriptor, image)


def read_frames(stream: IO[bytes], cfg: Preset = png) -> Iterator[FrameRecord]:
    return iter(AnimationParser(stream, cfg))


def parse(stream: IO[bytes], cfg: Preset = png) -> AnimationStream:
    parser = AnimationParser(stream, cfg)
    frames = list(parser)
    return AnimationStream(frames, parser.control, parser.header or b'')


def from_bytes(data: bytes, cfg: Preset = png) -> AnimationStream:
    with io.BytesIO(data) as stream:
        return parse(stream, cfg)


def from_path(path: str | os.PathLike[str], cfg: Preset = png) -> AnimationStream:
    return from_bytes(read_file(path), cfg)
