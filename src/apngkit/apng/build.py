import itertools
import os
from collections.abc import Iterable
from typing import Self

from apngkit.graphics.image import Raster, TImage, encode_png
from apngkit.kernel.chunk import Chunk
from apngkit.kernel.fileio import write_file
from apngkit.kernel.preset import Preset

from .chunks import (
    animation_control_chunk,
    frame_data_chunk,
    frame_header_chunk,
    read_image_header,
)
from .frame import BlendOp, DisposeOp, FrameDescriptor
from .preset import png
from .schema import SIGNATURE


def split_png(data: bytes, cfg: Preset = png) -> tuple[Chunk, list[Chunk]]:
    """Split an encoded PNG into its `IHDR` and the chunks up to `IEND`."""
    if data[: len(SIGNATURE)] != SIGNATURE:
        raise ValueError('encoder did not produce a PNG stream')  # noqa: TRY003
    header, *chunks = (
        chunk for _, chunk in cfg.read_chunks(data, offset=len(SIGNATURE))
    )
    if header.tag != 'IHDR':
        raise ValueError(f'expected IHDR as first chunk but got {header.tag}')  # noqa: TRY003
    return header, [chunk for chunk in chunks if chunk.tag != 'IEND']


class AnimationBuilder:
    """Accumulates frames into an APNG stream.

    The static image is what decoders unaware of APNG display. Unless the
    builder is created with `animated`, it is not part of the animation.
    """

    def __init__(
        self,
        static_image: TImage | Raster,
        play_count: int = 0,
        cfg: Preset = png,
    ) -> None:
        self.cfg = cfg
        header, chunks = split_png(encode_png(static_image), cfg)
        self.header = header
        self.play_count = play_count
        self.frame_count = 0
        self._prefix = SIGNATURE + bytes(header)
        self._chunks: list[Chunk] = chunks
        self._sequence = itertools.count()

    @classmethod
    def animated(
        cls,
        static_image: TImage | Raster,
        play_count: int = 0,
        delay_num: int = 0,
        delay_den: int = 0,
        dispose: DisposeOp = DisposeOp.NONE,
        blend: BlendOp = BlendOp.SOURCE,
        cfg: Preset = png,
    ) -> Self:
        builder = cls(static_image, play_count, cfg)
        ihdr = read_image_header(builder.header.data)
        descriptor = FrameDescriptor(
            width=ihdr.width,
            height=ihdr.height,
            delay_num=delay_num,
            delay_den=delay_den,
            dispose=dispose,
            blend=blend,
        )
        builder._chunks.insert(0, frame_header_chunk(descriptor, next(builder._sequence)))
        builder.frame_count += 1
        return builder

    def add_frame(
        self,
        raster: TImage | Raster,
        x: int = 0,
        y: int = 0,
        delay_num: int = 0,
        delay_den: int = 0,
        dispose: DisposeOp = DisposeOp.NONE,
        blend: BlendOp = BlendOp.SOURCE,
    ) -> FrameDescriptor:
        header, chunks = split_png(encode_png(raster), self.cfg)
        ihdr = read_image_header(header.data)
        descriptor = FrameDescriptor(
            width=ihdr.width,
            height=ihdr.height,
            x=x,
            y=y,
            delay_num=delay_num,
            delay_den=delay_den,
            dispose=DisposeOp(dispose),
            blend=BlendOp(blend),
            sequence_start=next(self._sequence),
        )
        self._chunks.append(frame_header_chunk(descriptor, descriptor.sequence_start))
        self._chunks.extend(
            frame_data_chunk(next(self._sequence), chunk.data)
            for chunk in chunks
            if chunk.tag == 'IDAT'
        )
        self.frame_count += 1
        self.cfg.logger.debug(
            f'added frame {self.frame_count} ({ihdr.width}x{ihdr.height} at {x},{y})'
        )
        return descriptor

    def finalize(self) -> bytes:
        actl = animation_control_chunk(self.frame_count, self.play_count)
        iend = self.cfg.mktag('IEND', b'')
        return self._prefix + self.cfg.write_chunks(
            itertools.chain([actl], self._chunks, [iend])
        )

    def save(self, path: str | os.PathLike[str]) -> int:
        return write_file(path, self.finalize())


def build_animation(
    static_image: TImage | Raster,
    frames: Iterable[TImage | Raster],
    play_count: int = 0,
    *,
    delay_num: int = 0,
    delay_den: int = 0,
    dispose: DisposeOp = DisposeOp.NONE,
    blend: BlendOp = BlendOp.SOURCE,
    animated: bool = False,
    cfg: Preset = png,
) -> bytes:
    """Build an APNG where every frame shares the same timing and operations."""
    builder = (
        AnimationBuilder.animated(
            static_image, play_count, delay_num, delay_den, dispose, blend, cfg
        )
        if animated
        else AnimationBuilder(static_image, play_count, cfg)
    )
    for frame in frames:
        builder.add_frame(frame, 0, 0, delay_num, delay_den, dispose, blend)
    return builder.finalize()
