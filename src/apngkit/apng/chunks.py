import struct
from dataclasses import replace
from typing import Any

from apngkit.kernel.chunk import ArrayBuffer, Chunk
from apngkit.kernel.preset import Preset
from apngkit.kernel.structured import StructuredTuple

from .frame import (
    AnimationControl,
    BlendOp,
    DisposeOp,
    FrameDescriptor,
    ImageHeader,
)
from .preset import png

SEQUENCE = struct.Struct('>I')


def _frame_descriptor(**fields: Any) -> FrameDescriptor:
    return FrameDescriptor(
        **{
            **fields,
            'dispose': DisposeOp(fields['dispose']),
            'blend': BlendOp(fields['blend']),
        }
    )


FCTL = StructuredTuple(
    (
        'sequence_start',
        'width',
        'height',
        'x',
        'y',
        'delay_num',
        'delay_den',
        'dispose',
        'blend',
    ),
    struct.Struct('>5I2H2B'),
    _frame_descriptor,
)

ACTL = StructuredTuple(
    ('num_frames', 'num_plays'),
    struct.Struct('>2I'),
    AnimationControl,
)

IHDR = StructuredTuple(
    (
        'width',
        'height',
        'bit_depth',
        'color_type',
        'compression',
        'filter_method',
        'interlace',
    ),
    struct.Struct('>2I5B'),
    ImageHeader,
)


def frame_header_chunk(descriptor: FrameDescriptor, sequence_number: int) -> Chunk:
    data = FCTL.pack(replace(descriptor, sequence_start=sequence_number))
    return png.mktag('fcTL', data)


def animation_control_chunk(frame_count: int, play_count: int) -> Chunk:
    return png.mktag('acTL', ACTL.pack(AnimationControl(frame_count, play_count)))


def frame_data_chunk(sequence_number: int, payload: ArrayBuffer) -> Chunk:
    data = SEQUENCE.pack(sequence_number) + memoryview(payload).tobytes()
    return png.mktag('fdAT', data)


def strip_frame_data(payload: ArrayBuffer) -> Chunk:
    """Turn `fdAT` data back into an `IDAT` chunk by dropping its sequence number."""
    return png.mktag('IDAT', memoryview(payload)[SEQUENCE.size :].tobytes())


def read_frame_header(data: ArrayBuffer) -> FrameDescriptor:
    return FCTL.unpack_from(data)


def read_animation_control(data: ArrayBuffer) -> AnimationControl:
    return ACTL.unpack_from(data)


def read_image_header(data: ArrayBuffer) -> ImageHeader:
    return IHDR.unpack_from(data)


def read_sequence_number(data: ArrayBuffer) -> int:
    return SEQUENCE.unpack_from(data)[0]


def derive_frame_header(
    base: bytes,
    descriptor: FrameDescriptor,
    cfg: Preset = png,
) -> Chunk:
    """Build the `IHDR` of a standalone image holding a single frame.

    Bit depth, color type and interlace method are inherited from `base`,
    the framed `IHDR` record of the animation.
    """
    _, base_chunk = cfg.untag(base)
    header = replace(
        read_image_header(base_chunk.data),
        width=descriptor.width,
        height=descriptor.height,
        compression=0,
        filter_method=0,
    )
    return cfg.mktag('IHDR', IHDR.pack(header))
