import io

import numpy as np
import pytest
from helpers import list_chunks, make_image

from apngkit.apng import anim
from apngkit.apng.build import AnimationBuilder
from apngkit.apng.chunks import (
    animation_control_chunk,
    frame_data_chunk,
    frame_header_chunk,
)
from apngkit.apng.frame import (
    NO_ANIMATION,
    AnimationControl,
    BlendOp,
    DisposeOp,
    FrameDescriptor,
    InvalidSignatureError,
    MissingImageHeaderError,
)
from apngkit.apng.preset import png
from apngkit.apng.schema import SIGNATURE
from apngkit.graphics.image import encode_png
from apngkit.kernel.fileio import TruncatedChunkError


def assemble(*chunks) -> bytes:
    return SIGNATURE + png.write_chunks(chunks)


def test_round_trip_descriptors_and_images():
    static = make_image(30, 20, seed=1)
    frames = [make_image(30, 20, seed=2), make_image(10, 8, seed=3), make_image(5, 5, seed=4)]
    builder = AnimationBuilder(static, 0)
    descriptors = [
        builder.add_frame(frames[0], 0, 0, 1, 10, DisposeOp.NONE, BlendOp.SOURCE),
        builder.add_frame(frames[1], 7, 3, 2, 10, DisposeOp.BACKGROUND, BlendOp.OVER),
        builder.add_frame(frames[2], 1, 9, 3, 10, DisposeOp.PREVIOUS, BlendOp.SOURCE),
    ]

    stream = anim.from_bytes(builder.finalize())

    assert len(stream) == 4
    assert stream.frames[0].descriptor == FrameDescriptor(width=30, height=20)
    assert np.array_equal(stream.frames[0].image, static)
    for record, descriptor, frame in zip(stream.frames[1:], descriptors, frames, strict=True):
        assert record.descriptor == descriptor
        assert np.array_equal(record.image, frame)


def test_round_trip_with_animated_static_image():
    builder = AnimationBuilder.animated(make_image(16, 16), 4, 3, 100, DisposeOp.BACKGROUND, BlendOp.OVER)
    builder.add_frame(make_image(16, 16, seed=5), 2, 2, 1, 100)
    stream = anim.from_bytes(builder.finalize())

    assert len(stream) == 2
    first = stream.frames[0].descriptor
    assert (first.delay_num, first.delay_den) == (3, 100)
    assert first.dispose is DisposeOp.BACKGROUND
    assert first.blend is BlendOp.OVER
    assert first.sequence_start == 0
    assert stream.frames[1].descriptor.sequence_start == 1
    assert stream.control == AnimationControl(num_frames=2, num_plays=4)
    assert stream.num_plays == 4


def test_plain_png_yields_single_implicit_frame():
    image = make_image(9, 7)
    stream = anim.from_bytes(encode_png(image))
    assert len(stream) == 1
    assert stream.control == NO_ANIMATION
    assert stream.frames[0].descriptor == FrameDescriptor(width=9, height=7)
    assert np.array_equal(stream.frames[0].image, image)
    assert stream.header[4:8] == b'IHDR'


def test_split_data_runs_are_joined():
    image = make_image(12, 12, seed=7)
    ihdr, idat = [c for c in list_chunks(encode_png(image)) if c.tag in {'IHDR', 'IDAT'}]
    payload = bytes(idat.data)
    half = len(payload) // 2
    descriptor = FrameDescriptor(width=12, height=12, x=1, y=2)

    data = assemble(
        ihdr,
        animation_control_chunk(1, 0),
        png.mktag('IDAT', payload[:half]),
        png.mktag('IDAT', payload[half:]),
        frame_header_chunk(descriptor, 0),
        frame_data_chunk(1, payload[:half]),
        frame_data_chunk(2, payload[half:]),
        png.mktag('IEND', b''),
    )
    static, frame = anim.from_bytes(data).frames

    assert np.array_equal(static.image, image)
    assert np.array_equal(frame.image, image)
    assert (frame.descriptor.x, frame.descriptor.y) == (1, 2)


def test_ancillary_chunks_pass_through_and_unknown_are_skipped():
    image = make_image(6, 6, seed=3)
    ihdr, idat = [c for c in list_chunks(encode_png(image)) if c.tag in {'IHDR', 'IDAT'}]
    data = assemble(
        ihdr,
        png.mktag('pHYs', b'\x00\x00\x0b\x13\x00\x00\x0b\x13\x01'),
        png.mktag('tEXt', b'Comment\x00skipped'),
        idat,
        png.mktag('zzZz', b'private'),
        png.mktag('IEND', b''),
    )
    parser = anim.AnimationParser(io.BytesIO(data))
    (record,) = list(parser)
    assert np.array_equal(record.image, image)
    assert bytes(parser.ancillary)[4:8] == b'pHYs'
    assert b'tEXt' not in parser.ancillary


def test_read_frames_is_lazy():
    builder = AnimationBuilder(make_image(4, 4), 0)
    builder.add_frame(make_image(4, 4, seed=2))
    frames = anim.read_frames(io.BytesIO(builder.finalize()))
    first = next(frames)
    assert first.descriptor.sequence_start == 0
    assert next(frames).descriptor.width == 4
    assert next(frames, None) is None


def test_truncated_stream_raises_io_error():
    builder = AnimationBuilder(make_image(10, 10), 0)
    builder.add_frame(make_image(10, 10, seed=2))
    data = builder.finalize()
    with pytest.raises(TruncatedChunkError):
        anim.from_bytes(data[:-6])
    with pytest.raises(OSError):
        anim.from_bytes(data[:40])


def test_invalid_signature():
    data = b'GIF89a\x00\x00' + bytes(png.mktag('IEND', b''))
    with pytest.raises(InvalidSignatureError):
        anim.from_bytes(data)
    assert len(anim.from_bytes(data, png(errors='ignore'))) == 0


def test_frame_header_before_image_header():
    descriptor = FrameDescriptor(width=1, height=1)
    data = assemble(frame_header_chunk(descriptor, 0), png.mktag('IEND', b''))
    with pytest.raises(MissingImageHeaderError):
        anim.from_bytes(data)


def test_from_path(tmp_path):
    builder = AnimationBuilder(make_image(5, 5), 0)
    builder.add_frame(make_image(3, 3, seed=4), 1, 1)
    path = tmp_path / 'anim.png'
    builder.save(path)
    stream = anim.from_path(path)
    assert [record.descriptor.width for record in stream.frames] == [5, 3]


def test_empty_file_raises_io_error(tmp_path):
    path = tmp_path / 'empty.png'
    path.write_bytes(b'')
    with pytest.raises(TruncatedChunkError) as excinfo:
        anim.from_path(path)
    assert isinstance(excinfo.value, OSError)
    assert excinfo.value.got == 0
