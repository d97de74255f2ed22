import numpy as np

from apngkit.apng.build import AnimationBuilder
from apngkit.apng.frame import BlendOp, DisposeOp
from apngkit.apng.preset import png
from apngkit.apng.schema import SIGNATURE
from apngkit.kernel.chunk import Chunk


def make_image(width: int, height: int, seed: int = 1) -> np.ndarray:
    yy, xx = np.mgrid[0:height, 0:width]
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[..., 0] = (xx * seed) % 256
    image[..., 1] = (yy * 3 + seed) % 256
    image[..., 2] = (seed * 40) % 256
    image[..., 3] = 255
    return image


def list_chunks(data: bytes) -> list[Chunk]:
    assert data[: len(SIGNATURE)] == SIGNATURE
    return [chunk for _, chunk in png.read_chunks(data, offset=len(SIGNATURE))]


SCENARIO_FRAMES = [
    ((40, 20), DisposeOp.BACKGROUND, BlendOp.OVER),
    ((20, 50), DisposeOp.PREVIOUS, BlendOp.SOURCE),
    ((50, 40), DisposeOp.NONE, BlendOp.SOURCE),
]


def build_scenario() -> bytes:
    """Static 100x100 image outside the animation followed by three frames."""
    builder = AnimationBuilder(make_image(100, 100, seed=1), 0)
    for idx, ((x, y), dispose, blend) in enumerate(SCENARIO_FRAMES):
        builder.add_frame(make_image(100, 100, seed=idx + 2), x, y, 100, 100, dispose, blend)
    return builder.finalize()
