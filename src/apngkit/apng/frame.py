from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np
from numpy.typing import NDArray

Raster = NDArray[np.uint8]


class DisposeOp(IntEnum):
    """Treatment of the frame region once the frame has been shown."""

    NONE = 0
    BACKGROUND = 1
    PREVIOUS = 2


class BlendOp(IntEnum):
    """Whether the frame replaces or is drawn over its region."""

    SOURCE = 0
    OVER = 1


@dataclass(frozen=True)
class FrameDescriptor:
    width: int
    height: int
    x: int = 0
    y: int = 0
    delay_num: int = 0
    delay_den: int = 0
    dispose: DisposeOp = DisposeOp.NONE
    blend: BlendOp = BlendOp.SOURCE
    sequence_start: int = 0


@dataclass(frozen=True)
class ImageHeader:
    width: int
    height: int
    bit_depth: int
    color_type: int
    compression: int
    filter_method: int
    interlace: int


@dataclass(frozen=True)
class AnimationControl:
    num_frames: int
    num_plays: int


NO_ANIMATION = AnimationControl(num_frames=0, num_plays=0)


@dataclass
class FrameRecord:
    descriptor: FrameDescriptor
    image: Raster

    @property
    def width(self) -> int:
        return self.image.shape[1]

    @property
    def height(self) -> int:
        return self.image.shape[0]


@dataclass
class AnimationStream:
    frames: Sequence[FrameRecord] = field(default_factory=list)
    control: AnimationControl = NO_ANIMATION
    header: bytes = b''

    @property
    def num_plays(self) -> int:
        return self.control.num_plays

    def __len__(self) -> int:
        return len(self.frames)


class EmptyAnimationError(ValueError):
    def __init__(self) -> None:
        super().__init__('animation has no frames to seed the canvas')


class InvalidSignatureError(ValueError):
    def __init__(self, signature: bytes) -> None:
        super().__init__(f'not a PNG stream: unexpected signature {signature!r}')
        self.signature = signature


class MissingImageHeaderError(ValueError):
    def __init__(self, tag: str) -> None:
        super().__init__(f'found {tag} before IHDR')
        self.tag = tag
