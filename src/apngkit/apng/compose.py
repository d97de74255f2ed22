from collections.abc import Sequence

from apngkit.graphics.frame import blank_canvas, clear_region, paste_region
from apngkit.graphics.image import Raster

from .frame import BlendOp, DisposeOp, EmptyAnimationError, FrameRecord


def compose_frames(
    records: Sequence[FrameRecord],
    include_first: bool = True,
) -> list[Raster]:
    """Replay dispose and blend operations the way a viewer renders them.

    The first element is always the raw first record. With `include_first`
    the first record also seeds the background the following frames are
    drawn against, otherwise they start from a transparent canvas.

    Frames are drawn opaquely. `BlendOp.OVER` does not alpha composite,
    `BlendOp.SOURCE` only clears the frame region before drawing.
    """
    if not records:
        raise EmptyAnimationError

    first, *rest = records
    height, width = first.image.shape[:2]
    background = blank_canvas(width, height)

    output = [first.image.copy()]
    frames = records if include_first else rest
    for idx, record in enumerate(frames):
        frame = record.descriptor
        result = background.copy()
        if frame.blend == BlendOp.SOURCE:
            clear_region(result, frame.x, frame.y, record.width, record.height)
        paste_region(result, record.image, frame.x, frame.y)

        if not (include_first and idx == 0):
            output.append(result)

        if frame.dispose == DisposeOp.PREVIOUS:
            continue
        background = result.copy()
        if frame.dispose == DisposeOp.BACKGROUND:
            clear_region(background, frame.x, frame.y, record.width, record.height)

    return output
