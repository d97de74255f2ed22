import io

import numpy as np
from numpy.typing import NDArray
from PIL import Image

TImage = Image.Image
Raster = NDArray[np.uint8]


def convert_to_pil_image(image: TImage | Raster) -> TImage:
    if isinstance(image, Image.Image):
        return image.convert('RGBA')
    npp = np.asarray(image, dtype=np.uint8)
    if npp.ndim != 3 or npp.shape[2] != 4:
        raise ValueError(f'expected RGBA raster of shape (h, w, 4) but got {npp.shape}')  # noqa: TRY003
    return Image.fromarray(npp)


def encode_png(image: TImage | Raster) -> bytes:
    """Encode an image as a baseline RGBA PNG."""
    with io.BytesIO() as stream:
        convert_to_pil_image(image).save(stream, format='PNG')
        return stream.getvalue()


def decode_png(data: bytes) -> Raster:
    """Decode a baseline PNG into an RGBA raster."""
    with io.BytesIO(data) as stream, Image.open(stream) as im:
        return np.array(im.convert('RGBA'), dtype=np.uint8)
