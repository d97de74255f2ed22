from apngkit.kernel import preset
from apngkit.kernel.chunk import PNGChunkHeader

from .schema import ANCILLARY

png = preset.shell(
    alignment=1,
    header_dtype=PNGChunkHeader,
    checksum=True,
    passthrough=ANCILLARY,
    errors='strict',
)
