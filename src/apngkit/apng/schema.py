from collections.abc import Container
from enum import Enum

SIGNATURE = b'\x89PNG\r\n\x1a\n'


class ChunkType(Enum):
    IHDR = 'IHDR'
    ACTL = 'acTL'
    FCTL = 'fcTL'
    IDAT = 'IDAT'
    FDAT = 'fdAT'
    IEND = 'IEND'
    ANCILLARY = '____'  # Copied verbatim into every synthesized frame image
    UNKNOWN = '????'

    @classmethod
    def classify(
        cls,
        tag: str,
        passthrough: Container[str] | None = None,
    ) -> 'ChunkType':
        if tag in (ANCILLARY if passthrough is None else passthrough):
            return cls.ANCILLARY
        try:
            ctype = cls(tag)
        except ValueError:
            return cls.UNKNOWN
        return cls.UNKNOWN if ctype is cls.ANCILLARY else ctype


# Chunks describing how to interpret pixel data, shared by all frames
ANCILLARY = frozenset(
    {
        'cHRM',
        'cICP',
        'gAMA',
        'iCCP',
        'mDCv',
        'cLLi',
        'sBIT',
        'sRGB',
        'bKGD',
        'hIST',
        'tRNS',
        'PLTE',
        'eXIf',
        'pHYs',
        'sPLT',
    }
)
