import logging
from dataclasses import dataclass, field, replace
from typing import Any, Self

from apngkit.kernel import tree
from apngkit.kernel.chunk import (
    ChunkSettings,
    PNGChunkHeader,
    mktag,
    read_chunks,
    untag,
    write_chunks,
)


@dataclass(frozen=True)
class _DefaultOverride:
    def __call__(self, **kwargs: Any) -> Self:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class Preset(ChunkSettings, _DefaultOverride):
    passthrough: frozenset[str] = frozenset()
    errors: str = 'strict'
    logger: logging.Logger = field(default=logging.getLogger('apngkit'))

    read_chunks = read_chunks
    write_chunks = write_chunks
    mktag = mktag
    untag = untag

    # static pass through
    find = staticmethod(tree.find)
    findall = staticmethod(tree.findall)
    render = staticmethod(tree.render)
    renders = staticmethod(tree.renders)


shell = Preset(
    header_dtype=PNGChunkHeader,
    alignment=1,
    checksum=True,
)
