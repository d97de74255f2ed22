import pathlib
from enum import Enum

import typer
from PIL import Image

from apngkit.kernel.fileio import read_file, write_file

from . import anim
from .build import build_animation
from .compose import compose_frames
from .frame import BlendOp, DisposeOp
from .preset import png
from .schema import SIGNATURE

app = typer.Typer()


class Dispose(str, Enum):
    NONE = 'none'
    BACKGROUND = 'background'
    PREVIOUS = 'previous'


class Blend(str, Enum):
    SOURCE = 'source'
    OVER = 'over'


def parse_delay(delay: str) -> tuple[int, int]:
    num, _, den = delay.partition('/')
    try:
        return int(num), int(den or 1)
    except ValueError:
        raise typer.BadParameter(f'expected NUM/DEN but got {delay!r}') from None


@app.command()
def build(
    output: str = typer.Argument(..., help='APNG file to write'),
    static: str = typer.Argument(..., help='image shown by decoders without APNG support'),
    frames: list[str] = typer.Argument(..., help='animation frames, in order'),
    plays: int = typer.Option(0, help='number of loops, 0 plays forever'),
    delay: str = typer.Option('1/10', help='frame delay in seconds as NUM/DEN'),
    dispose: Dispose = typer.Option(Dispose.NONE),
    blend: Blend = typer.Option(Blend.SOURCE),
    animated: bool = typer.Option(False, help='show the static image as frame 0'),
) -> None:
    delay_num, delay_den = parse_delay(delay)
    with Image.open(static) as im:
        static_image = im.convert('RGBA')
    images = []
    for filename in frames:
        with Image.open(filename) as im:
            images.append(im.convert('RGBA'))

    data = build_animation(
        static_image,
        images,
        plays,
        delay_num=delay_num,
        delay_den=delay_den,
        dispose=DisposeOp[dispose.name],
        blend=BlendOp[blend.name],
        animated=animated,
    )
    write_file(output, data)
    typer.echo(f'{output}: {len(images) + animated} frames, {len(data)} bytes')


@app.command()
def split(
    filename: str = typer.Argument(..., help='APNG file to read from'),
    outdir: str = typer.Option('.', help='directory for extracted frames'),
    raw: bool = typer.Option(False, help='write frames as stored, without compositing'),
    include_first: bool = typer.Option(
        True,
        '--include-first/--exclude-first',
        help='composite the first image as part of the animation',
    ),
) -> None:
    stream = anim.from_path(filename)
    images = (
        [record.image for record in stream.frames]
        if raw
        else compose_frames(stream.frames, include_first=include_first)
    )
    basedir = pathlib.Path(outdir)
    basedir.mkdir(parents=True, exist_ok=True)
    stem = pathlib.Path(filename).stem
    for idx, image in enumerate(images):
        Image.fromarray(image).save(basedir / f'{stem}_{idx:04d}.png')
    typer.echo(f'{filename}: wrote {len(images)} frames to {basedir}')


@app.command()
def info(
    filename: str = typer.Argument(..., help='APNG file to read from'),
) -> None:
    data = read_file(filename)
    if data[: len(SIGNATURE)] != SIGNATURE:
        raise typer.BadParameter(f'{filename} is not a PNG file')
    typer.echo(png.renders(png.read_chunks(data, offset=len(SIGNATURE))), nl=False)


def main() -> None:
    app()


if __name__ == '__main__':
    main()
