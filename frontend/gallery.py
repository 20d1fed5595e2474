"""
frontend/gallery.py
═══════════════════
Rendering sinks for match results.

  console  — prints the matched names on one line
  json     — prints a MatchResponse document
  gallery  — target image followed by its matches as a labelled thumbnail
             grid (Pillow); saved to a file or opened in the default viewer

The target image must be readable whatever the display; the CLI checks it
with GalleryRenderer.check_target before rendering.

Every renderer takes the query name and the best-first list of names; the
JSON renderer also uses the scores when a MatchResult is passed.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image, ImageDraw, ImageOps, UnidentifiedImageError

from cli.schemas import MatchResponse
from config.settings import Settings, get_settings
from models.matchmaker import MatchResult
from utils.errors import ConfigurationError, RenderError
from utils.logger import logger

_LABEL_HEIGHT = 18
_PADDING = 6
_BACKGROUND = (24, 26, 33)
_TARGET_BORDER = (233, 196, 106)
_LABEL_COLOUR = (220, 224, 232)
_MISSING_TILE = (60, 63, 74)


class ConsoleRenderer:
    def render(self, query: str, names: Sequence[str], result: Optional[MatchResult] = None) -> None:
        print("Output filenames: " + " ".join(names))


class JsonRenderer:
    def render(self, query: str, names: Sequence[str], result: Optional[MatchResult] = None) -> None:
        if result is not None:
            response = MatchResponse.from_result(result)
        else:
            response = MatchResponse.from_names(query, names)
        print(response.model_dump_json(indent=2))


class GalleryRenderer:
    """
    Parameters
    ----------
    image_dir   : directory the record names are resolved against
                  (None → names are used as paths)
    thumb_size  : longest thumbnail edge in pixels
    columns     : tiles per row
    output_path : write the gallery here; None → open with Image.show()
    """

    def __init__(
        self,
        image_dir: Optional[Path] = None,
        thumb_size: int = 160,
        columns: int = 5,
        output_path: Optional[Path] = None,
    ) -> None:
        self.image_dir = Path(image_dir) if image_dir is not None else None
        self.thumb_size = thumb_size
        self.columns = columns
        self.output_path = Path(output_path) if output_path is not None else None

    def resolve(self, name: str) -> Path:
        path = Path(name)
        if self.image_dir is not None and not path.is_absolute():
            return self.image_dir / path
        return path

    def check_target(self, query: str) -> Path:
        """Decode the target image once; RenderError if it is missing, empty or corrupt."""
        path = self.resolve(query)
        try:
            with Image.open(path) as img:
                img.load()
        except (OSError, UnidentifiedImageError) as exc:
            raise RenderError(f"Target image empty or unreadable: {path}") from exc
        return path

    def _open(self, name: str) -> Image.Image:
        with Image.open(self.resolve(name)) as img:
            img = ImageOps.exif_transpose(img).convert("RGB")
            img.thumbnail((self.thumb_size, self.thumb_size))
            return img

    def build(self, query: str, names: Sequence[str]) -> Image.Image:
        """Compose the gallery image. Raises RenderError if the target cannot be read."""
        try:
            target = self._open(query)
        except (OSError, UnidentifiedImageError) as exc:
            raise RenderError(f"Target image empty or unreadable: {self.resolve(query)}") from exc

        tiles: list[tuple[str, Optional[Image.Image]]] = [(query, target)]
        for name in names:
            try:
                tiles.append((name, self._open(name)))
            except (OSError, UnidentifiedImageError) as exc:
                logger.warning(f"Cannot read match image {self.resolve(name)}: {exc}")
                tiles.append((name, None))

        cols = min(self.columns, len(tiles))
        rows = math.ceil(len(tiles) / cols)
        cell_w = self.thumb_size + 2 * _PADDING
        cell_h = self.thumb_size + _LABEL_HEIGHT + 2 * _PADDING
        canvas = Image.new("RGB", (cols * cell_w, rows * cell_h), _BACKGROUND)
        draw = ImageDraw.Draw(canvas)

        for pos, (name, img) in enumerate(tiles):
            x0 = (pos % cols) * cell_w + _PADDING
            y0 = (pos // cols) * cell_h + _PADDING
            if img is None:
                draw.rectangle(
                    [x0, y0, x0 + self.thumb_size - 1, y0 + self.thumb_size - 1],
                    fill=_MISSING_TILE,
                )
            else:
                ox = x0 + (self.thumb_size - img.width) // 2
                oy = y0 + (self.thumb_size - img.height) // 2
                canvas.paste(img, (ox, oy))
            if pos == 0:
                draw.rectangle(
                    [x0 - 2, y0 - 2, x0 + self.thumb_size + 1, y0 + self.thumb_size + 1],
                    outline=_TARGET_BORDER,
                    width=2,
                )
            label = Path(name).name if pos else f"target: {Path(name).name}"
            draw.text((x0, y0 + self.thumb_size + 3), label, fill=_LABEL_COLOUR)

        return canvas

    def render(self, query: str, names: Sequence[str], result: Optional[MatchResult] = None) -> None:
        gallery = self.build(query, names)
        if self.output_path is not None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            gallery.save(self.output_path)
            logger.info(f"Gallery written to {self.output_path}")
        else:
            gallery.show(title=f"Matches for {Path(query).name}")


RENDERERS = ("console", "gallery", "json")


def get_renderer(kind: str, settings: Optional[Settings] = None):
    settings = settings or get_settings()
    if kind == "console":
        return ConsoleRenderer()
    if kind == "json":
        return JsonRenderer()
    if kind == "gallery":
        return GalleryRenderer(
            image_dir=settings.image_dir,
            thumb_size=settings.gallery_thumb_size,
            columns=settings.gallery_columns,
            output_path=settings.gallery_output,
        )
    raise ConfigurationError(
        f"Unknown display '{kind}'. Must be one of: {', '.join(RENDERERS)}"
    )
