# src/pc_app/modules/preview/service.py
from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from pc_app.core.errors import DecodeFailure, PreviewNotFound
from pc_app.core.imaging import ImageDecoder, PillowDecoder, PixelGrid
from pc_app.core.logging import get_logger
from pc_app.core.media_types import classify

from .scanner import MIN_PREVIEW_BYTES, ExtractedPreview, extract_preview
from .schemas import ExtractPreviewResponse

log = get_logger(__name__)

PLACEHOLDER_TOP = (0x6B, 0x72, 0x80)
PLACEHOLDER_BOTTOM = (0x4B, 0x55, 0x63)


class PreviewService:
    """Turns a RAW container into viewable pixels, or a labelled placeholder."""

    def __init__(
        self,
        decoder: ImageDecoder | None = None,
        min_size: int = MIN_PREVIEW_BYTES,
        placeholder_size: int = 300,
    ) -> None:
        self.decoder = decoder or PillowDecoder()
        self.min_size = min_size
        self.placeholder_size = placeholder_size

    # ---- extraction ------------------------------------------------------------
    def extract(self, path: Path, data: bytes | None = None) -> ExtractedPreview:
        if data is None:
            data = Path(path).read_bytes()
        return extract_preview(Path(path).name, data, self.min_size)

    def load(self, path: Path, data: bytes | None = None) -> PixelGrid:
        """
        Decoded pixels of the best embedded preview. A candidate that does not
        decode counts as no preview at all.
        """
        preview = self.extract(path, data)
        try:
            grid = self.decoder.decode(preview.data)
        except DecodeFailure as err:
            raise PreviewNotFound(
                f"{Path(path).name}: preview at {preview.start}..{preview.end} does not decode"
            ) from err
        log.debug(
            "Extracted %d byte preview from %s (%dx%d)",
            preview.length,
            Path(path).name,
            grid.width,
            grid.height,
        )
        return grid

    def load_or_placeholder(
        self, path: Path, data: bytes | None = None
    ) -> tuple[PixelGrid, bool]:
        """(pixels, is_real_preview). Never raises PreviewNotFound."""
        try:
            return self.load(path, data), True
        except PreviewNotFound as err:
            log.warning("No usable preview in %s (%s); using placeholder", path, err)
            return self.placeholder(path), False

    # ---- placeholder -----------------------------------------------------------
    def placeholder(self, path: Path, size: int | None = None) -> PixelGrid:
        """Grey gradient tile labelled with the RAW format and camera maker."""
        size = size or self.placeholder_size
        kind = classify(path)

        ramp = np.linspace(0.0, 1.0, size)[:, None]
        top = np.array(PLACEHOLDER_TOP, dtype=np.float64)
        bottom = np.array(PLACEHOLDER_BOTTOM, dtype=np.float64)
        rows = (top + (bottom - top) * ramp).astype(np.uint8)
        im = Image.fromarray(np.ascontiguousarray(np.repeat(rows[:, None, :], size, axis=1)))

        draw = ImageDraw.Draw(im)
        centre = size / 2
        draw.text(
            (centre, centre),
            kind.format,
            fill=(255, 255, 255),
            font=ImageFont.load_default(size=max(8, int(size * 0.12))),
            anchor="mm",
        )
        if kind.manufacturer:
            draw.text(
                (centre, centre + size * 0.15),
                kind.manufacturer,
                fill=(229, 231, 235),
                font=ImageFont.load_default(size=max(8, int(size * 0.07))),
                anchor="mm",
            )
        return PixelGrid.from_image(im)

    # ---- inspection (API/CLI) ----------------------------------------------------
    def inspect(self, path: Path, save_to: Path | None = None) -> ExtractPreviewResponse:
        path = Path(path)
        kind = classify(path)
        resp = ExtractPreviewResponse(
            path=str(path),
            format=kind.format,
            manufacturer=kind.manufacturer,
            found=False,
        )
        data = path.read_bytes()
        try:
            preview = self.extract(path, data)
        except PreviewNotFound:
            return resp

        resp.found = True
        resp.start, resp.end, resp.length = preview.start, preview.end, preview.length
        try:
            grid = self.decoder.decode(preview.data)
        except DecodeFailure:
            log.warning("Preview candidate in %s does not decode", path)
            return resp

        resp.decodable = True
        resp.width, resp.height = grid.width, grid.height
        if save_to is not None:
            save_to = Path(save_to)
            save_to.parent.mkdir(parents=True, exist_ok=True)
            save_to.write_bytes(preview.data)
            resp.saved_to = str(save_to)
        return resp
