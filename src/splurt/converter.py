from pathlib import Path

import numpy as np
from PIL import Image

from splurt.decoder import decode, from_pil, load
from splurt.model import Bitmap, Viewport
from splurt.quantize import DEFAULT_QUANTIZER, Quantizer
from splurt.scaler import index_grid, plan
from splurt.terminal import RESET, background, get_terminal_size


def _format_rows(grid: np.ndarray, x_margin: int) -> list[str]:
    """One line per grid row: margin, then a coloured space per cell."""
    out = []
    indent = " " * x_margin
    for row in grid.tolist():
        parts = [indent]
        previous = None
        for index in row:
            if index != previous:
                parts.append(background(index))
                previous = index
            parts.append(" ")
        parts.append(RESET)
        out.append("".join(parts))
    return out


def to_bitmap(image: Bitmap | Image.Image | bytes | str | Path) -> Bitmap:
    if isinstance(image, Bitmap):
        return image
    if isinstance(image, Image.Image):
        return from_pil(image)
    if isinstance(image, bytes):
        return decode(image)
    return load(image)


def image_to_ansi(
    image: Bitmap | Image.Image | bytes | str | Path,
    viewport: Viewport | None = None,
    quantizer: Quantizer = DEFAULT_QUANTIZER,
) -> str:
    """Render an image as 256-colour ANSI text sized to the viewport."""
    bitmap = to_bitmap(image)
    if viewport is None:
        columns, rows = get_terminal_size()
        viewport = Viewport(columns=columns, rows=rows)

    render_plan = plan(bitmap, viewport)
    if render_plan.empty:
        return ""

    grid = index_grid(bitmap, viewport, quantizer)
    lines = [""] * render_plan.y_margin + _format_rows(grid, render_plan.x_margin)
    return "\n".join(lines)
