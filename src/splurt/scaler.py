import logging
from collections.abc import Callable, Iterator

import numpy as np

from splurt.model import EMPTY_PLAN, Bitmap, RenderPlan, Viewport
from splurt.quantize import DEFAULT_QUANTIZER, Quantizer

logger = logging.getLogger(__name__)


def plan(bitmap: Bitmap, viewport: Viewport) -> RenderPlan:
    """Fit the bitmap into the viewport, preserving aspect ratio, and centre it.

    Terminal cells are roughly twice as tall as they are wide, so the
    viewport's aspect ratio is halved before comparing it with the image's.
    Returns an empty plan if either side has a zero dimension.
    """
    if bitmap.width <= 0 or bitmap.height <= 0 or viewport.columns <= 0 or viewport.rows <= 0:
        return EMPTY_PLAN

    image_aspect = bitmap.width / bitmap.height
    term_aspect = (viewport.columns / viewport.rows) / 2.0

    if term_aspect > image_aspect:
        # Viewport is wider than the image: fit to height
        scale = viewport.rows / bitmap.height
        fit_width = int(bitmap.width * scale) * 2
        fit_height = viewport.rows
    else:
        scale = viewport.columns / bitmap.width
        fit_height = int(bitmap.height * scale) // 2
        fit_width = viewport.columns

    if fit_width <= 0 or fit_height <= 0:
        return EMPTY_PLAN

    x_margin = (viewport.columns - fit_width - 1) // 2 if fit_width < viewport.columns else 0
    y_margin = (viewport.rows - fit_height - 1) // 2 if fit_height < viewport.rows else 0
    return RenderPlan(fit_width=fit_width, fit_height=fit_height, x_margin=x_margin, y_margin=y_margin)


def source_indices(fit: int, size: int) -> np.ndarray:
    """Nearest-neighbour source coordinate for each of ``fit`` target cells."""
    if fit <= 0 or size <= 0:
        return np.zeros(0, dtype=np.intp)
    idx = np.floor(np.arange(fit) / fit * size).astype(np.intp)
    # Rounding can land exactly on ``size`` for the last cell
    return np.minimum(idx, size - 1)


def _sample_rows(bitmap: Bitmap, render_plan: RenderPlan):
    """Yield (y, rgb_row) for each target row, rgb_row shaped (fit_width, 3)."""
    pixels = bitmap.array()
    ys = source_indices(render_plan.fit_height, bitmap.height)
    xs = source_indices(render_plan.fit_width, bitmap.width)
    for y, img_y in enumerate(ys):
        row = pixels[img_y, xs]
        if bitmap.channels == 1:
            row = np.repeat(row, 3, axis=1)
        yield y, row


def iter_cells(
    bitmap: Bitmap,
    viewport: Viewport,
    quantizer: Quantizer = DEFAULT_QUANTIZER,
) -> Iterator[tuple[int, int, int]]:
    """Lazily yield (row, col, palette_index) for every cell to draw, row-major."""
    return _cells(bitmap, plan(bitmap, viewport), quantizer)


def _cells(bitmap: Bitmap, render_plan: RenderPlan, quantizer: Quantizer) -> Iterator[tuple[int, int, int]]:
    if render_plan.empty:
        return
    for y, row in _sample_rows(bitmap, render_plan):
        indices = quantizer.quantize_array(row)
        screen_row = y + render_plan.y_margin
        for x, index in enumerate(indices.tolist()):
            yield screen_row, x + render_plan.x_margin, index


def index_grid(bitmap: Bitmap, viewport: Viewport, quantizer: Quantizer = DEFAULT_QUANTIZER) -> np.ndarray:
    """Palette indices for the whole fitted image, shape (fit_height, fit_width)."""
    return _grid(bitmap, plan(bitmap, viewport), quantizer)


def _grid(bitmap: Bitmap, render_plan: RenderPlan, quantizer: Quantizer) -> np.ndarray:
    if render_plan.empty:
        return np.zeros((0, 0), dtype=np.uint8)
    pixels = bitmap.array()
    ys = source_indices(render_plan.fit_height, bitmap.height)
    xs = source_indices(render_plan.fit_width, bitmap.width)
    sampled = pixels[np.ix_(ys, xs)]
    if bitmap.channels == 1:
        sampled = np.repeat(sampled, 3, axis=2)
    return quantizer.quantize_array(sampled)


def render(
    bitmap: Bitmap,
    viewport: Viewport,
    emit: Callable[[int, int, int], None],
    quantizer: Quantizer = DEFAULT_QUANTIZER,
) -> RenderPlan:
    """Quantize and emit every cell of the fitted bitmap. Returns the plan used."""
    render_plan = plan(bitmap, viewport)
    logger.debug(
        "Rendering %dx%d image into %dx%d viewport: %s",
        bitmap.width,
        bitmap.height,
        viewport.columns,
        viewport.rows,
        render_plan,
    )
    for row, col, index in _cells(bitmap, render_plan, quantizer):
        emit(row, col, index)
    return render_plan
