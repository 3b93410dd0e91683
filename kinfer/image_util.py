"""Image helpers for detection: letterbox resizing and box rescaling."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
from PIL import Image


@dataclass
class Rect:
    """An axis-aligned box given by its top-left corner and size."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0


@dataclass
class Detection:
    """One detected object."""

    box: Rect = field(default_factory=Rect)
    conf: float = 0.0
    class_id: int = -1


def _round_half_away(value: float) -> int:
    return int(math.floor(abs(value) + 0.5)) * (1 if value >= 0 else -1)


def letterbox_geometry(
    shape: tuple[int, int],
    new_shape: tuple[int, int] = (640, 640),
    stride: int = 32,
    fixed_shape: bool = False,
    scale_up: bool = False,
) -> tuple[float, tuple[int, int], tuple[int, int, int, int]]:
    """Work out a letterbox resize; sizes are (width, height).

    Returns the scale ratio, the resized (width, height) and the border
    widths (top, bottom, left, right).
    """
    width, height = shape
    new_w, new_h = new_shape
    ratio = min(new_h / height, new_w / width)
    if not scale_up:
        ratio = min(ratio, 1.0)

    unpad_w = _round_half_away(width * ratio)
    unpad_h = _round_half_away(height * ratio)

    dw = float(new_w - unpad_w)
    dh = float(new_h - unpad_h)
    if not fixed_shape:
        dw = math.fmod(int(dw), stride)
        dh = math.fmod(int(dh), stride)
    dw /= 2.0
    dh /= 2.0

    top = _round_half_away(dh - 0.1)
    bottom = _round_half_away(dh + 0.1)
    left = _round_half_away(dw - 0.1)
    right = _round_half_away(dw + 0.1)
    return ratio, (unpad_w, unpad_h), (top, bottom, left, right)


def letterbox(
    image: np.ndarray,
    new_shape: tuple[int, int] = (640, 640),
    stride: int = 32,
    color: Sequence[int] = (114, 114, 114),
    fixed_shape: bool = False,
    scale_up: bool = False,
) -> tuple[np.ndarray, float]:
    """Resize a uint8 image keeping its aspect ratio and pad it with ``color``.

    ``image`` is an (height, width) or (height, width, channels) array.
    Returns the padded image and the inverse of the scale ratio.
    """
    image = np.asarray(image)
    if image.ndim not in (2, 3) or image.size == 0:
        raise ValueError("image must be a non-empty 2-D or 3-D array")
    height, width = image.shape[:2]
    ratio, (unpad_w, unpad_h), (top, bottom, left, right) = letterbox_geometry(
        (width, height), new_shape, stride, fixed_shape, scale_up
    )

    if (unpad_w, unpad_h) != (width, height):
        resized = np.asarray(
            Image.fromarray(image).resize((unpad_w, unpad_h), Image.BILINEAR)
        )
    else:
        resized = image.copy()

    out_shape = (unpad_h + top + bottom, unpad_w + left + right) + resized.shape[2:]
    if resized.ndim == 3:
        fill = np.asarray(list(color)[: resized.shape[2]], dtype=resized.dtype)
    else:
        fill = np.asarray(color[0], dtype=resized.dtype)
    out = np.empty(out_shape, dtype=resized.dtype)
    out[...] = fill
    out[top:top + unpad_h, left:left + unpad_w] = resized
    return out, 1.0 / ratio


def _clip(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


def scale_coords(
    img_shape: tuple[int, int], coords: Rect, img_origin_shape: tuple[int, int]
) -> Rect:
    """Map a box on a letterboxed image back to the original image.

    Sizes are (width, height). Returns a new, clipped ``Rect``.
    """
    width, height = img_shape
    origin_w, origin_h = img_origin_shape
    gain = min(height / origin_h, width / origin_w)
    pad_x = int((width - origin_w * gain) / 2.0)
    pad_y = int((height - origin_h * gain) / 2.0)

    x = _round_half_away((coords.x - pad_x) / gain)
    y = _round_half_away((coords.y - pad_y) / gain)
    box_w = _round_half_away(coords.width / gain)
    box_h = _round_half_away(coords.height / gain)

    return Rect(
        x=_clip(x, 0, origin_w),
        y=_clip(y, 0, origin_h),
        width=_clip(box_w, 0, origin_w),
        height=_clip(box_h, 0, origin_h),
    )