# theme_map/colour_convert.py
from __future__ import annotations

"""
Colour conversions and metrics (sRGB, D65).

Exports:
  rgb_to_linear(srgb)
  linear_to_rgb(linear)
  rgb_to_lab(rgb, depth)
  lab_to_rgb(lab)
  to_perceptual(native, depth)
  to_native(lab)
  lab_distance(lab1, lab2)
  lab_distances(target, candidates)

All maths is float64. The XYZ -> RGB matrix is the numerical inverse of the
RGB -> XYZ one, so an unblended round trip lands back on the same 8-bit value.
"""

import math
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .core_types import Lab, LabColour, RGBTuple, channel_max

_RGB_TO_XYZ = np.array(
    [
        [0.4124564, 0.3575761, 0.1804375],
        [0.2126729, 0.7151522, 0.0721750],
        [0.0193339, 0.1191920, 0.9503041],
    ],
    dtype=np.float64,
)
_XYZ_TO_RGB = np.linalg.inv(_RGB_TO_XYZ)

# Reference white (D65)
_WHITE = np.array([0.95047, 1.00000, 1.08883], dtype=np.float64)

_EPSILON = 216.0 / 24389.0
_KAPPA = 24389.0 / 27.0


# sRGB <-> linear


def rgb_to_linear(srgb: np.ndarray) -> NDArray[np.float64]:
    """
    Convert sRGB (non-linear 0..1) to linear RGB (0..1). Vectorised.
    """
    srgb_f = np.asarray(srgb, dtype=np.float64)
    return np.where(
        srgb_f <= 0.04045, srgb_f / 12.92, ((srgb_f + 0.055) / 1.055) ** 2.4
    )


def linear_to_rgb(linear: np.ndarray) -> NDArray[np.float64]:
    """
    Linear RGB to sRGB (0..1). Out-of-gamut values are clipped first.
    """
    lin = np.clip(np.asarray(linear, dtype=np.float64), 0.0, 1.0)
    return np.where(
        lin <= 0.0031308, lin * 12.92, 1.055 * np.power(lin, 1.0 / 2.4) - 0.055
    )


# sRGB <-> Lab


def rgb_to_lab(rgb: np.ndarray, depth: int = 8) -> Lab:
    """
    Device RGB at `depth` bits per channel to CIE Lab (D65).
    Accepts any shape (..., 3); extra channels (alpha) must be sliced off by
    the caller. Returns float64 with the same leading shape.
    """
    rgb_f = np.asarray(rgb, dtype=np.float64) / float(channel_max(depth))
    xyz = rgb_to_linear(rgb_f) @ _RGB_TO_XYZ.T
    t = xyz / _WHITE

    f = np.where(t > _EPSILON, np.cbrt(t), (_KAPPA * t + 16.0) / 116.0)
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]

    out = np.empty(f.shape, dtype=np.float64)
    out[..., 0] = 116.0 * fy - 16.0
    out[..., 1] = 500.0 * (fx - fy)
    out[..., 2] = 200.0 * (fy - fz)
    return out


def lab_to_rgb(lab: np.ndarray) -> NDArray[np.uint8]:
    """
    CIE Lab (D65) to 8-bit sRGB, shape (..., 3). Colours outside the sRGB
    gamut are clipped per channel.
    """
    lab_f = np.asarray(lab, dtype=np.float64)
    fy = (lab_f[..., 0] + 16.0) / 116.0
    fx = fy + lab_f[..., 1] / 500.0
    fz = fy - lab_f[..., 2] / 200.0
    f = np.stack([fx, fy, fz], axis=-1)

    f3 = f**3
    t = np.where(f3 > _EPSILON, f3, (116.0 * f - 16.0) / _KAPPA)
    # L* <= 8 sits on the linear segment for Y regardless of f(y)^3.
    t[..., 1] = np.where(
        lab_f[..., 0] > _KAPPA * _EPSILON, f3[..., 1], lab_f[..., 0] / _KAPPA
    )

    xyz = t * _WHITE
    srgb = linear_to_rgb(xyz @ _XYZ_TO_RGB.T)
    return np.clip(np.rint(srgb * 255.0), 0, 255).astype(np.uint8)


# Scalar adapters


def to_perceptual(native: Sequence[int], depth: int = 8) -> LabColour:
    """One native pixel (RGB or RGBA) to Lab. Alpha does not affect colour."""
    L, a, b = rgb_to_lab(np.asarray(native[:3]), depth).tolist()
    return LabColour(L, a, b)


def to_native(lab: Sequence[float]) -> RGBTuple:
    """One Lab colour back to an 8-bit RGB tuple."""
    r, g, b = lab_to_rgb(np.asarray(lab, dtype=np.float64)).tolist()
    return (r, g, b)


# Distance


def lab_distance(lab1: Sequence[float], lab2: Sequence[float]) -> float:
    """Euclidean distance in Lab (CIE76)."""
    return math.dist(lab1, lab2)


def lab_distances(target: Lab, candidates: Lab) -> NDArray[np.float64]:
    """
    Euclidean Lab distance from each target row to each candidate row.

    Args:
      target: Lab [3] or [N,3]
      candidates: Lab [P,3]
    Returns:
      float64 [P] for a single target, [N,P] otherwise
    """
    diff = np.asarray(candidates)[None, :, :] - np.atleast_2d(target)[:, None, :]
    dist = np.sqrt(np.sum(diff * diff, axis=-1))
    return dist[0] if np.ndim(target) == 1 else dist


__all__ = [
    "rgb_to_linear",
    "linear_to_rgb",
    "rgb_to_lab",
    "lab_to_rgb",
    "to_perceptual",
    "to_native",
    "lab_distance",
    "lab_distances",
]
