# theme_map/image_io.py
from __future__ import annotations

import io
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import ImageDecodeError

"""
Image decode/encode helpers (file path or byte stream), sRGB normalisation.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except ImportError:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]

ImageSource = Union[str, Path, BinaryIO]

DEFAULT_FORMAT = "JPEG"
_ALPHA_FORMATS = {"PNG", "WEBP", "TIFF", "GIF"}


def _convert_to_srgb(im: Image.Image, mode: str) -> Image.Image:
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode=mode,
            )
            if im2 is not None:
                return im2
        except (ImageCms.PyCMSError, OSError, ValueError):
            pass

    return im if im.mode == mode else im.convert(mode)


def normalise_mode(im: Image.Image) -> Image.Image:
    """
    RGB/RGBA stay as they are; 16-bit (and 32-bit integer) greyscale becomes
    I;16; anything with
    transparency becomes RGBA; everything else becomes RGB.
    """
    if im.mode.startswith("I;16"):
        return im
    if im.mode == "I":
        # 16-bit greyscale PNGs open as 32-bit "I" on some Pillow releases
        return im.convert("I;16")
    if im.mode == "RGBA" or "A" in im.getbands() or "transparency" in im.info:
        return _convert_to_srgb(im, "RGBA")
    return _convert_to_srgb(im, "RGB")


def load_image(source: ImageSource) -> Image.Image:
    """Decode an image from a path or binary stream, EXIF-rotated and in sRGB."""
    try:
        with Image.open(source) as im0:
            im = ImageOps.exif_transpose(im0)
            if im is im0:
                im = im0.copy()
    except UnidentifiedImageError as exc:
        raise ImageDecodeError(f"cannot decode image: {exc}") from exc
    return normalise_mode(im)


def output_format(path: Optional[Path], requested: Optional[str] = None) -> str:
    """Pillow format name from an explicit request, else the suffix, else JPEG."""
    if requested:
        return requested.upper()
    if path is not None:
        ext = path.suffix.lower()
        registered = Image.registered_extensions()
        if ext in registered:
            return registered[ext]
    return DEFAULT_FORMAT


def _prepare_for(image: Image.Image, fmt: str) -> Image.Image:
    if fmt not in _ALPHA_FORMATS and image.mode != "RGB":
        return image.convert("RGB")
    return image


def encode_image(image: Image.Image, fmt: str = DEFAULT_FORMAT) -> bytes:
    buffer = io.BytesIO()
    _prepare_for(image, fmt).save(buffer, fmt)
    return buffer.getvalue()


def save_image(
    image: Image.Image, dest: ImageSource, fmt: Optional[str] = None
) -> Optional[Path]:
    """
    Encode to a path or binary stream. File output is encoded in full first,
    then written to a temp file beside the target and renamed over it, so a
    failure never leaves a half-written image at `dest`.

    Returns the written path for path destinations, else None.
    """
    if not isinstance(dest, (str, Path)):
        dest.write(encode_image(image, output_format(None, fmt)))
        dest.flush()
        return None

    path = Path(dest)
    data = encode_image(image, output_format(path, fmt))
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent or ".")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
    return path


__all__ = [
    "ImageSource",
    "DEFAULT_FORMAT",
    "normalise_mode",
    "load_image",
    "output_format",
    "encode_image",
    "save_image",
]
