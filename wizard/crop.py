"""Profile picture crop pipeline.

A selected upload is checked, kept as raw bytes while the cropper is open,
and turned into a square JPEG data URI on save. The circular mask is only
applied to the on-screen preview; the stored picture stays square.
"""

from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
from dataclasses import dataclass
from io import BytesIO
from typing import Callable, Final

import requests
from PIL import Image, ImageDraw, ImageOps, UnidentifiedImageError

from core.errors import ImageTooLargeError, MediaError, NotAnImageError, UnsupportedImageFormatError
from wizard.state import CropArea, WizardState

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_SIZE: Final[int] = 400
DEFAULT_JPEG_QUALITY: Final[int] = 90
MIN_ZOOM: Final[float] = 1.0
MAX_ZOOM: Final[float] = 3.0

MAX_UPLOAD_BYTES: Final[int] = 15 * 1024 * 1024

OUTPUT_MIME: Final[str] = "image/jpeg"
EDIT_PREPARE_FAILED_MESSAGE: Final[str] = "Failed to prepare image for editing"

_HEIC_CONTENT_TYPES: Final[frozenset[str]] = frozenset(
    {"image/heic", "image/heif", "image/heic-sequence", "image/heif-sequence"}
)
_HEIC_SUFFIXES: Final[tuple[str, ...]] = (".heic", ".heif")

ImageFetcher = Callable[[str], bytes]


@dataclass(frozen=True)
class ImageUpload:
    """A file picked by the user."""

    filename: str
    content_type: str | None
    data: bytes


def is_data_uri(value: str | None) -> bool:
    """Return ``True`` for freshly cropped payloads that still need uploading."""

    return bool(value) and value.startswith("data:image/")


def encode_data_uri(payload: bytes, mime: str = OUTPUT_MIME) -> str:
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


def decode_data_uri(value: str) -> tuple[bytes, str]:
    """Return ``(payload, mime)`` for a base64 data URI."""

    header, sep, encoded = value.partition(",")
    if not sep or not header.startswith("data:") or ";base64" not in header:
        raise ValueError("Not a base64 data URI")
    mime = header[len("data:") :].split(";", 1)[0] or OUTPUT_MIME
    try:
        return base64.b64decode(encoded, validate=True), mime
    except binascii.Error as exc:
        raise ValueError("Malformed base64 payload") from exc


def _load_image(raw: bytes) -> Image.Image:
    """Decode ``raw`` into an upright RGB image."""

    try:
        with Image.open(BytesIO(raw)) as opened:
            upright = ImageOps.exif_transpose(opened)
            return upright.convert("RGB")
    except Image.DecompressionBombError as exc:
        raise ImageTooLargeError() from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise NotAnImageError() from exc


def image_size(raw: bytes) -> tuple[int, int]:
    """Return the upright ``(width, height)`` of ``raw``."""

    return _load_image(raw).size


def inspect_upload(upload: ImageUpload) -> tuple[int, int]:
    """Reject files the cropper cannot handle and return the image size.

    Raises:
        UnsupportedImageFormatError: For HEIC/HEIF camera images.
        ImageTooLargeError: For files over ``MAX_UPLOAD_BYTES`` or images past
            Pillow's pixel limit.
        NotAnImageError: For non-image files or undecodable bytes.
    """

    filename = (upload.filename or "").strip().lower()
    content_type = (upload.content_type or mimetypes.guess_type(filename)[0] or "").strip().lower()
    is_heic = content_type in _HEIC_CONTENT_TYPES or filename.endswith(_HEIC_SUFFIXES)
    if not is_heic and not content_type.startswith("image/"):
        raise NotAnImageError()
    if is_heic:
        raise UnsupportedImageFormatError()
    if len(upload.data) > MAX_UPLOAD_BYTES:
        raise ImageTooLargeError()
    return image_size(upload.data)


def clamp_zoom(zoom: float, *, min_zoom: float = MIN_ZOOM, max_zoom: float = MAX_ZOOM) -> float:
    return max(min_zoom, min(float(zoom), max_zoom))


def crop_area_for(
    size: tuple[int, int],
    *,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
    zoom: float = 1.0,
    min_zoom: float = MIN_ZOOM,
    max_zoom: float = MAX_ZOOM,
) -> CropArea:
    """Return the square pixel area selected by offset and zoom.

    At zoom 1 the window spans the image's shorter side; zooming in shrinks it.
    Offsets move the image under a fixed window, so a positive ``offset_x``
    reveals more of the left edge. The window never leaves the image.
    """

    width, height = size
    side = max(1, round(min(width, height) / clamp_zoom(zoom, min_zoom=min_zoom, max_zoom=max_zoom)))
    left = round(width / 2 - offset_x - side / 2)
    top = round(height / 2 - offset_y - side / 2)
    left = max(0, min(left, width - side))
    top = max(0, min(top, height - side))
    return CropArea(x=left, y=top, width=side, height=side)


def _clip_box(area: CropArea, size: tuple[int, int]) -> tuple[int, int, int, int]:
    width, height = size
    left, top, right, bottom = area.as_box()
    left = max(0, min(left, width - 1))
    top = max(0, min(top, height - 1))
    right = max(left + 1, min(right, width))
    bottom = max(top + 1, min(bottom, height))
    return left, top, right, bottom


def crop_image(
    raw: bytes,
    area: CropArea,
    *,
    output_size: int = DEFAULT_OUTPUT_SIZE,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> str:
    """Crop ``area`` out of ``raw``, scale it to a square and return a JPEG data URI."""

    image = _load_image(raw)
    cropped = image.crop(_clip_box(area, image.size))
    squared = cropped.resize((output_size, output_size), Image.Resampling.LANCZOS)
    buffer = BytesIO()
    squared.save(buffer, format="JPEG", quality=quality, optimize=True)
    return encode_data_uri(buffer.getvalue(), OUTPUT_MIME)


def render_preview(raw: bytes, area: CropArea, *, size: int = 200) -> Image.Image:
    """Return a circular preview of ``area`` with a transparent surround."""

    image = _load_image(raw)
    preview = image.crop(_clip_box(area, image.size)).resize((size, size), Image.Resampling.LANCZOS)
    mask = Image.new("L", (size, size), 0)
    ImageDraw.Draw(mask).ellipse((0, 0, size - 1, size - 1), fill=255)
    preview.putalpha(mask)
    return preview


def fetch_image(url: str, *, timeout: float = 10.0) -> bytes:
    """Download a hosted picture so it can be cropped again."""

    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


class CropPipeline:
    """Drive the cropper fields of a :class:`WizardState`."""

    def __init__(
        self,
        *,
        output_size: int = DEFAULT_OUTPUT_SIZE,
        quality: int = DEFAULT_JPEG_QUALITY,
        min_zoom: float = MIN_ZOOM,
        max_zoom: float = MAX_ZOOM,
        fetch: ImageFetcher = fetch_image,
    ) -> None:
        self.output_size = output_size
        self.quality = quality
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self._fetch = fetch

    def open(self, state: WizardState, upload: ImageUpload) -> None:
        """Validate ``upload`` and open the cropper on it.

        Rejected files raise before any state changes, so ``raw_image`` stays as it was.
        """

        if state.crop.saving:
            logger.debug("Ignoring new selection while a crop is being saved")
            return
        size = inspect_upload(upload)
        self._start(state, upload.data, size)

    def _start(self, state: WizardState, raw: bytes, size: tuple[int, int]) -> None:
        state.fields.raw_image = raw
        state.crop.reset()
        state.crop.area = crop_area_for(size, min_zoom=self.min_zoom, max_zoom=self.max_zoom)
        state.crop.is_open = True
        state.errors.pop("profile_picture", None)

    def update(
        self,
        state: WizardState,
        *,
        offset_x: float | None = None,
        offset_y: float | None = None,
        zoom: float | None = None,
    ) -> CropArea | None:
        """Apply new cropper controls and recompute the pixel area."""

        raw = state.fields.raw_image
        if not state.crop.is_open or raw is None or state.crop.saving:
            return None
        if offset_x is not None:
            state.crop.offset_x = float(offset_x)
        if offset_y is not None:
            state.crop.offset_y = float(offset_y)
        if zoom is not None:
            state.crop.zoom = clamp_zoom(zoom, min_zoom=self.min_zoom, max_zoom=self.max_zoom)
        state.crop.area = crop_area_for(
            image_size(raw),
            offset_x=state.crop.offset_x,
            offset_y=state.crop.offset_y,
            zoom=state.crop.zoom,
            min_zoom=self.min_zoom,
            max_zoom=self.max_zoom,
        )
        return state.crop.area

    def save(self, state: WizardState) -> str | None:
        """Encode the current selection and store it as the cropped picture.

        Returns ``None`` without touching state when no crop is pending or a
        save is already running.
        """

        raw = state.fields.raw_image
        if state.crop.saving or not state.crop.is_open or raw is None or state.crop.area is None:
            return None
        state.crop.saving = True
        try:
            payload = crop_image(raw, state.crop.area, output_size=self.output_size, quality=self.quality)
        finally:
            state.crop.saving = False
        state.fields.cropped_image = payload
        state.fields.raw_image = None
        state.crop.is_open = False
        return payload

    def cancel(self, state: WizardState) -> None:
        """Drop the pending selection; a previously saved picture is kept."""

        if state.crop.saving:
            return
        state.fields.raw_image = None
        state.crop.is_open = False
        state.crop.reset()

    def reopen(self, state: WizardState) -> None:
        """Load the saved picture back into the cropper for another pass."""

        current = state.fields.cropped_image
        if not current or state.crop.saving:
            return
        try:
            if is_data_uri(current):
                raw, _mime = decode_data_uri(current)
            else:
                raw = self._fetch(current)
        except (ValueError, requests.RequestException) as exc:
            logger.warning("Could not load picture for re-cropping: %s", exc)
            raise MediaError(EDIT_PREPARE_FAILED_MESSAGE) from exc
        self._start(state, raw, image_size(raw))


__all__ = [
    "CropPipeline",
    "EDIT_PREPARE_FAILED_MESSAGE",
    "ImageUpload",
    "MAX_UPLOAD_BYTES",
    "clamp_zoom",
    "crop_area_for",
    "crop_image",
    "decode_data_uri",
    "encode_data_uri",
    "fetch_image",
    "image_size",
    "inspect_upload",
    "is_data_uri",
    "render_preview",
]
