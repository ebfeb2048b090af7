from io import BytesIO

import pytest
import requests
from PIL import Image

from core.errors import ImageTooLargeError, MediaError, NotAnImageError, UnsupportedImageFormatError
import wizard.crop as crop_module
from wizard.crop import (
    CropPipeline,
    ImageUpload,
    crop_area_for,
    crop_image,
    decode_data_uri,
    encode_data_uri,
    inspect_upload,
    is_data_uri,
    render_preview,
)
from wizard.state import CropArea, WizardState


def _decode(payload: str) -> Image.Image:
    data, mime = decode_data_uri(payload)
    assert mime == "image/jpeg"
    return Image.open(BytesIO(data))


def test_full_square_at_zoom_one_yields_output_size(image_bytes) -> None:
    raw = image_bytes((400, 400))

    payload = crop_image(raw, CropArea(0, 0, 400, 400), output_size=400)

    assert is_data_uri(payload)
    image = _decode(payload)
    assert image.format == "JPEG"
    assert image.size == (400, 400)


def test_rectangular_source_still_produces_square(image_bytes) -> None:
    raw = image_bytes((1200, 300))
    area = crop_area_for((1200, 300))

    image = _decode(crop_image(raw, area, output_size=250))

    assert area.width == area.height == 300
    assert image.size == (250, 250)


def test_crop_area_centres_and_zooms() -> None:
    assert crop_area_for((800, 600)) == CropArea(x=100, y=0, width=600, height=600)
    assert crop_area_for((800, 600), zoom=2.0) == CropArea(x=250, y=150, width=300, height=300)


def test_crop_area_never_leaves_image() -> None:
    area = crop_area_for((800, 600), offset_x=10_000, offset_y=-10_000, zoom=2.0)

    assert area.x == 0
    assert area.y == 300
    assert area.x + area.width <= 800
    assert area.y + area.height <= 600


def test_zoom_is_clamped() -> None:
    assert crop_area_for((600, 600), zoom=10).width == 200
    assert crop_area_for((600, 600), zoom=0.1).width == 600


def test_heic_is_rejected_before_cropper_opens() -> None:
    state = WizardState()
    pipeline = CropPipeline()
    upload = ImageUpload(filename="IMG_0001.HEIC", content_type="image/heic", data=b"\x00\x00\x00\x18ftypheic")

    with pytest.raises(UnsupportedImageFormatError) as excinfo:
        pipeline.open(state, upload)

    assert str(excinfo.value) == "HEIC images are not supported. Please use JPG or PNG."
    assert state.fields.raw_image is None
    assert state.crop.is_open is False


def test_heic_detected_by_extension_without_content_type() -> None:
    with pytest.raises(UnsupportedImageFormatError):
        inspect_upload(ImageUpload(filename="photo.heif", content_type=None, data=b""))


def test_non_image_is_rejected() -> None:
    with pytest.raises(NotAnImageError) as excinfo:
        inspect_upload(ImageUpload(filename="resume.pdf", content_type="application/pdf", data=b"%PDF-1.7"))

    assert str(excinfo.value) == "File must be an image"


def test_corrupt_image_bytes_are_rejected() -> None:
    with pytest.raises(NotAnImageError):
        inspect_upload(ImageUpload(filename="broken.png", content_type="image/png", data=b"not really a png"))


def test_pixel_bomb_is_rejected_as_too_large(monkeypatch, png_upload: ImageUpload) -> None:
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    state = WizardState()

    with pytest.raises(ImageTooLargeError) as excinfo:
        CropPipeline().open(state, png_upload)

    assert str(excinfo.value) == "Image is too large. Please choose a smaller picture."
    assert state.fields.raw_image is None
    assert state.crop.is_open is False


def test_oversized_upload_rejected_before_decoding(monkeypatch, png_upload: ImageUpload) -> None:
    monkeypatch.setattr(crop_module, "MAX_UPLOAD_BYTES", 16)

    with pytest.raises(ImageTooLargeError):
        inspect_upload(png_upload)


def test_open_update_save_flow(png_upload: ImageUpload) -> None:
    state = WizardState()
    pipeline = CropPipeline(output_size=120)

    pipeline.open(state, png_upload)
    assert state.crop.is_open
    assert state.fields.raw_image == png_upload.data
    assert state.crop.area == CropArea(x=100, y=0, width=600, height=600)

    area = pipeline.update(state, zoom=2.0, offset_x=50)
    assert area == CropArea(x=200, y=150, width=300, height=300)

    payload = pipeline.save(state)

    assert payload is not None
    assert state.fields.cropped_image == payload
    assert state.fields.raw_image is None
    assert state.crop.is_open is False
    assert state.crop.saving is False
    assert _decode(payload).size == (120, 120)


def test_save_is_noop_while_saving_or_closed(png_upload: ImageUpload) -> None:
    state = WizardState()
    pipeline = CropPipeline()

    assert pipeline.save(state) is None

    pipeline.open(state, png_upload)
    state.crop.saving = True
    assert pipeline.save(state) is None
    assert state.fields.cropped_image is None


def test_new_selection_ignored_while_saving(png_upload: ImageUpload, image_bytes) -> None:
    state = WizardState()
    pipeline = CropPipeline()
    pipeline.open(state, png_upload)
    state.crop.saving = True

    other = ImageUpload(filename="other.png", content_type="image/png", data=image_bytes((50, 50)))
    pipeline.open(state, other)

    assert state.fields.raw_image == png_upload.data


def test_cancel_keeps_previous_picture(png_upload: ImageUpload) -> None:
    state = WizardState()
    state.fields.cropped_image = "https://cdn.example.com/u1/old.jpg"
    pipeline = CropPipeline()

    pipeline.open(state, png_upload)
    pipeline.cancel(state)

    assert state.fields.cropped_image == "https://cdn.example.com/u1/old.jpg"
    assert state.fields.raw_image is None
    assert state.crop.is_open is False


def test_rejected_upload_keeps_existing_raw_image(png_upload: ImageUpload) -> None:
    state = WizardState()
    pipeline = CropPipeline()
    pipeline.open(state, png_upload)

    with pytest.raises(MediaError):
        pipeline.open(state, ImageUpload(filename="notes.txt", content_type="text/plain", data=b"hello"))

    assert state.fields.raw_image == png_upload.data


def test_reopen_from_data_uri(image_bytes) -> None:
    state = WizardState()
    state.fields.cropped_image = encode_data_uri(image_bytes((300, 300), fmt="JPEG"))

    CropPipeline().reopen(state)

    assert state.crop.is_open
    assert state.crop.area == CropArea(0, 0, 300, 300)


def test_reopen_fetches_hosted_picture(image_bytes) -> None:
    fetched: list[str] = []

    def _fetch(url: str) -> bytes:
        fetched.append(url)
        return image_bytes((200, 200), fmt="JPEG")

    state = WizardState()
    state.fields.cropped_image = "https://cdn.example.com/u1/1.jpg"

    CropPipeline(fetch=_fetch).reopen(state)

    assert fetched == ["https://cdn.example.com/u1/1.jpg"]
    assert state.crop.is_open


def test_reopen_failure_reports_prepare_message() -> None:
    def _fetch(url: str) -> bytes:
        raise requests.ConnectionError("offline")

    state = WizardState()
    state.fields.cropped_image = "https://cdn.example.com/u1/1.jpg"

    with pytest.raises(MediaError) as excinfo:
        CropPipeline(fetch=_fetch).reopen(state)

    assert str(excinfo.value) == "Failed to prepare image for editing"
    assert state.crop.is_open is False


def test_preview_is_circular(image_bytes) -> None:
    preview = render_preview(image_bytes((100, 100)), CropArea(0, 0, 100, 100), size=50)

    assert preview.mode == "RGBA"
    assert preview.getpixel((0, 0))[3] == 0
    assert preview.getpixel((25, 25))[3] == 255
