import pytest
from PIL import Image, UnidentifiedImageError

from cropkit.codec import (
    build_save_kwargs,
    decode_image,
    encode_image,
    output_format_for,
    prepare_image_for_save,
)


@pytest.mark.parametrize("path, expected", [
    ("out/a.jpg", "JPEG"),
    ("out/a.JPEG", "JPEG"),
    ("out/a.png", "PNG"),
    ("out/a.gif", "GIF"),
    ("out/a.webp", "WEBP"),
    ("out/noext", "PNG"),
    ("out/a.unknownext", "PNG"),
])
def test_output_format_for(path, expected):
    assert output_format_for(path) == expected


def test_decode_image_is_loaded(tmp_path, make_image):
    path = make_image(tmp_path / "a.png", (20, 10))
    img = decode_image(path)
    assert img.size == (20, 10)
    # Data is in memory, so cropping works after the file handle is closed.
    assert img.crop((0, 0, 5, 5)).size == (5, 5)


def test_decode_corrupt_file(tmp_path):
    path = tmp_path / "bad.png"
    path.write_bytes(b"this is not an image")
    with pytest.raises(UnidentifiedImageError):
        decode_image(str(path))


def test_jpeg_flattens_alpha_onto_white():
    img = Image.new("RGBA", (4, 4), (0, 0, 0, 0))
    prepared = prepare_image_for_save(img, "JPEG")
    assert prepared.mode == "RGB"
    assert prepared.getpixel((0, 0)) == (255, 255, 255)


def test_webp_converts_palette():
    img = Image.new("P", (4, 4), 0)
    assert prepare_image_for_save(img, "WEBP").mode == "RGB"


def test_png_keeps_mode():
    img = Image.new("RGBA", (4, 4))
    assert prepare_image_for_save(img, "PNG") is img


def test_build_save_kwargs():
    assert build_save_kwargs("JPEG", {"jpg_quality": 70})["quality"] == 70
    assert build_save_kwargs("WEBP", {"webp_quality": 55}) == {"quality": 55}
    assert build_save_kwargs("PNG") == {"optimize": True}
    assert build_save_kwargs("GIF") == {}


def test_encode_uses_extension_format(tmp_path):
    img = Image.new("RGBA", (8, 6), (10, 20, 30, 255))
    output_path = str(tmp_path / "out.jpg")

    assert encode_image(img, output_path) == "JPEG"
    with Image.open(output_path) as written:
        assert written.format == "JPEG"
        assert written.size == (8, 6)


def test_encode_unknown_extension_falls_back_to_png(tmp_path):
    output_path = str(tmp_path / "out.unknownext")
    assert encode_image(Image.new("RGB", (3, 3)), output_path) == "PNG"
    with Image.open(output_path) as written:
        assert written.format == "PNG"


def test_encode_into_missing_directory_raises(tmp_path):
    with pytest.raises(OSError):
        encode_image(Image.new("RGB", (3, 3)), str(tmp_path / "missing" / "out.png"))
