import pytest

from socialnet.core.exceptions import ValidationError
from socialnet.services.media_service import MediaService
from socialnet.utils.file_handler import (
    get_file_extension,
    resource_kind_for,
    sanitize_filename,
    validate_magic_bytes,
    validate_media_content,
)

JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 16
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
MP4 = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 16
WEBP = b"RIFF\x00\x00\x00\x00WEBPVP8 " + b"\x00" * 8


@pytest.mark.parametrize("url,expected", [
    ("https://res.cloudinary.com/demo/image/upload/v1712/reseau-social/abc.jpg", "reseau-social/abc"),
    ("https://res.cloudinary.com/demo/video/upload/v99/reseau-social/clip.mp4", "reseau-social/clip"),
    ("https://res.cloudinary.com/demo/image/upload/sample.png", "sample"),
    ("https://res.cloudinary.com/demo/image/upload/a/b/c.tar.gz", "a/b/c"),
    ("https://example.com/images/abc.jpg", None),
    ("https://res.cloudinary.com/demo/image/upload/v1712/", None),
    ("", None),
])
def test_extract_public_id(url, expected):
    assert MediaService.extract_public_id(url) == expected


def test_upload_rejects_unknown_kind():
    with pytest.raises(ValidationError):
        MediaService().upload(JPEG, owner_id=1, kind="avatar")


def test_upload_rejects_empty_payload():
    with pytest.raises(ValidationError):
        MediaService().upload(b"", owner_id=1)


@pytest.mark.parametrize("content,kind", [
    (JPEG, "jpeg"),
    (PNG, "png"),
    (MP4, "mp4"),
    (WEBP, "webp"),
    (b"GIF89a" + b"\x00" * 8, "gif"),
])
def test_magic_bytes_match(content, kind):
    assert validate_magic_bytes(content, kind)


def test_magic_bytes_mismatch():
    assert not validate_magic_bytes(PNG, "jpeg")
    assert not validate_magic_bytes(b"", "png")


def test_validate_media_content():
    assert validate_media_content(JPEG, "holiday.JPG") == (".jpg", "image")
    assert validate_media_content(MP4, "clip.mov") == (".mov", "video")

    with pytest.raises(ValidationError):
        validate_media_content(JPEG, "script.exe")
    with pytest.raises(ValidationError):
        validate_media_content(b"", "empty.png")
    with pytest.raises(ValidationError):
        validate_media_content(PNG, "fake.jpg")
    with pytest.raises(ValidationError):
        validate_media_content(JPEG * 10, "big.jpg", max_size_bytes=10)


def test_filename_helpers():
    assert sanitize_filename("../../etc/passwd") == "passwd"
    assert get_file_extension("Photo.PNG") == ".png"
    assert resource_kind_for(".webm") == "video"
    assert resource_kind_for(".txt") is None
