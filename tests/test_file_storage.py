import asyncio
from io import BytesIO

import pytest
from starlette.datastructures import Headers, UploadFile

from estatehub.core.config import settings
from estatehub.core.exceptions import ValidationError
from estatehub.utils import file_storage


def _upload(filename, content_type, body=b"image-bytes"):
    return UploadFile(
        file=BytesIO(body),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def _save(*files):
    return asyncio.run(file_storage.save_property_images(list(files)))


def _stored(upload_dir):
    folder = upload_dir / "properties"
    return list(folder.iterdir()) if folder.exists() else []


def test_saves_images_in_upload_order(upload_dir):
    paths = _save(_upload("a.jpg", "image/jpeg", b"first"), _upload("b.png", "image/png", b"second"))

    assert [p.rsplit(".", 1)[1] for p in paths] == ["jpg", "png"]
    assert all(p.startswith(file_storage.PUBLIC_PREFIX) for p in paths)
    first = upload_dir / "properties" / paths[0][len(file_storage.PUBLIC_PREFIX):]
    assert first.read_bytes() == b"first"


def test_extension_comes_from_mime_type_when_filename_has_none(upload_dir):
    (path,) = _save(_upload("camera-upload", "image/webp"))
    assert path.endswith(".webp")


def test_octet_stream_with_image_extension_is_accepted(upload_dir):
    (path,) = _save(_upload("IMG_0042.JPEG", "application/octet-stream"))
    assert path.endswith(".jpg")


@pytest.mark.parametrize("filename, content_type", [
    ("notes.txt", "text/plain"),
    ("report.pdf", "application/pdf"),
    ("archive.bin", "application/octet-stream"),
])
def test_non_images_are_rejected(upload_dir, filename, content_type):
    with pytest.raises(ValidationError, match="Only image files are allowed"):
        _save(_upload(filename, content_type))
    assert _stored(upload_dir) == []


def test_nothing_is_written_when_any_file_is_invalid(upload_dir):
    with pytest.raises(ValidationError):
        _save(_upload("ok.jpg", "image/jpeg"), _upload("bad.txt", "text/plain"))
    assert _stored(upload_dir) == []


def test_oversized_image_is_rejected(upload_dir, monkeypatch):
    monkeypatch.setattr(settings, "MAX_IMAGE_SIZE_MB", 0)

    with pytest.raises(ValidationError, match="exceeds"):
        _save(_upload("big.jpg", "image/jpeg", b"x"))
    assert _stored(upload_dir) == []


def test_too_many_images(upload_dir):
    files = [_upload(f"{n}.jpg", "image/jpeg") for n in range(settings.MAX_PROPERTY_IMAGES + 1)]
    with pytest.raises(ValidationError, match="maximum"):
        _save(*files)


def test_empty_file_parts_are_dropped():
    kept = _upload("a.jpg", "image/jpeg")
    assert file_storage.real_uploads([None, _upload("", "application/octet-stream"), kept]) == [kept]
    assert file_storage.real_uploads(None) == []


def test_delete_removes_stored_file(upload_dir):
    (path,) = _save(_upload("a.jpg", "image/jpeg"))
    assert len(_stored(upload_dir)) == 1

    file_storage.delete_property_image(path)
    file_storage.delete_property_image(path)

    assert _stored(upload_dir) == []


def test_delete_ignores_paths_outside_uploads(upload_dir, tmp_path):
    outside = tmp_path / "keep.jpg"
    outside.write_bytes(b"x")

    file_storage.delete_property_image(str(outside))

    assert outside.exists()


def test_stored_extension_follows_the_image_type_not_the_filename(upload_dir):
    (path,) = _save(_upload("x.html", "image/png"))

    assert path.endswith(".png")
    assert [p.suffix for p in _stored(upload_dir)] == [".png"]


def test_unknown_image_subtype_without_allowed_extension_is_rejected(upload_dir):
    with pytest.raises(ValidationError, match="Unsupported image type"):
        _save(_upload("pic", "image/svg+xml", b"<svg onload='x()'/>"))
    with pytest.raises(ValidationError):
        _save(_upload("pic.svg", "image/svg+xml"))
    assert _stored(upload_dir) == []


def test_stored_extension_is_always_allowed(upload_dir):
    paths = _save(
        _upload("a.JPEG", "image/heic"),
        _upload("b.gif", "application/octet-stream"),
        _upload("c", "image/jpeg; charset=binary"),
    )
    assert [p.rsplit(".", 1)[1] for p in paths] == ["jpg", "gif", "jpg"]
