from pathlib import Path

import pytest

from etsy_optimizer.encoder import (
    MAX_FILES,
    accept_uploads,
    encode_image,
    from_data_uri,
    mime_for,
    to_data_uri,
)
from etsy_optimizer.errors import ReadError, TooManyFiles, UnsupportedMediaType, UploadError


@pytest.mark.parametrize("name,mime", [
    ("a.png", "image/png"),
    ("b.JPG", "image/jpeg"),
    ("c.jpeg", "image/jpeg"),
])
def test_mime_for_accepted_types(name, mime):
    assert mime_for(Path(name)) == mime


@pytest.mark.parametrize("name", ["flyer.gif", "flyer.webp", "notes.pdf", "noext"])
def test_unsupported_media_type(name):
    with pytest.raises(UnsupportedMediaType):
        mime_for(Path(name))
    accepted, rejection = accept_uploads([Path(name)])
    assert accepted == []
    assert isinstance(rejection, UnsupportedMediaType)
    assert str(rejection) == f"{name}: please upload valid PNG or JPG files"


def test_accept_uploads_appends_to_existing():
    existing = [Path("one.png")]
    accepted, rejection = accept_uploads([Path("two.jpg")], existing=existing)
    assert accepted == [Path("one.png"), Path("two.jpg")]
    assert rejection is None
    assert existing == [Path("one.png")]


def test_mixed_batch_skips_unsupported_files():
    accepted, rejection = accept_uploads([Path("a.png"), Path("b.gif"), Path("c.jpg")])
    assert accepted == [Path("a.png"), Path("c.jpg")]
    assert isinstance(rejection, UnsupportedMediaType)


def test_too_many_files():
    paths = [Path(f"img{i}.png") for i in range(MAX_FILES + 2)]
    accepted, rejection = accept_uploads(paths)
    assert accepted == paths[:MAX_FILES]
    assert isinstance(rejection, TooManyFiles)
    assert isinstance(rejection, UploadError)
    assert accept_uploads(paths[:MAX_FILES]) == (paths[:MAX_FILES], None)


def test_overflow_after_existing_uploads():
    existing = [Path(f"old{i}.png") for i in range(3)]
    accepted, rejection = accept_uploads([Path(f"new{i}.jpg") for i in range(4)], existing=existing)
    assert accepted == existing + [Path("new0.jpg"), Path("new1.jpg")]
    assert str(rejection) == f"You can upload a maximum of {MAX_FILES} images."


def test_encode_image_reads_bytes_and_mime(tmp_path):
    p = tmp_path / "design.jpeg"
    p.write_bytes(b"\xff\xd8\xff\xe0jpeg")
    encoded = encode_image(p)
    assert encoded.data == b"\xff\xd8\xff\xe0jpeg"
    assert encoded.mime_type == "image/jpeg"


def test_encode_missing_file_is_read_error(tmp_path):
    with pytest.raises(ReadError):
        encode_image(tmp_path / "gone.png")


def test_data_uri_helpers():
    uri = to_data_uri(b"\x89PNG\r\n", "image/png")
    assert uri.startswith("data:image/png;base64,")
    assert from_data_uri(uri) == (b"\x89PNG\r\n", "image/png")


@pytest.mark.parametrize("bad", ["", "https://example.com/a.png", "data:image/png;base64,@@@"])
def test_from_data_uri_rejects_garbage(bad):
    with pytest.raises(ValueError):
        from_data_uri(bad)
