import base64
import json
import zipfile

import pytest

from conftest import png_bytes
from etsy_optimizer.errors import NothingToExport
from etsy_optimizer.models import GeneratedImage, ImageStatus
from etsy_optimizer.zip_exporter import (
    ZIP_NAME,
    build_export_bundle,
    create_listing_zip,
    mockup_filename,
)

PNG = png_bytes()
PNG_URI = "data:image/png;base64," + base64.b64encode(PNG).decode()
JPG_URI = "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8jpeg").decode()


def _images():
    return [
        GeneratedImage(id="a", name="Hero  Bundle Shot", base64=PNG_URI, status=ImageStatus.COMPLETED),
        GeneratedImage(id="b", name="Cafe Table", base64=None, status=ImageStatus.FAILED),
        GeneratedImage(id="c", name="Gallery Wall", base64=JPG_URI, status=ImageStatus.COMPLETED),
        GeneratedImage(id="d", name="Lifestyle", base64=None, status=ImageStatus.PENDING),
    ]


def test_bundle_contains_only_completed_images(copy_result, analysis):
    bundle = build_export_bundle(_images(), copy_result, analysis)
    assert [(name, is_b64) for name, _, is_b64 in bundle.images] == [
        ("Hero_Bundle_Shot.png", True),
        ("Gallery_Wall.jpg", True),
    ]
    assert bundle.images[0][1] == base64.b64encode(PNG).decode()
    assert dict(bundle.copy_files)["tags.csv"] == ",".join(copy_result.tags)
    assert json.loads(bundle.metadata)["theme"] == analysis.theme


@pytest.mark.parametrize("name,uri,expected", [
    ("Cozy\tReading Nook", PNG_URI, "Cozy_Reading_Nook.png"),
    ("Flat  Lay \n Marble", JPG_URI, "Flat_Lay_Marble.jpg"),
    ("Hero", None, "Hero.jpg"),
])
def test_mockup_filename_collapses_whitespace(name, uri, expected):
    image = GeneratedImage(id="x", name=name, base64=uri, status=ImageStatus.COMPLETED)
    assert mockup_filename(image) == expected


def test_nothing_to_export():
    failed = [GeneratedImage(id="x", name="X", status=ImageStatus.FAILED)]
    with pytest.raises(NothingToExport):
        build_export_bundle(failed, None, None)


def test_copy_alone_is_exportable(copy_result):
    bundle = build_export_bundle([], copy_result, None)
    assert bundle.images == []
    assert bundle.metadata is None
    assert len(bundle.copy_files) == 4


def test_zip_layout(tmp_path, copy_result, analysis):
    bundle = build_export_bundle(_images(), copy_result, analysis)
    zip_path = create_listing_zip(bundle, tmp_path / "out")

    assert zip_path == tmp_path / "out" / ZIP_NAME
    with zipfile.ZipFile(zip_path) as zf:
        names = set(zf.namelist())
        assert names == {
            "generated_mockups/Hero_Bundle_Shot.png",
            "generated_mockups/Gallery_Wall.jpg",
            "listing_copy/title.txt",
            "listing_copy/description.txt",
            "listing_copy/tags.csv",
            "listing_copy/materials.csv",
            "metadata.json",
        }
        assert zf.read("generated_mockups/Hero_Bundle_Shot.png") == PNG
        assert zf.read("listing_copy/title.txt").decode() == copy_result.title
        assert zf.read("listing_copy/materials.csv").decode() == "Digital File,Canva Template"
        meta = json.loads(zf.read("metadata.json"))
        assert meta["dominantColors"] == analysis.dominant_colors
        assert meta["productType"] == "Digital Template"
