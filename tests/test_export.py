"""
Test Artifact Export Helper
===========================
"""
import pytest
import requests

from core.errors import ExportError
from core.export import export_image, export_tabular
from core.schemas import GeneratedImage, TabularArtifact
from tests.conftest import PNG_BYTES, FakeResponse, FakeSession


@pytest.mark.parametrize("fmt, filename", [
    ("csv", "dataset.csv"),
    ("json", "dataset.json"),
    ("sql", "dataset.sql"),
    ("xml", "dataset.xml"),
    ("yaml", "dataset.yaml"),
    ("tsv", "dataset.tsv"),
    ("xlsx", "dataset.csv"),
    ("txt", "dataset.txt"),
    ("parquet", "dataset.txt"),
])
def test_tabular_export_naming(fmt, filename):
    exported = export_tabular(TabularArtifact(content="a,b\n1,2", format=fmt, row_count=10))
    assert exported.filename == filename
    assert exported.content_type == "text/plain"
    assert exported.data == b"a,b\n1,2"


def test_image_export_downloads_bytes():
    session = FakeSession(FakeResponse(200, content=PNG_BYTES))
    image = GeneratedImage(url="https://storage.test/img.png", storage_path="u/1-2.png")

    exported = export_image(image, 2, session=session)

    assert exported.filename == "image-3.png"
    assert exported.content_type == "image/png"
    assert exported.data == PNG_BYTES
    assert session.calls[0]["url"] == "https://storage.test/img.png"


@pytest.mark.parametrize("outcome", [FakeResponse(404, text="missing"), requests.ConnectionError("down")])
def test_image_export_failure(outcome):
    image = GeneratedImage(url="https://storage.test/img.png", storage_path="p")
    with pytest.raises(ExportError):
        export_image(image, 0, session=FakeSession(outcome))
