from io import BytesIO
from zipfile import ZipFile

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from conftest import build_zip, open_image
from core.image_converter.config import AppConfig


@pytest.fixture
def client(config: AppConfig) -> TestClient:
    return TestClient(create_app(config))


def test_create_app_requires_enabled_flag(config: AppConfig) -> None:
    config.runtime.enable_local_api = False
    with pytest.raises(RuntimeError):
        create_app(config)
    assert create_app(config, require_enabled=False) is not None


def test_health(client: TestClient) -> None:
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert "webp" in body["output_formats"]
    assert "svg" in body["input_formats"]


def test_image_converter_returns_attachment(client: TestClient, png_bytes: bytes) -> None:
    response = client.post(
        "/api/image-converter",
        files={"image": ("cat.png", png_bytes, "image/png")},
        data={"outputFormat": "webp", "quality": "70", "width": "100", "height": "", "fit": "inside"},
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/webp"
    assert response.headers["content-disposition"] == 'attachment; filename="converted_image.webp"'
    assert open_image(response.content).size == (100, 50)


@pytest.mark.parametrize("quality", ["0", "101"])
def test_quality_out_of_range_is_rejected(client: TestClient, png_bytes: bytes, quality: str) -> None:
    response = client.post(
        "/api/image-converter",
        files={"image": ("cat.png", png_bytes, "image/png")},
        data={"outputFormat": "png", "quality": quality},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid input data"
    assert [error["path"] for error in body["errors"]] == [["quality"]]


def test_validation_reports_every_bad_field(client: TestClient) -> None:
    response = client.post(
        "/api/image-converter",
        data={"outputFormat": "bmp", "width": "-3", "fit": "stretch", "extra": "x"},
    )
    assert response.status_code == 400
    paths = {tuple(error["path"]) for error in response.json()["errors"]}
    assert {("outputFormat",), ("width",), ("fit",), ("extra",), ("image",)} <= paths


def test_input_only_format_is_not_an_output(client: TestClient, png_bytes: bytes) -> None:
    response = client.post(
        "/api/image-converter",
        files={"image": ("cat.png", png_bytes, "image/png")},
        data={"outputFormat": "gif"},
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["path"] == ["outputFormat"]


def test_image_size_limit(config: AppConfig, png_bytes: bytes) -> None:
    config.runtime.max_image_bytes = 10
    client = TestClient(create_app(config))
    response = client.post(
        "/api/image-converter",
        files={"image": ("cat.png", png_bytes, "image/png")},
        data={"outputFormat": "png"},
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["path"] == ["image"]


def test_undetectable_image_is_processing_failure(client: TestClient) -> None:
    response = client.post(
        "/api/image-converter",
        files={"image": ("notes.txt", b"just text", "text/plain")},
        data={"outputFormat": "png"},
    )
    assert response.status_code == 500
    assert response.json()["code"] == "UNSUPPORTED_INPUT"


def test_folder_converter_returns_zip(client: TestClient, png_bytes: bytes) -> None:
    archive = build_zip([("a/b.png", png_bytes), ("a/readme.txt", b"hello"), ("c/", None)])
    response = client.post(
        "/api/folder-images-converter",
        files={"compacted": ("images.zip", archive, "application/zip")},
        data={"outputFormat": "webp", "quality": "80"},
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    assert response.headers["content-disposition"] == 'attachment; filename="converted_images.zip"'
    assert response.headers["x-converted-entries"] == "1"
    with ZipFile(BytesIO(response.content)) as result:
        assert result.namelist() == ["a/b.webp", "a/readme.txt", "c/"]
        assert open_image(result.read("a/b.webp")).format == "WEBP"
        assert result.read("a/readme.txt") == b"hello"


def test_folder_converter_isolate_policy(client: TestClient, png_bytes: bytes) -> None:
    archive = build_zip([("ok.png", png_bytes), ("bad.png", b"junk")])
    response = client.post(
        "/api/folder-images-converter",
        files={"compacted": ("images.zip", archive, "application/zip")},
        data={"outputFormat": "png", "failurePolicy": "isolate"},
    )
    assert response.status_code == 200
    assert response.headers["x-failed-entries"] == "1"


def test_folder_converter_strict_policy_fails_whole_request(client: TestClient, png_bytes: bytes) -> None:
    archive = build_zip([("ok.png", png_bytes), ("bad.png", b"junk")])
    response = client.post(
        "/api/folder-images-converter",
        files={"compacted": ("images.zip", archive, "application/zip")},
        data={"outputFormat": "png"},
    )
    assert response.status_code == 500
    assert response.json() == {"error": "Error processing images", "code": "DECODE_FAILED"}


def test_folder_converter_malformed_archive(client: TestClient) -> None:
    response = client.post(
        "/api/folder-images-converter",
        files={"compacted": ("images.zip", b"\x00garbage", "application/zip")},
        data={"outputFormat": "png"},
    )
    assert response.status_code == 500
    assert response.json()["code"] == "INVALID_ARCHIVE"


def test_folder_converter_requires_file(client: TestClient) -> None:
    response = client.post("/api/folder-images-converter", data={"outputFormat": "png", "compacted": "not a file"})
    assert response.status_code == 400
    assert response.json()["errors"][0]["path"] == ["compacted"]
