"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

from doclib.config import Settings
from doclib.main import create_doclib_app


def multipart_body(
    fields: dict[str, str] | None = None,
    files: list[tuple[str, bytes, str]] | None = None,
    boundary: str = "----DocLibBoundary",
    file_field: str = "files",
) -> tuple[bytes, dict[str, str]]:
    """Encode text fields and (filename, content, content_type) files as multipart/form-data."""
    chunks: list[bytes] = []
    for name, value in (fields or {}).items():
        chunks.append(
            (
                f"--{boundary}\r\n"
                f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
                f"{value}\r\n"
            ).encode("utf-8")
        )
    for filename, content, content_type in files or []:
        chunks.append(
            (
                f"--{boundary}\r\n"
                f'Content-Disposition: form-data; name="{file_field}"; filename="{filename}"\r\n'
                f"Content-Type: {content_type}\r\n\r\n"
            ).encode("utf-8")
            + content
            + b"\r\n"
        )
    chunks.append(f"--{boundary}--\r\n".encode("utf-8"))
    headers = {"Content-Type": f"multipart/form-data; boundary={boundary}"}
    return b"".join(chunks), headers


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        data_dir=tmp_path / "data",
        generation_api_key="sk-test",
        generation_api_url="http://llm.test/v1",
        generation_model="summary-model",
        vision_model="vision-model",
        cors_origins="http://localhost:3000",
    )


@pytest.fixture
def app(settings, mock_text_generator):
    """Falcon ASGI app wired to a temporary data directory and a mocked provider."""
    return create_doclib_app(settings, text_generator=mock_text_generator)


@pytest.fixture
def client(app):
    """Falcon ASGI test client."""
    return TestClient(app)


@pytest.fixture
def upload(client):
    """POST files to /v1/library/upload and return the falcon Result."""

    def _upload(*files: tuple[str, bytes], **fields: str):
        body, headers = multipart_body(
            fields=fields,
            files=[
                (name, data, "image/png" if name.endswith(".png") else "text/plain")
                for name, data in files
            ],
        )
        return client.simulate_post("/v1/library/upload", body=body, headers=headers)

    return _upload
