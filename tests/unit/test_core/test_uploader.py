"""Tests for the multipart uploader."""

import asyncio

import httpx
import pytest
from structlog.testing import capture_logs

from image2url.config.loader import create_test_config
from image2url.core.models import ImageSource, Origin
from image2url.core.uploader import build_upload_headers, upload_image
from image2url.exceptions import (
    BadResponseError,
    MissingUrlError,
    ServerError,
    UploadFailedError,
)


@pytest.fixture
def source(png_bytes):
    return ImageSource(
        data=png_bytes,
        original_name="photo.png",
        mime_type="image/png",
        size=len(png_bytes),
        origin=Origin.LOCAL,
    )


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestBuildUploadHeaders:
    def test_user_agent_only_without_token(self, settings):
        headers = build_upload_headers(settings)
        assert headers["User-Agent"].startswith("mcp-server-image2url/")
        assert "Authorization" not in headers

    def test_bearer_token(self):
        settings = create_test_config(api_token="s3cret")
        headers = build_upload_headers(settings)
        assert headers["Authorization"] == "Bearer s3cret"


class TestUploadImage:
    async def test_success(self, settings, source, png_bytes):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(
                200,
                json={
                    "url": "https://host/x.png",
                    "uploadedAt": "2026-01-01T00:00:00Z",
                },
            )

        async with _client(handler) as client:
            result = await upload_image(source, settings, client)

        assert result.hosted_url == "https://host/x.png"
        assert result.uploaded_at == "2026-01-01T00:00:00Z"

        request = seen["request"]
        assert request.method == "POST"
        assert str(request.url) == "https://upload.test/api/upload"
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert request.headers["user-agent"].startswith("mcp-server-image2url/")
        body = request.content
        assert b'name="file"; filename="photo.png"' in body
        assert b"Content-Type: image/png" in body
        assert png_bytes in body

    async def test_uploaded_at_absent(self, settings, source):
        async with _client(
            lambda request: httpx.Response(200, json={"url": "https://host/x.png"})
        ) as client:
            result = await upload_image(source, settings, client)
        assert result.uploaded_at is None

    async def test_authorization_header_sent(self, source):
        settings = create_test_config(
            upload_url="https://self.hosted/upload", api_token="tok"
        )
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={"url": "https://self.hosted/i/1.png"})

        async with _client(handler) as client:
            await upload_image(source, settings, client)
        assert seen["request"].headers["authorization"] == "Bearer tok"
        assert str(seen["request"].url) == "https://self.hosted/upload"

    async def test_server_error_message_preferred(self, settings, source):
        async with _client(
            lambda request: httpx.Response(500, json={"error": "quota exceeded"})
        ) as client:
            with pytest.raises(ServerError, match="quota exceeded") as exc_info:
                await upload_image(source, settings, client)
        assert exc_info.value.status_code == 500

    async def test_server_error_falls_back_to_reason_phrase(self, settings, source):
        async with _client(lambda request: httpx.Response(503)) as client:
            with pytest.raises(ServerError, match="Service Unavailable"):
                await upload_image(source, settings, client)

    async def test_unparseable_body(self, settings, source):
        async with _client(
            lambda request: httpx.Response(502, text="<html>Bad Gateway</html>")
        ) as client:
            with pytest.raises(BadResponseError) as exc_info:
                await upload_image(source, settings, client)
        assert "502" in str(exc_info.value)
        assert "<html>Bad Gateway</html>" in str(exc_info.value)
        assert exc_info.value.body == "<html>Bad Gateway</html>"

    async def test_missing_url(self, settings, source):
        async with _client(
            lambda request: httpx.Response(200, json={"ok": True})
        ) as client:
            with pytest.raises(MissingUrlError, match="did not return a URL"):
                await upload_image(source, settings, client)

    async def test_non_string_url(self, settings, source):
        async with _client(
            lambda request: httpx.Response(200, json={"url": 42})
        ) as client:
            with pytest.raises(MissingUrlError):
                await upload_image(source, settings, client)

    async def test_empty_body_success_status(self, settings, source):
        async with _client(lambda request: httpx.Response(200)) as client:
            with pytest.raises(MissingUrlError):
                await upload_image(source, settings, client)

    async def test_timeout(self, settings, source):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as client:
            with pytest.raises(UploadFailedError, match="timed out") as exc_info:
                await upload_image(source, settings, client)
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    async def test_slow_response_hits_overall_deadline(self, source):
        settings = create_test_config(base_url="https://upload.test", timeout_ms=300)

        class DripStream(httpx.AsyncByteStream):
            async def __aiter__(self):
                for _ in range(20):
                    await asyncio.sleep(0.1)
                    yield b" "

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=DripStream())

        async with _client(handler) as client:
            with pytest.raises(UploadFailedError, match="timed out after 300 ms"):
                await upload_image(source, settings, client)

    async def test_redirect_not_followed(self, settings, source):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(
                307, headers={"location": "https://elsewhere.test/upload"}
            )

        async with _client(handler) as client:
            with pytest.raises(ServerError) as exc_info:
                await upload_image(source, settings, client)
        assert exc_info.value.status_code == 307
        assert calls == ["/api/upload"]


class TestUploadLogging:
    async def test_raw_body_logged_at_debug(self, settings, source):
        body = '{"url": "https://host/x.png"}'
        async with _client(
            lambda request: httpx.Response(200, text=body)
        ) as client:
            with capture_logs() as logs:
                await upload_image(source, settings, client)

        entries = [e for e in logs if e["event"] == "Upload response"]
        assert len(entries) == 1
        assert entries[0]["log_level"] == "debug"
        assert entries[0]["status_code"] == 200
        assert entries[0]["body"] == body

    async def test_raw_body_logged_before_parse_failure(self, settings, source):
        async with _client(
            lambda request: httpx.Response(200, text="not json")
        ) as client:
            with capture_logs() as logs:
                with pytest.raises(BadResponseError):
                    await upload_image(source, settings, client)

        assert any(
            e["event"] == "Upload response" and e["body"] == "not json" for e in logs
        )
