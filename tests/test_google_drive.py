"""
Tests for Google Drive video duration checks
"""
import httpx
import pytest

from visionsprint.services.google_drive import (GoogleDriveClient,
                                                extract_drive_file_id,
                                                format_duration)

VIDEO_URL = "https://drive.google.com/file/d/1AbC_d-9/view?usp=sharing"


def video_response(duration_ms):
    return httpx.Response(200, json={
        "name": "demo.mp4",
        "mimeType": "video/mp4",
        "videoMediaMetadata": {"durationMillis": str(duration_ms), "width": 1920, "height": 1080},
    })


def drive_client(handler, api_key=None):
    return GoogleDriveClient(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        api_key=api_key,
    )


@pytest.mark.parametrize("url,expected", [
    (VIDEO_URL, "1AbC_d-9"),
    ("https://docs.google.com/file/d/xyz/edit", "xyz"),
    ("https://drive.google.com/open?id=abc-123", "abc-123"),
    ("https://www.youtube.com/watch?v=abc", None),
    ("", None),
    (None, None),
])
def test_extract_drive_file_id(url, expected):
    assert extract_drive_file_id(url) == expected


def test_format_duration():
    assert format_duration(0) == "0:00"
    assert format_duration(65_432) == "1:05"
    assert format_duration(240_000) == "4:00"
    assert format_duration(3_725_000) == "62:05"


async def test_metadata_with_access_token():
    def handler(request):
        assert request.url.path == "/drive/v3/files/1AbC_d-9"
        assert request.headers["Authorization"] == "Bearer user-token"
        assert request.url.params["fields"] == "name,mimeType,videoMediaMetadata"
        return video_response(95_000)

    metadata = await drive_client(handler).get_video_metadata("1AbC_d-9", "user-token")

    assert metadata == {
        "duration_ms": 95_000,
        "duration_formatted": "1:35",
        "width": 1920,
        "height": 1080,
        "file_name": "demo.mp4",
    }


async def test_metadata_falls_back_to_api_key():
    calls = []

    def handler(request):
        calls.append(request)
        if "Authorization" in request.headers:
            return httpx.Response(403, json={"error": {"message": "forbidden"}})
        assert request.url.params["key"] == "server-key"
        return video_response(30_000)

    metadata = await drive_client(handler, api_key="server-key").get_video_metadata("1AbC_d-9", "user-token")

    assert metadata["duration_formatted"] == "0:30"
    assert len(calls) == 2


async def test_metadata_missing_without_video_fields():
    def handler(request):
        return httpx.Response(200, json={"name": "slides.pdf", "mimeType": "application/pdf"})

    assert await drive_client(handler, api_key="server-key").get_video_metadata("abc") is None


async def test_validate_too_long():
    result = await drive_client(lambda request: video_response(241_000), api_key="k").validate_video_duration(VIDEO_URL)

    assert result == {
        "valid": False,
        "error": "Video is 4:01 long. Maximum allowed is 4:00.",
        "duration_formatted": "4:01",
    }


async def test_validate_within_limit():
    result = await drive_client(lambda request: video_response(240_000), api_key="k").validate_video_duration(VIDEO_URL)

    assert result == {"valid": True, "duration_formatted": "4:00"}


async def test_validate_unreadable_video_is_accepted_with_warning():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    result = await drive_client(handler, api_key="k").validate_video_duration(VIDEO_URL, "token")

    assert result["valid"] is True
    assert "Anyone with the link" in result["warning"]


async def test_validate_unrecognised_url():
    result = await drive_client(lambda request: video_response(1)).validate_video_duration("https://vimeo.com/1")

    assert result == {"valid": True, "warning": "Could not extract file ID from URL"}
