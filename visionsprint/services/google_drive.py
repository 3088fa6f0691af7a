"""
Google Drive video metadata lookups used to enforce the demo video length limit

Two ways of reading a file's metadata are tried in order: the user's OAuth
access token (from Google sign-in), then the server API key, which only works
for files shared as "Anyone with the link".
"""
import re
from typing import Any, Dict, Optional

import httpx

from visionsprint.core.config import get_settings
from visionsprint.core.logging_config import LoggingConfig
from visionsprint.core.metrics import drive_checks_total

logger = LoggingConfig.get_logger(__name__)

DRIVE_FILES_URL = "https://www.googleapis.com/drive/v3/files"
DRIVE_FIELDS = "name,mimeType,videoMediaMetadata"

_FILE_PATH_PATTERN = re.compile(r"(?:drive\.google\.com|docs\.google\.com)/file/d/([a-zA-Z0-9_-]+)")
_OPEN_ID_PATTERN = re.compile(r"drive\.google\.com/open\?id=([a-zA-Z0-9_-]+)")


def extract_drive_file_id(url: Optional[str]) -> Optional[str]:
    """
    Extract the file id from a Google Drive share URL

    Handles .../file/d/<id>/view (drive or docs host) and .../open?id=<id>.
    """
    if not url:
        return None
    match = _FILE_PATH_PATTERN.search(url) or _OPEN_ID_PATTERN.search(url)
    return match.group(1) if match else None


def format_duration(duration_ms: int) -> str:
    """Milliseconds to M:SS"""
    total_seconds = duration_ms // 1000
    return f"{total_seconds // 60}:{total_seconds % 60:02d}"


class GoogleDriveClient:
    """Reads video metadata from the Drive v3 files API"""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, api_key: Optional[str] = None):
        settings = get_settings()
        self.http_client = http_client
        self.api_key = api_key if api_key is not None else settings.google_api_key
        self.max_duration_ms = settings.max_video_duration_seconds * 1000

    async def get_video_metadata(self, file_id: str, access_token: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Fetch duration metadata for a Drive video

        Args:
            file_id: Drive file id
            access_token: User's Google OAuth access token, if any

        Returns:
            Dict with duration_ms, duration_formatted, width, height, file_name;
            None when neither the token nor the API key yields video metadata
        """
        url = f"{DRIVE_FILES_URL}/{file_id}"

        if access_token:
            metadata = await self._fetch_file(url, {"fields": DRIVE_FIELDS}, {"Authorization": f"Bearer {access_token}"})
            if metadata:
                return metadata
            logger.info("OAuth token gave no video metadata, trying API key")

        if self.api_key:
            metadata = await self._fetch_file(url, {"fields": DRIVE_FIELDS, "key": self.api_key}, {})
            if metadata:
                return metadata
            logger.info("API key gave no video metadata")
        else:
            logger.info("No Google API key configured, cannot check video without an OAuth token")

        return None

    async def _fetch_file(self, url: str, params: Dict[str, str], headers: Dict[str, str]) -> Optional[Dict[str, Any]]:
        try:
            if self.http_client is not None:
                response = await self.http_client.get(url, params=params, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Drive API request failed: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Drive API error {response.status_code}: {response.text[:200]}")
            return None

        data = response.json()
        video = data.get("videoMediaMetadata") or {}
        if not video.get("durationMillis"):
            logger.info(f"No video metadata for {data.get('name')} ({data.get('mimeType')})")
            return None

        duration_ms = int(video["durationMillis"])
        return {
            "duration_ms": duration_ms,
            "duration_formatted": format_duration(duration_ms),
            "width": video.get("width"),
            "height": video.get("height"),
            "file_name": data.get("name"),
        }

    async def validate_video_duration(self, video_url: str, access_token: Optional[str] = None) -> Dict[str, Any]:
        """
        Check that a Drive video is within the maximum length

        Videos whose length cannot be read are accepted with a warning.

        Returns:
            {"valid": bool} plus "error", "warning" and/or "duration_formatted"
        """
        file_id = extract_drive_file_id(video_url)
        if not file_id:
            drive_checks_total.labels(outcome="unknown").inc()
            return {"valid": True, "warning": "Could not extract file ID from URL"}

        metadata = await self.get_video_metadata(file_id, access_token)
        if not metadata:
            drive_checks_total.labels(outcome="unknown").inc()
            return {
                "valid": True,
                "warning": 'Could not read video metadata. Make sure the file is shared as "Anyone with the link can view".',
            }

        if metadata["duration_ms"] > self.max_duration_ms:
            drive_checks_total.labels(outcome="too_long").inc()
            return {
                "valid": False,
                "error": (
                    f"Video is {metadata['duration_formatted']} long. "
                    f"Maximum allowed is {format_duration(self.max_duration_ms)}."
                ),
                "duration_formatted": metadata["duration_formatted"],
            }

        drive_checks_total.labels(outcome="valid").inc()
        return {"valid": True, "duration_formatted": metadata["duration_formatted"]}
