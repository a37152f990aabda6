"""HTTP clients for the transcription and notification services."""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional

import aiohttp

from ..errors import DeliveryFailure, NotificationFailure

logger = logging.getLogger(__name__)


def _is_success(status: int) -> bool:
    return 200 <= status < 300


class TranscriptionClient:
    """Sends one WAV file to a whisper-style HTTP endpoint and returns the transcript."""

    def __init__(self,
                 url: str,
                 content_type: str = "audio/wav",
                 headers: Optional[Dict[str, str]] = None,
                 response_field: Optional[str] = "text",
                 timeout_seconds: float = 120.0):
        """Initialize transcription client.

        Args:
            url: Transcription endpoint
            content_type: Content-Type sent with the raw WAV body
            headers: Extra request headers (e.g. authorization)
            response_field: JSON field holding the transcript; None reads the body as plain text
            timeout_seconds: Total timeout for one request
        """
        self.url = url
        self.content_type = content_type
        self.headers = dict(headers or {})
        self.response_field = response_field
        self.timeout_seconds = timeout_seconds

        logger.info(f"TranscriptionClient initialized with endpoint: {url}")

    async def transcribe(self, wav_path: Path) -> str:
        """Transcribe a saved recording.

        Raises:
            DeliveryFailure: On any non-2xx response, timeout, connection error
                or unreadable response body
        """
        try:
            wav_bytes = Path(wav_path).read_bytes()
        except OSError as e:
            raise DeliveryFailure(f"Failed to read WAV file {Path(wav_path).name}: {e}") from e

        headers = {"Content-Type": self.content_type}
        headers.update(self.headers)
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.url, data=wav_bytes, headers=headers) as response:
                    if not _is_success(response.status):
                        body = await response.text(errors="replace")
                        raise DeliveryFailure(
                            f"Transcription server returned error {response.status}: {body.strip()}")
                    return await self._read_transcript(response)
        except asyncio.TimeoutError as e:
            raise DeliveryFailure(f"Transcription request timed out after {self.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise DeliveryFailure(f"Failed to send request to transcription server: {e}") from e

    async def _read_transcript(self, response: aiohttp.ClientResponse) -> str:
        if not self.response_field:
            return (await response.text(errors="replace")).strip()

        try:
            payload = await response.json(content_type=None)
        except ValueError as e:
            raise DeliveryFailure(f"Failed to parse transcription response: {e}") from e

        if not isinstance(payload, dict) or not isinstance(payload.get(self.response_field), str):
            raise DeliveryFailure(
                f"Transcription response has no '{self.response_field}' field: {str(payload)[:200]}")
        return payload[self.response_field].strip()


class NotificationClient:
    """Posts plain-text push notifications (ntfy-style topic URL)."""

    def __init__(self,
                 url: str,
                 headers: Optional[Dict[str, str]] = None,
                 timeout_seconds: float = 10.0):
        self.url = url
        self.headers = dict(headers or {})
        self.timeout_seconds = timeout_seconds

        logger.info(f"NotificationClient initialized with endpoint: {url}")

    async def send(self, message: str, title: Optional[str] = None, priority: Optional[int] = None) -> None:
        """Send one notification. Never retried.

        Raises:
            NotificationFailure: If the request fails or returns a non-2xx status
        """
        headers = {"Content-Type": "text/plain; charset=utf-8"}
        headers.update(self.headers)
        if title:
            headers["X-Title"] = title
        if priority is not None:
            headers["X-Priority"] = str(priority)

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.url, data=message.encode("utf-8"), headers=headers) as response:
                    if not _is_success(response.status):
                        body = await response.text(errors="replace")
                        raise NotificationFailure(
                            f"Notification server returned status {response.status}: {body.strip()}")
        except asyncio.TimeoutError as e:
            raise NotificationFailure(f"Notification request timed out after {self.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise NotificationFailure(f"Failed to send notification: {e}") from e
