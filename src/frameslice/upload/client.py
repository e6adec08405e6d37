"""
Image Upload Clients
====================

Uploaders that turn encoded slice bytes into public image URLs.

Components:
    - ImageUploader: Protocol every backend implements
    - KlaviyoImageUploader: Klaviyo Images API (production)
    - MockImageUploader: Deterministic URLs, no network (local runs, tests)

Design Rules:
    - One uploader instance is bound to one credential
    - An upload is a single fallible call: no retries, no backoff
    - Every failure surfaces as UploadFailedError with the API's detail
"""

import asyncio
import base64
import hashlib
import logging
from typing import Any, List, Optional, Protocol, Tuple

import requests

from frameslice.errors import UploadFailedError


logger = logging.getLogger(__name__)


KLAVIYO_IMAGES_URL = "https://a.klaviyo.com/api/images/"
JSON_API_MIME = "application/vnd.api+json"


class ImageUploader(Protocol):
    """
    Protocol for upload backends.

    All implementations must provide an async `upload_image` method that
    returns the public URL of the stored image.
    """

    async def upload_image(self, name: str, data: bytes, mime_type: str) -> str:
        """
        Upload one encoded image.

        Args:
            name: Display name in the image library
            data: Encoded image bytes
            mime_type: MIME type of data

        Returns:
            Publicly resolvable image URL

        Raises:
            UploadFailedError: On any failure
        """
        ...


def extract_error_text(payload: Any, fallback: str) -> str:
    """Pull the most specific error message out of an API error body."""
    if isinstance(payload, dict):
        errors = payload.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            detail = errors[0].get("detail")
            if detail:
                return str(detail)
        if payload.get("error"):
            return str(payload["error"])
    return fallback


class KlaviyoImageUploader:
    """
    Uploader for the Klaviyo Images API.

    Images are sent inline as a data URL through `import_from_url`. The
    blocking HTTP call runs in a worker thread.

    Attributes:
        endpoint: Images API URL
        revision: API revision header value
        timeout_seconds: Transport timeout per request
    """

    def __init__(
        self,
        api_key: str,
        revision: str = "2025-10-15",
        endpoint: str = KLAVIYO_IMAGES_URL,
        timeout_seconds: float = 60.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize uploader.

        Args:
            api_key: Private API key of the account
            revision: Klaviyo API revision
            endpoint: Images API URL
            timeout_seconds: Transport timeout per request
            session: Optional caller-owned requests session; module-level
                requests.post is used when omitted
        """
        if not api_key:
            raise ValueError("api_key is required")

        self._api_key = api_key
        self.revision = revision
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self._session = session
        self._upload_count: int = 0

    def _headers(self) -> dict:
        return {
            "Authorization": f"Klaviyo-API-Key {self._api_key}",
            "accept": JSON_API_MIME,
            "content-type": JSON_API_MIME,
            "revision": self.revision,
        }

    @staticmethod
    def build_payload(name: str, data: bytes, mime_type: str) -> dict:
        """JSON:API body for an inline image import."""
        encoded = base64.b64encode(data).decode("ascii")
        return {
            "data": {
                "type": "image",
                "attributes": {
                    "name": name,
                    "import_from_url": f"data:{mime_type};base64,{encoded}",
                },
            }
        }

    def _post(self, name: str, data: bytes, mime_type: str) -> str:
        post = self._session.post if self._session is not None else requests.post
        try:
            response = post(
                self.endpoint,
                headers=self._headers(),
                json=self.build_payload(name, data, mime_type),
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise UploadFailedError(f"Image upload failed: {e}")

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            raise UploadFailedError(
                f"Image upload failed: {extract_error_text(body, f'HTTP {response.status_code}')}"
            )

        image_url = None
        if isinstance(body, dict):
            image_url = (((body.get("data") or {}).get("attributes")) or {}).get("image_url")
        if not image_url:
            raise UploadFailedError("Image uploaded but image_url missing from Klaviyo response")

        return str(image_url)

    async def upload_image(self, name: str, data: bytes, mime_type: str) -> str:
        """Upload one image and return its public URL."""
        image_url = await asyncio.to_thread(self._post, name, data, mime_type)
        self._upload_count += 1
        logger.info(f"Uploaded {name} ({len(data)} bytes, {mime_type})")
        return image_url

    @property
    def upload_count(self) -> int:
        """Total successful uploads."""
        return self._upload_count


class MockImageUploader:
    """
    Deterministic uploader for local runs and tests.

    Returns a URL derived from the name and a content hash, and records
    every call in order.

    Attributes:
        base_url: Prefix of generated URLs
        uploads: (name, mime_type, size) per call, in call order
        fail_on: Name that triggers an UploadFailedError
    """

    def __init__(
        self,
        base_url: str = "https://images.example.test",
        fail_on: Optional[str] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.fail_on = fail_on
        self.uploads: List[Tuple[str, str, int]] = []

    async def upload_image(self, name: str, data: bytes, mime_type: str) -> str:
        if self.fail_on is not None and name == self.fail_on:
            raise UploadFailedError(f"Image upload failed: mock rejection for {name}")

        await asyncio.sleep(0)
        self.uploads.append((name, mime_type, len(data)))

        digest = hashlib.sha1(data).hexdigest()[:12]
        ext = "png" if mime_type == "image/png" else "jpg"
        return f"{self.base_url}/{name}-{digest}.{ext}"
