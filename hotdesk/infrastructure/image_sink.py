"""
Floor-plan image storage.

The core only needs `upload(name, content) -> opaque_id` and a deterministic
way to turn that id into a direct download URL. Two bindings exist: a local
directory (development, tests) and a remote HTTP upload endpoint.
"""
from __future__ import annotations

import re
import uuid
from pathlib import Path
from typing import BinaryIO

import httpx
import structlog
from PIL import Image, UnidentifiedImageError

from hotdesk.core.errors import UpstreamFault
from hotdesk.infrastructure.config import ImageSinkSettings

logger = structlog.get_logger(__name__)

MAX_IMAGE_BYTES = 6 << 20
ACCEPTED_IMAGE_TYPES = {"image/png", "image/jpeg"}


def sniff_image_type(content: BinaryIO) -> str | None:
    """
    Detect the MIME type from the image bytes, ignoring any client-supplied
    content type. The stream is rewound afterwards.
    """
    try:
        with Image.open(content) as img:
            return Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        return None
    finally:
        content.seek(0)


class _TemplateUrls:
    def __init__(self, url_template: str) -> None:
        self._url_template = url_template

    def download_url(self, opaque_id: str) -> str:
        return self._url_template.format(id=opaque_id)


class LocalImageSink(_TemplateUrls):
    """Stores images under a local directory, keyed by a random id."""

    def __init__(self, directory: str | Path, url_template: str) -> None:
        super().__init__(url_template)
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def upload(self, name: str, content: BinaryIO) -> str:
        slug = re.sub(r"[^A-Za-z0-9_-]+", "-", name).strip("-") or "floor"
        opaque_id = f"{uuid.uuid4().hex}-{slug}"
        try:
            with (self.directory / opaque_id).open("wb") as f:
                f.write(content.read())
        except OSError as e:
            raise UpstreamFault(f"Failed to store floor plan {name!r}") from e
        return opaque_id


class HttpImageSink(_TemplateUrls):
    """
    Posts images as multipart to a remote upload endpoint that answers with
    a JSON object carrying the stored file's `id`.
    """

    def __init__(
        self,
        upload_url: str,
        url_template: str,
        *,
        api_token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(url_template)
        self._upload_url = upload_url
        self._api_token = api_token
        self._timeout = timeout
        self._transport = transport

    def upload(self, name: str, content: BinaryIO) -> str:
        headers = {"Authorization": f"Bearer {self._api_token}"} if self._api_token else {}
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(
                    self._upload_url,
                    headers=headers,
                    data={"name": name},
                    files={"file": (name, content)},
                )
                response.raise_for_status()
                opaque_id = response.json()["id"]
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.error("image_upload_failed", name=name, error=str(e))
            raise UpstreamFault(f"Failed to upload floor plan {name!r}") from e
        return str(opaque_id)


def build_image_sink(config: ImageSinkSettings) -> LocalImageSink | HttpImageSink:
    if config.provider == "http":
        if not config.upload_url:
            raise ValueError("image_sink.upload_url is required for the http provider")
        return HttpImageSink(
            config.upload_url,
            config.url_template,
            api_token=config.api_token,
            timeout=config.timeout_seconds,
        )
    if config.provider == "local":
        return LocalImageSink(config.directory, config.url_template)
    raise ValueError(f"Unknown image_sink.provider: {config.provider!r}")
