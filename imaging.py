"""Encoding of uploaded pictures into data URIs stored on documents."""
import base64
from typing import Optional, Protocol

from exceptions import ImageRequiredError

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class Upload(Protocol):
    content_type: Optional[str]

    async def read(self, size: int = -1) -> bytes: ...


def encode_data_url(content: bytes, content_type: Optional[str] = None) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type or DEFAULT_CONTENT_TYPE};base64,{encoded}"


async def read_as_data_url(upload: Upload, collection: str) -> str:
    """Read the whole upload and return it as a data URI.

    An empty file counts as no image at all.
    """
    content = await upload.read()
    if not content:
        raise ImageRequiredError(collection)
    return encode_data_url(content, upload.content_type)
