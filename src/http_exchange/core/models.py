"""Request-side data model: requests, single-payload and multipart bodies."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Tuple, Union
import os

from urllib3.fields import RequestField
from urllib3.filepost import encode_multipart_formdata

from .config import TimeoutConfig

SAFE_METHODS = frozenset({'GET', 'HEAD'})

DEFAULT_BINARY = "application/octet-stream"
TEXT_PLAIN = "text/plain"

BinaryData = Union[bytes, bytearray, str, os.PathLike, BinaryIO]


@dataclass(frozen=True)
class BytesBody:
    """Single payload with its content type."""

    content: bytes
    content_type: str = DEFAULT_BINARY

    def encode(self) -> Tuple[bytes, str]:
        return bytes(self.content), self.content_type


@dataclass(frozen=True)
class TextPart:
    """
    Text part of a multipart body.

    Attributes:
        name: Form field name
        value: Text value, encoded with ``charset``
        charset: Character set added to the part's Content-Type
        content_type: MIME type without parameters
    """

    name: str
    value: str
    charset: str = "utf-8"
    content_type: str = TEXT_PLAIN

    def to_field(self) -> RequestField:
        part = RequestField(name=self.name, data=self.value.encode(self.charset))
        part.make_multipart(content_type=f"{self.content_type}; charset={self.charset}")
        return part


@dataclass(frozen=True)
class BinaryPart:
    """
    Binary part of a multipart body.

    ``data`` may be raw bytes, a filesystem path or a readable binary stream.
    Paths and streams are read when the body is encoded.
    """

    name: str
    data: BinaryData
    filename: Optional[str] = None
    content_type: str = DEFAULT_BINARY

    def read(self) -> bytes:
        if isinstance(self.data, (bytes, bytearray)):
            return bytes(self.data)
        if isinstance(self.data, (str, os.PathLike)):
            return Path(self.data).read_bytes()
        return self.data.read()

    def resolved_filename(self) -> Optional[str]:
        if self.filename is not None:
            return self.filename
        if isinstance(self.data, (str, os.PathLike)):
            return Path(self.data).name
        stream_name = getattr(self.data, 'name', None)
        return os.path.basename(stream_name) if isinstance(stream_name, str) else None

    def to_field(self) -> RequestField:
        part = RequestField(name=self.name, data=self.read(), filename=self.resolved_filename())
        part.make_multipart(content_type=self.content_type)
        return part


Part = Union[TextPart, BinaryPart]


@dataclass
class MultipartBody:
    """
    Ordered multipart/form-data body.

    Parts keep the order they were added in. Encoding is delegated to
    urllib3's multipart encoder.

    Example:
        >>> body = (MultipartBody()
        ...         .add_file("file", "report.zip", content_type="application/zip")
        ...         .add_text("message", "This is message 1"))
        >>> payload, content_type = body.encode()
    """

    parts: List[Part] = field(default_factory=list)
    boundary: Optional[str] = None

    def add_text(
        self,
        name: str,
        value: str,
        charset: str = "utf-8",
        content_type: str = TEXT_PLAIN
    ) -> 'MultipartBody':
        self.parts.append(TextPart(name, value, charset=charset, content_type=content_type))
        return self

    def add_binary(
        self,
        name: str,
        data: BinaryData,
        filename: Optional[str] = None,
        content_type: str = DEFAULT_BINARY
    ) -> 'MultipartBody':
        self.parts.append(BinaryPart(name, data, filename=filename, content_type=content_type))
        return self

    def add_file(
        self,
        name: str,
        path: Union[str, os.PathLike],
        filename: Optional[str] = None,
        content_type: str = DEFAULT_BINARY
    ) -> 'MultipartBody':
        """Add a file from disk; filename defaults to the file's base name."""
        return self.add_binary(name, Path(path), filename=filename, content_type=content_type)

    def encode(self) -> Tuple[bytes, str]:
        """Return the encoded payload and its Content-Type header value."""
        if not self.parts:
            raise ValueError("multipart body has no parts")
        fields = [part.to_field() for part in self.parts]
        return encode_multipart_formdata(fields, boundary=self.boundary)


Body = Union[BytesBody, MultipartBody]


@dataclass
class Request:
    """
    A single HTTP request.

    Attributes:
        method: HTTP method, normalised to upper case
        url: Absolute URL, or a path relative to the client's base_url
        headers: Request headers
        body: Optional single payload or multipart body
        timeout: Per-request override of the client's timeout budget

    Example:
        >>> Request("POST", "/upload", body=MultipartBody().add_text("text", "hi"))
    """

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Body] = None
    timeout: Optional[TimeoutConfig] = None

    def __post_init__(self):
        self.method = self.method.upper()
        self.headers = dict(self.headers or {})

    def encode_body(self) -> Tuple[Optional[bytes], Optional[str]]:
        """Encode the body once so redirects can replay it."""
        if self.body is None:
            return None, None
        return self.body.encode()
