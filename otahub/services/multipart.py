"""Decoder for multipart/form-data firmware upload bodies.

Parsing is delegated to python-multipart's streaming ``MultipartParser``;
part bodies are collected as raw bytes so firmware images come through
untouched. Only scalar fields are decoded to text.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from otahub.models.firmware import WILDCARD_HARDWARE
from otahub.services.errors import ValidationFailed

_TRUE_VALUES = {"true", "on", "1", "yes"}


@dataclass(frozen=True)
class DecodedUpload:
    binary: bytes
    filename: str
    version: str
    changelog: str
    hardware_version: str
    required: bool


@dataclass
class _Part:
    headers: dict[bytes, bytes] = field(default_factory=dict)
    content: bytearray = field(default_factory=bytearray)
    name: str | None = None
    filename: str | None = None


def extract_boundary(content_type: str | None) -> str | None:
    if not content_type:
        return None
    try:
        media_type, params = parse_options_header(content_type)
    except ValueError:
        return None
    if media_type.lower() != b"multipart/form-data":
        return None
    boundary = params.get(b"boundary")
    return boundary.decode("latin-1") if boundary else None


class UploadDecoder:
    """Incremental decoder: ``feed`` body chunks as they arrive, then ``finish``.

    Raises:
        ValidationFailed: boundary missing, body malformed, or no binary /
            version supplied.
    """

    def __init__(self, boundary: str | None):
        if not boundary:
            raise ValidationFailed("Multipart boundary missing")
        self.parts: list[_Part] = []
        self._part: _Part | None = None
        self._header_field = bytearray()
        self._header_value = bytearray()
        self._parser = MultipartParser(
            boundary,
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
            },
        )

    def _on_part_begin(self) -> None:
        self._part = _Part()

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._part.content.extend(data[start:end])

    def _on_part_end(self) -> None:
        self.parts.append(self._part)
        self._part = None

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field.extend(data[start:end])

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value.extend(data[start:end])

    def _on_header_end(self) -> None:
        self._part.headers[bytes(self._header_field).lower()] = bytes(self._header_value)
        self._header_field.clear()
        self._header_value.clear()

    def _on_headers_finished(self) -> None:
        disposition = self._part.headers.get(b"content-disposition", b"")
        try:
            _, params = parse_options_header(disposition)
        except ValueError as exc:
            raise ValidationFailed("Malformed Content-Disposition header") from exc
        name = params.get(b"name")
        filename = params.get(b"filename")
        self._part.name = name.decode("latin-1") if name is not None else None
        self._part.filename = filename.decode("latin-1") if filename is not None else None

    def feed(self, chunk: bytes) -> None:
        try:
            self._parser.write(chunk)
        except MultipartParseError as exc:
            raise ValidationFailed(f"Malformed multipart body: {exc}") from exc

    def finish(self) -> DecodedUpload:
        self._parser.finalize()

        file_part = next((part for part in self.parts if part.filename is not None), None)
        fields = {part.name: part for part in self.parts if part.filename is None and part.name}

        if file_part is None or not file_part.content:
            raise ValidationFailed("No firmware data received")

        version = _text(fields.get("version"))
        if not version:
            raise ValidationFailed("No version provided")

        return DecodedUpload(
            binary=bytes(file_part.content),
            filename=file_part.filename or "",
            version=version,
            changelog=_text(fields.get("changelog")),
            hardware_version=_text(fields.get("hardware_version")) or WILDCARD_HARDWARE,
            required=_text(fields.get("required")).lower() in _TRUE_VALUES,
        )


def _text(part: _Part | None) -> str:
    if part is None:
        return ""
    return part.content.decode("utf-8", errors="replace").strip()


def decode_upload(body: bytes, boundary: str | None) -> DecodedUpload:
    """Extract the firmware binary and its metadata fields from a complete body."""
    decoder = UploadDecoder(boundary)
    decoder.feed(body)
    return decoder.finish()
