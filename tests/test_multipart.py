import pytest

from otahub.services.errors import ValidationFailed
from otahub.services.multipart import UploadDecoder, decode_upload, extract_boundary

BOUNDARY = "----otahubBoundary7MA4YWxkTrZu0gW"


def build_body(fields: dict[str, str], file_part: tuple[str, bytes] | None = None) -> bytes:
    chunks = []
    for name, value in fields.items():
        chunks.append(
            f"--{BOUNDARY}\r\nContent-Disposition: form-data; name=\"{name}\"\r\n\r\n".encode()
            + value.encode("utf-8")
            + b"\r\n"
        )
    if file_part is not None:
        filename, content = file_part
        chunks.append(
            (
                f"--{BOUNDARY}\r\n"
                f"Content-Disposition: form-data; name=\"firmware\"; filename=\"{filename}\"\r\n"
                "Content-Type: application/octet-stream\r\n\r\n"
            ).encode()
            + content
            + b"\r\n"
        )
    chunks.append(f"--{BOUNDARY}--\r\n".encode())
    return b"".join(chunks)


def test_binary_part_is_byte_exact():
    # CRLFs, dashes and invalid UTF-8 must all survive untouched.
    payload = bytes(range(256)) + b"\r\n--" + b"\xff\xfe\x00" * 100 + b"\r\n"
    body = build_body({"version": "1.2.3"}, ("fw.bin", payload))

    upload = decode_upload(body, BOUNDARY)

    assert upload.binary == payload
    assert upload.filename == "fw.bin"


def test_scalar_fields_are_trimmed_and_defaulted():
    body = build_body({"version": "  2.0.0 \n", "changelog": " Fixes watchdog reset "}, ("a.bin", b"\x01"))

    upload = decode_upload(body, BOUNDARY)

    assert upload.version == "2.0.0"
    assert upload.changelog == "Fixes watchdog reset"
    assert upload.hardware_version == "all"
    assert upload.required is False


@pytest.mark.parametrize("raw,expected", [("true", True), ("on", True), ("1", True), ("false", False), ("", False)])
def test_required_flag(raw, expected):
    body = build_body({"version": "1.0.0", "required": raw, "hardware_version": "v2"}, ("a.bin", b"\x01"))

    upload = decode_upload(body, BOUNDARY)

    assert upload.required is expected
    assert upload.hardware_version == "v2"


def test_missing_boundary_fails():
    with pytest.raises(ValidationFailed):
        decode_upload(build_body({"version": "1.0.0"}, ("a.bin", b"\x01")), None)


def test_missing_version_fails():
    with pytest.raises(ValidationFailed, match="version"):
        decode_upload(build_body({"changelog": "x"}, ("a.bin", b"\x01")), BOUNDARY)


def test_missing_binary_fails():
    with pytest.raises(ValidationFailed, match="firmware data"):
        decode_upload(build_body({"version": "1.0.0"}), BOUNDARY)


def test_empty_binary_fails():
    with pytest.raises(ValidationFailed):
        decode_upload(build_body({"version": "1.0.0"}, ("a.bin", b"")), BOUNDARY)


def test_extract_boundary():
    assert extract_boundary(f"multipart/form-data; boundary={BOUNDARY}") == BOUNDARY
    assert extract_boundary('multipart/form-data; boundary="quoted-token"') == "quoted-token"
    assert extract_boundary("application/json") is None
    assert extract_boundary(None) is None


def test_unquoted_and_extended_disposition_params():
    body = (
        f"--{BOUNDARY}\r\nContent-Disposition: form-data; name=version\r\n\r\n3.1.0\r\n"
        f"--{BOUNDARY}\r\nContent-Disposition: form-data; name=firmware; filename*=UTF-8''fw.bin\r\n\r\n"
    ).encode() + b"\x10\x20" + f"\r\n--{BOUNDARY}--\r\n".encode()

    upload = decode_upload(body, BOUNDARY)

    assert upload.version == "3.1.0"
    assert upload.filename == "fw.bin"
    assert upload.binary == b"\x10\x20"


def test_incremental_feed_matches_whole_body():
    payload = bytes(range(256)) * 40
    body = build_body({"version": "4.0.0", "changelog": "chunked"}, ("fw.bin", payload))
    decoder = UploadDecoder(BOUNDARY)

    for offset in range(0, len(body), 7):
        decoder.feed(body[offset:offset + 7])
    upload = decoder.finish()

    assert upload == decode_upload(body, BOUNDARY)
    assert upload.binary == payload


def test_malformed_body_fails():
    with pytest.raises(ValidationFailed):
        decode_upload(b"this is not multipart at all", BOUNDARY)
