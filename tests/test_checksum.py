from otahub.services.checksum import digest, verify


def test_digest_known_vectors():
    assert digest(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    assert digest(b"abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_digest_is_deterministic_and_hex():
    data = bytes(range(256)) * 64

    first = digest(data)

    assert first == digest(bytes(data))
    assert len(first) == 64
    assert all(char in "0123456789abcdef" for char in first)


def test_digest_differs_for_different_content():
    assert digest(b"\xff" * 16) != digest(b"\xff" * 15 + b"\xfe")


def test_verify_accepts_uppercase_digest():
    data = b"firmware image"

    assert verify(data, digest(data).upper()) is True
    assert verify(data + b"!", digest(data)) is False


def test_verify_rejects_non_ascii_expected():
    assert verify(b"x", "\u00e9" * 64) is False
