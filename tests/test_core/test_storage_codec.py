# tests/test_core/test_storage_codec.py

import pytest

from repo_archive.core.storage_codec import from_storable, to_storable
from repo_archive.exceptions import CorruptPayload


def test_empty_round_trip():
    assert to_storable(b"") == ""
    assert from_storable("") == b""


def test_every_byte_value_round_trips():
    data = bytes(range(256))
    encoded = to_storable(data)

    assert isinstance(encoded, str)
    assert encoded.isascii()

    decoded = from_storable(encoded)
    assert len(decoded) == 256
    assert list(decoded) == list(range(256))


def test_accepts_bytearray_and_memoryview():
    data = bytearray(b"\x00\x01\xfe\xff")
    assert from_storable(to_storable(data)) == bytes(data)
    assert from_storable(to_storable(memoryview(bytes(data)))) == bytes(data)


@pytest.mark.parametrize("bad", ["not base64!", "abc", "éééé"])
def test_invalid_text_is_corrupt(bad):
    with pytest.raises(CorruptPayload):
        from_storable(bad)
