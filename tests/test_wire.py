"""SSH wire primitive tests."""

import pytest

from sshsign.errors import FormatError
from sshsign.sshsig.wire import WireReader, pack_mpint, pack_string, pack_uint32


def test_pack_string_prefixes_big_endian_length() -> None:
    assert pack_string("git") == b"\x00\x00\x00\x03git"
    assert pack_string(b"") == b"\x00\x00\x00\x00"


def test_pack_mpint_adds_sign_byte_for_high_bit() -> None:
    assert pack_mpint(0) == b"\x00\x00\x00\x00"
    assert pack_mpint(0x7F) == b"\x00\x00\x00\x01\x7f"
    assert pack_mpint(0x80) == b"\x00\x00\x00\x02\x00\x80"


def test_reader_reads_fields_in_order() -> None:
    data = b"SSHSIG" + pack_uint32(1) + pack_string(b"key") + pack_mpint(0x80)
    reader = WireReader(data)

    assert reader.read_bytes(6) == b"SSHSIG"
    assert reader.read_uint32() == 1
    assert reader.read_string() == b"key"
    assert reader.read_mpint() == 0x80
    reader.expect_end()


def test_reader_rejects_truncated_string() -> None:
    reader = WireReader(b"\x00\x00\x00\x10short")
    with pytest.raises(FormatError, match="truncated"):
        reader.read_string()


def test_reader_rejects_trailing_bytes() -> None:
    reader = WireReader(pack_string("git") + b"extra")
    reader.read_string()
    with pytest.raises(FormatError, match="trailing"):
        reader.expect_end()


def test_reader_rejects_invalid_utf8_text() -> None:
    with pytest.raises(FormatError, match="UTF-8"):
        WireReader(pack_string(b"\xff\xfe")).read_text()
