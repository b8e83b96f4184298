"""Tests for the FileID / DataKey codec."""

import itertools
import json

import pytest

from skydb.errors import EncodingError
from skydb.wire import (
    FileID,
    FileType,
    build_file_id,
    decode_file_id,
    encode_file_id,
)


class TestBuildFileID:
    """Test FileID construction."""

    def test_defaults(self):
        fid = build_file_id("SkySkapp", FileType.PUBLIC_UNENCRYPTED, "foo.txt")
        assert fid.version == 1
        assert fid.application_id == "SkySkapp"
        assert fid.file_type is FileType.PUBLIC_UNENCRYPTED
        assert fid.filename == "foo.txt"

    def test_int_file_type_normalized(self):
        fid = build_file_id("app", 1, "f")
        assert fid.file_type is FileType.PUBLIC_UNENCRYPTED

    @pytest.mark.parametrize("kwargs", [
        {"application_id": "", "file_type": FileType.PUBLIC_UNENCRYPTED, "filename": "f"},
        {"application_id": "app", "file_type": FileType.PUBLIC_UNENCRYPTED, "filename": ""},
        {"application_id": "app", "file_type": FileType.INVALID, "filename": "f"},
        {"application_id": "app", "file_type": 99, "filename": "f"},
        {"application_id": "app", "file_type": FileType.PUBLIC_UNENCRYPTED, "filename": "f", "version": 0},
    ])
    def test_invalid_fields_rejected(self, kwargs):
        with pytest.raises(EncodingError):
            build_file_id(**kwargs)

    def test_immutable(self, file_id):
        with pytest.raises(AttributeError):
            file_id.filename = "bar.txt"


class TestEncodeFileID:
    """Test canonical DataKey encoding."""

    def test_wire_format(self, file_id):
        """Matches the fileid string other clients send."""
        expected = json.dumps({
            "version": 1,
            "applicationid": "SkySkapp",
            "filetype": 1,
            "filename": "foo.txt",
        }, separators=(",", ":"))
        assert encode_file_id(file_id) == expected.encode("ascii")
        assert str(file_id) == expected

    def test_deterministic(self, file_id):
        copy = build_file_id("SkySkapp", FileType.PUBLIC_UNENCRYPTED, "foo.txt")
        assert encode_file_id(file_id) == encode_file_id(copy)

    def test_non_ascii_written_as_utf8(self):
        """Same bytes as JSON.stringify: raw UTF-8, no \\u escapes."""
        fid = build_file_id("アプリ", FileType.PUBLIC_UNENCRYPTED, "naïve.txt")
        key = encode_file_id(fid)
        expected = '{"version":1,"applicationid":"アプリ","filetype":1,"filename":"naïve.txt"}'
        assert key == expected.encode("utf-8")
        assert str(fid) == expected
        assert decode_file_id(key) == fid

    def test_lone_surrogate_rejected(self):
        fid = build_file_id("app", FileType.PUBLIC_UNENCRYPTED, "bad\ud800.txt")
        with pytest.raises(EncodingError):
            encode_file_id(fid)

    def test_escaped_form_not_canonical(self):
        """The \\u-escaped spelling of a non-ASCII name is a different key."""
        raw = b'{"version":1,"applicationid":"app","filetype":1,"filename":"na\\u00efve.txt"}'
        with pytest.raises(EncodingError):
            decode_file_id(raw)

    def test_injective(self):
        """Distinct tuples never share a key, including quote/separator tricks."""
        apps = ["a", "ab", 'a"', "a,b", "a\\"]
        names = ["b", "", "c", '","filename":"b', "b}"]
        keys = {}
        for version, app, name in itertools.product([1, 2], apps, names):
            if not name:
                continue
            fid = build_file_id(app, FileType.PUBLIC_UNENCRYPTED, name, version=version)
            key = encode_file_id(fid)
            assert key not in keys, (fid, keys.get(key))
            keys[key] = fid


class TestDecodeFileID:
    """Test DataKey parsing."""

    def test_roundtrip(self, file_id):
        assert decode_file_id(encode_file_id(file_id)) == file_id

    @pytest.mark.parametrize("raw", [
        b'{"applicationid":"SkySkapp","version":1,"filetype":1,"filename":"foo.txt"}',
        b'{"version": 1, "applicationid": "SkySkapp", "filetype": 1, "filename": "foo.txt"}',
        b'{"version":1,"applicationid":"SkySkapp","filetype":1}',
        b'not json',
        b'[1, "SkySkapp", 1, "foo.txt"]',
        b'\xff\xfe',
    ])
    def test_non_canonical_rejected(self, raw):
        with pytest.raises(EncodingError):
            decode_file_id(raw)

    def test_direct_construction_validated_on_encode(self):
        fid = FileID(version=1, application_id="", file_type=FileType.PUBLIC_UNENCRYPTED, filename="f")
        with pytest.raises(EncodingError):
            encode_file_id(fid)
