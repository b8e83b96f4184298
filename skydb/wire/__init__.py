# skydb/wire/__init__.py
"""
SkyDB Wire Formats

Modules:
    file_id: FileID and its canonical DataKey encoding

Usage:
    from skydb.wire import FileType, build_file_id, encode_file_id

    fid = build_file_id("SkySkapp", FileType.PUBLIC_UNENCRYPTED, "foo.txt")
    data_key = encode_file_id(fid)
"""

from .file_id import (
    FileID,
    FileType,
    FILE_ID_VERSION,
    FIELD_ORDER,
    build_file_id,
    encode_file_id,
    decode_file_id,
)

__all__ = [
    "FileID",
    "FileType",
    "FILE_ID_VERSION",
    "FIELD_ORDER",
    "build_file_id",
    "encode_file_id",
    "decode_file_id",
]
