# skydb/wire/file_id.py
"""
SkyDB Wire: FileID / DataKey codec

A FileID names one application file of one user. Its canonical
serialization is the registry DataKey ("tweak") and the `fileid` field sent
to the portal, so every implementation must produce identical bytes.

Wire Format:
    Compact JSON, fixed key order, UTF-8:

    {"version":1,"applicationid":"SkySkapp","filetype":1,"filename":"foo.txt"}

    - No whitespace, no optional fields, no key reordering
    - filetype is the integer code of FileType
    - Non-ASCII characters are written as raw UTF-8, not \\u-escaped
    - Strings holding lone surrogates have no UTF-8 form and are rejected

Usage:
    fid = build_file_id("SkySkapp", FileType.PUBLIC_UNENCRYPTED, "foo.txt")
    key = encode_file_id(fid)
    assert decode_file_id(key) == fid
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict

from ..errors import EncodingError


# =============================================================================
# Constants
# =============================================================================

FILE_ID_VERSION = 1

# Field order is part of the format
FIELD_ORDER = ("version", "applicationid", "filetype", "filename")


class FileType(IntEnum):
    """File type codes (shared with other SkyDB clients)."""
    INVALID = 0
    PUBLIC_UNENCRYPTED = 1


# =============================================================================
# FileID
# =============================================================================

@dataclass(frozen=True)
class FileID:
    """
    Identifier of an application file.

    Attributes:
        version: FileID format version (currently 1)
        application_id: Application namespace, e.g. "SkySkapp"
        file_type: FileType code
        filename: File name within the application
    """
    version: int
    application_id: str
    file_type: FileType
    filename: str

    def to_dict(self) -> Dict[str, Any]:
        """Wire dict in canonical field order."""
        return {
            "version": self.version,
            "applicationid": self.application_id,
            "filetype": int(self.file_type),
            "filename": self.filename,
        }

    def to_bytes(self) -> bytes:
        """Canonical DataKey bytes."""
        return encode_file_id(self)

    def __str__(self) -> str:
        return encode_file_id(self).decode("utf-8")


def _validate(version: Any, application_id: Any, file_type: Any, filename: Any) -> FileType:
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise EncodingError(f"Invalid FileID version: {version!r}")
    if not isinstance(application_id, str) or not application_id:
        raise EncodingError("applicationID must be a non-empty string")
    if not isinstance(filename, str) or not filename:
        raise EncodingError("filename must be a non-empty string")
    if isinstance(file_type, bool):
        raise EncodingError(f"Invalid file type: {file_type!r}")
    try:
        ftype = FileType(file_type)
    except ValueError:
        raise EncodingError(f"Unknown file type: {file_type!r}") from None
    if ftype == FileType.INVALID:
        raise EncodingError("File type must not be INVALID")
    return ftype


def build_file_id(
    application_id: str,
    file_type: FileType,
    filename: str,
    version: int = FILE_ID_VERSION,
) -> FileID:
    """
    Create a validated FileID.

    Raises:
        EncodingError: On empty names, unknown/INVALID file type or version < 1
    """
    ftype = _validate(version, application_id, file_type, filename)
    return FileID(
        version=version,
        application_id=application_id,
        file_type=ftype,
        filename=filename,
    )


# =============================================================================
# Codec
# =============================================================================

def encode_file_id(file_id: FileID) -> bytes:
    """Serialize a FileID to its canonical DataKey."""
    _validate(file_id.version, file_id.application_id, file_id.file_type, file_id.filename)
    text = json.dumps(
        file_id.to_dict(),
        separators=(",", ":"),
        ensure_ascii=False,
    )
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(f"FileID is not encodable as UTF-8: {e}") from e


def decode_file_id(data: bytes) -> FileID:
    """
    Parse a DataKey back into a FileID.

    Only canonical encodings are accepted: the result must re-encode to
    exactly the input bytes.
    """
    try:
        obj = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise EncodingError(f"DataKey is not canonical JSON: {e}") from e

    if not isinstance(obj, dict) or tuple(obj.keys()) != FIELD_ORDER:
        raise EncodingError(f"DataKey fields must be exactly {FIELD_ORDER}")

    file_id = build_file_id(
        application_id=obj["applicationid"],
        file_type=obj["filetype"],
        filename=obj["filename"],
        version=obj["version"],
    )
    if encode_file_id(file_id) != data:
        raise EncodingError("DataKey is not in canonical form")
    return file_id
