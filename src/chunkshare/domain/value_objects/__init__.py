"""Domain value objects."""

from chunkshare.domain.value_objects.identifiers import (
    ANONYMOUS,
    FileId,
    Principal,
    create_file_id,
    filename_from_file_id,
    is_anonymous,
    sanitize_filename,
)
from chunkshare.domain.value_objects.share_link import build_share_link, parse_share_link

__all__ = [
    "ANONYMOUS",
    "FileId",
    "Principal",
    "create_file_id",
    "filename_from_file_id",
    "is_anonymous",
    "sanitize_filename",
    "build_share_link",
    "parse_share_link",
]
