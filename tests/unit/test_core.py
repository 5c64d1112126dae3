"""Unit tests for chunkshare domain layer."""

import pytest
from datetime import datetime, timezone

from chunkshare.domain.entities.chunk import Chunk
from chunkshare.domain.entities.file_object import FileObject, ReconstructedFileObject, preview_kind
from chunkshare.domain.errors import ChunkShareError, IncompleteObject, NotFound, PermissionDenied, ValidationError
from chunkshare.domain.services.access_control import AccessView, ShareAccessController, can_read
from chunkshare.domain.services.chunk_splitter import chunk_at, chunk_count_for, split_chunks
from chunkshare.domain.services.content_sniffer import OCTET_STREAM, sniff_content_type
from chunkshare.domain.services.gateway_errors import to_core_error
from chunkshare.domain.services.metadata_reconciler import MetadataReconciler, reconstruct_metadata
from chunkshare.domain.services.reassembler import reassemble
from chunkshare.domain.value_objects.identifiers import (
    create_file_id,
    filename_from_file_id,
    is_anonymous,
    sanitize_filename,
)
from chunkshare.domain.value_objects.share_link import build_share_link, parse_share_link
from chunkshare.ports.outbound import (
    GatewayError,
    InvalidChunkError,
    NotOwnerError,
    UnauthenticatedError,
    UnknownObjectError,
)


def make_chunks(file_id: str, data: bytes, chunk_size: int) -> list[Chunk]:
    """Split data into chunk entities."""
    count = chunk_count_for(len(data), chunk_size)
    return [
        Chunk(file_id=file_id, chunk_index=index, data=part, size=len(part), chunk_count=count)
        for index, part in split_chunks(data, chunk_size)
    ]


@pytest.mark.unit
class TestChunkSplitter:
    """Test chunk splitting."""

    @pytest.mark.parametrize(
        "size,chunk_size,expected",
        [
            (0, 10, 1),
            (1, 10, 1),
            (10, 10, 1),
            (11, 10, 2),
            (1_200_000, 500_000, 3),
        ],
    )
    def test_chunk_count(self, size, chunk_size, expected):
        """Test chunk count is the ceiling, and at least one."""
        assert chunk_count_for(size, chunk_size) == expected

    def test_split_sizes(self):
        """Test every chunk is full except possibly the last."""
        data = bytes(range(256)) * 4  # 1024 bytes
        parts = list(split_chunks(data, 300))
        assert [index for index, _ in parts] == [0, 1, 2, 3]
        assert [len(part) for _, part in parts] == [300, 300, 300, 124]
        assert b"".join(part for _, part in parts) == data

    def test_empty_input_yields_one_empty_chunk(self):
        """Test empty data splits into one empty chunk."""
        assert list(split_chunks(b"", 10)) == [(0, b"")]

    def test_rejects_non_positive_chunk_size(self):
        """Test chunk size validation."""
        with pytest.raises(ValueError):
            list(split_chunks(b"abc", 0))

    def test_chunk_at(self):
        """Test single chunk extraction."""
        data = b"abcdefghij"
        assert chunk_at(data, 1, 4) == b"efgh"
        assert chunk_at(data, 2, 4) == b"ij"
        with pytest.raises(IndexError):
            chunk_at(data, 3, 4)


@pytest.mark.unit
class TestContentSniffer:
    """Test content-type sniffing."""

    @pytest.mark.parametrize(
        "head,expected",
        [
            (b"\xff\xd8\xff\xe0" + b"\x00" * 8, "image/jpeg"),
            (b"\x89PNG\r\n\x1a\n" + b"\x00" * 4, "image/png"),
            (b"GIF89a" + b"\x00" * 6, "image/gif"),
            (b"RIFF\x00\x00\x00\x00WEBP", "image/webp"),
            (b"\x00\x00\x00\x18ftypmp42", "video/mp4"),
            (b"\x01\x02\x03\x04ftypisom", "video/mp4"),
            (b"\x00\x00\x00\x01" + b"\xff" * 8, "video/mp4"),
            (b"\x00" * 12, "video/mp4"),
            (b"%PDF-1.7" + b"\x00" * 4, OCTET_STREAM),
            (b"", OCTET_STREAM),
        ],
    )
    def test_signatures(self, head, expected):
        """Test each signature rule."""
        assert sniff_content_type(head) == expected

    def test_short_input_only_matches_covered_rules(self):
        """Test inputs shorter than a rule do not match it."""
        assert sniff_content_type(b"\x89PN") == OCTET_STREAM
        assert sniff_content_type(b"\x01\x02\x03\x04ft") == OCTET_STREAM

    def test_first_match_wins(self):
        """Test JPEG magic wins over a later ftyp marker."""
        assert sniff_content_type(b"\xff\xd8\xff\x00ftyp" + b"\x00" * 4) == "image/jpeg"


@pytest.mark.unit
class TestReassembler:
    """Test reassembly."""

    def test_reassemble_any_order(self):
        """Test chunks are concatenated by index regardless of order."""
        data = b"0123456789" * 5
        chunks = make_chunks("f_1", data, 7)
        assert reassemble("f_1", list(reversed(chunks))) == data

    @pytest.mark.parametrize("chunk_size", [1, 7, 500_000])
    def test_split_then_reassemble(self, chunk_size):
        """Test reassembly restores split data for any chunk size."""
        data = bytes(range(256)) * 40
        assert reassemble("f_1", make_chunks("f_1", data, chunk_size)) == data

    def test_missing_index_two_of_five(self):
        """Test a set missing index 2 of 5 is never returned short."""
        chunks = make_chunks("f_1", b"z" * 50, 10)
        chunks = [chunk for chunk in chunks if chunk.chunk_index != 2]
        with pytest.raises(IncompleteObject) as exc_info:
            reassemble("f_1", chunks)
        assert exc_info.value.missing == [2]

    def test_duplicate_index_last_write_wins(self):
        """Test a later chunk with the same index replaces an earlier one."""
        chunks = make_chunks("f_1", b"aaaabbbb", 4)
        chunks.append(Chunk("f_1", 1, b"cccc", 4, 2))
        assert reassemble("f_1", chunks) == b"aaaacccc"

    def test_missing_chunk_rejected(self):
        """Test a gap is reported with the missing indices."""
        chunks = make_chunks("f_1", b"x" * 30, 10)
        del chunks[1]
        with pytest.raises(IncompleteObject) as exc_info:
            reassemble("f_1", chunks)
        assert exc_info.value.missing == [1]

    def test_declared_count_beyond_stored(self):
        """Test an explicit count larger than the stored chunks."""
        chunks = make_chunks("f_1", b"x" * 20, 10)
        with pytest.raises(IncompleteObject) as exc_info:
            reassemble("f_1", chunks, chunk_count=4)
        assert exc_info.value.missing == [2, 3]

    def test_size_mismatch_rejected(self):
        """Test a chunk whose size disagrees with its payload."""
        chunks = [Chunk("f_1", 0, b"abc", 4, 1)]
        with pytest.raises(IncompleteObject):
            reassemble("f_1", chunks)

    def test_expected_size_checked(self):
        """Test the total is compared with the declared size."""
        chunks = make_chunks("f_1", b"x" * 20, 10)
        with pytest.raises(IncompleteObject):
            reassemble("f_1", chunks, expected_size=21)

    def test_no_chunks_rejected(self):
        """Test an empty chunk set."""
        with pytest.raises(IncompleteObject):
            reassemble("f_1", [])

    def test_empty_file(self):
        """Test a single empty chunk reassembles to empty bytes."""
        chunks = make_chunks("f_1", b"", 10)
        assert reassemble("f_1", chunks, expected_size=0) == b""


@pytest.mark.unit
class TestIdentifiers:
    """Test identifier helpers."""

    def test_sanitize_filename(self):
        assert sanitize_filename("my cat.png") == "my-cat.png"
        assert sanitize_filename("a/b\\c") == "a-b-c"
        assert sanitize_filename("") == "file"

    def test_create_file_id(self):
        assert create_file_id("cat.png", 1700000000) == "cat.png_1700000000"

    @pytest.mark.parametrize(
        "file_id,expected",
        [
            ("cat.png_1700000000", "cat.png"),
            ("my_cat.png_1700000000", "my_cat.png"),
            ("plainid", "plainid"),
            ("_123", "_123"),
        ],
    )
    def test_filename_from_file_id(self, file_id, expected):
        assert filename_from_file_id(file_id) == expected

    def test_is_anonymous(self):
        assert is_anonymous("anonymous")
        assert is_anonymous("")
        assert not is_anonymous("alice")


@pytest.mark.unit
class TestShareLink:
    """Test share link building and parsing."""

    def test_build(self):
        link = build_share_link("cat.png_1", "https://files.example.com/")
        assert link == "https://files.example.com/share/cat.png_1"

    def test_parse_recovers_id(self):
        link = build_share_link("cat.png_1", "http://localhost:3000")
        assert parse_share_link(link) == "cat.png_1"

    @pytest.mark.parametrize(
        "url",
        [
            "http://localhost:3000/files/cat.png_1",
            "http://localhost:3000/share/",
            "http://localhost:3000/share/a/b",
        ],
    )
    def test_parse_rejects_other_urls(self, url):
        with pytest.raises(ValueError):
            parse_share_link(url)

    def test_build_rejects_empty_id(self):
        with pytest.raises(ValueError):
            build_share_link("", "http://localhost:3000")


@pytest.mark.unit
class TestFileObject:
    """Test metadata entities."""

    def test_preview_kind(self):
        assert preview_kind("image/png") == "image"
        assert preview_kind("video/mp4") == "video"
        assert preview_kind("application/pdf") == "other"

    def test_authoritative_flags(self):
        obj = FileObject(id="f_1", filename="f", content_type="image/png", owner="alice", size=1, chunk_count=1)
        rebuilt = ReconstructedFileObject(id="f_1", filename="f", content_type="image/png", size=1, chunk_count=1)
        assert obj.authoritative is True
        assert rebuilt.authoritative is False
        assert rebuilt.owner is None
        assert rebuilt.is_shared is True

    def test_can_read(self):
        obj = FileObject(id="f_1", filename="f", content_type="image/png", owner="alice", size=1, chunk_count=1)
        assert can_read("alice", obj)
        assert not can_read("bob", obj)
        obj.is_shared = True
        assert can_read("bob", obj)


@pytest.mark.unit
class TestMetadataReconciler:
    """Test metadata reconstruction."""

    def test_reconstruct_from_chunks(self):
        """Test size, type and filename are rebuilt from chunk bytes."""
        data = b"\x89PNG" + b"x" * 96
        chunks = make_chunks("cat.png_17", data, 30)
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        metadata = reconstruct_metadata("cat.png_17", list(reversed(chunks)), now=now)
        assert metadata.size == 100
        assert metadata.content_type == "image/png"
        assert metadata.filename == "cat.png"
        assert metadata.chunk_count == 4
        assert metadata.uploaded == now
        assert metadata.download_count == 0

    def test_reconstruct_without_chunks(self):
        with pytest.raises(NotFound):
            reconstruct_metadata("cat.png_17", [])

    def test_reconcile_requires_published(self, owner_gateway, stranger_gateway):
        """Test an unshared file is not reconstructed."""
        file_id = owner_gateway.declare("cat.png", "image/png", 4, 1)
        owner_gateway.write_chunk(file_id, 0, b"\x89PNG", 4, 1)
        with pytest.raises(NotFound):
            MetadataReconciler(stranger_gateway).reconcile(file_id)

        owner_gateway.publish(file_id)
        metadata = MetadataReconciler(stranger_gateway).reconcile(file_id)
        assert metadata.content_type == "image/png"
        assert metadata.size == 4


@pytest.mark.unit
class TestShareAccessController:
    """Test read authorization."""

    def test_owner_view(self, owner_gateway):
        file_id = owner_gateway.declare("cat.png", "image/png", 4, 1)
        decision = ShareAccessController(owner_gateway).authorize_read(file_id)
        assert decision.view is AccessView.OWNER
        assert decision.metadata.id == file_id

    def test_stranger_denied_until_published(self, owner_gateway, stranger_gateway):
        file_id = owner_gateway.declare("cat.png", "image/png", 4, 1)
        controller = ShareAccessController(stranger_gateway)
        with pytest.raises(PermissionDenied):
            controller.authorize_read(file_id)

        owner_gateway.publish(file_id)
        decision = controller.authorize_read(file_id)
        assert decision.view is AccessView.SHARED
        assert decision.metadata is None

    def test_anonymous_skips_owner_lookup(self, owner_gateway, anonymous_gateway):
        file_id = owner_gateway.declare("cat.png", "image/png", 4, 1)
        controller = ShareAccessController(anonymous_gateway)
        assert controller.find_owned(file_id) is None
        owner_gateway.publish(file_id)
        assert controller.authorize_read(file_id).view is AccessView.SHARED

    def test_unknown_id_denied(self, stranger_gateway):
        with pytest.raises(PermissionDenied):
            ShareAccessController(stranger_gateway).authorize_read("missing_1")


@pytest.mark.unit
class TestGatewayErrorMapping:
    """Test gateway errors map onto core errors."""

    @pytest.mark.parametrize(
        "error,expected",
        [
            (UnknownObjectError("f_1"), NotFound),
            (NotOwnerError("f_1"), PermissionDenied),
            (UnauthenticatedError("anonymous"), PermissionDenied),
            (InvalidChunkError("bad"), ValidationError),
            (GatewayError("other"), ChunkShareError),
        ],
    )
    def test_mapping(self, error, expected):
        assert type(to_core_error(error, "f_1")) is expected
