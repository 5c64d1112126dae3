"""Integration tests for the file lifecycle through the file share service."""

import pytest

from chunkshare.adapters.outbound.memory_gateway import InMemoryStorageGateway
from chunkshare.application.file_share_service import FileShareService
from chunkshare.domain.errors import ChunkUploadFailed, GatewayUnavailable, IncompleteObject, PermissionDenied
from chunkshare.domain.services.reassembler import reassemble
from chunkshare.infrastructure.config import Config, UploadConfig

PNG_MAGIC = b"\x89PNG"


def make_cat_png() -> bytes:
    """Create a 1,200,000-byte PNG-looking payload."""
    body = bytes(range(256)) * (1_200_000 // 256 + 1)
    return (PNG_MAGIC + body)[:1_200_000]


@pytest.mark.integration
class TestSharedFileScenario:
    """Declare, write, finalize, publish and read back as a stranger."""

    def test_gateway_level_scenario(self, owner_gateway, stranger_gateway):
        """Test the raw gateway protocol end to end."""
        data = make_cat_png()
        file_id = owner_gateway.declare("cat.png", "image/png", len(data), 3)

        for index, (start, end) in enumerate([(0, 500_000), (500_000, 1_000_000), (1_000_000, 1_200_000)]):
            part = data[start:end]
            owner_gateway.write_chunk(file_id, index, part, len(part), 3)
        owner_gateway.finalize(file_id)
        owner_gateway.publish(file_id)

        chunks = stranger_gateway.get_chunks(file_id)
        assert sorted(chunk.size for chunk in chunks) == [200_000, 500_000, 500_000]
        output = reassemble(file_id, chunks)
        assert len(output) == 1_200_000
        assert output[:4] == bytes([0x89, 0x50, 0x4E, 0x47])
        assert output == data

    def test_service_level_scenario(self, store, owner_service, stranger_service):
        """Test the same flow through the facade."""
        data = make_cat_png()
        progress = []
        result = owner_service.upload("cat.png", "image/png", data, on_progress=progress.append)

        assert result.chunk_count == 3
        assert progress == [33, 67, 100]

        content = stranger_service.download(result.file_id)
        assert content.size == 1_200_000
        assert content.data[:4] == PNG_MAGIC
        assert content.media_type == "image/png"
        assert content.metadata.authoritative is False

        owned = owner_service.resolve_metadata(result.file_id)
        assert owned.download_count == 1
        assert owned.finalized is True
        stored = store.get_file(result.file_id)
        assert owned.size == sum(chunk.size for chunk in stored.chunks.values())


@pytest.mark.integration
class TestIncompleteUploads:
    """Test interrupted uploads stay unreadable until resumed."""

    def test_interrupted_upload_then_resume(self, store, stranger_gateway, metrics):
        class DropsChunkTwo(InMemoryStorageGateway):
            armed = True

            def write_chunk(self, file_id, chunk_index, data, size, chunk_count):
                if chunk_index == 2 and self.armed:
                    self.armed = False
                    raise GatewayUnavailable("connection reset")
                super().write_chunk(file_id, chunk_index, data, size, chunk_count)

        config = Config(upload=UploadConfig(chunk_size=10))
        owner = FileShareService(DropsChunkTwo(store, "alice"), config, metrics=metrics)
        stranger = FileShareService(stranger_gateway, config, metrics=metrics)
        data = PNG_MAGIC + b"q" * 46  # 50 bytes, 5 chunks

        with pytest.raises(ChunkUploadFailed) as exc_info:
            owner.upload("cat.png", "image/png", data)
        file_id = exc_info.value.file_id
        assert exc_info.value.index == 2

        # Not published and not complete
        with pytest.raises(PermissionDenied):
            stranger.read(file_id)
        with pytest.raises(IncompleteObject) as incomplete:
            owner.read(file_id)
        assert incomplete.value.missing == [2, 3, 4]

        owner.resume_upload(file_id, data, 2)
        assert owner.read(file_id).data == data
        assert stranger.read(file_id).data == data

    def test_overwrite_is_reflected(self, owner_gateway, owner_service):
        file_id = owner_gateway.declare("cat.png", "image/png", 8, 2)
        owner_gateway.write_chunk(file_id, 0, b"\x89PNG", 4, 2)
        owner_gateway.write_chunk(file_id, 1, b"aaaa", 4, 2)
        owner_gateway.write_chunk(file_id, 1, b"bbbb", 4, 2)
        owner_gateway.finalize(file_id)

        assert owner_service.read(file_id).data == b"\x89PNGbbbb"

    def test_size_mismatch_rejected_for_owner(self, owner_gateway, owner_service):
        file_id = owner_gateway.declare("cat.png", "image/png", 10, 1)
        owner_gateway.write_chunk(file_id, 0, b"\x89PNG", 4, 1)
        owner_gateway.finalize(file_id)

        with pytest.raises(IncompleteObject):
            owner_service.read(file_id)
