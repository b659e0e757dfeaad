import asyncio
import io
import re

import pytest
from starlette.datastructures import UploadFile

from app.application.services.upload_service import UploadAdmissionPipeline
from app.domain.errors import UploadRejected

from .conftest import PNG_BYTES

NAME_PATTERN = re.compile(r"^profileImage-\d{13}-\d{9}\.png$")


def incoming(filename: str, data: bytes = PNG_BYTES) -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename)


@pytest.mark.asyncio
async def test_admitted_file_is_written_under_generated_name(pipeline, upload_dir):
    stored = await pipeline.admit(incoming("holiday.png"))

    assert NAME_PATTERN.match(stored.filename)
    assert stored.public_path == f"/uploads/profile-pictures/{stored.filename}"
    assert stored.path == upload_dir / stored.filename
    assert stored.path.read_bytes() == PNG_BYTES
    assert stored.size == len(PNG_BYTES)


@pytest.mark.asyncio
async def test_extension_check_is_case_insensitive_and_preserves_original(pipeline):
    stored = await pipeline.admit(incoming("PHOTO.JPeG"))
    assert stored.filename.endswith(".JPeG")


@pytest.mark.asyncio
@pytest.mark.parametrize("filename", ["notes.txt", "script.png.exe", "noextension", ""])
async def test_non_image_is_rejected_before_writing(pipeline, upload_dir, filename):
    with pytest.raises(UploadRejected) as excinfo:
        await pipeline.admit(incoming(filename))
    assert "profileImage" in excinfo.value.errors
    assert not upload_dir.exists() or not any(upload_dir.iterdir())


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected_and_partial_file_removed(upload_dir):
    pipeline = UploadAdmissionPipeline(upload_dir, "/uploads/profile-pictures", max_bytes=1024)
    with pytest.raises(UploadRejected):
        await pipeline.admit(incoming("big.png", b"x" * (1024 * 70)))
    assert list(upload_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_upload_at_exact_ceiling_is_accepted(upload_dir):
    pipeline = UploadAdmissionPipeline(upload_dir, "/uploads/profile-pictures", max_bytes=2048)
    stored = await pipeline.admit(incoming("edge.gif", b"y" * 2048))
    assert stored.size == 2048


@pytest.mark.asyncio
async def test_default_ceiling_is_five_mebibytes(pipeline, upload_dir):
    with pytest.raises(UploadRejected) as excinfo:
        await pipeline.admit(incoming("huge.png", b"z" * (5 * 1024 * 1024 + 1)))
    assert "5MB" in excinfo.value.message
    assert list(upload_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_concurrent_submissions_get_unique_names(pipeline, upload_dir):
    # Bounded so the test stays within the per-process file descriptor limit.
    gate = asyncio.Semaphore(100)

    async def submit():
        async with gate:
            return await pipeline.admit(incoming("same.png"))

    stored = await asyncio.gather(*(submit() for _ in range(1000)))

    names = {item.filename for item in stored}
    assert len(names) == 1000
    assert len(list(upload_dir.iterdir())) == 1000


@pytest.mark.asyncio
async def test_delete_stored_is_idempotent(pipeline, upload_dir):
    stored = await pipeline.admit(incoming("me.png"))

    await pipeline.delete_stored(stored)
    await pipeline.delete_stored(stored)

    assert list(upload_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_delete_public_path_only_touches_managed_files(pipeline, upload_dir, tmp_path):
    stored = await pipeline.admit(incoming("me.png"))
    outsider = tmp_path / "keep.png"
    outsider.write_bytes(PNG_BYTES)

    await pipeline.delete_public_path("/elsewhere/keep.png")
    await pipeline.delete_public_path("")
    assert stored.path.exists()
    assert outsider.exists()

    await pipeline.delete_public_path(stored.public_path)
    assert not stored.path.exists()
