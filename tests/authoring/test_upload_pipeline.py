import re

import pytest

from conftest import FakeStorage, make_file
from wheelstore.authoring.errors import StorageError, UploadBatchFailed
from wheelstore.authoring.image_compressor import LocalImageFile
from wheelstore.authoring.upload_pipeline import ImageUploadPipeline, staging_path


def test_staging_path_shape():
    assert re.fullmatch(r"staging/\d{13}-[0-9a-f]{8}\.png", staging_path("staging", ".png"))
    assert staging_path("staging", "").endswith(".jpg")


@pytest.mark.asyncio
async def test_upload_pending_in_order_with_progress():
    storage = FakeStorage()
    pipeline = ImageUploadPipeline(storage)
    files = [make_file("a.jpg"), make_file("b.png"), make_file("c.jpg")]
    progress = []

    refs = await pipeline.upload_pending(files, on_progress=progress.append)

    assert [ref.position for ref in refs] == [0, 1, 2]
    assert [ref.url for ref in refs] == storage.uploads
    assert all(ref.url.startswith("staging/") for ref in refs)
    assert refs[1].url.endswith(".png")
    assert not any(ref.pending for ref in refs)
    assert [ref.correlation_id for ref in refs] == [f.correlation_id for f in files]
    assert progress == pytest.approx([1 / 6, 2 / 6, 3 / 6, 4 / 6, 5 / 6, 1.0])


@pytest.mark.asyncio
async def test_empty_batch_is_a_no_op():
    storage = FakeStorage()
    assert await ImageUploadPipeline(storage).upload_pending([]) == []
    assert storage.uploads == []


@pytest.mark.asyncio
async def test_failed_upload_aborts_batch_and_rolls_back():
    storage = FakeStorage(fail_upload_on=2)
    pipeline = ImageUploadPipeline(storage)
    files = [make_file("a.jpg"), make_file("b.jpg"), make_file("c.jpg")]
    progress = []

    with pytest.raises(UploadBatchFailed) as exc:
        await pipeline.upload_pending(files, on_progress=progress.append)

    assert exc.value.file_name == "b.jpg"
    assert isinstance(exc.value.cause, StorageError)
    assert exc.value.orphaned_paths == []
    # first file was uploaded then removed again; third never attempted
    assert storage.deleted == [storage.uploads[0]]
    assert len(storage.uploads) == 2
    assert progress[-1] < 1.0


@pytest.mark.asyncio
async def test_rollback_failures_are_reported_as_orphans():
    class StickyStorage(FakeStorage):
        def delete(self, paths):
            self.fail_delete = set(paths)
            return super().delete(paths)

    storage = StickyStorage(fail_upload_on=3)
    pipeline = ImageUploadPipeline(storage)
    files = [make_file("a.jpg"), make_file("b.jpg"), make_file("c.jpg")]

    with pytest.raises(UploadBatchFailed) as exc:
        await pipeline.upload_pending(files)

    assert exc.value.orphaned_paths == storage.uploads[:2]


@pytest.mark.asyncio
async def test_compression_failure_aborts_batch():
    storage = FakeStorage()
    pipeline = ImageUploadPipeline(storage, rollback_on_failure=False)
    files = [make_file("a.jpg"), LocalImageFile(name="bad.jpg", data=b"nope")]

    with pytest.raises(UploadBatchFailed) as exc:
        await pipeline.upload_pending(files)

    assert exc.value.file_name == "bad.jpg"
    assert exc.value.orphaned_paths == storage.uploads
    assert storage.deleted == []


@pytest.mark.asyncio
async def test_delete_marked_reports_each_path():
    storage = FakeStorage(fail_delete=["staging/b.jpg"])
    results = await ImageUploadPipeline(storage).delete_marked(
        ["staging/a.jpg", "staging/b.jpg"]
    )
    assert [(r.path, r.success) for r in results] == [
        ("staging/a.jpg", True),
        ("staging/b.jpg", False),
    ]
