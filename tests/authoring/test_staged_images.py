import pytest

from conftest import FakeStorage, make_file
from wheelstore.authoring.errors import CapacityExceeded, StorageError
from wheelstore.authoring.staged_images import (
    ImageRef,
    InMemoryPreviewAllocator,
    MoveDirection,
    StagedImageStore,
)


class CountingPreviews(InMemoryPreviewAllocator):
    def __init__(self):
        super().__init__()
        self.released = []

    def release_preview(self, handle):
        self.released.append(handle)
        super().release_preview(handle)


def _files(count):
    return [make_file(f"img{i}.jpg") for i in range(count)]


def _committed(*paths):
    return [
        ImageRef(id=str(i + 1), url=path, position=i) for i, path in enumerate(paths)
    ]


def test_add_six_files_gets_contiguous_positions():
    store = StagedImageStore(InMemoryPreviewAllocator())
    refs = store.add(_files(6))

    assert [ref.position for ref in store.images] == [0, 1, 2, 3, 4, 5]
    assert all(ref.pending and ref.id.startswith("temp-") for ref in refs)
    assert all(ref.url.startswith("preview:") for ref in refs)


def test_seventh_file_is_rejected_without_mutation():
    previews = InMemoryPreviewAllocator()
    store = StagedImageStore(previews)
    store.add(_files(6))
    before = [ref.id for ref in store.images]

    with pytest.raises(CapacityExceeded) as exc:
        store.add(_files(1))

    assert exc.value.limit == 6
    assert [ref.id for ref in store.images] == before
    assert len(previews.live_handles) == 6


@pytest.mark.asyncio
async def test_remove_pending_releases_preview_once_and_renumbers():
    previews = CountingPreviews()
    store = StagedImageStore(previews)
    refs = store.add(_files(5))

    removed = await store.remove(2)

    assert removed is refs[2]
    assert previews.released == [refs[2].url]
    assert [ref.id for ref in store.images] == [r.id for r in refs[:2] + refs[3:]]
    assert [ref.position for ref in store.images] == [0, 1, 2, 3]
    assert [f.name for f in store.pending_files] == ["img0.jpg", "img1.jpg", "img3.jpg", "img4.jpg"]


@pytest.mark.asyncio
async def test_remove_committed_in_edit_mode_only_queues_deletion():
    storage = FakeStorage()
    store = StagedImageStore(
        InMemoryPreviewAllocator(),
        storage=storage,
        editing=True,
        images=_committed("staging/a.jpg", "staging/b.jpg"),
    )

    removed = await store.remove(0)

    assert removed.marked_for_deletion
    assert store.deletion_queue == ["staging/a.jpg"]
    assert storage.deleted == []
    assert [(ref.url, ref.position) for ref in store.images] == [("staging/b.jpg", 0)]


@pytest.mark.asyncio
async def test_remove_committed_outside_edit_mode_deletes_now():
    storage = FakeStorage()
    store = StagedImageStore(
        InMemoryPreviewAllocator(),
        storage=storage,
        images=_committed("staging/a.jpg", "staging/b.jpg"),
    )

    await store.remove(1)

    assert storage.deleted == ["staging/b.jpg"]
    assert store.deletion_queue == []
    assert store.committed_paths == ["staging/a.jpg"]


@pytest.mark.asyncio
async def test_failed_immediate_delete_leaves_list_unchanged():
    storage = FakeStorage(fail_delete=["staging/a.jpg"])
    store = StagedImageStore(
        InMemoryPreviewAllocator(),
        storage=storage,
        images=_committed("staging/a.jpg", "staging/b.jpg"),
    )

    with pytest.raises(StorageError):
        await store.remove(0)

    assert store.committed_paths == ["staging/a.jpg", "staging/b.jpg"]


@pytest.mark.asyncio
async def test_remove_out_of_range():
    store = StagedImageStore(InMemoryPreviewAllocator())
    with pytest.raises(IndexError):
        await store.remove(0)


def test_move_swaps_neighbours_and_ignores_boundaries():
    store = StagedImageStore(InMemoryPreviewAllocator())
    refs = store.add(_files(3))

    store.move(0, MoveDirection.DOWN)
    assert [ref.id for ref in store.images] == [refs[1].id, refs[0].id, refs[2].id]
    assert [ref.position for ref in store.images] == [0, 1, 2]

    store.move(0, MoveDirection.UP)
    store.move(2, "down")
    assert [ref.id for ref in store.images] == [refs[1].id, refs[0].id, refs[2].id]


def test_initial_images_are_sorted_and_renumbered():
    images = [
        ImageRef(id="b", url="staging/b.jpg", position=5),
        ImageRef(id="a", url="staging/a.jpg", position=2),
    ]
    store = StagedImageStore(InMemoryPreviewAllocator(), images=images)
    assert [(ref.id, ref.position) for ref in store.images] == [("a", 0), ("b", 1)]


def test_commit_uploads_replaces_pending_refs_in_place():
    previews = InMemoryPreviewAllocator()
    store = StagedImageStore(previews, images=_committed("staging/keep.jpg"))
    pending = store.add(_files(2))
    store.move(1, MoveDirection.UP)  # pending img0 now first

    uploaded = [
        ImageRef(id="u0", url="staging/u0.jpg", position=0, correlation_id=pending[0].correlation_id),
        ImageRef(id="u1", url="staging/u1.jpg", position=1, correlation_id=pending[1].correlation_id),
    ]
    store.commit_uploads(uploaded)

    assert store.committed_paths == ["staging/u0.jpg", "staging/keep.jpg", "staging/u1.jpg"]
    assert [ref.position for ref in store.images] == [0, 1, 2]
    assert store.pending_images == []
    assert previews.live_handles == []


def test_release_previews_on_teardown():
    previews = InMemoryPreviewAllocator()
    store = StagedImageStore(previews)
    store.add(_files(3))
    store.release_previews()
    assert previews.live_handles == []


def test_wire_format():
    ref = ImageRef.from_wire({"id": 4, "image_url": "staging/x.jpg", "position": 2})
    assert ref.to_wire() == {"id": "4", "image_url": "staging/x.jpg", "position": 2}
    assert not ref.pending


def test_preview_handles_resolve_to_files():
    previews = InMemoryPreviewAllocator()
    store = StagedImageStore(previews)
    (ref,) = store.add(_files(1))
    assert previews.get(ref.url) is ref.file
    store.reset()
    assert previews.get(ref.url) is None
    assert len(store) == 0


@pytest.mark.asyncio
async def test_same_file_added_twice_commits_two_distinct_images():
    from wheelstore.authoring.upload_pipeline import ImageUploadPipeline

    storage = FakeStorage()
    store = StagedImageStore(InMemoryPreviewAllocator())
    file = make_file("wheel.jpg")
    store.add([file])
    store.add([file])

    first, second = store.pending_images
    assert first.correlation_id != second.correlation_id

    uploaded = await ImageUploadPipeline(storage).upload_pending(store.pending_files)
    store.commit_uploads(uploaded)

    images = store.images
    assert [ref.position for ref in images] == [0, 1]
    assert images[0] is not images[1]
    assert [ref.url for ref in images] == storage.uploads
    assert len(set(storage.uploads)) == 2
