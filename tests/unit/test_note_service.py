"""Unit tests for NoteApplicationService over the in-memory repository."""

import pytest

from src.mn_common.errors import NoteNotFoundError
from src.mn_notes.application.schemas import NoteCreateRequest, NoteUpdateRequest
from src.mn_notes.application.service import NoteApplicationService
from src.mn_notes.domain.models import NoteFilter
from tests.fakes import FakeSession, InMemoryNoteRepository


@pytest.fixture
def db() -> FakeSession:
    return FakeSession()


@pytest.fixture
def repo() -> InMemoryNoteRepository:
    return InMemoryNoteRepository()


@pytest.fixture
def svc(repo: InMemoryNoteRepository) -> NoteApplicationService:
    return NoteApplicationService(repo=repo)


async def _create(svc, db, user_id=1, **fields):
    body = NoteCreateRequest(**{"title": "T", "text": "B", **fields})
    return await svc.create_note(db, user_id, body)


class TestCreate:
    async def test_defaults_and_commit(self, svc, db) -> None:
        note = await _create(svc, db, title="  Shopping  ", text="milk")
        assert note.title == "Shopping"
        assert note.tags == []
        assert note.is_pinned is False
        assert note.is_archived is False
        assert db.commits == 1


class TestList:
    async def test_pinned_first_then_newest(self, svc, db) -> None:
        old = await _create(svc, db, title="old")
        pinned = await _create(svc, db, title="pinned", is_pinned=True)
        new = await _create(svc, db, title="new")

        resp = await svc.list_notes(db, 1, NoteFilter(), page=1, limit=20)

        assert [n.id for n in resp.notes] == [pinned.id, new.id, old.id]
        assert resp.pagination.total == 3
        assert resp.pagination.pages == 1

    async def test_archived_hidden_by_default(self, svc, db) -> None:
        await _create(svc, db, title="visible")
        await _create(svc, db, title="gone", is_archived=True)

        visible = await svc.list_notes(db, 1, NoteFilter(), 1, 20)
        archived = await svc.list_notes(db, 1, NoteFilter(archived=True), 1, 20)

        assert [n.title for n in visible.notes] == ["visible"]
        assert [n.title for n in archived.notes] == ["gone"]

    async def test_search_and_pagination(self, svc, db) -> None:
        for i in range(5):
            await _create(svc, db, title=f"recipe {i}")
        await _create(svc, db, title="other")

        resp = await svc.list_notes(db, 1, NoteFilter(search="recipe"), page=2, limit=2)

        assert len(resp.notes) == 2
        assert resp.pagination.model_dump() == {"page": 2, "limit": 2, "total": 5, "pages": 3}

    async def test_only_owner_notes(self, svc, db) -> None:
        await _create(svc, db, user_id=2)
        resp = await svc.list_notes(db, 1, NoteFilter(), 1, 20)
        assert resp.notes == []
        assert resp.pagination.pages == 0


class TestUpdate:
    async def test_partial_update_keeps_other_fields(self, svc, db) -> None:
        note = await _create(svc, db, title="A", text="B", tags=["x"])

        updated = await svc.update_note(db, 1, note.id, NoteUpdateRequest(title="C"))

        assert updated.title == "C"
        assert updated.text == "B"
        assert updated.tags == ["x"]

    async def test_toggle_pin(self, svc, db) -> None:
        note = await _create(svc, db)
        assert (await svc.toggle_pin(db, 1, note.id)).is_pinned is True
        assert (await svc.toggle_pin(db, 1, note.id)).is_pinned is False

    async def test_other_owner_is_not_found(self, svc, db) -> None:
        note = await _create(svc, db, user_id=2)
        with pytest.raises(NoteNotFoundError):
            await svc.update_note(db, 1, note.id, NoteUpdateRequest(title="hijack"))


class TestDelete:
    async def test_delete_then_get_is_not_found(self, svc, db) -> None:
        note = await _create(svc, db)
        await svc.delete_note(db, 1, note.id)
        with pytest.raises(NoteNotFoundError):
            await svc.get_note(db, 1, note.id)

    async def test_delete_missing_rolls_back(self, svc, db) -> None:
        with pytest.raises(NoteNotFoundError):
            await svc.delete_note(db, 1, 404)
        assert db.rollbacks == 1
