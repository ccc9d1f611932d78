"""mn_notes REST endpoints (all require a Bearer access token).

GET    /notes                 — paginated list (pinned first, newest first)
GET    /notes/{note_id}       — single note
POST   /notes                 — create
PUT    /notes/{note_id}       — partial update
PATCH  /notes/{note_id}/pin   — toggle is_pinned
DELETE /notes/{note_id}       — delete

GET responses are served through the read-through cache; every successful
write clears the caller's cached note reads.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mn_common.database import BIGINT_MAX, get_db_session
from src.mn_common.response import ApiResponse, success_response
from src.mn_gateway.account.models import Account
from src.mn_gateway.auth.dependencies import get_current_user
from src.mn_notes.application.schemas import NoteCreateRequest, NoteUpdateRequest
from src.mn_notes.application.service import NoteApplicationService
from src.mn_notes.domain.models import NoteFilter

router = APIRouter(prefix="/notes", tags=["notes"])

_service = NoteApplicationService()


def get_note_service() -> NoteApplicationService:
    return _service


def _respond(request: Request, data: object, message: str = "success") -> ApiResponse:
    resp = success_response(data, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_notes(
    request: Request,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[NoteApplicationService, Depends(get_note_service)],
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = Query(None, max_length=100),
    archived: bool = Query(False),
    pinned: bool | None = Query(None),
) -> ApiResponse:
    filters = NoteFilter(search=search, archived=archived, pinned=pinned)
    result = await service.list_notes(db, current_user.id, filters, page, limit)
    return _respond(request, result.model_dump(mode="json"))


@router.get("/{note_id}")
async def get_note(
    note_id: Annotated[int, Path(ge=1, le=BIGINT_MAX)],
    request: Request,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[NoteApplicationService, Depends(get_note_service)],
) -> ApiResponse:
    note = await service.get_note(db, current_user.id, note_id)
    return _respond(request, {"note": note.model_dump(mode="json")})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_note(
    request: Request,
    body: NoteCreateRequest,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[NoteApplicationService, Depends(get_note_service)],
) -> ApiResponse:
    note = await service.create_note(db, current_user.id, body)
    return _respond(request, {"note": note.model_dump(mode="json")}, "Note created successfully")


@router.put("/{note_id}")
async def update_note(
    note_id: Annotated[int, Path(ge=1, le=BIGINT_MAX)],
    request: Request,
    body: NoteUpdateRequest,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[NoteApplicationService, Depends(get_note_service)],
) -> ApiResponse:
    note = await service.update_note(db, current_user.id, note_id, body)
    return _respond(request, {"note": note.model_dump(mode="json")}, "Note updated successfully")


@router.patch("/{note_id}/pin")
async def toggle_pin(
    note_id: Annotated[int, Path(ge=1, le=BIGINT_MAX)],
    request: Request,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[NoteApplicationService, Depends(get_note_service)],
) -> ApiResponse:
    note = await service.toggle_pin(db, current_user.id, note_id)
    message = "Note pinned" if note.is_pinned else "Note unpinned"
    return _respond(request, {"note": note.model_dump(mode="json")}, message)


@router.delete("/{note_id}")
async def delete_note(
    note_id: Annotated[int, Path(ge=1, le=BIGINT_MAX)],
    request: Request,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[NoteApplicationService, Depends(get_note_service)],
) -> ApiResponse:
    await service.delete_note(db, current_user.id, note_id)
    return _respond(request, None, "Note deleted successfully")
