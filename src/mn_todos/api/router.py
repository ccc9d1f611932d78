"""mn_todos REST endpoints (all require a Bearer access token).

GET    /todos                    — paginated list + owner-wide stats
GET    /todos/stats/summary      — counts overall, by priority, by category
GET    /todos/{todo_id}          — single todo
POST   /todos                    — create
PUT    /todos/{todo_id}          — partial update (completed_at maintained)
PATCH  /todos/{todo_id}/toggle   — flip completed
DELETE /todos/{todo_id}          — delete

/stats/summary is declared before /{todo_id} so it is not parsed as an id.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mn_common.database import BIGINT_MAX, get_db_session
from src.mn_common.enums import TodoPriority
from src.mn_common.response import ApiResponse, success_response
from src.mn_gateway.account.models import Account
from src.mn_gateway.auth.dependencies import get_current_user
from src.mn_todos.application.schemas import TodoCreateRequest, TodoUpdateRequest
from src.mn_todos.application.service import TodoApplicationService
from src.mn_todos.domain.models import TodoFilter

router = APIRouter(prefix="/todos", tags=["todos"])

_service = TodoApplicationService()


def get_todo_service() -> TodoApplicationService:
    return _service


def _respond(request: Request, data: object, message: str = "success") -> ApiResponse:
    resp = success_response(data, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_todos(
    request: Request,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TodoApplicationService, Depends(get_todo_service)],
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    completed: bool | None = Query(None),
    priority: TodoPriority | None = Query(None),
    category: str | None = Query(None, max_length=30),
) -> ApiResponse:
    filters = TodoFilter(completed=completed, priority=priority, category=category or None)
    result = await service.list_todos(db, current_user.id, filters, page, limit)
    return _respond(request, result.model_dump(mode="json"))


@router.get("/stats/summary")
async def todo_summary(
    request: Request,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TodoApplicationService, Depends(get_todo_service)],
) -> ApiResponse:
    result = await service.get_summary(db, current_user.id)
    return _respond(request, result.model_dump(mode="json"))


@router.get("/{todo_id}")
async def get_todo(
    todo_id: Annotated[int, Path(ge=1, le=BIGINT_MAX)],
    request: Request,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TodoApplicationService, Depends(get_todo_service)],
) -> ApiResponse:
    todo = await service.get_todo(db, current_user.id, todo_id)
    return _respond(request, {"todo": todo.model_dump(mode="json")})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_todo(
    request: Request,
    body: TodoCreateRequest,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TodoApplicationService, Depends(get_todo_service)],
) -> ApiResponse:
    todo = await service.create_todo(db, current_user.id, body)
    return _respond(request, {"todo": todo.model_dump(mode="json")}, "Todo created successfully")


@router.put("/{todo_id}")
async def update_todo(
    todo_id: Annotated[int, Path(ge=1, le=BIGINT_MAX)],
    request: Request,
    body: TodoUpdateRequest,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TodoApplicationService, Depends(get_todo_service)],
) -> ApiResponse:
    todo = await service.update_todo(db, current_user.id, todo_id, body)
    return _respond(request, {"todo": todo.model_dump(mode="json")}, "Todo updated successfully")


@router.patch("/{todo_id}/toggle")
async def toggle_todo(
    todo_id: Annotated[int, Path(ge=1, le=BIGINT_MAX)],
    request: Request,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TodoApplicationService, Depends(get_todo_service)],
) -> ApiResponse:
    todo = await service.toggle(db, current_user.id, todo_id)
    message = "Todo completed" if todo.completed else "Todo marked as pending"
    return _respond(request, {"todo": todo.model_dump(mode="json")}, message)


@router.delete("/{todo_id}")
async def delete_todo(
    todo_id: Annotated[int, Path(ge=1, le=BIGINT_MAX)],
    request: Request,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TodoApplicationService, Depends(get_todo_service)],
) -> ApiResponse:
    await service.delete_todo(db, current_user.id, todo_id)
    return _respond(request, None, "Todo deleted successfully")
