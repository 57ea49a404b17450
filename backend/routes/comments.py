from fastapi import APIRouter, HTTPException, Depends, Request, Query
from typing import Optional

from config import DEFAULT_PAGE_ROWS, MAX_PAGE_ROWS, MODERATOR_ROLES
from middleware.auth import get_current_user
from models.comment import Comment, CommentCreate, CommentUpdate, CommentListDTO, BasePageDTO
from models.result import ApiResult
from services.comment_service import CommentService
from services.errors import StorageError

comments_router = APIRouter(prefix="/api", tags=["Comments"])


def get_comment_service(request: Request) -> CommentService:
    return request.app.state.comment_service


def _author(current_user: dict, **fields) -> Comment:
    return Comment(user_id=current_user.get("id"), user_name=current_user.get("name"), **fields)


@comments_router.post("/comments", response_model=ApiResult)
async def add_comment(
    comment: CommentCreate,
    current_user: dict = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """Add a comment to a document."""
    return await service.insert(_author(current_user, doc_id=comment.doc_id, content=comment.content))


@comments_router.put("/comments/{comment_id}", response_model=ApiResult)
async def update_comment(
    comment_id: str,
    update: CommentUpdate,
    current_user: dict = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """Edit own comment."""
    return await service.update(_author(current_user, id=comment_id, content=update.content))


@comments_router.delete("/comments/{comment_id}", response_model=ApiResult)
async def delete_comment(
    comment_id: str,
    current_user: dict = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """Delete own comment."""
    return await service.remove(_author(current_user, id=comment_id), current_user.get("id"))


@comments_router.get("/documents/{doc_id}/comments", response_model=ApiResult)
async def list_document_comments(
    doc_id: str,
    page: int = Query(default=0, ge=0),
    rows: int = Query(default=DEFAULT_PAGE_ROWS, ge=1, le=MAX_PAGE_ROWS),
    service: CommentService = Depends(get_comment_service),
):
    """Newest-first comments on a document. ``page`` starts at 0."""
    return await service.query_by_id(CommentListDTO(doc_id=doc_id, page=page, rows=rows))


@comments_router.get("/comments", response_model=ApiResult)
async def list_all_comments(
    page: int = Query(default=1, ge=1),
    rows: int = Query(default=DEFAULT_PAGE_ROWS, ge=1, le=MAX_PAGE_ROWS),
    current_user: dict = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """Newest-first comments across all documents. ``page`` starts at 1."""
    return await service.query_all_comments(BasePageDTO(page=page, rows=rows), current_user.get("id"))


@comments_router.get("/documents/{doc_id}/comments/count", response_model=ApiResult)
async def count_document_comments(doc_id: str, service: CommentService = Depends(get_comment_service)):
    try:
        return ApiResult.success(await service.comment_num(doc_id))
    except StorageError as e:
        return ApiResult.error(e.code, e.message)


@comments_router.get("/comments/search", response_model=ApiResult)
async def search_comment_documents(keyword: Optional[str] = None, service: CommentService = Depends(get_comment_service)):
    """Ids of documents whose comments mention ``keyword``."""
    try:
        return ApiResult.success(await service.fuzzy_search_doc(keyword))
    except StorageError as e:
        return ApiResult.error(e.code, e.message)


@comments_router.get("/comments/stats", response_model=ApiResult)
async def comment_stats(service: CommentService = Depends(get_comment_service)):
    try:
        return ApiResult.success({"total": await service.count_all_file()})
    except StorageError as e:
        return ApiResult.error(e.code, e.message)


@comments_router.delete("/documents/{doc_id}/comments", response_model=ApiResult)
async def purge_document_comments(
    doc_id: str,
    current_user: dict = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """Remove every comment of a document (owner/admin only)."""
    if current_user.get("role") not in MODERATOR_ROLES:
        raise HTTPException(status_code=403, detail="Only owners and admins can purge comments")
    try:
        return ApiResult.success({"removed": await service.remove_by_doc_id(doc_id)})
    except StorageError as e:
        return ApiResult.error(e.code, e.message)
