"""Comment lifecycle and query service.

Every operation re-reads storage before acting; nothing is cached between
calls. Operations returning an ``ApiResult`` never raise: domain errors and
driver failures are converted into the envelope's error branch. The count
and search helpers return plain values and raise ``StorageError`` instead.
"""

import re
import logging
import functools
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from pymongo.errors import PyMongoError

from models.comment import Comment, CommentListDTO, BasePageDTO
from models.result import ApiResult
from services.errors import CommentError, ValidationError, AuthorizationError, StorageError
from services.sensitive_filter import SensitiveFilter, MIN_MATCH

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", -1)]


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@contextmanager
def _storage_errors(operation: str):
    try:
        yield
    except PyMongoError as e:
        logger.error(f"Comment {operation} failed in storage: {e}")
        raise StorageError() from e


def _envelope(func):
    """Run an operation and fold any failure into ApiResult.error."""

    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            with _storage_errors(func.__name__):
                return await func(self, *args, **kwargs)
        except CommentError as e:
            return ApiResult.error(e.code, e.message)

    return wrapper


def _require_author(comment: Comment):
    if not (comment.user_id or "").strip() or not (comment.user_name or "").strip():
        raise ValidationError()


def _check_owner(stored: Optional[Dict[str, Any]], requester_id: Optional[str], action: str, comment_id: Optional[str]):
    # A missing record falls through to the same error as a foreign one
    owner = (stored or {}).get("user_id")
    if not owner or owner != requester_id:
        logger.warning(f"Rejected {action} of comment {comment_id} by {requester_id}")
        raise AuthorizationError()


def _check_page_size(rows: int):
    # Mongo rejects a negative skip or limit outside its own error hierarchy
    if rows < 0:
        raise ValidationError("format error")

class CommentService:
    def __init__(
        self,
        gateway,
        sensitive_filter: SensitiveFilter,
        collection: str = "comments",
        mask_char: str = "*",
        match_mode: int = MIN_MATCH,
        clock: Callable[[], str] = _utc_now,
    ):
        self.gateway = gateway
        self.sensitive_filter = sensitive_filter
        self.collection = collection
        self.mask_char = mask_char
        self.match_mode = match_mode
        self.clock = clock

    def _filter(self, content: str) -> str:
        return self.sensitive_filter.replace_sensitive_word(content, self.match_mode, self.mask_char)

    @_envelope
    async def insert(self, comment: Comment) -> ApiResult:
        _require_author(comment)
        content = self._filter(comment.content)

        now = self.clock()
        record = comment.model_dump(exclude={"id"})
        record.update(content=content, created_at=now, updated_at=now)
        comment_id = await self.gateway.insert(self.collection, record)
        logger.info(f"Comment {comment_id} added to document {comment.doc_id} by {comment.user_id}")
        return ApiResult.success()

    @_envelope
    async def update(self, comment: Comment) -> ApiResult:
        _require_author(comment)

        stored = await self.gateway.find_by_id(self.collection, comment.id)
        _check_owner(stored, comment.user_id, "edit", comment.id)

        content = self._filter(comment.content)
        # Owner is part of the filter so the check and the write agree
        matched = await self.gateway.update_first(
            self.collection,
            {"id": comment.id, "user_id": comment.user_id},
            {"$set": {"content": content, "updated_at": self.clock()}},
        )
        if not matched:
            raise AuthorizationError()
        return ApiResult.success()

    @_envelope
    async def remove(self, comment: Comment, user_id: Optional[str] = None) -> ApiResult:
        """Delete one comment if ``comment.user_id`` owns it.

        ``user_id`` is the authenticated requester; ownership is decided on
        ``comment.user_id`` alone.
        """
        stored = await self.gateway.find_by_id(self.collection, comment.id)
        if user_id is not None and user_id != comment.user_id:
            logger.debug(f"Removal of {comment.id}: requester {user_id} differs from comment author field")
        _check_owner(stored, comment.user_id, "removal", comment.id)

        await self.gateway.remove(self.collection, {"id": comment.id})
        return ApiResult.success()

    @_envelope
    async def query_by_id(self, dto: Optional[CommentListDTO]) -> ApiResult:
        """Newest-first page of comments on one document."""
        if dto is None or dto.doc_id is None:
            raise ValidationError("format error")
        _check_page_size(dto.rows)

        query = {"doc_id": dto.doc_id}
        total = await self.gateway.count(self.collection, query)
        records = await self.gateway.find(
            self.collection,
            query,
            sort=NEWEST_FIRST,
            skip=max(dto.page, 0) * dto.rows,
            limit=dto.rows,
        )
        return ApiResult.success({
            "totalNum": total,
            "comments": [Comment(**r).model_dump() for r in records],
        })

    @_envelope
    async def query_all_comments(self, page: BasePageDTO, user_id: Optional[str] = None) -> ApiResult:
        """Newest-first page across every document. ``user_id`` does not filter."""
        _check_page_size(page.rows)
        records = await self.gateway.find(
            self.collection,
            {},
            sort=NEWEST_FIRST,
            skip=max(page.page - 1, 0) * page.rows,
            limit=page.rows,
        )
        total = await self.gateway.count(self.collection, {})
        return ApiResult.success({
            "data": [Comment(**r).model_dump() for r in records],
            "total": total,
        })

    async def comment_num(self, doc_id: Optional[str]) -> int:
        with _storage_errors("count"):
            return await self.gateway.count(self.collection, {"doc_id": doc_id})

    async def fuzzy_search_doc(self, keyword: Optional[str]) -> List[str]:
        """Document ids of comments containing ``keyword``, one per matching comment."""
        if keyword is None or not keyword.strip():
            return []
        query = {"content": {"$regex": re.escape(keyword), "$options": "i"}}
        with _storage_errors("search"):
            records = await self.gateway.find(self.collection, query)
        return [r.get("doc_id") for r in records]

    async def remove_by_doc_id(self, doc_id: str) -> int:
        """Delete every comment on a document, one at a time.

        There is no rollback: a failure part way leaves the earlier
        deletions in place.
        """
        removed = 0
        with _storage_errors("cascade removal"):
            records = await self.gateway.find(self.collection, {"doc_id": doc_id})
            for record in records:
                removed += await self.gateway.remove(self.collection, {"id": record["id"]})
        logger.info(f"Removed {removed} comments of document {doc_id}")
        return removed

    async def count_all_file(self) -> int:
        with _storage_errors("estimated count"):
            return await self.gateway.estimated_count(self.collection)
