from pydantic import BaseModel
from typing import Optional


class Comment(BaseModel):
    id: Optional[str] = None
    doc_id: Optional[str] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    content: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CommentCreate(BaseModel):
    doc_id: str
    content: str


class CommentUpdate(BaseModel):
    content: str


class CommentListDTO(BaseModel):
    """Page of comments under one document. ``page`` is zero-based."""
    doc_id: Optional[str] = None
    page: int = 0
    rows: int = 10


class BasePageDTO(BaseModel):
    """Page across every comment. ``page`` is one-based."""
    page: int = 1
    rows: int = 10
