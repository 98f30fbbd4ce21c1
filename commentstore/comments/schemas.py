"""Pydantic schemas for the comments API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Comment


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateCommentRequest(BaseModel):
    """Request to create a new comment."""

    parent: str = Field(
        default="",
        max_length=200,
        pattern=r"^[^/]*$",
        description="ID of the comment being replied to; empty for top level",
    )
    body: str = Field(..., min_length=1)

    @field_validator("body")
    @classmethod
    def validate_body(cls, v: str) -> str:
        """Strip whitespace and reject blank bodies."""
        v = v.strip()
        if not v:
            msg = "Body cannot be empty"
            raise ValueError(msg)
        return v


# ==============================================================================
# Response Schemas
# ==============================================================================


class CommentResponse(BaseModel):
    """A stored comment."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    post: str
    parent: str
    author: str
    created: datetime | None
    modified: datetime | None
    body: str

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls.model_validate(comment)


class RepliesResponse(BaseModel):
    """Direct replies of a comment (or the top-level comments of a post)."""

    post: str
    parent: str = Field(..., description="Parent ID; empty for top level")
    replies: list[CommentResponse]


class ErrorResponse(BaseModel):
    """Error body returned by the exception handlers."""

    error: bool = True
    message: str
    status_code: int
    request_id: str | None = None
