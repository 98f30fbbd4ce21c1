"""Comments API endpoints.

Provides routes for:
- Creating a comment or a reply
- Fetching one comment
- Listing the replies of a comment, or a post's top-level comments
- Deleting a comment (author only)

Store calls block on object storage, so the handlers are plain functions and
FastAPI runs them in its threadpool.
"""

import html

import structlog
from fastapi import APIRouter, HTTPException, Response, status

from commentstore.posts import PostError

from .dependencies import (
    CommentStoreDep,
    CurrentUser,
    SettingsDep,
    handle_comment_error,
)
from .models import Comment
from .schemas import (
    CommentResponse,
    CreateCommentRequest,
    ErrorResponse,
    RepliesResponse,
)
from .service import CommentError, PermissionDeniedError


logger = structlog.get_logger(__name__)

# Path value standing in for "no parent" when listing replies.
TOPLEVEL_PATH = "toplevel"

router = APIRouter(prefix="/v1/posts/{post}/comments", tags=["comments"])

_error_responses = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    404: {"model": ErrorResponse, "description": "Post or comment not found"},
    500: {"model": ErrorResponse, "description": "Storage failure"},
}


def sanitize_body(body: str) -> str:
    """Escape HTML so stored bodies are safe to render verbatim."""
    return html.escape(body)


@router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}, **_error_responses},
    summary="Create comment",
)
def create_comment(
    post: str,
    data: CreateCommentRequest,
    store: CommentStoreDep,
    settings: SettingsDep,
    user: CurrentUser,
) -> CommentResponse:
    """Create a comment on a post, or a reply when ``parent`` is set."""
    if len(data.body) < settings.comment_body_min_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Body too short"
        )
    if len(data.body) > settings.comment_body_max_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Body too long"
        )

    try:
        comment = store.create(
            Comment(
                post=post,
                parent=data.parent,
                author=user,
                body=sanitize_body(data.body),
            )
        )
    except (CommentError, PostError) as e:
        raise handle_comment_error(e) from e

    return CommentResponse.from_comment(comment)


@router.get(
    "/{parent}/replies",
    response_model=RepliesResponse,
    responses=_error_responses,
    summary="List replies",
)
def list_replies(post: str, parent: str, store: CommentStoreDep) -> RepliesResponse:
    """List direct replies, oldest first. Use ``toplevel`` as the parent for
    the post's top-level comments."""
    if parent == TOPLEVEL_PATH:
        parent = ""

    try:
        replies = store.replies(post, parent)
    except CommentError as e:
        raise handle_comment_error(e) from e

    return RepliesResponse(
        post=post,
        parent=parent,
        replies=[CommentResponse.from_comment(c) for c in replies],
    )


@router.get(
    "/{comment}",
    response_model=CommentResponse,
    responses=_error_responses,
    summary="Get comment",
)
def get_comment(post: str, comment: str, store: CommentStoreDep) -> CommentResponse:
    """Fetch a single comment."""
    try:
        return CommentResponse.from_comment(store.fetch(post, comment))
    except CommentError as e:
        raise handle_comment_error(e) from e


@router.delete(
    "/{comment}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        **_error_responses,
    },
    summary="Delete comment",
)
def delete_comment(
    post: str,
    comment: str,
    store: CommentStoreDep,
    user: CurrentUser,
) -> Response:
    """Delete a comment. Only its author may do so; replies are kept."""
    try:
        existing = store.fetch(post, comment)
        if existing.author != user:
            logger.warning(
                "comment_delete_forbidden",
                post=post,
                comment=comment,
                author=existing.author,
            )
            raise PermissionDeniedError("User is not the comment author")
        store.delete(post, comment)
    except CommentError as e:
        raise handle_comment_error(e) from e

    return Response(status_code=status.HTTP_204_NO_CONTENT)
