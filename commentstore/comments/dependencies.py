"""FastAPI dependencies for the comments API.

Provides dependency injection for:
- The comment store and settings the app was built with
- The authenticated user forwarded by the auth proxy
- Error to HTTP status mapping
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from commentstore.config.settings import Settings
from commentstore.core.middleware import USER_HEADER
from commentstore.posts import PostError

from .service import CommentError, CommentStore


def get_comment_store(request: Request) -> CommentStore:
    """Get the comment store from app state.

    Args:
        request: FastAPI request

    Returns:
        CommentStore instance
    """
    store = getattr(request.app.state, "comment_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Comment store not available",
        )
    return store


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_current_user(
    user: Annotated[str | None, Header(alias=USER_HEADER)] = None,
) -> str:
    """Require the user ID set by the upstream auth proxy."""
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


# Type aliases for dependency injection
CommentStoreDep = Annotated[CommentStore, Depends(get_comment_store)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
CurrentUser = Annotated[str, Depends(get_current_user)]


def handle_comment_error(error: CommentError | PostError) -> HTTPException:
    """Convert comment and post errors to HTTP exceptions.

    Args:
        error: Comment or post error

    Returns:
        HTTPException with appropriate status code
    """
    status_map = {
        "comment_not_found": status.HTTP_404_NOT_FOUND,
        "post_not_found": status.HTTP_404_NOT_FOUND,
        "validation_error": status.HTTP_400_BAD_REQUEST,
        "permission_denied": status.HTTP_403_FORBIDDEN,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=error.message,
    )
