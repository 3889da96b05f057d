"""User API routes.

Endpoints:
- GET /users: List all users (active and inactive)
- GET /users/email-exists?email=: Check whether an email is registered
- GET /users/{id}: Get a user
- POST /users: Register a user
- PUT /users/{id}: Update a user
- DELETE /users/{id}: Deactivate a user (soft delete)

Domain errors raised by the service are turned into responses by
api.error_handlers.
"""

import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.dependencies import get_user_repo
from api.models import EmailExistsResponse, UserCreateRequest, UserResponse, UserUpdateRequest
from port.user_repository import UserRepository
from services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

# Deadline for a single request's repository work; 0 disables it
REQUEST_TIMEOUT = float(os.getenv("USER_REQUEST_TIMEOUT", "10")) or None


@router.get("", response_model=list[UserResponse])
async def list_users(repo: UserRepository = Depends(get_user_repo)):
    """List every user."""
    views = await user_service.list_users(repo, timeout=REQUEST_TIMEOUT)
    return [UserResponse.from_view(view) for view in views]


@router.get("/email-exists", response_model=EmailExistsResponse)
async def check_email(email: str, repo: UserRepository = Depends(get_user_repo)):
    """Check whether an email (case-insensitive) is already registered."""
    exists = await user_service.email_exists(repo, email, timeout=REQUEST_TIMEOUT)
    return EmailExistsResponse(exists=exists)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, repo: UserRepository = Depends(get_user_repo)):
    """Get a user by ID."""
    view = await user_service.get_user(repo, user_id, timeout=REQUEST_TIMEOUT)
    if view is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.from_view(view)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserCreateRequest,
    response: Response,
    repo: UserRepository = Depends(get_user_repo),
):
    """Register a new user.

    Raises:
        400: field violations or age restriction
        409: email already registered
    """
    view = await user_service.create_user(repo, request.to_domain(), timeout=REQUEST_TIMEOUT)
    response.headers["Location"] = f"/users/{view.id}"
    return UserResponse.from_view(view)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    request: UserUpdateRequest,
    repo: UserRepository = Depends(get_user_repo),
):
    """Update a user.

    Raises:
        400: field violations or age restriction
        404: user not found
        409: email owned by another user, or reactivation attempt
    """
    view = await user_service.update_user(repo, user_id, request.to_domain(), timeout=REQUEST_TIMEOUT)
    return UserResponse.from_view(view)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_user(user_id: int, repo: UserRepository = Depends(get_user_repo)):
    """Deactivate a user. The record is kept with active=false."""
    if not await user_service.deactivate_user(repo, user_id, timeout=REQUEST_TIMEOUT):
        raise HTTPException(status_code=404, detail="User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
