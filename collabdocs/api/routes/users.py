"""
User Routes - accounts, login cookie, profile image and usage.

Endpoints:
- POST /api/users                     : Sign up
- POST /api/login, /api/users/login   : Log in (sets the auth-token cookie)
- GET  /api/users/logout              : Clear the cookie
- GET  /api/users/current             : The caller's profile
- GET  /api/users/check-auth          : Is the cookie valid?
- PUT  /api/users/update              : Change name / email / password
- GET  /api/users/credits             : Remaining AI credits
- GET  /api/users/storage             : Document storage used
- POST /api/users/profile-image       : Upload a profile image
- GET  /api/users/{id}                : Public profile
- GET  /api/users/{id}/profile-image  : Profile image bytes
"""
from fastapi import APIRouter, Depends, File, Response, UploadFile

from collabdocs.api.deps import require_user_id
from collabdocs.core.config import get_settings
from collabdocs.core.logging_config import get_logger
from collabdocs.core.security import AUTH_COOKIE_NAME, auth_token_max_age, create_auth_token
from collabdocs.models.common import ErrorResponse, result
from collabdocs.models.users import (
    CreditsResponse,
    LoginRequest,
    SignupRequest,
    StorageResponse,
    UpdateUserRequest,
    UserResponse,
)
from collabdocs.services.credit_service import get_credit_service
from collabdocs.services.user_service import get_user_service

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Users"],
    responses={
        401: {"model": ErrorResponse, "description": "Not logged in"},
    }
)


def _set_auth_cookie(response: Response, user_id: int) -> None:
    settings = get_settings()
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=create_auth_token(user_id),
        max_age=auth_token_max_age(),
        path="/",
        domain=settings.cookie_domain,
        secure=settings.is_production(),
        httponly=True,
        samesite="lax",
    )


@router.post(
    "/users",
    response_model=UserResponse,
    summary="Create an account",
    responses={409: {"model": ErrorResponse, "description": "Email already registered"}},
)
async def signup(request: SignupRequest) -> UserResponse:
    user = get_user_service().signup(request.name, request.email, request.password)
    return UserResponse(**user)


@router.post("/login", summary="Log in")
@router.post("/users/login", summary="Log in", include_in_schema=False)
async def login(request: LoginRequest, response: Response):
    """Check credentials and set the auth-token cookie."""
    user_id = get_user_service().authenticate(request.email, request.password)
    _set_auth_cookie(response, user_id)
    logger.info(f"User {user_id} logged in")
    return result(user_id=user_id)


@router.get("/users/logout", summary="Log out")
async def logout(response: Response):
    settings = get_settings()
    response.delete_cookie(
        key=AUTH_COOKIE_NAME,
        path="/",
        domain=settings.cookie_domain,
        secure=settings.is_production(),
        httponly=True,
        samesite="lax",
    )
    return result()


@router.get("/users/current", response_model=UserResponse, summary="The logged-in user")
async def current_user(user_id: int = Depends(require_user_id)) -> UserResponse:
    return UserResponse(**get_user_service().get_user(user_id))


@router.get("/users/check-auth", summary="Validate the auth cookie")
async def check_auth(user_id: int = Depends(require_user_id)):
    return result(user_id=user_id)


@router.put(
    "/users/update",
    summary="Update the logged-in user",
    responses={409: {"model": ErrorResponse, "description": "Email belongs to another account"}},
)
async def update_user(request: UpdateUserRequest, user_id: int = Depends(require_user_id)):
    user = get_user_service().update_user(
        user_id,
        name=request.name,
        email=request.email,
        password=request.password,
    )
    return result(user=user)


@router.get("/users/credits", response_model=CreditsResponse, summary="Remaining AI credits")
async def get_credits(user_id: int = Depends(require_user_id)) -> CreditsResponse:
    return CreditsResponse(user_id=user_id, ai_credits=get_credit_service().balance(user_id))


@router.get("/users/storage", response_model=StorageResponse, summary="Document storage used")
async def get_storage(user_id: int = Depends(require_user_id)) -> StorageResponse:
    return StorageResponse(**get_user_service().get_storage(user_id))


@router.post(
    "/users/profile-image",
    summary="Upload a profile image",
    responses={413: {"model": ErrorResponse, "description": "Image too large"}},
)
async def upload_profile_image(
    profile_image: UploadFile = File(..., description="PNG, JPEG, GIF or WebP image"),
    user_id: int = Depends(require_user_id),
):
    data = await profile_image.read()
    get_user_service().set_profile_image(user_id, data, profile_image.content_type)
    return result()


@router.get(
    "/users/{target_id}",
    response_model=UserResponse,
    summary="Public profile of a user",
    responses={404: {"model": ErrorResponse, "description": "No such user"}},
)
async def get_user(target_id: int, user_id: int = Depends(require_user_id)) -> UserResponse:
    return UserResponse(**get_user_service().get_user(target_id))


@router.get(
    "/users/{target_id}/profile-image",
    summary="Profile image bytes",
    response_class=Response,
    responses={404: {"model": ErrorResponse, "description": "No profile image"}},
)
async def get_profile_image(target_id: int, user_id: int = Depends(require_user_id)):
    data, content_type = get_user_service().get_profile_image(target_id)
    return Response(content=data, media_type=content_type, headers={"Cache-Control": "private, max-age=300"})
