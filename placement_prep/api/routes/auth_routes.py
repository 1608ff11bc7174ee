"""
Authentication Routes

POST /auth/register - Register a student or alumni account
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
"""

from fastapi import APIRouter, Depends

from placement_prep.core.auth import create_access_token, get_current_user, hash_password, verify_password
from placement_prep.core.errors import DuplicateEmailError, ForbiddenError, UnauthorizedError
from placement_prep.schemas.schemas import (
    LoginRequest, RegisterRequest, RegisterResponse, TokenResponse, UserResponse, user_response
)
from placement_prep.services.mongo_service import PersistenceGateway, get_gateway

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(payload: RegisterRequest, gateway: PersistenceGateway = Depends(get_gateway)):
    """
    Register a new student or alumni account.

    Students start without a category and with empty progress.
    """
    request = payload.root

    # Check email exists
    if gateway.users.find_by_email(request.email) is not None:
        raise DuplicateEmailError()

    doc = request.model_dump(by_alias=True)
    doc["password"] = hash_password(request.password)
    user_id = gateway.users.insert(doc)

    return RegisterResponse(
        message="User registered successfully",
        user=user_response(gateway.users.get_by_id(user_id))
    )


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, gateway: PersistenceGateway = Depends(get_gateway)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    doc = gateway.users.find_raw_by_email(request.email)
    if not doc or not doc.get("password"):
        raise UnauthorizedError("Invalid email or password")

    if not verify_password(request.password, doc["password"]):
        raise UnauthorizedError("Invalid email or password")

    if doc.get("role") not in ("student", "alumni", "admin"):
        raise ForbiddenError("Account role not supported")

    user_id = str(doc["_id"])
    token = create_access_token(data={"sub": user_id, "role": doc["role"]})

    return TokenResponse(access_token=token, user_id=user_id, role=doc["role"])


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user), gateway: PersistenceGateway = Depends(get_gateway)):
    """Get current authenticated user's info."""
    return user_response(gateway.users.get_by_id(user["user_id"]))
