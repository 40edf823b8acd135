"""
Signup and login.

POST /api/auth/signup - register a user
POST /api/auth/login  - check credentials, return the user's identity
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, sessionmaker

from ledger_api.dependencies import get_session_factory
from ledger_api.responses import envelope
from ledger_api.schemas import LoginRequest, SignupRequest, UserResponse
from ledger_kernel.db.engine import session_scope
from ledger_kernel.services.user_service import UserService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/signup")
def signup(
    body: SignupRequest,
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        user = UserService(session).register(
            email=body.email,
            password=body.password,
            first_name=body.first_name,
            last_name=body.last_name,
        )
        data = UserResponse.of(user)
    return envelope(201, "User registered successfully", data)


@router.post("/login")
def login(
    body: LoginRequest,
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        user = UserService(session).authenticate(body.email, body.password)
        data = UserResponse.of(user)
    return envelope(200, "Login successful", data)
