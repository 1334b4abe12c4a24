"""Signup and login: the only routes that do not need a token."""

from fastapi import APIRouter, Depends, status
from ..dependencies.services import get_auth_service
from ..schemas.user import AuthResponse, UserCreate, UserLogin, UserOut
from ..services.auth import AuthService

router = APIRouter()


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: UserCreate, auth: AuthService = Depends(get_auth_service)):
    user, token = auth.signup(payload.email, payload.password)
    return AuthResponse(user=UserOut.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
def login(payload: UserLogin, auth: AuthService = Depends(get_auth_service)):
    user, token = auth.login(payload.email, payload.password)
    return AuthResponse(user=UserOut.model_validate(user), token=token)
