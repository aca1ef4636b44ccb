import hmac

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from ou_provisioner.core.security import JWTHandler
from ou_provisioner.core.config import settings

router = APIRouter(prefix="/auth", tags=["Authentication"])


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


@router.post("/login", response_model=TokenResponse)
def login(credentials: LoginRequest) -> TokenResponse:
    """Exchange the local API credentials for a JWT token."""
    valid_username = hmac.compare_digest(
        credentials.username, settings.local_auth_username
    )
    valid_password = hmac.compare_digest(
        credentials.password, settings.local_auth_password
    )
    if not (valid_username and valid_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_data = {
        "sub": credentials.username,
        "username": credentials.username,
    }
    access_token = JWTHandler.create_token(token_data)

    return TokenResponse(
        access_token=access_token,
        expires_in=settings.jwt_expiration_hours * 3600,
    )
