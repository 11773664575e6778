from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from pos_app.database import get_db
from pos_app.core.auth import get_current_user
from pos_app.core.jwt import create_access_token
from pos_app.core.rate_limiter import limiter
from pos_app.schemas.user import TokenResponse, UserResponse
from pos_app.services.users import authenticate

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ---------------- LOGIN (TOKEN-BASED) ----------------
@router.post("/login", response_model=TokenResponse)
@limiter.limit("5/minute")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = authenticate(db, form_data.username, form_data.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    token = create_access_token(
        data={"sub": str(user.id), "role": user.role}
    )

    return {
        "access_token": token,
        "token_type": "bearer"
    }


# ---------------- CURRENT USER ----------------
@router.get("/me", response_model=UserResponse)
def me(current_user=Depends(get_current_user)):
    return current_user
