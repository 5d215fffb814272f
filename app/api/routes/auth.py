import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.core.config import settings
from app.core.rate_limit import limiter
from app.core.security import create_access_token, verify_password
from app.db.database import get_db
from app.models.token_blacklist import TokenBlacklist
from app.models.user import User
from app.schemas.user import Token

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=Token)
@limiter.limit(settings.login_rate_limit)
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    email = form_data.username.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(form_data.password, user.hashed_password):
        logger.warning(f"Failed login attempt for {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")

    logger.info(f"User {user.id} logged in")
    return Token(access_token=create_access_token(user.id))


@router.post("/logout")
def logout(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Revoke the bearer token used for this request."""
    payload = request.state.token_payload
    jti = payload.get("jti")
    if jti and not db.query(TokenBlacklist.id).filter(TokenBlacklist.jti == jti).first():
        db.add(TokenBlacklist(
            jti=jti,
            user_id=current_user.id,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            reason="logout",
        ))
        db.commit()
    logger.info(f"User {current_user.id} logged out")
    return {"message": "Logged out"}
