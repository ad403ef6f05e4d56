"""
Authentication dependencies.

Every API call carries ``Authorization: Bearer <token>``. When
``AUTH_JWT_SECRET`` is configured the token is verified and its ``sub``
becomes the caller's user id; otherwise the token is accepted as-is and
the caller stays anonymous.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from carecoord.auth.config import AuthSettings, get_auth_settings
from carecoord.auth.schemas import Caller, User
from carecoord.utils.logger import logger

security = HTTPBearer(auto_error=False)


def decode_access_token(token: str, settings: AuthSettings) -> User:
    """
    Verify a JWT and build the User it identifies.

    Args:
        token: Encoded JWT
        settings: Auth settings with a configured secret

    Returns:
        User: Identity from the token claims

    Raises:
        HTTPException: 401 if the token is invalid, expired or has no subject
    """
    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError as e:
        logger.warning("Access token rejected", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    subject = claims.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return User(id=subject, email=claims.get("email"), role=claims.get("role"))


async def get_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: AuthSettings = Depends(get_auth_settings),
) -> Caller:
    """
    Resolve the caller from the Authorization header.

    Raises:
        HTTPException: 401 if no bearer token was sent or it fails verification
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authentication token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    if settings.jwt_secret is None:
        return Caller(access_token=token)
    return Caller(access_token=token, user=decode_access_token(token, settings))
