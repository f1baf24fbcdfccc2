# challenge_tracker/auth/dependencies.py
from __future__ import annotations

from typing import Optional

import jwt
from fastapi import HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from challenge_tracker.config.settings import settings

# challenges.user_id 컬럼 길이와 같아야 함
MAX_USER_ID_LENGTH = 64


bearer_scheme = HTTPBearer(auto_error=False)


def verify_access_token(token: str) -> Optional[dict]:
    """
    서명 / exp 검증 후 payload 반환 (실패하면 None)
    토큰 발급은 인증 서버 담당이라 여기서는 검증만 한다.
    """
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError:
        return None


def get_current_user_id(
    request: Request,
    bearer: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> str:
    # Authorization: Bearer <token> 우선, 없으면 헤더 직접 확인
    if bearer and getattr(bearer, "scheme", "").lower() == "bearer":
        access_token = bearer.credentials
    else:
        auth = request.headers.get("Authorization")
        if not auth or not auth.startswith("Bearer "):
            raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing Authorization header")
        access_token = auth.replace("Bearer ", "", 1).strip()

    payload = verify_access_token(access_token)
    if payload is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid access token")

    # 호출자 식별자는 불투명 문자열로만 사용
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Token has no sub claim")
    if len(str(user_id)) > MAX_USER_ID_LENGTH:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid sub claim")

    return str(user_id)
