import os
from typing import Optional

from fastapi import Depends
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer

from school_directory.core.errors import Unauthorized
from school_directory.core.security import verify_token

AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "auth-token")

cookie_scheme = APIKeyCookie(name=AUTH_COOKIE_NAME, auto_error=False)
bearer_scheme = HTTPBearer(auto_error=False)

def authenticate(token: Optional[str]) -> int:
    if not token:
        raise Unauthorized()
    return verify_token(token)

def get_current_user(
    cookie_token: Optional[str] = Depends(cookie_scheme),
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> int:
    token = cookie_token or (bearer.credentials if bearer else None)
    return authenticate(token)
