# airdesk/dependencies.py
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from airdesk.auth import decode_access_token
from airdesk.errors import ForbiddenError
from airdesk.schemas.user import Identity

# auto_error is off so a missing token goes through our own 401 body
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/users/signin", auto_error=False)


async def get_db(request: Request):
    return request.app.state.db


async def get_config(request: Request):
    return request.app.state.config


async def get_current_user(token: str | None = Depends(oauth2_scheme), config=Depends(get_config)) -> Identity:
    return decode_access_token(token, config)


async def require_admin(current_user: Identity = Depends(get_current_user)) -> Identity:
    if not current_user.is_admin:
        raise ForbiddenError("Admins only")
    return current_user
