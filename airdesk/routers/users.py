# airdesk/routers/users.py
from fastapi import APIRouter, Depends

from airdesk.dependencies import get_config, get_current_user, get_db
from airdesk.schemas.user import Identity, UserCreate, UserSignIn
from airdesk.services import users as user_service

router = APIRouter(prefix="/users", tags=["Users"])


# -------------------------
# List users (no password hashes)
# -------------------------
@router.get("")
async def list_users(db=Depends(get_db), current_user: Identity = Depends(get_current_user)):
    return await user_service.list_users(db)


# -------------------------
# Signup
# -------------------------
@router.post("/signup", status_code=201)
async def signup(data: UserCreate, db=Depends(get_db), config=Depends(get_config)):
    return await user_service.sign_up(db, config, data)


# -------------------------
# Signin
# -------------------------
@router.post("/signin")
async def signin(data: UserSignIn, db=Depends(get_db), config=Depends(get_config)):
    return await user_service.sign_in(db, config, data.email, data.password)
