from fastapi import APIRouter, Depends, HTTPException
from ..deps import get_current_user, get_settings, get_storage
from ..schemas import LoginIn, TokenOut, User, UserCreate, UserOut
from ..security import hash_password, issue_user_token, verify_password
from ..settings import Settings
from ..storage.base import Storage

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/register", response_model=UserOut, status_code=201)
def register(data: UserCreate, storage: Storage = Depends(get_storage)):
    if storage.get_user_by_username(data.username):
        raise HTTPException(400, "Username already exists")
    return storage.create_user(
        username=data.username,
        password_hash=hash_password(data.password),
        full_name=data.full_name,
        email=data.email,
        phone=data.phone,
    )

@router.post("/login", response_model=TokenOut)
def login(data: LoginIn, storage: Storage = Depends(get_storage), settings: Settings = Depends(get_settings)):
    user = storage.get_user_by_username(data.username)
    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Incorrect username or password")
    token = issue_user_token(user.id, secret_key=settings.SECRET_KEY,
                             expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return TokenOut(access_token=token, user_id=user.id, full_name=user.full_name)

@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user
