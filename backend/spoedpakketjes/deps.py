from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from .schemas import User
from .security import ALGORITHM
from .services import DeliveryService
from .settings import Settings
from .simulation import ProgressSimulator
from .storage.base import Storage

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_storage(request: Request) -> Storage:
    return request.app.state.storage

def get_service(request: Request) -> DeliveryService:
    return request.app.state.service

def get_simulator(request: Request) -> ProgressSimulator | None:
    return request.app.state.simulator

def get_current_user(
    token: str = Depends(oauth2_scheme),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> User:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user
