from fastapi import APIRouter, Depends, HTTPException
from ..deps import get_storage
from ..schemas import Address, AddressCreate
from ..storage.base import Storage

router = APIRouter(prefix="/api/addresses", tags=["addresses"])

@router.get("/{user_id}", response_model=list[Address])
def user_addresses(user_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_addresses_by_user_id(user_id)

@router.post("", response_model=Address, status_code=201)
def create_address(payload: AddressCreate, storage: Storage = Depends(get_storage)):
    if payload.user_id is not None and not storage.get_user(payload.user_id):
        raise HTTPException(400, "User not found")
    return storage.create_address(payload)
