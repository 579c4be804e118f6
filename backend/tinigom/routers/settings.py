from fastapi import APIRouter, Depends, HTTPException

from tinigom.deps import get_gateway
from tinigom.schemas import SettingsOut, SettingsUpdate
from tinigom.services.gateway import PersistenceGateway, StorageUnavailableError

router = APIRouter(tags=["settings"])


@router.get("")
def get_app_settings(gateway: PersistenceGateway = Depends(get_gateway)):
    try:
        return {"settings": SettingsOut.model_validate(gateway.get_settings())}
    except StorageUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("")
def update_app_settings(
    payload: SettingsUpdate,
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """
    Update the shared goal. Target fields left out of the body keep their
    stored values. No concurrency guard: last writer wins.
    """
    try:
        row = gateway.get_settings()
        row = gateway.settings.update(row.id, payload.model_dump(exclude_unset=True))
    except StorageUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"settings": SettingsOut.model_validate(row)}
