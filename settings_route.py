# settings_route.py
from fastapi import APIRouter, Depends

from business_settings import SettingsCache, get_settings
from db import get_store
from errors import fails_with
from schemas import ApiResponse, SettingsOut, SettingsUpdate, ok
from store import Store

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=ApiResponse[SettingsOut])
def read_settings(settings: SettingsCache = Depends(get_settings)):
  return ok(settings.current)


@router.put("", response_model=ApiResponse[SettingsOut])
@fails_with("Failed to update settings")
def update_settings(
  payload: SettingsUpdate,
  store: Store = Depends(get_store),
  settings: SettingsCache = Depends(get_settings),
):
  changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
  return ok(settings.update(store, changes), "Settings updated successfully")


@router.post("/reset", response_model=ApiResponse[SettingsOut])
@fails_with("Failed to reset settings")
def reset_settings(store: Store = Depends(get_store), settings: SettingsCache = Depends(get_settings)):
  return ok(settings.reset(store), "Settings reset to defaults")
