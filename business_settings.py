# business_settings.py
#
# The business settings row is read once at startup and kept in memory.
# Every write goes to the store first and then replaces the cached copy.
import logging
from typing import Optional

from fastapi import Request

from models import BusinessSettings
from schemas import SettingsOut
from store import Store

logger = logging.getLogger(__name__)

SETTINGS_ID = 1


class SettingsCache:
  def __init__(self):
    self._current: Optional[SettingsOut] = None

  @property
  def current(self) -> SettingsOut:
    if self._current is None:
      raise RuntimeError("settings not loaded")
    return self._current

  def _remember(self, row: BusinessSettings) -> SettingsOut:
    self._current = SettingsOut.model_validate(row)
    return self._current

  def load(self, store: Store) -> SettingsOut:
    row = store.get(BusinessSettings, SETTINGS_ID)
    if row is None:
      row = BusinessSettings(id=SETTINGS_ID)
      with store.transaction():
        store.add(row)
      logger.info("created default business settings")
    return self._remember(row)

  def update(self, store: Store, changes: dict) -> SettingsOut:
    changes = {k: v for k, v in changes.items() if k != "id"}
    with store.transaction():
      row = store.get(BusinessSettings, SETTINGS_ID)
      if row is None:
        store.add(BusinessSettings(id=SETTINGS_ID, **changes))
      else:
        for k, v in changes.items():
          setattr(row, k, v)
        store.save(row)
    return self.load(store)

  def reset(self, store: Store) -> SettingsOut:
    defaults = BusinessSettings(id=SETTINGS_ID).model_dump(exclude={"id"})
    return self.update(store, defaults)


def get_settings(request: Request) -> SettingsCache:
  return request.app.state.settings
