# errors.py
import functools
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import config

logger = logging.getLogger(__name__)


class ApiError(Exception):
  status_code = 500

  def __init__(self, message: str, status_code: Optional[int] = None):
    super().__init__(message)
    self.message = message
    if status_code is not None:
      self.status_code = status_code


class ValidationError(ApiError):
  status_code = 400


class NotFoundError(ApiError):
  status_code = 404


class ConflictError(ApiError):
  status_code = 409


class StoreError(ApiError):
  """Backing store failure. Adapters raise this in place of driver errors."""
  status_code = 500


def fails_with(message: str):
  """Turn a StoreError raised inside the route into a 500 carrying `message`."""
  def decorator(fn):
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
      try:
        return fn(*args, **kwargs)
      except StoreError:
        logger.exception("%s", message)
        raise ApiError(message, 500)
    return wrapper
  return decorator


def error_body(message: str) -> dict:
  return {"success": False, "error": message}


def _first_error(exc: RequestValidationError) -> str:
  errors = exc.errors()
  if not errors:
    return "Invalid request"
  err = errors[0]
  loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
  msg = err.get("msg", "invalid value")
  return f"Invalid request: {loc}: {msg}" if loc else f"Invalid request: {msg}"


def register_error_handlers(app: FastAPI) -> None:
  @app.exception_handler(ApiError)
  async def api_error_handler(_request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

  @app.exception_handler(RequestValidationError)
  async def request_validation_handler(_request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content=error_body(_first_error(exc)))

  @app.exception_handler(StarletteHTTPException)
  async def http_error_handler(_request: Request, exc: StarletteHTTPException):
    message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content=error_body(message))

  @app.exception_handler(Exception)
  async def unhandled_error_handler(_request: Request, exc: Exception):
    logger.exception("Unhandled error")
    message = "Internal server error" if config.is_production() else str(exc)
    return JSONResponse(status_code=500, content=error_body(message))
