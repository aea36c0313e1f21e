# config.py
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dairy.db").strip()
STORE_BACKEND = os.getenv("STORE_BACKEND", "sql").strip().lower()
APP_ENV = os.getenv("APP_ENV", "development").strip().lower()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
SQL_ECHO = os.getenv("SQL_ECHO", "0").strip() in ("1", "true", "yes")
HOST = os.getenv("HOST", "127.0.0.1").strip()
PORT = int(os.getenv("PORT", "8000"))
CORS_ORIGINS = [
  x.strip()
  for x in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
  if x.strip()
]

if STORE_BACKEND not in ("sql", "memory"):
  raise RuntimeError(f"STORE_BACKEND must be 'sql' or 'memory', got {STORE_BACKEND!r}")


def is_production() -> bool:
  return APP_ENV == "production"
