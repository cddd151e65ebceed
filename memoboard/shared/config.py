# memoboard/shared/config.py
from pydantic import BaseModel
from pathlib import Path
import os

ROOT = Path(__file__).resolve().parents[2]   # project root
_DEFAULT_DB_URL = f"sqlite:///{(ROOT / 'storage' / 'memoboard.db').as_posix()}"


class Settings(BaseModel):
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # store
    DB_URL: str = os.getenv("DB_URL", _DEFAULT_DB_URL)

    # summarization provider (unset key -> summaries are unconfigured)
    OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
    OPENAI_BASE_URL: str | None = os.getenv("OPENAI_BASE_URL")
    SUMMARY_MODEL: str = os.getenv("SUMMARY_MODEL", "gpt-4o-mini")
    SUMMARY_MAX_TOKENS: int = int(os.getenv("SUMMARY_MAX_TOKENS", "100"))
    SUMMARY_TEMPERATURE: float = float(os.getenv("SUMMARY_TEMPERATURE", "0.7"))
    SUMMARY_MAX_CHARS: int = int(os.getenv("SUMMARY_MAX_CHARS", "50"))

    # client side
    STORE_URL: str = os.getenv("STORE_URL", "http://127.0.0.1:8000")
    STORE_TIMEOUT: float = float(os.getenv("STORE_TIMEOUT", "10.0"))

settings = Settings()
