"""
Runtime configuration read from the environment.

`.env` files are loaded once via python-dotenv; every path is relative to the
working directory unless given absolute.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_LLM_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_LLM_MODEL = "llama-3.1-8b-instant"


def _get(env: Mapping[str, str], name: str) -> Optional[str]:
    value = (env.get(name) or "").strip()
    return value or None


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = _get(env, name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _get(env, name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    catalog_path: Path
    emails_dir: Path
    email_pattern: str
    output_dir: Path
    store_path: Path
    catalog_snapshot_path: Path
    pdf_template: Optional[Path]
    llm_api_key: Optional[str]
    llm_base_url: str = DEFAULT_LLM_BASE_URL
    llm_model: str = DEFAULT_LLM_MODEL
    llm_temperature: float = 0.1
    llm_max_tokens: int = 1000
    llm_timeout_seconds: float = 60.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        if env is None:
            load_dotenv()
            env = os.environ
        data_dir = Path(_get(env, "ORDER_DATA_DIR") or "data")
        template = _get(env, "ORDER_PDF_TEMPLATE")
        return cls(
            data_dir=data_dir,
            catalog_path=Path(_get(env, "ORDER_CATALOG_PATH") or data_dir / "Product Catalog.csv"),
            emails_dir=Path(_get(env, "ORDER_EMAILS_DIR") or data_dir / "sample_emails"),
            email_pattern=_get(env, "ORDER_EMAIL_PATTERN") or "sample_email_*.txt",
            output_dir=Path(_get(env, "ORDER_OUTPUT_DIR") or "generated"),
            store_path=Path(_get(env, "ORDER_STORE_PATH") or data_dir / "orders.json"),
            catalog_snapshot_path=Path(
                _get(env, "ORDER_CATALOG_SNAPSHOT_PATH") or data_dir / "catalog.json"
            ),
            pdf_template=Path(template) if template else None,
            llm_api_key=(
                _get(env, "LLM_API_KEY") or _get(env, "GROQ_API_KEY") or _get(env, "OPENAI_API_KEY")
            ),
            llm_base_url=_get(env, "LLM_BASE_URL") or DEFAULT_LLM_BASE_URL,
            llm_model=_get(env, "LLM_MODEL") or DEFAULT_LLM_MODEL,
            llm_temperature=_get_float(env, "LLM_TEMPERATURE", 0.1),
            llm_max_tokens=_get_int(env, "LLM_MAX_TOKENS", 1000),
            llm_timeout_seconds=_get_float(env, "LLM_TIMEOUT_SECONDS", 60.0),
            log_level=(_get(env, "LOG_LEVEL") or "INFO").upper(),
        )
