from pathlib import Path

import pytest

from order_intake.config import DEFAULT_LLM_MODEL, Settings


def test_defaults_derive_paths_from_data_dir() -> None:
    settings = Settings.from_env({"ORDER_DATA_DIR": "/srv/orders"})

    assert settings.catalog_path == Path("/srv/orders/Product Catalog.csv")
    assert settings.emails_dir == Path("/srv/orders/sample_emails")
    assert settings.store_path == Path("/srv/orders/orders.json")
    assert settings.email_pattern == "sample_email_*.txt"
    assert settings.output_dir == Path("generated")
    assert settings.pdf_template is None
    assert settings.llm_model == DEFAULT_LLM_MODEL
    assert settings.llm_api_key is None
    assert settings.log_level == "INFO"


def test_api_key_falls_back_to_provider_variables() -> None:
    assert Settings.from_env({"GROQ_API_KEY": "groq"}).llm_api_key == "groq"
    assert Settings.from_env({"OPENAI_API_KEY": "oa", "LLM_API_KEY": "own"}).llm_api_key == "own"


def test_numeric_overrides_are_validated() -> None:
    settings = Settings.from_env({"LLM_TEMPERATURE": "0.3", "LLM_MAX_TOKENS": "500"})

    assert settings.llm_temperature == 0.3
    assert settings.llm_max_tokens == 500
    with pytest.raises(ValueError, match="LLM_MAX_TOKENS"):
        Settings.from_env({"LLM_MAX_TOKENS": "lots"})
