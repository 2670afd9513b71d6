"""Language-model extraction of candidate orders from free-text emails."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Protocol

from loguru import logger
import requests

from order_intake.errors import ExtractionError
from order_intake.models import (
    ADDRESS_NOT_FOUND,
    DATE_NOT_SPECIFIED,
    UNKNOWN_CUSTOMER,
    CandidateItem,
    CandidateOrder,
    CustomerInfo,
    DeliveryInfo,
)

EXTRACTION_PROMPT = """
Extract order information from this email. Return ONLY valid JSON with this exact structure:

{{
  "customer": {{
    "name": "string",
    "address": "string"
  }},
  "items": [
    {{
      "product": "exact product name or code from email",
      "quantity": number,
      "confidence": number between 0-1
    }}
  ],
  "delivery": {{
    "date": "YYYY-MM-DD or 'not specified'",
    "address": "delivery address or same as customer"
  }}
}}

Email content:
{email}

Rules:
- Extract exact product names/codes as written
- Parse quantities carefully (numbers before product names)
- If delivery address not specified, use customer address
- Set confidence based on clarity of information
- Return valid JSON only, no other text
"""

PRODUCT_KEYS = ("product", "productText", "product_text")


class OrderExtractor(Protocol):
    def extract(self, email_text: str) -> CandidateOrder:
        ...


class CompletionClient(Protocol):
    def complete(self, prompt: str) -> str:
        ...


class ChatCompletionClient:
    """
    Minimal adapter over an OpenAI-compatible chat completions endpoint.
    POST {base_url}/chat/completions with a single user message.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        model: str,
        temperature: float = 0.1,
        max_tokens: int = 1000,
        timeout_seconds: float = 60.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

    def complete(self, prompt: str) -> str:
        if not self.api_key:
            raise ExtractionError("No language model API key configured.")
        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        try:
            response = requests.post(
                f"{self.base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=body,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise ExtractionError(f"Model request failed: {exc}") from exc
        if response.status_code != 200:
            raise ExtractionError(f"Model request returned HTTP {response.status_code}")
        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ExtractionError(f"Unexpected model response shape: {exc}") from exc
        if not content:
            raise ExtractionError("No response from language model")
        return str(content)


def build_extraction_prompt(email_text: str) -> str:
    return EXTRACTION_PROMPT.format(email=email_text)


def fallback_candidate() -> CandidateOrder:
    return CandidateOrder(
        customer=CustomerInfo(name=UNKNOWN_CUSTOMER, address=ADDRESS_NOT_FOUND),
        items=(),
        delivery=DeliveryInfo(date=DATE_NOT_SPECIFIED, address=ADDRESS_NOT_FOUND),
    )


def extract_json_object(reply: str) -> Dict[str, Any]:
    """Parse the span between the first '{' and the last '}' of a model reply."""
    start = reply.find("{")
    end = reply.rfind("}")
    if start < 0 or end < start:
        raise ExtractionError("Model reply contains no JSON object")
    try:
        parsed = json.loads(reply[start : end + 1])
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"Invalid JSON in model reply: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ExtractionError("Model reply JSON is not an object")
    return parsed


def _text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _as_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _normalize_item(raw: Any) -> Optional[CandidateItem]:
    if not isinstance(raw, dict):
        return None
    product = next((raw[k] for k in PRODUCT_KEYS if raw.get(k) not in (None, "")), None)
    if product is None:
        return None
    return CandidateItem(
        product_text=str(product).strip(),
        quantity=_as_int(raw.get("quantity")),
        confidence=_as_float(raw.get("confidence")),
    )


def normalize_candidate(payload: Dict[str, Any]) -> CandidateOrder:
    """Coerce a loosely-structured reply into a CandidateOrder.

    Confidence values are passed through without range checks.
    """
    customer = payload.get("customer") if isinstance(payload.get("customer"), dict) else {}
    delivery = payload.get("delivery") if isinstance(payload.get("delivery"), dict) else {}
    raw_items = payload.get("items")
    items: List[CandidateItem] = []
    if isinstance(raw_items, list):
        for raw in raw_items:
            item = _normalize_item(raw)
            if item is not None:
                items.append(item)
    return CandidateOrder(
        customer=CustomerInfo(
            name=_text(customer.get("name"), UNKNOWN_CUSTOMER),
            address=_text(customer.get("address"), ADDRESS_NOT_FOUND),
        ),
        items=tuple(items),
        delivery=DeliveryInfo(
            date=_text(delivery.get("date"), DATE_NOT_SPECIFIED),
            address=_text(delivery.get("address"), ADDRESS_NOT_FOUND),
        ),
    )


class LLMOrderExtractor:
    def __init__(self, client: CompletionClient) -> None:
        self.client = client

    def extract(self, email_text: str) -> CandidateOrder:
        try:
            reply = self.client.complete(build_extraction_prompt(email_text))
            return normalize_candidate(extract_json_object(reply))
        except Exception as exc:
            # Any transport or parse failure degrades to the fixed fallback.
            logger.warning("Extraction failed, using fallback candidate: {}", exc)
            return fallback_candidate()
