from __future__ import annotations  # LLM request gateway module

import json
import logging
import os
from typing import Any, Dict, Optional, Protocol, Sequence, Type, TypeVar

import httpx
from langchain_core.messages import BaseMessage
from pydantic import BaseModel, ValidationError

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


class LlmTransportError(LlmGatewayError):  # Network failure or non-success status
    def __init__(self, message: str, *, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class LlmFormatError(LlmGatewayError):  # Reply content did not match the expected schema
    def __init__(self, message: str, *, content: str = "") -> None:
        super().__init__(message)
        self.content = content


T = TypeVar("T", bound=BaseModel)


def chat(
    messages: Sequence[Any],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:  # Invoke configured LLM route and validate output
    base_messages = _coerce_messages(messages)
    attempts = cfg.max_retries + 1
    last_error: Optional[Exception] = None
    last_content = ""
    preview = _preview(base_messages)
    if len(preview) > 120:
        preview = preview[:117] + "..."
    logger.info(
        "LLM request start route=%s model=%s attempts=%d messages=%d preview=%s",
        cfg.name,
        cfg.model,
        attempts,
        len(base_messages),
        preview,
    )
    for attempt in range(attempts):
        attempt_messages = list(base_messages)
        if attempt > 0:
            attempt_messages.append({"role": "system", "content": _retry_hint(str(last_error))})
        payload = _payload(cfg, attempt_messages, options)
        headers = _headers(cfg)
        response = _post(cfg.url, payload, headers, cfg.timeout_s, client)
        if not 200 <= response.status_code < 300:
            body = _safe_text(response)
            logger.error("LLM error status: %s", response.status_code)
            raise LlmTransportError(
                f"LLM returned status {response.status_code}",
                status=response.status_code,
                body=body,
            )
        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Invalid JSON payload from LLM: %s", exc)
            raise LlmFormatError("LLM payload was not JSON", content=_safe_text(response)) from exc
        content = _first_choice_text(data)
        try:
            parsed = _validate(schema, content)
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("LLM output validation failed: %s", exc)
            last_error = exc
            last_content = content
            continue
        logger.info("LLM request done route=%s model=%s attempt=%d", cfg.name, cfg.model, attempt + 1)
        return parsed
    raise LlmFormatError("LLM output validation failed", content=last_content) from last_error


def _payload(cfg: LlmRoute, messages: Sequence[Dict[str, str]], options: Optional[Dict[str, Any]]) -> Dict[str, Any]:  # Build request body
    payload: Dict[str, Any] = {"model": cfg.model}
    if cfg.max_tokens is not None:
        payload["max_tokens"] = cfg.max_tokens
    if cfg.temperature is not None:
        payload["temperature"] = cfg.temperature
    if options:
        payload.update(options)
    payload["messages"] = list(messages)
    return payload


def _headers(cfg: LlmRoute) -> Dict[str, str]:  # Build request headers with bearer credential
    headers = {"Content-Type": "application/json"}
    api_key = cfg.api_key
    if not api_key and cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return headers


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> HttpResponse:  # Dispatch HTTP request
    try:
        if client is not None:
            return client.post(url, json=payload, headers=headers, timeout=timeout)
        with httpx.Client(timeout=timeout) as http_client:
            return http_client.post(url, json=payload, headers=headers)
    except httpx.HTTPError as exc:
        logger.error("LLM transport failure: %s", exc)
        raise LlmTransportError(f"LLM transport failed: {exc}") from exc


def _safe_text(response: HttpResponse) -> str:  # Read response body for diagnostics
    try:
        return response.text
    except (UnicodeDecodeError, httpx.HTTPError):
        return ""


def _coerce_messages(payload: Sequence[Any]) -> list[Dict[str, str]]:  # Convert LangChain or dict messages into role/content dicts
    normalized: list[Dict[str, str]] = []
    for item in payload:
        if isinstance(item, BaseMessage):
            normalized.append(_message_dict(item))
            continue
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict or BaseMessage")
        role = str(item.get("role", "")).strip()
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": str(item.get("content", ""))})
    return normalized


_ROLE_NAMES = {"human": "user", "ai": "assistant"}  # LangChain message type -> chat-completions role


def _message_dict(message: BaseMessage) -> Dict[str, str]:  # LangChain message as a chat-completions entry
    content = message.content if isinstance(message.content, str) else json.dumps(message.content)
    return {"role": _ROLE_NAMES.get(message.type, message.type), "content": content}


def _first_choice_text(data: Any) -> str:  # choices[0].message.content of a chat-completions reply
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    if isinstance(content, str):
        return content
    raise LlmFormatError("LLM response missing content", content=json.dumps(data, default=str)[:500])


def _preview(messages: Sequence[Dict[str, str]]) -> str:  # Build preview string for logging
    for message in reversed(messages):
        text = message.get("content", "").strip()
        if text:
            return text.splitlines()[0]
    return ""


def _validate(schema: Type[T], content: str) -> T:  # Parse JSON content with schema
    return schema.model_validate_json(strip_code_fences(content))


def strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    if text.startswith("```json"):
        text = text[len("```json"):]
    elif text.startswith("```"):
        text = text[len("```"):]
    if text.endswith("```"):
        text = text[: -len("```")]
    return text.strip()


def _retry_hint(error_text: Optional[str]) -> str:  # Compose retry instructions including last error
    base = "The previous reply failed validation."
    if error_text:
        truncated = error_text.splitlines()[0].strip()
        if len(truncated) > 200:
            truncated = truncated[:197] + "..."
        base += f" Reason: {truncated}."
    return base + " Return a single JSON object that matches the required structure, without markdown."
