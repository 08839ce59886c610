"""Client for the external AI provider (OpenAI-compatible REST API).

Calls are made once; a failure is reported to the caller as
``UpstreamFailure`` and never retried here.
"""
from __future__ import annotations

import base64
import json
import logging
from typing import Any

import httpx

from app.core.config import Settings, get_settings
from app.core.errors import UpstreamFailure, ValidationFailed
from app.services.recipe_text import join_lines, strip_code_fence

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Other"
NOT_CONFIGURED = "AI provider key not configured. Add it in the admin settings."

SCAN_PROMPT = (
    "Read the recipe shown in this image as precisely as possible. Copy every ingredient with its "
    "exact quantity, one per line, in the order shown. Copy the preparation steps one per line, "
    "keeping times and temperatures. Do not invent anything that is not visible. Reply with a JSON "
    'object only: {"title": ..., "description": <short summary>, "ingredients": <one per line>, '
    '"instructions": <one step per line>}.'
)
GENERATE_SYSTEM_PROMPT = "You are a professional chef. Reply with valid JSON only."
OPTIMIZE_SYSTEM_PROMPT = (
    "You are a cooking teacher who rewrites recipes so a home cook can follow them while cooking. "
    "Reply with valid JSON only."
)


def _generate_prompt(country: str, dish_type: str | None) -> str:
    dish = f"{dish_type} from {country}" if dish_type else f"a traditional dish from {country}"
    return (
        f"Create a detailed recipe for {dish}. Include a creative title, a short description, the "
        "ingredients with quantities and step-by-step instructions. Answer as JSON with the keys "
        "title, description, ingredients (array), instructions (array), category."
    )


def _optimize_prompt(title: str, ingredients: str, instructions: str) -> str:
    return (
        f"RECIPE: {title}\n\nINGREDIENTS:\n{ingredients}\n\nINSTRUCTIONS:\n{instructions}\n\n"
        "Rewrite the instructions so they are clearer and more precise, add concrete times and heat "
        "levels, briefly explain techniques, give 3-5 practical tips and estimate the total time. "
        'Answer as JSON: {"optimizedInstructions": [...], "tips": [...], "estimatedTime": "..."}'
    )


def step_illustration_prompt(step_description: str, recipe_name: str) -> str:
    return (
        f'A simple, hand-drawn cookbook illustration of this cooking step: "{step_description}". '
        f"Recipe context: {recipe_name}. Minimal line drawing with few colors, clear and educational."
    )


def avatar_prompt(username: str) -> str:
    return (
        f"A friendly avatar for a user named {username}. Modern, colorful, abstract geometric style "
        "with warm colors. Simple, clean design suitable for a profile picture."
    )


def parse_json_content(content: str) -> dict[str, Any]:
    """Parse a model reply that should be a JSON object, tolerating code fences."""

    try:
        parsed = json.loads(strip_code_fence(content))
    except json.JSONDecodeError as exc:
        logger.warning("AI provider returned invalid JSON")
        raise UpstreamFailure("The AI provider did not return valid JSON", raw_response=content) from exc
    if not isinstance(parsed, dict):
        raise UpstreamFailure("The AI provider did not return a JSON object", raw_response=content)
    return parsed


def normalize_draft(data: dict[str, Any]) -> dict[str, Any]:
    category = data.get("category")
    # Models sometimes answer with a list of candidates; only a plain name is kept
    if not isinstance(category, str) or not category.strip():
        category = DEFAULT_CATEGORY
    return {
        "title": str(data.get("title") or ""),
        "description": str(data.get("description") or ""),
        "ingredients": join_lines(data.get("ingredients")),
        "instructions": join_lines(data.get("instructions")),
        "category": category.strip(),
    }


def normalize_optimization(data: dict[str, Any]) -> dict[str, Any]:
    tips = data.get("tips")
    return {
        "optimized_instructions": join_lines(data.get("optimizedInstructions")),
        "tips": [str(tip) for tip in tips] if isinstance(tips, list) else [],
        "estimated_time": str(data.get("estimatedTime") or "Not specified"),
    }


class OpenAIProvider:
    """Chat, vision and image generation calls against the configured provider."""

    def __init__(
        self,
        api_key: str | None,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._settings = settings or get_settings()
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _require_key(self) -> str:
        if not self._api_key:
            raise ValidationFailed(NOT_CONFIGURED)
        return self._api_key

    async def _post_json(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        api_key = self._require_key()
        try:
            async with httpx.AsyncClient(
                base_url=self._settings.openai_base_url,
                headers={"Authorization": f"Bearer {api_key}"},
                timeout=self._settings.openai_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("AI provider request to %s failed: %s", path, exc)
            raise UpstreamFailure(f"Could not reach the AI provider: {exc}") from exc

        if response.status_code >= 400:
            logger.warning("AI provider response %s: %s", response.status_code, response.text[:500])
            raise UpstreamFailure(f"AI provider error: {_error_message(response)}")
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamFailure("AI provider returned a non-JSON body", raw_response=response.text) from exc

    async def _chat(self, payload: dict[str, Any]) -> str:
        data = await self._post_json("/chat/completions", payload)
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as exc:
            raise UpstreamFailure("Unexpected AI provider response", raw_response=json.dumps(data)) from exc

    async def analyze_image(self, content: bytes, mime_type: str | None) -> dict[str, Any]:
        encoded = base64.b64encode(content).decode("ascii")
        reply = await self._chat(
            {
                "model": self._settings.openai_vision_model,
                "messages": [
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": SCAN_PROMPT},
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:{mime_type or 'image/jpeg'};base64,{encoded}"},
                            },
                        ],
                    }
                ],
                "max_tokens": 2000,
            }
        )
        draft = normalize_draft(parse_json_content(reply))
        draft.pop("category")
        return draft

    async def generate_recipe(self, country: str, dish_type: str | None = None) -> dict[str, Any]:
        reply = await self._chat(
            {
                "model": self._settings.openai_text_model,
                "messages": [
                    {"role": "system", "content": GENERATE_SYSTEM_PROMPT},
                    {"role": "user", "content": _generate_prompt(country, dish_type)},
                ],
                "temperature": 0.8,
                "response_format": {"type": "json_object"},
            }
        )
        return normalize_draft(parse_json_content(reply))

    async def optimize_recipe(self, title: str, ingredients: str, instructions: str) -> dict[str, Any]:
        reply = await self._chat(
            {
                "model": self._settings.openai_vision_model,
                "messages": [
                    {"role": "system", "content": OPTIMIZE_SYSTEM_PROMPT},
                    {"role": "user", "content": _optimize_prompt(title, ingredients, instructions)},
                ],
                "temperature": 0.7,
                "response_format": {"type": "json_object"},
            }
        )
        return normalize_optimization(parse_json_content(reply))

    async def generate_image(self, prompt: str) -> str:
        data = await self._post_json(
            "/images/generations",
            {
                "model": self._settings.openai_image_model,
                "prompt": prompt,
                "n": 1,
                "size": "1024x1024",
                "quality": "standard",
            },
        )
        try:
            return data["data"][0]["url"]
        except (KeyError, IndexError, TypeError) as exc:
            raise UpstreamFailure("Unexpected AI provider response", raw_response=json.dumps(data)) from exc


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
    return f"HTTP {response.status_code}"
