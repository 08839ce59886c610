"""Tests for the AI provider client and the AI-backed endpoints."""
import json

import httpx
import pytest
from httpx import AsyncClient

from app.core.dependencies import get_ai_provider
from app.core.errors import UpstreamFailure, ValidationFailed
from app.main import app
from app.services.ai_provider import OpenAIProvider, normalize_draft, normalize_optimization, parse_json_content


def chat_reply(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def provider_for(handler, api_key: str | None = "sk-test") -> OpenAIProvider:
    return OpenAIProvider(api_key, transport=httpx.MockTransport(handler))


class TestParsing:
    def test_code_fences_are_stripped(self):
        content = '```json\n{"title": "Soup"}\n```'
        assert parse_json_content(content) == {"title": "Soup"}

    def test_invalid_json_keeps_raw_text(self):
        with pytest.raises(UpstreamFailure) as excinfo:
            parse_json_content("Sorry, I cannot help with that.")
        assert excinfo.value.raw_response == "Sorry, I cannot help with that."
        assert excinfo.value.to_payload()["rawResponse"] == "Sorry, I cannot help with that."

    def test_non_object_json_is_rejected(self):
        with pytest.raises(UpstreamFailure):
            parse_json_content("[1, 2]")

    def test_draft_lists_become_lines(self):
        draft = normalize_draft({"title": "Soup", "ingredients": ["Water", "Salt"], "instructions": "Boil"})
        assert draft["ingredients"] == "Water\nSalt"
        assert draft["instructions"] == "Boil"
        assert draft["category"] == "Other"

    def test_non_string_category_falls_back(self):
        draft = normalize_draft({"title": "Soup", "category": ["Soup", "Starter"], "ingredients": 3})
        assert draft["category"] == "Other"
        assert draft["ingredients"] == "3"

    def test_optimization_time_is_text(self):
        result = normalize_optimization({"optimizedInstructions": "Boil", "estimatedTime": 45})
        assert result["estimated_time"] == "45"


class TestProvider:
    @pytest.mark.asyncio
    async def test_generate_recipe_sends_bearer_key(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["authorization"]
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            reply = {"title": "Pasta", "description": "d", "ingredients": ["a", "b"], "instructions": ["x"], "category": "Main"}
            return httpx.Response(200, json=chat_reply(json.dumps(reply)))

        recipe = await provider_for(handler).generate_recipe("Italy", "Pasta")
        assert seen["auth"] == "Bearer sk-test"
        assert seen["path"].endswith("/chat/completions")
        assert seen["body"]["response_format"] == {"type": "json_object"}
        assert "Italy" in seen["body"]["messages"][1]["content"]
        assert recipe["ingredients"] == "a\nb"
        assert recipe["category"] == "Main"

    @pytest.mark.asyncio
    async def test_provider_error_is_upstream_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"error": {"message": "Rate limit reached"}})

        with pytest.raises(UpstreamFailure) as excinfo:
            await provider_for(handler).optimize_recipe("Soup", "Water", "Boil")
        assert "Rate limit reached" in excinfo.value.message

    @pytest.mark.asyncio
    async def test_network_error_is_upstream_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(UpstreamFailure):
            await provider_for(handler).generate_image("a cat")

    @pytest.mark.asyncio
    async def test_missing_key_fails_validation_without_calling_out(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("provider must not be called")

        with pytest.raises(ValidationFailed):
            await provider_for(handler, api_key=None).generate_recipe("Italy")

    @pytest.mark.asyncio
    async def test_optimize_normalizes_fields(self):
        def handler(request: httpx.Request) -> httpx.Response:
            reply = {"optimizedInstructions": ["Step one", "Step two"], "tips": ["Salt late"]}
            return httpx.Response(200, json=chat_reply(json.dumps(reply)))

        result = await provider_for(handler).optimize_recipe("Soup", "Water", "Boil")
        assert result["optimized_instructions"] == "Step one\nStep two"
        assert result["tips"] == ["Salt late"]
        assert result["estimated_time"] == "Not specified"

    @pytest.mark.asyncio
    async def test_analyze_image_sends_data_url(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            seen["url"] = body["messages"][0]["content"][1]["image_url"]["url"]
            reply = '```json\n{"title": "Cake", "description": "", "ingredients": "Flour", "instructions": "Bake"}\n```'
            return httpx.Response(200, json=chat_reply(reply))

        draft = await provider_for(handler).analyze_image(b"\x89PNG", "image/png")
        assert seen["url"].startswith("data:image/png;base64,")
        assert draft == {"title": "Cake", "description": "", "ingredients": "Flour", "instructions": "Bake"}


class TestAiEndpoints:
    @pytest.fixture
    def use_provider(self):
        def install(handler, api_key: str | None = "sk-test") -> None:
            app.dependency_overrides[get_ai_provider] = lambda: provider_for(handler, api_key)

        return install

    @pytest.mark.asyncio
    async def test_generate_requires_session(self, client: AsyncClient):
        response = await client.post("/api/generate-recipe", json={"country": "Italy"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_generate_recipe_returns_draft(self, user_client: AsyncClient, use_provider):
        reply = {"title": "Pasta", "description": "d", "ingredients": ["a"], "instructions": ["x"]}
        use_provider(lambda request: httpx.Response(200, json=chat_reply(json.dumps(reply))))

        response = await user_client.post("/api/generate-recipe", json={"country": "Italy", "dishType": "Pasta"})
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Pasta"
        assert body["country"] == "Italy"
        assert body["dishType"] == "Pasta"
        assert body["imageUrl"] == ""
        assert body["category"] == "Other"

    @pytest.mark.asyncio
    async def test_generate_with_list_category(self, user_client: AsyncClient, use_provider):
        reply = {"title": "T", "category": ["Soup"]}
        use_provider(lambda request: httpx.Response(200, json=chat_reply(json.dumps(reply))))

        response = await user_client.post("/api/generate-recipe", json={"country": "Italy"})
        assert response.status_code == 200
        assert response.json()["category"] == "Other"

    @pytest.mark.asyncio
    async def test_generate_requires_country(self, user_client: AsyncClient, use_provider):
        use_provider(lambda request: httpx.Response(500))
        response = await user_client.post("/api/generate-recipe", json={})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unparseable_reply_includes_raw_text(self, user_client: AsyncClient, use_provider):
        use_provider(lambda request: httpx.Response(200, json=chat_reply("not json at all")))
        response = await user_client.post("/api/generate-recipe", json={"country": "Italy"})
        assert response.status_code == 502
        assert response.json()["kind"] == "upstream_failure"
        assert response.json()["rawResponse"] == "not json at all"

    @pytest.mark.asyncio
    async def test_missing_key_is_reported(self, user_client: AsyncClient, use_provider):
        use_provider(lambda request: httpx.Response(500), api_key=None)
        response = await user_client.post("/api/optimize-recipe", json={"title": "a", "ingredients": "b", "instructions": "c"})
        assert response.status_code == 400
        assert "not configured" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_analyze_upload(self, user_client: AsyncClient, use_provider):
        reply = {"title": "Cake", "description": "Sweet", "ingredients": ["Flour"], "instructions": ["Bake"]}
        use_provider(lambda request: httpx.Response(200, json=chat_reply(json.dumps(reply))))

        files = {"file": ("recipe.jpg", b"jpeg-bytes", "image/jpeg")}
        response = await user_client.post("/api/ai-analyze", files=files)
        assert response.status_code == 200
        assert response.json() == {
            "title": "Cake",
            "description": "Sweet",
            "ingredients": "Flour",
            "instructions": "Bake",
            "imageUrl": "",
        }

    @pytest.mark.asyncio
    async def test_analyze_without_file(self, user_client: AsyncClient, use_provider):
        use_provider(lambda request: httpx.Response(500))
        response = await user_client.post("/api/ai-analyze", data={"other": "x"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_step_illustration_degrades_to_empty(self, user_client: AsyncClient, use_provider):
        use_provider(lambda request: httpx.Response(500, text="down"))
        response = await user_client.post("/api/generate-step-illustration", json={"stepDescription": "Chop onions"})
        assert response.status_code == 200
        assert response.json() == {"imageUrl": ""}

    @pytest.mark.asyncio
    async def test_step_illustration_without_key(self, user_client: AsyncClient, use_provider):
        use_provider(lambda request: httpx.Response(500), api_key=None)
        response = await user_client.post("/api/generate-step-illustration", json={"stepDescription": "Chop onions"})
        assert response.json() == {"imageUrl": ""}

    @pytest.mark.asyncio
    async def test_profile_image_updates_session(self, user_client: AsyncClient, use_provider):
        use_provider(lambda request: httpx.Response(200, json={"data": [{"url": "https://img.example/avatar.png"}]}))

        response = await user_client.post("/api/generate-profile-image")
        assert response.status_code == 200
        assert response.json()["imageUrl"] == "https://img.example/avatar.png"

        me = (await user_client.get("/api/me")).json()
        assert me["profileImageUrl"] == "https://img.example/avatar.png"
