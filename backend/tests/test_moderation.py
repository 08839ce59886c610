"""Tests for the recipe moderation queue."""
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.core.errors import Conflict, InvalidAction, NotFound
from app.models.pending_recipe import ModerationStatus, PendingRecipe
from app.models.recipe import Recipe
from app.models.user import User
from app.schemas.moderation import PendingRecipeCreate
from app.services import moderation as moderation_service
from app.services.moderation import ModerationAction, next_status, parse_action

SOUP_DRAFT = {
    "title": "Soup",
    "country": "Italy",
    "ingredients": "Water\nSalt",
    "instructions": "Boil",
}


async def recipe_count(client: AsyncClient) -> int:
    return len((await client.get("/api/recipes")).json())


async def submit(client: AsyncClient, **overrides) -> dict:
    response = await client.post("/api/admin/pending-recipes", json={**SOUP_DRAFT, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


class TestTransitions:
    def test_pending_can_be_approved_or_rejected(self):
        assert next_status(ModerationStatus.PENDING, ModerationAction.APPROVE) is ModerationStatus.APPROVED
        assert next_status(ModerationStatus.PENDING, ModerationAction.REJECT) is ModerationStatus.REJECTED

    @pytest.mark.parametrize("terminal", [ModerationStatus.APPROVED, ModerationStatus.REJECTED])
    @pytest.mark.parametrize("action", list(ModerationAction))
    def test_terminal_states_do_not_move(self, terminal, action):
        with pytest.raises(Conflict):
            next_status(terminal, action)

    @pytest.mark.parametrize("value", [None, "", "APPROVE", "delete"])
    def test_unknown_actions_are_invalid(self, value):
        with pytest.raises(InvalidAction):
            parse_action(value)


class TestModerationApi:
    @pytest.mark.asyncio
    async def test_submit_creates_pending_entry(self, user_client: AsyncClient):
        entry = await submit(user_client, dishType="Soup", ingredients=["Water", "Salt"])
        assert entry["status"] == "PENDING"
        assert entry["category"] == "Other"
        assert entry["country"] == "Italy"
        assert entry["dishType"] == "Soup"
        assert entry["ingredients"] == "Water\nSalt"

    @pytest.mark.asyncio
    async def test_submit_requires_session(self, client: AsyncClient):
        response = await client.post("/api/admin/pending-recipes", json=SOUP_DRAFT)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_submit_requires_country(self, user_client: AsyncClient):
        response = await user_client.post("/api/admin/pending-recipes", json={"title": "Soup"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_submissions_are_independent(self, user_client: AsyncClient):
        first = await submit(user_client)
        second = await submit(user_client)
        assert first["id"] != second["id"]

    @pytest.mark.asyncio
    async def test_listing_is_admin_only(self, user_client: AsyncClient):
        await submit(user_client)
        assert (await user_client.get("/api/admin/pending-recipes")).status_code == 403

    @pytest.mark.asyncio
    async def test_listing_shows_pending_newest_first(self, admin_client: AsyncClient, user_client: AsyncClient):
        older = await submit(user_client, title="Older")
        newer = await submit(user_client, title="Newer")
        decided = await submit(user_client, title="Decided")
        await admin_client.post(f"/api/admin/pending-recipes/{decided['id']}", json={"action": "reject"})

        listing = (await admin_client.get("/api/admin/pending-recipes")).json()
        assert [item["id"] for item in listing] == [newer["id"], older["id"]]

    @pytest.mark.asyncio
    async def test_approve_publishes_exactly_one_recipe(self, admin_client: AsyncClient, user_client: AsyncClient):
        entry = await submit(user_client)
        before = await recipe_count(admin_client)

        response = await admin_client.post(f"/api/admin/pending-recipes/{entry['id']}", json={"action": "approve"})
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "APPROVED"

        recipes = (await admin_client.get("/api/recipes")).json()
        assert len(recipes) == before + 1
        published = next(item for item in recipes if item["id"] == body["recipeId"])
        assert published["title"] == "Soup"
        assert published["ingredients"] == "Water\nSalt"
        assert published["instructions"] == "Boil"
        assert published["category"] == "Other"
        assert "country" not in published

    @pytest.mark.asyncio
    async def test_reject_never_creates_recipe(self, admin_client: AsyncClient, user_client: AsyncClient):
        entry = await submit(user_client)
        before = await recipe_count(admin_client)

        response = await admin_client.post(f"/api/admin/pending-recipes/{entry['id']}", json={"action": "reject"})
        assert response.status_code == 200
        assert response.json()["status"] == "REJECTED"
        assert response.json()["recipeId"] is None
        assert await recipe_count(admin_client) == before

    @pytest.mark.asyncio
    async def test_decided_entry_does_not_change(self, admin_client: AsyncClient, user_client: AsyncClient):
        entry = await submit(user_client)
        url = f"/api/admin/pending-recipes/{entry['id']}"
        await admin_client.post(url, json={"action": "approve"})
        count = await recipe_count(admin_client)

        rejected = await admin_client.post(url, json={"action": "reject"})
        assert rejected.status_code == 409
        approved_again = await admin_client.post(url, json={"action": "approve"})
        assert approved_again.status_code == 409
        assert await recipe_count(admin_client) == count

    @pytest.mark.asyncio
    async def test_invalid_action(self, admin_client: AsyncClient, user_client: AsyncClient):
        entry = await submit(user_client)
        response = await admin_client.post(f"/api/admin/pending-recipes/{entry['id']}", json={"action": "publish"})
        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_action"

    @pytest.mark.asyncio
    async def test_unknown_entry_is_not_found(self, admin_client: AsyncClient):
        response = await admin_client.post("/api/admin/pending-recipes/999", json={"action": "approve"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_plain_user_cannot_decide(self, user_client: AsyncClient):
        entry = await submit(user_client)
        response = await user_client.post(f"/api/admin/pending-recipes/{entry['id']}", json={"action": "approve"})
        assert response.status_code == 403


class TestModerationService:
    @pytest.mark.asyncio
    async def test_approval_is_one_transaction(self, db_session):
        user = User(username="u", email="u@example.com", password_hash="x")
        db_session.add(user)
        await db_session.flush()
        entry = await moderation_service.submit(db_session, PendingRecipeCreate(**SOUP_DRAFT), user.id)
        await db_session.commit()
        entry_id = entry.id

        decided, recipe = await moderation_service.decide(db_session, entry_id, "approve")
        assert decided.approved_recipe_id == recipe.id
        # Abandoning the transaction leaves neither write behind
        await db_session.rollback()

        assert await db_session.scalar(select(func.count(Recipe.id))) == 0
        stored = await db_session.get(PendingRecipe, entry_id)
        await db_session.refresh(stored)
        assert stored.status == ModerationStatus.PENDING.value

    @pytest.mark.asyncio
    async def test_decide_missing_entry(self, db_session):
        with pytest.raises(NotFound):
            await moderation_service.decide(db_session, 12345, "reject")

    @pytest.mark.asyncio
    async def test_action_is_checked_before_existence(self, db_session):
        with pytest.raises(InvalidAction):
            await moderation_service.decide(db_session, 12345, "maybe")

    @pytest.mark.asyncio
    async def test_entries_survive_submitter_deletion(self, db_session):
        user = User(username="u", email="u@example.com", password_hash="x")
        db_session.add(user)
        await db_session.flush()
        entry = await moderation_service.submit(db_session, PendingRecipeCreate(**SOUP_DRAFT), user.id)
        await db_session.commit()

        await db_session.delete(user)
        await db_session.commit()
        await db_session.refresh(entry)
        assert entry.user_id is None
        assert entry.status == ModerationStatus.PENDING.value
