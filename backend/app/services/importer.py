"""Import a recipe from a supported recipe website by scraping its page."""
from __future__ import annotations

import logging
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from app.core.config import Settings, get_settings
from app.core.errors import UpstreamFailure, ValidationFailed
from app.services.recipe_text import collapse_whitespace

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)
INSTRUCTIONS_HEADING = "Zubereitung"


def parse_recipe_page(html: str | bytes) -> dict[str, str]:
    """Extract title, description, image, ingredients and instructions from page markup."""

    soup = BeautifulSoup(html, "html.parser")

    heading = soup.find("h1")
    title = heading.get_text(strip=True) if heading else ""

    description = collapse_whitespace(
        " ".join(node.get_text(" ", strip=True) for node in soup.select("p.recipe-text"))
    )

    og_image = soup.find("meta", property="og:image")
    image_url = og_image.get("content", "") if og_image else ""

    ingredient_lines: list[str] = []
    for row in soup.select(".ingredients tr"):
        amount = " ".join(span.get_text(" ", strip=True) for span in row.select("td.td-left span"))
        name = " ".join(span.get_text(" ", strip=True) for span in row.select("td.td-right span"))
        amount, name = collapse_whitespace(amount), collapse_whitespace(name)
        # Amount may be blank, e.g. "Salz"
        if name:
            ingredient_lines.append(f"{amount} {name}" if amount else name)

    instructions = ""
    steps = soup.select_one(".ds-recipe-steps")
    if steps is not None:
        instructions = steps.get_text(" ", strip=True)
    else:
        for h2 in soup.find_all("h2"):
            if INSTRUCTIONS_HEADING in h2.get_text():
                sibling = h2.find_next_sibling()
                if sibling is not None:
                    instructions = sibling.get_text(" ", strip=True)

    return {
        "title": title,
        "description": description,
        "ingredients": "\n".join(ingredient_lines),
        "instructions": collapse_whitespace(instructions),
        "image_url": image_url,
    }


class RecipeImporter:
    """Fetch and parse recipe pages from the configured host."""

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    def validate_url(self, url: str) -> str:
        host = (urlparse(url).hostname or "").lower()
        allowed = self._settings.import_allowed_host.lower()
        if not (host == allowed or host.endswith(f".{allowed}")):
            raise ValidationFailed(f"Please enter a valid {allowed} URL")
        return url

    async def import_recipe(self, url: str) -> dict[str, str]:
        self.validate_url(url)
        try:
            async with httpx.AsyncClient(
                headers={"User-Agent": USER_AGENT},
                timeout=self._settings.import_timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Import of %s failed: %s", url, exc)
            raise UpstreamFailure("Could not load the recipe page") from exc

        recipe = parse_recipe_page(response.text)
        if not recipe["title"]:
            raise UpstreamFailure("The recipe could not be read from the page")
        return recipe
