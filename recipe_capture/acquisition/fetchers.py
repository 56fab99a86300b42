import json
import logging
from typing import Any, Optional

import httpx
from bs4 import BeautifulSoup

from ..core.errors import UpstreamUnavailable
from ..settings import settings

logger = logging.getLogger("recipe_capture.acquisition")

DESCRIPTION_META = [
    ("property", "og:description"),
    ("name", "description"),
    ("name", "twitter:description"),
]


def _find_recipe_node(node: Any) -> Optional[dict]:
    if isinstance(node, list):
        for item in node:
            found = _find_recipe_node(item)
            if found:
                return found
        return None
    if not isinstance(node, dict):
        return None

    node_type = node.get("@type")
    types_ = node_type if isinstance(node_type, list) else [node_type]
    if "Recipe" in types_:
        return node
    if "@graph" in node:
        return _find_recipe_node(node["@graph"])
    return None


def _instruction_lines(value: Any) -> list[str]:
    """recipeInstructions may be a string, HowToStep list or HowToSection list."""
    if isinstance(value, str):
        return [line.strip() for line in value.splitlines() if line.strip()]
    if isinstance(value, dict):
        if "itemListElement" in value:
            return _instruction_lines(value["itemListElement"])
        text = value.get("text") or value.get("name") or ""
        return [text.strip()] if text.strip() else []
    if isinstance(value, list):
        lines = []
        for item in value:
            lines.extend(_instruction_lines(item))
        return lines
    return []


def json_ld_recipe_text(soup: BeautifulSoup) -> str:
    """Render a schema.org Recipe embedded as JSON-LD as plain recipe text."""
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.string or "")
        except json.JSONDecodeError:
            continue

        recipe = _find_recipe_node(data)
        if not recipe:
            continue

        ingredients = [i.strip() for i in recipe.get("recipeIngredient") or [] if isinstance(i, str) and i.strip()]
        steps = _instruction_lines(recipe.get("recipeInstructions"))
        if not ingredients and not steps:
            continue

        parts = []
        if recipe.get("name"):
            parts.append(str(recipe["name"]).strip())
        parts.append("Ingredients:")
        parts.extend(f"- {i}" for i in ingredients)
        parts.append("Instructions:")
        parts.extend(f"{n}. {s}" for n, s in enumerate(steps, start=1))
        return "\n".join(parts)

    return ""


def page_text_from_html(html: str) -> str:
    """Best caption-like text from a page: JSON-LD recipe, else meta descriptions."""
    soup = BeautifulSoup(html or "", "html.parser")

    recipe_text = json_ld_recipe_text(soup)
    if recipe_text:
        return recipe_text

    seen = []
    for attr, value in DESCRIPTION_META:
        tag = soup.find("meta", attrs={attr: value})
        content = (tag.get("content") or "").strip() if tag else ""
        if content and content not in seen:
            seen.append(content)
    return "\n".join(seen)


class HttpPageTextFetcher:
    """Caption fetcher that reads the public page of a post or recipe site."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.headers = {
            "User-Agent": user_agent or settings.http_user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def fetch_caption(self, url: str) -> str:
        async with httpx.AsyncClient(
            headers=self.headers,
            follow_redirects=True,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise UpstreamUnavailable(f"Failed to fetch {url}: {e}") from e

        text = page_text_from_html(response.text)
        logger.info(f"Fetched page text for {url}: {len(text)} chars")
        return text
