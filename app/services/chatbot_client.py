"""
Tourism chatbot backed by Google Custom Search and OpenRouter.

Search snippets give the language model something current to ground its
answer on. Both upstream calls degrade instead of failing: a broken search
yields a placeholder context, a broken completion yields an apology.
"""
import hashlib
import logging
from typing import Optional

import httpx

from app.config import settings
from app.services.redis_client import RedisClient, redis_client

logger = logging.getLogger(__name__)

NO_RESULTS = "No relevant results found."
SEARCH_FAILED = "Error fetching search results."
FALLBACK_ANSWER = "Sorry, I couldn't process your request right now. 😔"


def answer_cache_key(question: str) -> str:
    """Case and whitespace insensitive cache key for a question."""
    normalized = " ".join(question.lower().split())
    return f"chatbot:answer:{hashlib.sha256(normalized.encode('utf-8')).hexdigest()}"


class ChatbotClient:
    """Answers short tourism questions about the region."""

    def __init__(
        self,
        cache: Optional[RedisClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.google_api_key = settings.google_api_key
        self.search_engine_id = settings.search_engine_id
        self.openrouter_api_key = settings.openrouter_api_key
        self.model = settings.openrouter_model
        self.search_url = "https://www.googleapis.com/customsearch/v1"
        self.completion_url = "https://openrouter.ai/api/v1/chat/completions"
        self.cache = cache or redis_client
        self.cache_ttl = settings.cache_ttl_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=settings.http_timeout, transport=self.transport)

    async def search(self, query: str, max_results: int = 5) -> str:
        """Return search hits as `- title: snippet (Source: link)` lines."""
        if not self.google_api_key or not self.search_engine_id:
            logger.warning("Google Custom Search not configured")
            return NO_RESULTS

        params = {
            "key": self.google_api_key,
            "cx": self.search_engine_id,
            "q": query,
            "num": max_results,
        }
        try:
            async with self._client() as client:
                response = await client.get(self.search_url, params=params)
                response.raise_for_status()
                items = response.json().get("items") or []
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"Google Search error: {exc}")
            return SEARCH_FAILED

        lines = [
            f"- {item.get('title')}: {item.get('snippet')} (Source: {item.get('link')})"
            for item in items
        ]
        return "\n".join(lines) if lines else NO_RESULTS

    def _build_prompt(self, question: str, search_results: str) -> str:
        region = settings.region_name
        return (
            f"You are a tourism assistant bot for {region}. Use the search results below "
            "to answer the user's question in 1-2 sentences. Be brief, accurate, and "
            "include one emoji.\n\n"
            f"User Question: {question}\n\n"
            f"Search Results:\n{search_results}\n\n"
            "Respond with:\n"
            "- A direct short answer (1-2 sentences)\n"
            "- Include a source URL if available\n"
            "- Use one emoji if relevant\n"
        )

    async def complete(self, question: str, search_results: str) -> str:
        if not self.openrouter_api_key:
            logger.warning("OpenRouter API key not configured")
            return FALLBACK_ANSWER

        payload = {
            "model": self.model,
            "messages": [
                {
                    "role": "system",
                    "content": f"You are a helpful tourism chatbot for {settings.region_name}.",
                },
                {"role": "user", "content": self._build_prompt(question, search_results)},
            ],
        }
        headers = {
            "Authorization": f"Bearer {self.openrouter_api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with self._client() as client:
                response = await client.post(self.completion_url, json=payload, headers=headers)
                response.raise_for_status()
                return response.json()["choices"][0]["message"]["content"]
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error(f"OpenRouter API error: {exc}")
            return FALLBACK_ANSWER

    async def ask(self, question: str) -> str:
        """Answer a question, serving repeated questions from Redis."""
        cache_key = answer_cache_key(question)

        cached = await self.cache.get(cache_key)
        if cached:
            return cached

        search_results = await self.search(question)
        answer = await self.complete(question, search_results)

        if answer != FALLBACK_ANSWER:
            await self.cache.set(cache_key, answer, ttl=self.cache_ttl)
        return answer


# Global instance
chatbot_client = ChatbotClient()
