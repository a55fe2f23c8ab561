from __future__ import annotations

import logging
import random
from typing import Optional

import httpx

from tsundoku.config import AppConfig, DialogueProviderConfig
from tsundoku.library.errors import GenerationFailure
from tsundoku.library.models import Character
from tsundoku.library.progress import calculate_progress

log = logging.getLogger(__name__)

MAX_DIALOGUE_CHARS = 50
_QUOTE_PAIRS = (("「", "」"), ("『", "』"), ('"', '"'), ("“", "”"))


class DialogueEngine:
    """Generates a character's one-line message about a book.

    ``generate`` never raises: any service failure falls back to a local
    template.
    """

    def __init__(
        self, config: AppConfig, rng: Optional[random.Random] = None
    ) -> None:
        self._config = config
        self._rng = rng or random.Random()
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def provider(self) -> Optional[DialogueProviderConfig]:
        return self._config.get_active_provider()

    @property
    def is_configured(self) -> bool:
        p = self.provider
        if not p:
            return False
        if p.name == "ollama":
            return bool(p.base_url)
        return bool(p.api_key and p.base_url)

    @staticmethod
    def build_prompt(
        title: str, progress: int, reason: str, character: Character
    ) -> str:
        character_prompt = (
            f"あなたは「{character.type}」（人格:{character.personality}）です。"
        )
        info_prompt = (
            f"本「{title}」の現在の進捗は{progress}%です。"
            f"この本を買った理由は「{reason}」です。"
        )
        return (
            f"{character_prompt} {info_prompt}"
            "あなたがこの本の魂として、購入理由と現在の進捗を踏まえて、"
            "読者を励まし、読み進めるのを思い出させるための、"
            f"一言メッセージ（{MAX_DIALOGUE_CHARS}字以内）を生成してください。"
        )

    async def generate(
        self,
        title: str,
        total_page: int,
        current_page: int,
        reason: str,
        character: Character,
    ) -> str:
        progress = calculate_progress(current_page, total_page)
        prompt = self.build_prompt(title, progress, reason, character)

        if not self.is_configured:
            log.debug("No dialogue provider configured, using fallback")
            return self.fallback_message(
                title, progress, current_page, reason, character
            )

        try:
            text = await self._call_api(prompt)
        except GenerationFailure as e:
            log.warning("Dialogue generation failed: %s", e)
            return self.fallback_message(
                title, progress, current_page, reason, character
            )
        except Exception:
            log.exception("Unexpected error during dialogue generation")
            return self.fallback_message(
                title, progress, current_page, reason, character
            )
        return text

    def fallback_message(
        self,
        title: str,
        progress: int,
        current_page: int,
        reason: str,
        character: Character,
    ) -> str:
        short_reason = (reason or "この本")[:10]
        messages = [
            f"進捗{progress}%！「{short_reason}...」を達成するんだ！",
            f"買った理由を忘れてない？ {character.emoji}思い出せ！",
            f"あなたの「{reason}」という夢は、この{title}の中に。",
            f"{character.type}からの一言: あと少しで目標に近づくよ！",
            f"まだ{current_page}ページ。君の決意が試されているぞ！",
        ]
        return self._rng.choice(messages)

    async def _call_api(self, prompt: str) -> str:
        p = self.provider
        if not p:
            raise GenerationFailure("No dialogue provider configured")

        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.dialogue_timeout)

        headers: dict[str, str] = {"Content-Type": "application/json"}
        if p.api_key:
            headers["Authorization"] = f"Bearer {p.api_key}"

        url = f"{p.base_url.rstrip('/')}/chat/completions"
        payload = {
            "model": p.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.9,
        }

        try:
            resp = await self._client.post(url, json=payload, headers=headers)
            resp.raise_for_status()
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except httpx.HTTPStatusError as e:
            log.error(
                "Dialogue API error: %s %s",
                e.response.status_code,
                e.response.text[:200],
            )
            raise GenerationFailure(
                f"Dialogue failed: HTTP {e.response.status_code}"
            ) from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            log.error("Unexpected API response format: %s", e)
            raise GenerationFailure("Dialogue failed: unexpected response format") from e
        except httpx.RequestError as e:
            log.error("Dialogue request error: %s -> %s", type(e).__name__, e)
            raise GenerationFailure(
                f"Dialogue failed: {type(e).__name__} ({url})"
            ) from e

        text = self._clean(content) if isinstance(content, str) else ""
        if not text:
            raise GenerationFailure("Dialogue failed: empty response")
        return text

    @staticmethod
    def _clean(text: str) -> str:
        text = text.strip()
        for left, right in _QUOTE_PAIRS:
            if len(text) >= 2 and text.startswith(left) and text.endswith(right):
                inner = text[len(left) : -len(right)]
                # only a single wrapping pair, not 「a」と「b」
                if left not in inner and right not in inner:
                    text = inner.strip()
                break
        return text

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
