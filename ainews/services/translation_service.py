import json
import logging
import re
from typing import List, Optional

from anthropic import Anthropic

from ainews.config import settings
from ainews.config.models import CLAUDE_MODEL_CONTENT, CLAUDE_MODEL_TRANSLATION, TRANSLATION_MAX_TOKENS
from ainews.errors import TranslationFailed

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    "zh": "Simplified Chinese",
    "en": "English",
}

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


class TranslationService:
    def __init__(self, client=None, model: str = None, content_model: str = None):
        if client is not None:
            self.client = client
        else:
            api_key = settings.ANTHROPIC_API_KEY
            self.client = Anthropic(api_key=api_key) if api_key else None
        self.model = model or CLAUDE_MODEL_TRANSLATION
        # Article bodies and excerpts are long-form
        self.content_model = content_model or CLAUDE_MODEL_CONTENT

    def _complete(self, prompt: str, model: str = None, system: str = None) -> str:
        if not self.client:
            raise TranslationFailed("Claude API client not initialized")

        options = {}
        if system:
            options["system"] = system

        try:
            message = self.client.messages.create(
                model=model or self.model,
                max_tokens=TRANSLATION_MAX_TOKENS,
                messages=[{
                    "role": "user",
                    "content": prompt
                }],
                **options
            )
            return message.content[0].text.strip()
        except Exception as e:
            raise TranslationFailed(str(e)) from e

    def translate_text(self, text: str, target: str = None, model: str = None) -> str:
        """
        Translate one string.

        Raises:
            TranslationFailed: API error, missing client or empty output
        """
        language = LANGUAGE_NAMES.get(target or settings.TRANSLATION_TARGET_LANGUAGE, target)

        prompt = f"""Translate the following AI industry news text into {language}.

Requirements:
- Keep product names, company names and model names as they are (GPT-5, Claude, Llama)
- Natural, professional tone for a technology news audience
- Keep the meaning and structure, do not summarize

TEXT:

{text}

Return only the translation, without comments."""

        translation = self._complete(prompt, model=model)
        if not translation:
            raise TranslationFailed("Empty translation")
        return translation

    def translate_body(self, text: str, target: str = None) -> str:
        """Full article body, on the long-form model"""
        return self.translate_text(text, target, model=self.content_model)

    def generate_excerpt(self, title: str, content: str) -> str:
        """
        400-500 word digest of an article, in the article's own language.

        Raises:
            TranslationFailed: API error, missing client or empty output
        """
        excerpt = self._complete(
            f"Title: {title}\n\nContent: {content}",
            model=self.content_model,
            system=(
                "You are a professional news summarizer. Summarize the following AI industry "
                "news article in 400-500 words, covering its key points for quick reading. "
                "Write in the same language as the original content. Return only the summary."
            )
        )
        if not excerpt:
            raise TranslationFailed("Empty excerpt")
        return excerpt

    def _parse_batch(self, payload: str, expected: int) -> Optional[List[str]]:
        try:
            data = json.loads(_CODE_FENCE.sub("", payload.strip()))
        except ValueError:
            logger.warning("[TRANSLATION] Batch output is not valid JSON")
            return None

        if not isinstance(data, list) or len(data) != expected:
            logger.warning(f"[TRANSLATION] Batch output has wrong shape (expected {expected} items)")
            return None

        if not all(isinstance(item, str) and item.strip() for item in data):
            logger.warning("[TRANSLATION] Batch output contains empty items")
            return None

        return [item.strip() for item in data]

    def translate_batch(self, texts: List[str], target: str = None) -> List[str]:
        """
        Translate several strings in one call, order preserved.

        Malformed, mismatched or failed batch output falls back to one
        translate_text call per string.

        Raises:
            TranslationFailed: a per-string fallback call failed
        """
        if not texts:
            return []

        language = LANGUAGE_NAMES.get(target or settings.TRANSLATION_TARGET_LANGUAGE, target)

        prompt = f"""Translate each string of the following JSON array into {language}.
Keep product, company and model names unchanged.
Respond with a JSON array of exactly {len(texts)} strings in the same order, and nothing else.

{json.dumps(texts, ensure_ascii=False)}"""

        try:
            translated = self._parse_batch(self._complete(prompt), len(texts))
        except TranslationFailed as e:
            logger.warning(f"[TRANSLATION] Batch call failed, translating one by one: {e}")
            translated = None

        if translated is not None:
            return translated

        return [self.translate_text(text, target) for text in texts]


translation_service = TranslationService()
