# services/text_sources.py
from __future__ import annotations
import logging
import os
import random
import string
from typing import Iterable, Optional

import openai

from app.errors import GenerationError, GenerationTimeout, TextSourceError
from utils.file_handler import read_api_key

log = logging.getLogger(__name__)

API_KEY_ENV = "TOUCHTYPER_LLM_API_KEY"

DUMMY_TEXT = (
    "The quick brown fox jumps over the lazy dog near the old wooden bridge. "
    "During summer evenings, children often play games in the park while their parents watch from comfortable benches. "
    "Technology has transformed how we communicate with friends and family across great distances. "
    "Modern computers process information at incredible speeds, making complex calculations seem effortless. "
    "Students learn new skills through interactive online platforms that adapt to individual learning styles. "
    "Fresh vegetables from local farmers markets provide essential nutrients for healthy living. "
    "Musicians create beautiful melodies using both traditional instruments and digital software. "
    "Photography captures precious memories that last forever."
)

PROVIDER_BASE_URLS = {
    "openai": None,
    "anthropic": "https://api.anthropic.com/v1/",
    "ollama": "http://localhost:11434",
}

OPENING_PROMPT = """Generate a single interesting sentence for typing practice.
Make it varied content (quotes, facts, or creative).
Length: 50-80 characters.
IMPORTANT: Start the sentence with the letter "{letter}".
Only output the sentence, nothing else."""

CONTINUATION_INSTRUCTIONS = """
Generate ONE sentence (50-80 characters) that:
1. Continues naturally from the previous sentence
2. Helps practice the problem characters and similar words
3. Maintains topic coherence with the previous sentence
4. Is interesting and natural to read

Only output the sentence, nothing else."""


class TextSource:
    """Produces passages to type. Continuations are optional."""

    supports_continuation = False

    def get_opening_text(self, timeout: Optional[float] = None) -> str:
        raise NotImplementedError

    def get_continuation(
        self,
        previous: str,
        error_chars: Iterable[str],
        error_words: Iterable[str],
        timeout: Optional[float] = None,
    ) -> str:
        raise NotImplementedError(f"{type(self).__name__} cannot continue text")


class DummySource(TextSource):
    def get_opening_text(self, timeout: Optional[float] = None) -> str:
        return DUMMY_TEXT


def build_continuation_prompt(previous: str, error_chars: Iterable[str], error_words: Iterable[str]) -> str:
    chars = list(dict.fromkeys(error_chars))
    words = sorted(set(error_words))
    parts = [f'Previous sentence: "{previous}"\n\n']
    if chars:
        parts.append(f"User made mistakes typing these characters: {' '.join(chars)}\n")
    if words:
        parts.append(f"User had trouble with these words: {', '.join(words)}\n")
    parts.append(CONTINUATION_INSTRUCTIONS)
    return "".join(parts)


class LLMSource(TextSource):
    supports_continuation = True

    def __init__(self, llm_config, client=None):
        self.model = llm_config.model
        self.timeout = float(llm_config.timeout_seconds)
        self.provider = (llm_config.provider or "").lower()
        self.client = client or self._make_client(llm_config)

    def _make_client(self, llm_config):
        if self.provider not in PROVIDER_BASE_URLS:
            raise TextSourceError(
                f"unsupported provider: {llm_config.provider} (supported: anthropic, openai, ollama)"
            )
        api_key = os.environ.get(API_KEY_ENV) or read_api_key()
        base_url = llm_config.api_base or PROVIDER_BASE_URLS[self.provider]

        if self.provider == "ollama":
            # ollama serves the OpenAI-compatible API under /v1 and ignores the key
            base_url = base_url.rstrip("/") + "/v1"
            api_key = api_key or "ollama"
        elif not api_key:
            raise TextSourceError(f"{API_KEY_ENV} environment variable not set and api-key file not found")

        return openai.OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=self.timeout,
            max_retries=max(0, int(llm_config.max_retries)),
        )

    def _complete(self, prompt: str, timeout: Optional[float]) -> str:
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                timeout=timeout if timeout is not None else self.timeout,
            )
        except openai.APITimeoutError as e:
            raise GenerationTimeout(f"{self.provider} request timed out") from e
        except openai.OpenAIError as e:
            raise GenerationError(f"API call failed: {e}") from e

        text = (completion.choices[0].message.content or "").strip() if completion.choices else ""
        if not text:
            raise GenerationError("model returned an empty response")
        return text

    def get_opening_text(self, timeout: Optional[float] = None) -> str:
        letter = random.choice(string.ascii_uppercase)
        return self._complete(OPENING_PROMPT.format(letter=letter), timeout)

    def get_continuation(self, previous, error_chars, error_words, timeout=None) -> str:
        return self._complete(build_continuation_prompt(previous, error_chars, error_words), timeout)


_DUMMY_NAMES = {"dummy", "dummy_source", "dummysource"}
_LLM_NAMES = {"llm", "llm_source", "llmsource"}


def new_text_source(text_config) -> TextSource:
    name = (text_config.source or "").lower()
    if name in _DUMMY_NAMES:
        return DummySource()
    if name in _LLM_NAMES:
        try:
            return LLMSource(text_config.llm)
        except TextSourceError as e:
            if not text_config.llm.fallback_to_dummy:
                raise
            log.warning("LLM source unavailable (%s); falling back to dummy text", e)
            return DummySource()
    raise TextSourceError(f"unknown source type: {text_config.source}")


def get_opening_text(source: TextSource, text_config) -> str:
    try:
        text = source.get_opening_text()
    except GenerationError as e:
        if not text_config.llm.fallback_to_dummy:
            raise
        log.warning("opening text generation failed (%s); using dummy text", e)
        text = DUMMY_TEXT
    if not text:
        raise TextSourceError("no text generated")
    return text
