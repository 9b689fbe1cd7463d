"""Shared Gemini client, retry logic, and model configuration."""

import json
import os
import random
import re
import time

from google import genai
from google.genai import types
from google.genai.errors import ClientError, ServerError

# Retry configuration
MAX_RETRIES = 5
BASE_DELAY = 3  # seconds

MODEL = os.getenv("CVSCORE_MODEL", "gemini-2.5-flash")


def api_key() -> str | None:
    """Return the configured Gemini key, if any."""
    return os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")


def create_client() -> genai.Client:
    """Create a Gemini client."""
    key = api_key()
    if not key:
        raise ValueError("GOOGLE_API_KEY environment variable not set")
    return genai.Client(api_key=key)


def call_gemini(
    client: genai.Client,
    prompt: str,
    temperature: float = 0.0,
    max_tokens: int = 2048,
    max_retries: int = MAX_RETRIES,
    json_output: bool = False,
) -> str:
    """Make a Gemini API call with retry logic.

    Retries on 429 (rate limit) and 503 (overloaded) with exponential backoff,
    up to *max_retries* attempts in total.
    """
    last_exception: Exception | None = None
    config = types.GenerateContentConfig(
        temperature=temperature,
        max_output_tokens=max_tokens,
        response_mime_type="application/json" if json_output else None,
    )

    for attempt in range(max_retries):
        try:
            response = client.models.generate_content(
                model=MODEL,
                contents=prompt,
                config=config,
            )
            return response.text or ""
        except ServerError as e:
            last_exception = e
            if attempt < max_retries - 1:
                delay = BASE_DELAY * (2**attempt) + random.uniform(0, 1)  # noqa: S311
                time.sleep(delay)
        except ClientError as e:
            if "429" in str(e) or "RESOURCE_EXHAUSTED" in str(e):
                last_exception = e
                if attempt < max_retries - 1:
                    delay = BASE_DELAY * (2**attempt) + random.uniform(0, 1)  # noqa: S311
                    time.sleep(delay)
            else:
                raise

    raise last_exception  # type: ignore[misc]


def parse_json(text: str) -> dict | list:
    """Extract and parse JSON from an LLM response that may contain markdown fences.

    Handles responses like:
        ```json\\n{...}\\n```
        ```\\n[...]\\n```
        Some text {json} more text
        Raw JSON
    """
    if not text:
        raise ValueError("Empty response from API")

    # Strip markdown code fences (```json ... ``` or ``` ... ```)
    stripped = re.sub(r"```(?:json)?\s*\n?", "", text).strip()

    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        pass

    # Outermost JSON object { ... }
    match = re.search(r"\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}", text, re.DOTALL)
    if match:
        try:
            return json.loads(match.group())
        except json.JSONDecodeError:
            pass

    match = re.search(r"\[[\s\S]*\]", text)
    if match:
        try:
            return json.loads(match.group())
        except json.JSONDecodeError:
            pass

    raise ValueError(f"Could not parse JSON from response: {text[:200]}")
