"""
Google Gemini provider implementation (google-genai SDK).
"""
import logging
from typing import Optional, Dict
from google import genai
from google.genai import types, errors

from ats_portal.core.config import GEMINI_API_KEY, GEMINI_MODEL
from ats_portal.llm.provider import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Gemini provider. System messages become the system instruction."""

    def __init__(self, api_key: Optional[str] = None, default_model: str = GEMINI_MODEL):
        self.api_key = api_key or GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY not configured")
        self.client = genai.Client(api_key=self.api_key)
        self.default_model = default_model
        logger.info("Gemini provider initialized")

    def chat(
        self,
        messages: list[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate a completion from a chat-style message list."""
        model = model or self.default_model
        system_parts = [m["content"] for m in messages if m.get("role") == "system"]
        contents = [
            types.Content(
                role="model" if m.get("role") == "assistant" else "user",
                parts=[types.Part.from_text(text=m["content"])],
            )
            for m in messages
            if m.get("role") != "system"
        ]
        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens or 2048,
            system_instruction="\n\n".join(system_parts) if system_parts else None,
            **kwargs
        )

        try:
            response = self.client.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        except errors.APIError as e:
            logger.error(f"Gemini API error: {e}", exc_info=True)
            raise

        usage = response.usage_metadata
        return LLMResponse(
            content=response.text or "",
            tokens_in=(usage.prompt_token_count or 0) if usage else 0,
            tokens_out=(usage.candidates_token_count or 0) if usage else 0,
            model=model,
        )
