"""
Provider factory and model routing per analysis feature.
"""
import logging
from typing import Optional

from ats_portal.core import config
from ats_portal.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

# Feature -> model, per provider. Unlisted features use the provider default.
MODEL_ROUTING = {
    "gemini": {
        "resume_parse": config.GEMINI_MODEL,
        "job_match": config.GEMINI_MODEL,
        "generated_resume": config.GEMINI_MODEL,
        "job_posting": config.GEMINI_MODEL,
        "resume_analysis": config.GEMINI_MODEL,
    },
    "openai": {
        "resume_parse": config.OPENAI_MODEL,
        "job_match": config.OPENAI_MODEL,
        "generated_resume": config.OPENAI_MODEL,
        "job_posting": config.OPENAI_MODEL,
        "resume_analysis": config.OPENAI_MODEL,
    },
}


def get_model_for_feature(feature: str, provider: str = None) -> Optional[str]:
    """
    Get the model for a feature.
    
    Returns None when the provider has no entry, meaning "provider default".
    """
    provider = provider or config.AI_PROVIDER
    return MODEL_ROUTING.get(provider, {}).get(feature)


def get_provider(name: str = None) -> Optional[LLMProvider]:
    """
    Build the configured provider.
    
    Returns None when no API key is configured or the provider name is
    unknown; callers then use the rule-based analysis path.
    """
    name = (name or config.AI_PROVIDER).lower()

    if name == "gemini":
        if not config.GEMINI_API_KEY:
            logger.info("GEMINI_API_KEY not configured - using rule-based analysis")
            return None
        from ats_portal.llm.gemini_provider import GeminiProvider
        return GeminiProvider(api_key=config.GEMINI_API_KEY, default_model=config.GEMINI_MODEL)

    if name == "openai":
        if not config.OPENAI_API_KEY:
            logger.info("OPENAI_API_KEY not configured - using rule-based analysis")
            return None
        from ats_portal.llm.openai_provider import OpenAIProvider
        return OpenAIProvider(api_key=config.OPENAI_API_KEY, default_model=config.OPENAI_MODEL)

    logger.error(f"Unsupported AI_PROVIDER='{name}' - using rule-based analysis")
    return None
