"""
Shared API dependencies: document store, LLM provider and per-user records.
"""

from typing import Optional
from fastapi import Depends

from ..config import Settings, settings
from ..core import RecordManager
from ..llm import LLMProvider, create_llm_provider
from ..storage import DocumentStore, get_document_store
from ..utils.auth import UserContext, get_current_user


def get_store() -> DocumentStore:
    """The application's document store."""
    return get_document_store()


def llm_api_key_for(config: Settings) -> Optional[str]:
    """LLM_API_KEY, else the key belonging to the selected provider."""
    if config.llm_api_key:
        return config.llm_api_key
    provider_keys = {
        "gemini": config.gemini_api_key,
        "openai": config.openai_api_key,
    }
    return provider_keys.get(config.llm_provider)


def get_llm_provider() -> Optional[LLMProvider]:
    """Get configured LLM provider or None."""
    api_key = llm_api_key_for(settings)
    if not api_key:
        return None
    return create_llm_provider(
        provider=settings.llm_provider,
        api_key=api_key,
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        default_temperature=settings.llm_temperature,
        default_max_tokens=settings.llm_max_tokens,
        timeout=settings.llm_timeout,
    )


def get_records(
    user: UserContext = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> RecordManager:
    """Records of the authenticated user."""
    return RecordManager(store, user.user_id)
