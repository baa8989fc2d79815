"""
LLM Integration for match explanations
Supports OpenAI API and OpenAI-compatible endpoints (Ollama, LocalAI, etc.)
"""
import logging
from typing import List, Dict, Optional, Any
import requests
from abc import ABC, abstractmethod

import config

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """The provider could not produce a usable completion"""


class LLMProvider(ABC):
    """Abstract base class for LLM providers"""

    @abstractmethod
    def generate(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        """Generate response from LLM"""
        pass


class OpenAIProvider(LLMProvider):
    """
    OpenAI API provider
    Also works with OpenAI-compatible endpoints (Ollama, LocalAI, etc.)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-3.5-turbo",
        temperature: float = 0.3,
        timeout: int = 30
    ):
        self.api_key = api_key if api_key is not None else config.OPENAI_API_KEY
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.temperature = temperature
        self.timeout = timeout

    def generate(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        """
        Generate response using the chat completions endpoint

        Args:
            messages: List of message dicts with 'role' and 'content'

        Returns:
            Response dict with 'content' and 'finish_reason'

        Raises:
            LLMError: on transport errors or a malformed response
        """
        headers = {
            "Content-Type": "application/json",
        }

        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }

        try:
            response = requests.post(
                f"{self.base_url}/chat/completions",
                headers=headers,
                json=payload,
                timeout=self.timeout
            )
            response.raise_for_status()
            result = response.json()
        except (requests.RequestException, ValueError) as e:
            raise LLMError(f"Error calling LLM: {e}") from e

        try:
            choice = result['choices'][0]
            message = choice['message']
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError(f"Unexpected LLM response: {result!r}") from e

        return {
            'content': message.get('content') or '',
            'finish_reason': choice.get('finish_reason', 'stop')
        }


class LocalLLMProvider(LLMProvider):
    """
    Local LLM provider (for Ollama, LocalAI, etc.)
    Uses OpenAI-compatible API format
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434/v1",  # Ollama default
        model: str = "llama2",
        temperature: float = 0.3
    ):
        self.openai_provider = OpenAIProvider(
            api_key="",  # Local models don't need API key
            base_url=base_url,
            model=model,
            temperature=temperature
        )

    def generate(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        """Generate response using local LLM"""
        return self.openai_provider.generate(messages)


class LLMManager:
    """
    Manages LLM interactions for match explanations
    Handles provider selection and fallback to the template text
    """

    SYSTEM_PROMPT = (
        "You help a staffing admin decide who to put on a project. "
        "Rewrite the given match summary as two or three friendly sentences. "
        "Keep every number and skill name exactly as given and add no new facts."
    )

    def __init__(self, provider: Optional[LLMProvider] = None):
        self.provider = provider or self._get_default_provider()

    def _get_default_provider(self) -> LLMProvider:
        """Get default LLM provider based on configuration"""
        if config.OPENAI_API_KEY:
            return OpenAIProvider(
                api_key=config.OPENAI_API_KEY,
                base_url=config.OPENAI_BASE_URL,
                model=config.OPENAI_MODEL
            )

        return LocalLLMProvider(base_url=config.LOCAL_LLM_ENDPOINT, model=config.LOCAL_LLM_MODEL)

    def rephrase_explanation(self, explanation: str, project_title: str) -> str:
        """
        Ask the LLM to rephrase a template explanation.
        Falls back to the template when the provider fails or returns nothing.
        """
        messages = [
            {"role": "system", "content": self.SYSTEM_PROMPT},
            {"role": "user", "content": f"Project: {project_title}\nSummary: {explanation}"}
        ]

        try:
            response = self.provider.generate(messages)
        except LLMError as e:
            logger.warning(f"LLM rephrasing failed, using template explanation: {e}")
            return explanation

        content = response['content'].strip()
        if not content:
            logger.warning("LLM returned an empty explanation, using template explanation")
            return explanation
        return content
