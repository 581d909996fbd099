from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_anthropic import ChatAnthropic
from langchain_openai import ChatOpenAI
from langchain_ollama import ChatOllama
from typing import List, Union
from weekly_reminders.config import Settings, settings as default_settings
from weekly_reminders.exceptions import ProviderNotConfiguredError


def has_credential(value: str) -> bool:
    """Treat empty keys and .env placeholders like 'your-key-here' as absent"""
    value = (value or "").strip()
    if not value:
        return False
    return not (value.startswith("your-") and value.endswith("-here"))


def response_text(response) -> str:
    """Flatten a chat model response into plain text"""
    content = response.content if hasattr(response, "content") else response
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class BaseProvider:
    """
    One generation backend in the fallback chain.

    Subclasses only describe how to build their LangChain chat model; the
    orchestrator decides what goes into the message.
    """

    name = "base"
    accepts_documents = False  # True when PDFs can be attached as file blocks

    def __init__(self, config: Settings = None):
        self.config = config or default_settings

    def is_configured(self) -> bool:
        raise NotImplementedError

    def build_llm(self):
        raise NotImplementedError

    def generate(self, content: Union[str, List[dict]]) -> str:
        """Send one user message and return the raw text answer"""
        if not self.is_configured():
            raise ProviderNotConfiguredError(f"{self.name} has no credentials")
        llm = self.build_llm()
        response = llm.invoke([HumanMessage(content=content)])
        return response_text(response)

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.name}>"


class GeminiProvider(BaseProvider):
    """Google Gemini, reads PDFs natively"""

    name = "gemini"
    accepts_documents = True

    def is_configured(self) -> bool:
        return has_credential(self.config.google_gemini_api_key)

    def build_llm(self):
        return ChatGoogleGenerativeAI(
            model=self.config.gemini_model,
            google_api_key=self.config.google_gemini_api_key,
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_output_tokens,
            timeout=self.config.provider_timeout_seconds,
            max_retries=0
        )


class ClaudeProvider(BaseProvider):
    """Anthropic Claude, reads PDFs natively as document blocks"""

    name = "claude"
    accepts_documents = True

    def is_configured(self) -> bool:
        return has_credential(self.config.anthropic_api_key)

    def build_llm(self):
        return ChatAnthropic(
            model=self.config.claude_model,
            api_key=self.config.anthropic_api_key,
            temperature=self.config.temperature,
            max_tokens=self.config.max_output_tokens,
            timeout=self.config.provider_timeout_seconds,
            max_retries=0
        )


class KimiProvider(BaseProvider):
    """Moonshot Kimi through its OpenAI-compatible API (text only)"""

    name = "kimi"

    def is_configured(self) -> bool:
        return has_credential(self.config.kimi_api_key)

    def build_llm(self):
        return ChatOpenAI(
            model=self.config.kimi_model,
            api_key=self.config.kimi_api_key,
            base_url=self.config.kimi_base_url,
            temperature=self.config.temperature,
            max_tokens=self.config.max_output_tokens,
            timeout=self.config.provider_timeout_seconds,
            max_retries=0
        )


class OpenRouterProvider(BaseProvider):
    """OpenRouter through its OpenAI-compatible API (text only)"""

    name = "openrouter"

    def is_configured(self) -> bool:
        return has_credential(self.config.openrouter_api_key)

    def build_llm(self):
        return ChatOpenAI(
            model=self.config.openrouter_model,
            api_key=self.config.openrouter_api_key,
            base_url=self.config.openrouter_base_url,
            temperature=self.config.temperature,
            max_tokens=self.config.max_output_tokens,
            timeout=self.config.provider_timeout_seconds,
            max_retries=0,
            default_headers={"X-Title": "Weekly Reminders"}
        )


class OllamaProvider(BaseProvider):
    """Local Ollama for development (text only)"""

    name = "ollama"

    def is_configured(self) -> bool:
        return bool(self.config.ollama_model and self.config.ollama_base_url)

    def build_llm(self):
        return ChatOllama(
            model=self.config.ollama_model,
            base_url=self.config.ollama_base_url,
            temperature=0.0,
            format="json",
            client_kwargs={"timeout": self.config.provider_timeout_seconds}
        )


PROVIDER_CHAIN = [GeminiProvider, ClaudeProvider, KimiProvider, OpenRouterProvider, OllamaProvider]


def get_providers(config: Settings = None) -> List[BaseProvider]:
    """Factory returning the provider chain in priority order"""
    return [provider_cls(config) for provider_cls in PROVIDER_CHAIN]
