from pydantic_settings import BaseSettings
from pathlib import Path

# Get the project root directory (parent of the package folder)
PROJECT_ROOT = Path(__file__).parent.parent

FRIDAY = 4


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'weekly_reminders.db'}"
    storage_dir: str = str(PROJECT_ROOT / "storage")
    log_level: str = "INFO"

    # Target site (agent settings in the database take precedence)
    scraping_url: str = ""
    scraping_password: str = ""

    # Scraper timings
    navigation_timeout_ms: int = 30000
    consent_wait_timeout_ms: int = 3000
    login_wait_timeout_ms: int = 15000
    settle_seconds: float = 10.0
    password_tab_limit: int = 10

    # Schedule
    publish_day: int = FRIDAY  # 0 = Monday
    cutoff_hour: int = 10
    timezone: str = "Europe/London"

    # Provider chain, tried in this order when a key is present
    google_gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    anthropic_api_key: str = ""
    claude_model: str = "claude-sonnet-4-5-20250929"

    kimi_api_key: str = ""
    kimi_base_url: str = "https://api.moonshot.cn/v1"
    kimi_model: str = "kimi-k2-0711"

    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "google/gemini-2.0-flash-001"

    # Local Ollama for development; disabled while ollama_model is empty
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = ""

    provider_timeout_seconds: float = 120.0
    max_output_tokens: int = 4096
    temperature: float = 0.7

    class Config:
        env_file = str(PROJECT_ROOT / ".env")


settings = Settings()
