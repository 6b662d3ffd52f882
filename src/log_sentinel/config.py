from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Credentials(BaseSettings):
    """The only values read from the environment (or .env)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    api_key: str


class LLMConfig(BaseModel):
    base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    model_name: str = "gemini-3-pro-preview"
    temperature: float = 0.2
    thinking_budget: int = 4096  # reasoning tokens per turn
    timeout: float = 120.0


class ContextConfig(BaseModel):
    max_file_chars: int = 20_000  # chars per attached file


class SessionConfig(BaseModel):
    max_sessions: int = 200
    idle_ttl: float = 3600.0  # seconds since last access


class Config(BaseModel):
    credentials: Credentials = Field(default_factory=Credentials)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
    sessions: SessionConfig = Field(default_factory=SessionConfig)


@lru_cache
def get_config() -> Config:
    return Config()


CONFIG_EXTENSIONS = {
    ".json",
    ".yaml",
    ".xml",
}
