from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Chat Memory"
    debug: bool = False

    # Storage
    db_path: Path = Path(__file__).resolve().parent.parent.parent / "chatmemory.db"

    # Conversation
    system_prompt: str = "You are a helpful assistant."
    title_max_length: int = 80

    # LLM
    llm_provider: str = "gemini"  # gemini | azure_openai
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    # Azure OpenAI
    azure_openai_endpoint: str = ""
    azure_openai_key: str = ""
    azure_openai_deployment: str = ""
    azure_openai_api_version: str = "2024-06-01"

    # Server
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "CHATMEMORY_",
    }


settings = Settings()
