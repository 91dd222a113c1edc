from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from typing import List
from dotenv import load_dotenv

# Load .env file from the project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Also try loading from current directory
load_dotenv()


class Settings(BaseSettings):
    app_name: str = "PhishLens API"
    max_upload_bytes: int = 10 * 1024 * 1024
    default_page_size: int = 50
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
