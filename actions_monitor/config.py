from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    # Application
    APP_NAME: str = "GitHub Actions Monitor"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # GitHub
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_OWNER: Optional[str] = None
    GITHUB_REPO: Optional[str] = None
    GITHUB_TOKEN: Optional[str] = None
    GITHUB_TIMEOUT_SECONDS: float = 120

    # Aggregation
    RUNS_PER_WORKFLOW: int = 100
    PREV_RUNS_LIMIT: int = 5
    DISPLAY_TIMEZONE: str = "Asia/Kolkata"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
