from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from enum import Enum

class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"

class Settings(BaseSettings):
    # Basic Settings
    APP_NAME: str = "Voice Interview"
    ENVIRONMENT: EnvironmentType = EnvironmentType.DEVELOPMENT
    DEBUG: bool = True
    API_PREFIX: str = "/api"
    WEBSOCKET_PATH: str = "/ws"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "DEBUG"

    # Call provider targets
    GENERATE_WORKFLOW_ID: str = ""
    INTERVIEWER_ASSISTANT_ID: str = "interviewer"

    # Feedback service
    FEEDBACK_SERVICE_URL: str = "http://localhost:3000/api/feedback"
    FEEDBACK_SERVICE_TOKEN: str | None = None
    FEEDBACK_TIMEOUT_SECONDS: float = 30.0

    # Navigation
    HOME_PATH: str = "/"
    FEEDBACK_PATH_TEMPLATE: str = "/interview/{interview_id}/feedback"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra='ignore'
    )

@lru_cache
def get_settings() -> Settings:
    return Settings()
