from pydantic_settings import BaseSettings
from functools import lru_cache

# The echo server always listens here; it is not read from the environment.
ECHO_PORT: int = 8080


class Settings(BaseSettings):
    PROJECT_NAME: str = "Echo App"
    HOST: str = "0.0.0.0"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

@lru_cache()
def get_settings():
    return Settings()

settings = get_settings()
