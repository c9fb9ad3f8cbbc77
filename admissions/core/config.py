from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # "Search and apply" catalog behind the funnel lookups
    EXTERNAL_API_BASE_URL: str | None = None
    EXTERNAL_API_TIMEOUT_SECONDS: float = 10.0

    # CRM backend for student detail and application creation
    CRM_API_BASE_URL: str | None = None
    CRM_API_TOKEN: str | None = None
    CRM_API_TIMEOUT_SECONDS: float = 10.0


settings = Settings()
