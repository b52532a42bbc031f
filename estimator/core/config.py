from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    REDIS_URL: str = ""  # empty disables quote caching
    QUOTE_CACHE_TTL: int = 60  # 60 seconds

    CATALOG_FILE: str = ""  # JSON override for the embedded service catalog

    API_TITLE: str = "Service Quote Estimator"
    API_DESCRIPTION: str = "Price ranges for mobile mechanic services and maintenance packages"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
