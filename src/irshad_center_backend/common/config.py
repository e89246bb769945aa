'''
Holds all the configurations
'''
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Manages application configuration using environment variables.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore") # automatically loads the .env

    # Application Metadata
    APP_NAME: str = "Irshad Center Admin Backend"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Admin API for Mahad and Dugsi students, relationships and billing."
    TEST_MODE: bool = False

    # Database URL
    DATABASE_URL_PROD: str
    DATABASE_URL_TEST: str
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_ECHO: bool = False

    @property
    def database_url(self) -> str:
        """
        Dynamically returns the correct database URL based on the test_mode flag.
        """
        if self.TEST_MODE:
            return self.DATABASE_URL_TEST
        return self.DATABASE_URL_PROD

    # CORS
    BACKEND_CORS_ORIGINS: list[str] = []

    # Logging
    LOG_LEVEL: str = "INFO"

# Create a single, importable instance of the settings
settings = Settings()
