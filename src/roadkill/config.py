from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./roadkill.db"
    db_echo: bool = False
    db_pool_timeout: float = 30.0

    # Symmetric key used to sign access tokens
    jwt_secret: SecretStr
    jwt_algo: str = "HS256"
    jwt_issuer: str = "roadkill"
    jwt_audience: str = "roadkill"
    jwt_expiry_days: int = 7

    refresh_token_expiry_days: int = 30

    # Lockout-on-failure for password sign-in
    lockout_max_failed_attempts: int = 5
    lockout_minutes: int = 5

    api_version: str = "3"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
