from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite:///notes.db")
    api_title: str = Field("Notes API")
    access_token_expire_minutes: int = Field(15)
    refresh_token_expire_minutes: int = Field(60 * 24 * 7)
    jwt_secret: str = Field("secret")
    jwt_algorithm: str = Field("HS256")
    bcrypt_rounds: int = Field(10)
    login_rate_limit: str = Field("5/minute")
    # Report not-found and persistence failures with the status codes the
    # previous backend used (409 / 400) instead of 404 / 500.
    legacy_status_codes: bool = Field(False)
    admin_username: str | None = Field(None)
    admin_password: str | None = Field(None)


settings = Settings()
