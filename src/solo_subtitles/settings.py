from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Subtitle service settings.

    All settings can be overridden via environment variables or .env file.
    Environment variables use uppercase names (e.g., OPENSUBTITLES_API_KEY=...).

    OpenSubtitles tokens live 24 hours; the cache refreshes them
    ``opensubtitles_token_margin`` seconds early so the provider never sees
    an expired token.
    """
    opensubtitles_api_url: str = "https://api.opensubtitles.com/api/v1"
    opensubtitles_api_key: Optional[str] = None
    opensubtitles_useragent: Optional[str] = None
    opensubtitles_username: Optional[str] = None
    opensubtitles_password: Optional[str] = None
    opensubtitles_token_lifetime: int = 24 * 60 * 60
    opensubtitles_token_margin: int = 60 * 60

    arm_api_url: str = "https://arm.haglund.dev"
    ids_moe_api_url: str = "https://api.ids.moe"
    ids_moe_api_key: Optional[str] = None
    default_mapping_service: str = "arm"

    default_languages: List[str] = ["en", "fr"]
    request_timeout: float = 15.0

    # Bearer tokens accepted by the HTTP surface
    api_tokens: List[str] = []

    log_level: str = "INFO"
    json_logs: bool = False
    log_file: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def token_ttl(self) -> int:
        """Seconds a freshly issued provider token is trusted for."""
        return max(0, self.opensubtitles_token_lifetime - self.opensubtitles_token_margin)


settings = Settings()


def get_settings() -> Settings:
    return settings
