import os
import sys
from functools import lru_cache

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from relaybot.errors import ConfigMissing
from relaybot.logging_config import bot_logger as logger


def _env_file() -> str | None:
    # .env is a local development convenience only
    if os.environ.get("ENVIRONMENT", "development") == "production":
        return None
    return ".env"


class Settings(BaseSettings):
    # Telegram
    telegram_bot_token: str
    telegram_webhook_secret: str = ""  # Optional: for webhook verification

    # Perplexity
    pplx_api_key: str
    pplx_model: str = "sonar"
    pplx_base_url: str = "https://api.perplexity.ai"

    # Public URL of this service, used to register the webhook
    server_url: str

    # Local storage
    data_dir: str = "./data"

    # OneDrive (optional: mirroring is enabled only when all credentials are set)
    onedrive_client_id: str = ""
    onedrive_client_secret: str = ""
    onedrive_tenant_id: str = ""
    onedrive_user_id: str = ""
    onedrive_folder: str = "TelegramBot"

    # Runtime
    http_timeout: float = 60.0
    port: int = 3000
    log_level: str = "INFO"
    environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @property
    def onedrive_enabled(self) -> bool:
        return all([
            self.onedrive_client_id,
            self.onedrive_client_secret,
            self.onedrive_tenant_id,
            self.onedrive_user_id,
        ])

    @property
    def webhook_path(self) -> str:
        return f"/webhook/{self.telegram_bot_token}"

    @property
    def webhook_url(self) -> str:
        return f"{self.server_url.rstrip('/')}{self.webhook_path}"


def build_settings(**overrides) -> Settings:
    """
    Build settings from the environment.

    Raises:
        ConfigMissing: a required variable is missing or invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"]).upper()
            if error["type"] == "missing":
                problems.append(f"Missing {field} env var")
            else:
                problems.append(f"Invalid {field} env var: {error['msg']}")
        raise ConfigMissing(problems) from e


def load_settings(**overrides) -> Settings:
    """
    Build settings, exiting the process if a required variable is missing
    or invalid.
    """
    try:
        settings = build_settings(**overrides)
    except ConfigMissing as e:
        for problem in e.problems:
            logger.error(problem)
        sys.exit(1)

    # Log vars (without exposing secrets)
    logger.info(f"TELEGRAM_BOT_TOKEN present? {bool(settings.telegram_bot_token)}")
    logger.info(f"PPLX_API_KEY present? {bool(settings.pplx_api_key)}")
    logger.info(f"SERVER_URL: {settings.server_url}")
    logger.info(f"OneDrive mirroring enabled? {settings.onedrive_enabled}")
    return settings


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
