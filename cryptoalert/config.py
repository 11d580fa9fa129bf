"""
Application Configuration

All settings come from environment variables and are collected once at
startup into a Settings object that is passed to every component.
"""

import math
import os
from typing import List, Mapping, Optional

from pydantic import BaseModel

from cryptoalert.utils.schedule import DEFAULT_SCHEDULE, InvalidScheduleError, parse_schedule

TRUE_VALUES = ("1", "true", "yes", "on")


class ConfigurationError(Exception):
    """Raised when the configuration is invalid and the process must not start."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("Invalid configuration: " + "; ".join(errors))


class Settings(BaseModel):
    """Explicit application settings."""

    app_env: str = "development"

    # Database Configuration
    database_url: str = "sqlite:///./crypto_alert.sqlite"

    # Redis Configuration (Celery broker and evaluation pass lock)
    redis_hostname: str = "localhost"
    redis_port: int = 6379

    # CoinGecko Configuration
    coingecko_api_url: str = "https://api.coingecko.com/api/v3"
    api_timeout: float = 10.0  # seconds
    coins_list_limit: int = 100

    # Email Configuration
    email_enabled: bool = False
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_secure: bool = False  # True for implicit TLS (port 465)
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    email_from_name: str = "CryptoAlert"

    # Alert Configuration
    alert_check_interval: str = DEFAULT_SCHEDULE
    max_alerts_per_email: int = 10
    price_history_default_limit: int = 100
    max_price_history: int = 1000

    # Logging Configuration
    log_level: str = "DEBUG"
    log_path: Optional[str] = "logs/app.log"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings: Populated settings
        """
        env = os.environ if environ is None else environ
        app_env = env.get("APP_ENV", "development").lower()

        smtp_host = env.get("SMTP_HOST") or None
        smtp_user = env.get("SMTP_USER") or None
        smtp_pass = env.get("SMTP_PASS") or None

        # Email is on when explicitly requested, or implicitly when fully configured
        email_flag = env.get("EMAIL_ENABLED")
        if email_flag is None or email_flag.strip() == "":
            email_enabled = bool(smtp_host and smtp_user and smtp_pass)
        else:
            email_enabled = email_flag.strip().lower() in TRUE_VALUES

        default_log_level = "INFO" if app_env == "production" else "DEBUG"

        return cls(
            app_env=app_env,
            database_url=env.get("DATABASE_URL", "sqlite:///./crypto_alert.sqlite"),
            redis_hostname=env.get("REDIS_HOSTNAME", "localhost"),
            redis_port=int(env.get("REDIS_PORT", "6379")),
            coingecko_api_url=env.get("COINGECKO_API_URL", "https://api.coingecko.com/api/v3"),
            api_timeout=float(env.get("API_TIMEOUT", "10")),
            coins_list_limit=int(env.get("COINS_LIST_LIMIT", "100")),
            email_enabled=email_enabled,
            smtp_host=smtp_host,
            smtp_port=int(env.get("SMTP_PORT", "587")),
            smtp_secure=env.get("SMTP_SECURE", "false").lower() in TRUE_VALUES,
            smtp_user=smtp_user,
            smtp_pass=smtp_pass,
            email_from_name=env.get("EMAIL_FROM_NAME", "CryptoAlert"),
            alert_check_interval=env.get("ALERT_CHECK_INTERVAL", DEFAULT_SCHEDULE),
            max_alerts_per_email=int(env.get("MAX_ALERTS_PER_EMAIL", "10")),
            price_history_default_limit=int(env.get("PRICE_HISTORY_DEFAULT_LIMIT", "100")),
            max_price_history=int(env.get("MAX_PRICE_HISTORY", "1000")),
            log_level=env.get("LOG_LEVEL", default_log_level).upper(),
            log_path=env.get("LOG_PATH", "logs/app.log") or None,
        )

    @property
    def redis_url(self) -> str:
        return f"redis://{self.redis_hostname}:{self.redis_port}/1"

    def validate_settings(self) -> List[str]:
        """
        Check the settings for problems that must stop startup.

        Returns:
            list: Human-readable error messages (empty when valid)
        """
        errors = []

        if self.email_enabled:
            if not self.smtp_host:
                errors.append("SMTP_HOST is required when email is enabled")
            if not self.smtp_user:
                errors.append("SMTP_USER is required when email is enabled")
            if not self.smtp_pass:
                errors.append("SMTP_PASS is required when email is enabled")

        if not 1 <= self.smtp_port <= 65535:
            errors.append(f"Invalid SMTP_PORT value: {self.smtp_port}")
        if not 1 <= self.redis_port <= 65535:
            errors.append(f"Invalid REDIS_PORT value: {self.redis_port}")
        if not math.isfinite(self.api_timeout) or self.api_timeout <= 0:
            errors.append(f"Invalid API_TIMEOUT value: {self.api_timeout}")

        try:
            parse_schedule(self.alert_check_interval)
        except InvalidScheduleError as e:
            errors.append(f"Invalid ALERT_CHECK_INTERVAL: {e}")

        for name in ("coins_list_limit", "max_alerts_per_email", "price_history_default_limit", "max_price_history"):
            if getattr(self, name) < 1:
                errors.append(f"{name.upper()} must be at least 1")

        if self.price_history_default_limit > self.max_price_history:
            errors.append("PRICE_HISTORY_DEFAULT_LIMIT cannot exceed MAX_PRICE_HISTORY")

        return errors

    def summary(self) -> str:
        """One-line description for the startup log (no secrets)."""
        return (
            f"env={self.app_env}, database={self.database_url.split('@')[-1]}, "
            f"email_enabled={self.email_enabled}, "
            f"alert_check_interval='{self.alert_check_interval}'"
        )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build and validate settings.

    Raises:
        ConfigurationError: If any setting is invalid
    """
    try:
        settings = Settings.from_env(environ)
    except ValueError as e:
        raise ConfigurationError([f"Malformed setting: {e}"]) from e

    errors = settings.validate_settings()
    if errors:
        raise ConfigurationError(errors)
    return settings
