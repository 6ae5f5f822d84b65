"""Configuration constants and settings for timesheet monitoring."""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from timesheet_monitor.utilities.exceptions import ConfigurationError

# ============================================================================
# TIMESHEET SOURCE CONFIGURATION
# ============================================================================

DEFAULT_API_URL = "https://timesheet-be.fleetstudio.com/api/user/reports/filter"
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_MAX_CONCURRENT_FETCHES = 5
USER_AGENT = "TimesheetMonitor-API/1.0"

# ============================================================================
# EMAIL/MAILER CONFIGURATION
# ============================================================================

DEFAULT_SMTP_HOST = "smtp.gmail.com"
DEFAULT_SMTP_PORT = 587
DEFAULT_ADMIN_EMAIL = "admin@fleetstudio.com"
DEFAULT_HR_EMAIL = "hr@fleetstudio.com"
EMAIL_FROM_NAME = "Timesheet Monitor"

# ============================================================================
# SLACK CONFIGURATION
# ============================================================================

DEFAULT_SLACK_CHANNEL = "#timesheet-alerts"
SLACK_USERNAME = "Timesheet Monitor"
SLACK_ICON_EMOJI = ":chart_with_upwards_trend:"
SLACK_FOOTER = "Timesheet Monitoring System"

# ============================================================================
# BUSINESS RULES
# ============================================================================

# Reserved for a shortfall rule; the daily classifier does not read it.
DEFAULT_MINIMUM_HOURS = 32

MISSING_TEXT = "N/A"

# Longest window walked when enumerating working days
MAX_WINDOW_DAYS = 366

# Entries listed per category in the report preview
REPORT_PREVIEW_LIMIT = 5

WEEKDAY_NAMES = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]

TRUE_VALUES = {"1", "true", "yes", "on"}


def _get_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}")


def _get_float(environ: Mapping[str, str], key: str) -> Optional[float]:
    raw = environ.get(key)
    if raw is None or str(raw).strip() == "":
        return None
    try:
        return float(str(raw).strip())
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")


def _get_str(environ: Mapping[str, str], key: str, default: Optional[str] = None) -> Optional[str]:
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings handed to the pipeline, client and dispatcher."""
    api_url: str = DEFAULT_API_URL
    minimum_hours: int = DEFAULT_MINIMUM_HOURS
    request_timeout: int = DEFAULT_TIMEOUT_SECONDS
    max_concurrent_fetches: int = DEFAULT_MAX_CONCURRENT_FETCHES
    analysis_timeout: Optional[float] = None
    include_sample_data: bool = False

    smtp_host: str = DEFAULT_SMTP_HOST
    smtp_port: int = DEFAULT_SMTP_PORT
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    email_from: Optional[str] = None
    admin_email: Optional[str] = DEFAULT_ADMIN_EMAIL
    hr_email: Optional[str] = DEFAULT_HR_EMAIL

    slack_webhook_url: Optional[str] = None
    slack_channel: str = DEFAULT_SLACK_CHANNEL
    slack_bot_token: Optional[str] = None

    port: int = 3000

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_user and self.smtp_password and self.report_recipients)

    @property
    def report_recipients(self) -> list:
        return [address for address in (self.admin_email, self.hr_email) if address]

    @property
    def slack_webhook_enabled(self) -> bool:
        return bool(self.slack_webhook_url)

    @property
    def slack_dm_enabled(self) -> bool:
        return bool(self.slack_bot_token)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings instance

        Raises:
            ConfigurationError: If a numeric value cannot be parsed
        """
        env = os.environ if environ is None else environ

        max_fetches = _get_int(env, "MAX_CONCURRENT_FETCHES", DEFAULT_MAX_CONCURRENT_FETCHES)
        if max_fetches < 1:
            raise ConfigurationError("MAX_CONCURRENT_FETCHES must be at least 1")

        return cls(
            api_url=_get_str(env, "TIMESHEET_API_URL", DEFAULT_API_URL).rstrip("/"),
            minimum_hours=_get_int(env, "MINIMUM_HOURS_THRESHOLD", DEFAULT_MINIMUM_HOURS),
            request_timeout=_get_int(env, "REQUEST_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            max_concurrent_fetches=max_fetches,
            analysis_timeout=_get_float(env, "ANALYSIS_TIMEOUT"),
            include_sample_data=(env.get("INCLUDE_SAMPLE_DATA", "false").strip().lower() in TRUE_VALUES),
            smtp_host=_get_str(env, "SMTP_HOST", DEFAULT_SMTP_HOST),
            smtp_port=_get_int(env, "SMTP_PORT", DEFAULT_SMTP_PORT),
            smtp_user=_get_str(env, "SMTP_USER"),
            smtp_password=_get_str(env, "SMTP_PASS"),
            email_from=_get_str(env, "EMAIL_FROM"),
            admin_email=_get_str(env, "ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL),
            hr_email=_get_str(env, "HR_EMAIL", DEFAULT_HR_EMAIL),
            slack_webhook_url=_get_str(env, "SLACK_WEBHOOK_URL"),
            slack_channel=_get_str(env, "SLACK_CHANNEL", DEFAULT_SLACK_CHANNEL),
            slack_bot_token=_get_str(env, "SLACK_BOT_TOKEN"),
            port=_get_int(env, "PORT", 3000),
        )
