"""Engine settings."""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    poll_interval_seconds: float = 2.0
    default_timeout_seconds: float | None = 300.0

    @model_validator(mode="after")
    def validate_timing_settings(self) -> "Settings":
        """Ensure polling cadence and deadlines are usable."""

        if self.poll_interval_seconds <= 0:
            raise ValueError("ML_STATE_POLL_INTERVAL_SECONDS must be > 0.")
        if self.default_timeout_seconds is not None and self.default_timeout_seconds <= 0:
            raise ValueError(
                "ML_STATE_DEFAULT_TIMEOUT_SECONDS must be > 0 when set. "
                "Set it to 'none' to wait without a deadline."
            )
        return self

    model_config = SettingsConfigDict(
        env_prefix="ML_STATE_",
        env_parse_none_str="none",
        extra="ignore",
    )


__all__ = ["Settings"]
