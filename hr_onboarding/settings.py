# hr_onboarding/settings.py
from __future__ import annotations
import os
from dataclasses import dataclass


def _optional_float(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    return float(raw)


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, read from the environment."""
    api_base_url: str = 'http://localhost:8000/api'
    api_token: str | None = None
    # Seconds; None leaves requests without a timeout
    api_timeout: float | None = None
    port: int = 8080
    log_level: str = 'INFO'
    master_page_size: int = 1000

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            api_base_url=env.get('HR_API_BASE_URL', cls.api_base_url),
            api_token=env.get('HR_API_TOKEN') or None,
            api_timeout=_optional_float(env.get('HR_API_TIMEOUT')),
            port=int(env.get('PORT', cls.port)),
            log_level=env.get('LOG_LEVEL', cls.log_level).upper(),
            master_page_size=int(env.get('MASTER_PAGE_SIZE', cls.master_page_size)),
        )
