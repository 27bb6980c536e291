# tests/test_settings.py
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from hr_onboarding.settings import Settings


def test_defaults_when_environment_is_empty() -> None:
    settings = Settings.from_env({})
    assert settings.api_base_url == 'http://localhost:8000/api'
    assert settings.api_token is None
    assert settings.api_timeout is None, "Requests have no timeout unless one is configured"
    assert settings.port == 8080
    assert settings.master_page_size == 1000

def test_values_are_read_from_the_environment() -> None:
    settings = Settings.from_env({
        'HR_API_BASE_URL': 'https://hr.example.in/api',
        'HR_API_TOKEN': 'secret',
        'HR_API_TIMEOUT': '12.5',
        'PORT': '9000',
        'LOG_LEVEL': 'debug',
        'MASTER_PAGE_SIZE': '200',
    })
    assert settings.api_base_url == 'https://hr.example.in/api'
    assert settings.api_token == 'secret'
    assert settings.api_timeout == 12.5
    assert settings.port == 9000
    assert settings.log_level == 'DEBUG'
    assert settings.master_page_size == 200

def test_blank_token_and_timeout_are_unset() -> None:
    settings = Settings.from_env({'HR_API_TOKEN': '', 'HR_API_TIMEOUT': ' '})
    assert settings.api_token is None
    assert settings.api_timeout is None
