import os
from dataclasses import dataclass, fields, replace
from typing import List, Mapping, Optional

from dotenv import load_dotenv


@dataclass
class BaseConfig:
    DEBUG: bool = False
    TESTING: bool = False
    DATABASE_PATH: str = "storage/sqlite/deepcut.db"
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_TIMEOUT: int = 120
    GEMINI_MAX_OUTPUT_TOKENS: int = 8192
    STREAM_SHUTDOWN_TIMEOUT: int = 30

    CRON_SECRET: str = ""
    RESEND_API_KEY: str = ""
    EMAIL_FROM: str = "DeepCut <onboarding@resend.dev>"
    EMAIL_TO: str = ""

    def email_recipients(self) -> List[str]:
        return [item.strip() for item in self.EMAIL_TO.split(",") if item.strip()]


@dataclass
class DevelopmentConfig(BaseConfig):
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"


@dataclass
class TestingConfig(BaseConfig):
    TESTING: bool = True
    DATABASE_PATH: str = "storage/sqlite/deepcut-test.db"


CONFIG_MAP = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": BaseConfig
}


def _coerce(raw: str, current: object) -> object:
    if isinstance(current, bool):
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    if isinstance(current, int):
        return int(raw)
    return raw


def load_settings(name: str, environ: Optional[Mapping[str, str]] = None) -> BaseConfig:
    """Build the config dataclass for ``name`` with environment overrides applied.

    Only fields declared on the dataclass are read; unknown variables are ignored.
    Pass ``environ`` explicitly to avoid touching the process environment.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ
    config = CONFIG_MAP.get(name, BaseConfig)()
    overrides = {}
    for item in fields(config):
        raw = environ.get(item.name)
        if raw is None:
            continue
        overrides[item.name] = _coerce(raw, getattr(config, item.name))
    return replace(config, **overrides)