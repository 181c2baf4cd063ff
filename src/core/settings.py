"""
Engine-wide settings.

Values can be overridden with environment variables (prefix GAMEY_), e.g. GAMEY_BOT_TIMEOUT_SECONDS=0.5
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from src.core.shared_types import ForfeitPolicy

ENV_PREFIX = "GAMEY_"


class EngineSettings(BaseModel):
    bot_timeout_seconds: float = Field(default=5.0, gt=0)
    forfeit_policy: ForfeitPolicy = ForfeitPolicy.SKIP_TURN
    bot_workers: int = Field(default=4, ge=1)
    database_url: str = "sqlite:///gamey.db"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> EngineSettings:
    """Collect the GAMEY_* variables that match a settings field and let pydantic do the validation/conversion."""
    environ = os.environ if environ is None else environ
    overrides = {
        name: environ[ENV_PREFIX + name.upper()]
        for name in EngineSettings.model_fields
        if ENV_PREFIX + name.upper() in environ
    }
    return EngineSettings(**overrides)
