"""Configuration for CFS classification.

Defaults are read from the environment (optionally via a .env file next to
the package). Every public operation also accepts explicit arguments, which
take precedence over these values.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Find and load .env file
_env_candidates = [
    Path(__file__).parent.parent / ".env",
    Path(__file__).parent.parent / ".env.template",
]

for env_path in _env_candidates:
    if env_path.exists():
        load_dotenv(env_path)
        break


class Config:
    """CFS classification configuration."""

    # --- Classification ---
    # Comorbidity count at or above which a subject without ADL/IADL
    # difficulties is scored 4 (threshold M)
    MIN_COMORBIDITIES: int = int(os.getenv("CFS_MIN_COMORBIDITIES", "10"))
    # Decision table: cfs9 (current 1-9 scale) or cfs7_legacy
    SCALE_VERSION: str = os.getenv("CFS_SCALE_VERSION", "cfs9")
    # How the physical activity column is recorded: ordinal (1-4) or binary (0/1)
    PHYSICAL_ACTIVITY_SCALE: str = os.getenv("CFS_PHYSICAL_ACTIVITY_SCALE", "ordinal")

    # --- Validation ---
    # strict: two missing scores are not a pass; lenient: they are
    VALIDATION_NA_MODE: str = os.getenv("CFS_VALIDATION_NA_MODE", "strict")

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("CFS_LOG_LEVEL", "INFO")

    @classmethod
    def get_min_comorbidities(cls, override: int | None = None) -> int:
        """Return the comorbidity threshold, preferring an explicit override."""
        return cls.MIN_COMORBIDITIES if override is None else override
