"""Engine configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  Embedding
applications typically override them via env vars or a ``.env`` file.
"""

import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class EngineSettings:
    """Immutable engine configuration read from environment at startup."""

    # Directory of questionnaire definitions (None → QuestionnaireStore default,
    # which is forms/ at the repo root)
    questionnaire_dir: str | None = None

    # Logging
    log_level: str = "INFO"

    # Suggestions below this confidence are discarded by FormSession
    suggestion_min_confidence: float = 0.0


def load_settings() -> EngineSettings:
    """Build settings from ``QUESTIONNAIRE_*`` environment variables."""
    min_confidence = float(os.getenv("QUESTIONNAIRE_SUGGESTION_MIN_CONFIDENCE", "0.0"))
    if not 0.0 <= min_confidence <= 1.0:
        raise ValueError(
            f"QUESTIONNAIRE_SUGGESTION_MIN_CONFIDENCE must be in [0, 1], got {min_confidence}"
        )

    return EngineSettings(
        questionnaire_dir=os.getenv("QUESTIONNAIRE_DIR") or None,
        log_level=os.getenv("QUESTIONNAIRE_LOG_LEVEL", "INFO").upper(),
        suggestion_min_confidence=min_confidence,
    )


def configure_logging(settings: EngineSettings) -> None:
    """Install the root logging handler at the configured level."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
