from pathlib import Path
from typing import Any

from questionnaire_engine.models import Questionnaire
from questionnaire_engine.store import find_repo_root, load_definition_file


def forms_dir() -> Path:
    """The repo's bundled questionnaire definitions (``forms/``)."""
    return find_repo_root(Path(__file__).resolve()) / "forms"


def load_form(name: str) -> Questionnaire:
    """Parse ``forms/<name>.yaml`` into a Questionnaire model."""
    raw: Any = load_definition_file(forms_dir() / f"{name}.yaml")
    return Questionnaire.model_validate(raw)
