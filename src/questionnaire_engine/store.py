"""QuestionnaireStore — loads questionnaire definitions from a directory.

Each ``*.yaml``, ``*.yml`` or ``*.json`` file holds one FHIR ``Questionnaire``
resource.  The store is loaded once at startup and provides lookup by id.

Usage::

    store = QuestionnaireStore()          # defaults to forms/ relative to repo root
    store.load()                          # parse all definition files

    questionnaire = store.get("phq2-intake")
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from questionnaire_engine.constants import DEFINITION_SUFFIXES
from questionnaire_engine.models.item import (
    Questionnaire,
    duplicate_link_ids,
    iter_items,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_definition_file(path: Path | str) -> Any:
    """Load a single YAML or JSON file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing definition file: {path}")
    with path.open("r", encoding="utf-8") as f:
        if path.suffix == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def check_definition(questionnaire: Questionnaire) -> None:
    """Enforce tree-wide invariants on a parsed definition.

    Raises ``ValueError`` if any linkId occurs more than once.  Conditions
    pointing at unknown linkIds are only logged: at runtime they evaluate as
    "not satisfied" and the dependent item stays hidden.
    """
    dupes = duplicate_link_ids(questionnaire.item)
    if dupes:
        raise ValueError(
            f"Questionnaire {questionnaire.id!r} has duplicate linkIds: {dupes}"
        )

    known = {item.link_id for item in iter_items(questionnaire.item)}
    for item in iter_items(questionnaire.item):
        for condition in item.enable_when:
            if condition.question not in known:
                logger.warning(
                    "Questionnaire %s: item %s depends on unknown linkId %s",
                    questionnaire.id,
                    item.link_id,
                    condition.question,
                )


# ---------------------------------------------------------------------------
# QuestionnaireStore
# ---------------------------------------------------------------------------

class QuestionnaireStore:
    """Loads every definition file under a directory and provides typed lookup.

    Attributes populated after :meth:`load`:

        questionnaires — dict[id, Questionnaire]
    """

    def __init__(self, questionnaire_dir: str | Path | None = None) -> None:
        if questionnaire_dir is None:
            questionnaire_dir = find_repo_root() / "forms"
        self._base = Path(questionnaire_dir)

        # Populated by load()
        self.questionnaires: dict[str, Questionnaire] = {}

    def load(self) -> None:
        """Parse all definition files into typed models.

        Call this once at startup.  Raises ``FileNotFoundError`` if the
        directory is missing and ``ValueError`` for an invalid definition or
        a repeated questionnaire id.
        """
        if not self._base.is_dir():
            raise FileNotFoundError(f"Missing questionnaire directory: {self._base}")

        for path in sorted(self._base.iterdir()):
            if path.suffix not in DEFINITION_SUFFIXES:
                continue
            questionnaire = Questionnaire.model_validate(load_definition_file(path))
            check_definition(questionnaire)
            if questionnaire.id in self.questionnaires:
                raise ValueError(
                    f"Questionnaire id {questionnaire.id!r} defined twice (again in {path.name})"
                )
            self.questionnaires[questionnaire.id] = questionnaire

        logger.info(
            "QuestionnaireStore loaded %d questionnaires from %s",
            len(self.questionnaires),
            self._base,
        )

    def get(self, questionnaire_id: str) -> Questionnaire | None:
        """Look up a questionnaire by id."""
        return self.questionnaires.get(questionnaire_id)

    def ids(self) -> list[str]:
        """Loaded questionnaire ids, sorted."""
        return sorted(self.questionnaires)
