import pytest

from helpers.loader import load_form

from questionnaire_engine.config import EngineSettings
from questionnaire_engine.models import Reference


@pytest.fixture(scope="session")
def intake():
    """The bundled general-intake questionnaire."""
    return load_form("general_intake")


@pytest.fixture
def patient_ref():
    return Reference(reference="Patient/p1", display="Test Patient")


@pytest.fixture
def settings():
    """Settings independent of the test runner's environment."""
    return EngineSettings(suggestion_min_confidence=0.5)
