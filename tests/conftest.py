"""Shared pytest fixtures for cvscore tests."""

import json
from pathlib import Path

import pytest

from cvscore.models import CvDocument

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture()
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture()
def full_cv_data() -> dict:
    """The raw camelCase payload of a complete, well-written CV."""
    return json.loads((FIXTURES_DIR / "full_cv.json").read_text(encoding="utf-8"))


@pytest.fixture()
def full_cv(full_cv_data: dict) -> CvDocument:
    return CvDocument.model_validate(full_cv_data)


@pytest.fixture()
def empty_cv() -> CvDocument:
    """A CV with every section present but blank."""
    return CvDocument.model_validate(
        {
            "header": {"name": "", "location": "", "phone": "", "email": "", "linkedin": "", "github": ""},
            "summary": {"title": "", "text": ""},
            "education": {"title": "", "items": []},
            "experience": {"title": "", "items": []},
            "projects": {"title": "", "items": []},
            "skills": {"title": "", "categories": []},
            "languages": {"title": "", "items": []},
        }
    )


@pytest.fixture()
def make_cv(full_cv: CvDocument):
    """Build a variant of the full CV, replacing whole sections given as plain dicts."""

    def _make(base: CvDocument | None = None, **sections) -> CvDocument:
        data = (base or full_cv).model_dump(by_alias=True)
        data.update(sections)
        return CvDocument.model_validate(data)

    return _make
