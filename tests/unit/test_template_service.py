import json

import pytest

from app.core.errors import ApiError, BadRequestError, NotFoundError
from application.services.template_service import TemplateService


@pytest.fixture
def templates_file(tmp_path):
    path = tmp_path / "templates.json"
    path.write_text(
        json.dumps(
            {
                "mentor": {"status": "active", "importance_level": 6, "skills": ["wisdom"], "tags": ["guide"]},
                "rogue": {"status": "active", "importance_level": 4, "skills": ["lockpicking"]},
            }
        ),
        encoding="utf-8",
    )
    return path


def test_get_templates_returns_all_or_one(templates_file):
    service = TemplateService(str(templates_file))
    assert set(service.get_templates()) == {"mentor", "rogue"}
    assert service.get_templates("rogue")["skills"] == ["lockpicking"]
    # Unknown type falls back to the whole set
    assert set(service.get_templates("dragon")) == {"mentor", "rogue"}


def test_instantiate_merges_customizations(templates_file):
    service = TemplateService(str(templates_file))
    character = service.instantiate("mentor", {"name": "Old Tam", "skills": ["swordplay"]})

    assert character["name"] == "Old Tam"
    assert character["importance_level"] == 6
    assert character["skills"] == ["swordplay"]
    assert character["tags"] == ["guide"]
    assert character["aliases"] == []


def test_instantiate_errors(templates_file):
    service = TemplateService(str(templates_file))
    with pytest.raises(BadRequestError):
        service.instantiate(None, {})
    with pytest.raises(NotFoundError):
        service.instantiate("dragon", {})


def test_unreadable_file_is_an_api_error(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{oops", encoding="utf-8")

    with pytest.raises(ApiError) as exc:
        TemplateService(str(broken)).load()
    assert exc.value.message == "Failed to load templates"

    with pytest.raises(ApiError):
        TemplateService(str(tmp_path / "missing.json")).load()


def test_bundled_templates_load():
    templates = TemplateService().get_templates()
    assert {"protagonist", "antagonist", "supporting"} <= set(templates)
