import json

import pytest

from domain.rules.character_rules import CSV_COLUMNS, CharacterImportError, CharacterRules


def test_to_csv_header_and_embedded_json():
    csv_text = CharacterRules.to_csv(
        [{"id": 1, "name": "Mira", "aliases": ["The Fox"], "is_protagonist": True, "description": None}]
    )
    header, row = csv_text.split("\n")
    assert header.split(",") == CSV_COLUMNS
    assert row.startswith('1,Mira,"[""The Fox""]",')
    assert ",true," in row


def test_to_csv_empty():
    assert CharacterRules.to_csv([]) == ""


def test_parse_csv_rows_blank_cells_become_none():
    rows = CharacterRules.parse_rows("name,description\nMira,\nOdo,Shapeshifter\n", "csv")
    assert rows == [{"name": "Mira", "description": None}, {"name": "Odo", "description": "Shapeshifter"}]


def test_parse_json_accepts_object_or_list():
    assert CharacterRules.parse_rows(json.dumps({"name": "Mira"}), "json") == [{"name": "Mira"}]
    assert len(CharacterRules.parse_rows(json.dumps([{"name": "A"}, {"name": "B"}]), "json")) == 2


@pytest.mark.parametrize(
    "content,file_format",
    [("{not json", "json"), ("[1, 2]", "json"), ("name\nMira", "xlsx")],
)
def test_parse_rows_rejects_bad_input(content, file_format):
    with pytest.raises(CharacterImportError):
        CharacterRules.parse_rows(content, file_format)


def test_field_mapping_renames_columns():
    rows = CharacterRules.apply_field_mapping([{"Full Name": "Mira", "bio": "x"}], {"Full Name": "name"})
    assert rows == [{"name": "Mira", "bio": "x"}]
    assert CharacterRules.apply_field_mapping(rows, None) is rows


def test_valid_imports_skips_nameless_rows_and_normalizes():
    rows = [
        {"name": "  Mira ", "skills": "stealth, archery", "is_main_character": "yes", "importance_level": "2"},
        {"name": "   "},
        {"description": "no name"},
        {"name": "Odo", "tags": '["changeling"]', "personality": "calm", "importance_level": "high"},
    ]
    valid = CharacterRules.valid_imports(rows)

    assert [c["name"] for c in valid] == ["Mira", "Odo"]
    mira, odo = valid
    assert mira["skills"] == ["stealth", "archery"]
    assert mira["is_main_character"] is True
    assert mira["importance_level"] == 2
    assert mira["status"] == "active"
    assert odo["tags"] == ["changeling"]
    assert odo["personality"] == {"description": "calm"}
    assert odo["importance_level"] == 5


def test_merge_template_customizations_win():
    template = {"name": "Hero", "importance_level": 1, "skills": ["courage"], "tags": ["lead"]}
    merged = CharacterRules.merge_template(template, {"name": "Mira", "tags": None})

    assert merged["name"] == "Mira"
    assert merged["importance_level"] == 1
    assert merged["skills"] == ["courage"]
    assert merged["tags"] == ["lead"]
    assert merged["aliases"] == []


def test_merge_template_empty_list_clears_field():
    merged = CharacterRules.merge_template({"skills": ["sword"], "abilities": ["flight"]}, {"skills": []})

    assert merged["skills"] == []
    assert merged["abilities"] == ["flight"]
