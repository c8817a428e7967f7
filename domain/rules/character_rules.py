import csv
import io
import json
from typing import Any, Dict, List, Optional

CSV_COLUMNS = [
    "id",
    "name",
    "aliases",
    "description",
    "appearance",
    "height",
    "weight",
    "eye_color",
    "hair_color",
    "age_range",
    "personality",
    "skills",
    "abilities",
    "weaknesses",
    "motivations",
    "fears",
    "status",
    "importance_level",
    "is_main_character",
    "is_protagonist",
    "is_antagonist",
    "first_appearance",
    "creator",
    "voice_actor",
    "tags",
    "created_at",
    "updated_at",
]

LIST_FIELDS = ("aliases", "skills", "abilities", "weaknesses", "tags")
TEXT_FIELDS = (
    "description",
    "height",
    "weight",
    "eye_color",
    "hair_color",
    "age_range",
    "motivations",
    "fears",
    "first_appearance",
    "creator",
    "voice_actor",
)
FLAG_FIELDS = ("is_main_character", "is_protagonist", "is_antagonist")
JSON_FIELDS = ("appearance", "personality")

IMPORT_PREVIEW_ROWS = 10


class CharacterImportError(ValueError):
    pass


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _parse_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _parse_list(value: Any) -> List:
    if not value:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return [part.strip() for part in value.split(",") if part.strip()]
        return parsed if isinstance(parsed, list) else [parsed]
    return []


def _parse_json(value: Any) -> Optional[Any]:
    if not value:
        return None
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return {"description": value}
    return value


class CharacterRules:
    @staticmethod
    def to_csv(characters: List[Dict[str, Any]]) -> str:
        """Lists and objects are embedded as JSON; nulls become empty cells."""
        if not characters:
            return ""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)
        for character in characters:
            row = []
            for column in CSV_COLUMNS:
                value = character.get(column)
                if value is None:
                    row.append("")
                elif isinstance(value, (list, dict)):
                    row.append(json.dumps(value, ensure_ascii=False))
                elif isinstance(value, bool):
                    row.append("true" if value else "false")
                elif hasattr(value, "isoformat"):
                    row.append(value.isoformat())
                else:
                    row.append(value)
            writer.writerow(row)
        return buffer.getvalue().rstrip("\n")

    @staticmethod
    def parse_rows(content: str, file_format: str) -> List[Dict[str, Any]]:
        if file_format == "csv":
            reader = csv.DictReader(io.StringIO(content.strip()))
            return [{(k or "").strip(): (v if v != "" else None) for k, v in row.items()} for row in reader]
        if file_format == "json":
            try:
                parsed = json.loads(content)
            except ValueError as e:
                raise CharacterImportError(f"Invalid JSON content: {e}") from e
            rows = parsed if isinstance(parsed, list) else [parsed]
            if not all(isinstance(row, dict) for row in rows):
                raise CharacterImportError("Invalid file format")
            return rows
        raise CharacterImportError("Unsupported file format")

    @staticmethod
    def apply_field_mapping(rows: List[Dict[str, Any]], mapping: Optional[Dict[str, str]]) -> List[Dict[str, Any]]:
        if not mapping:
            return rows
        return [{mapping.get(key, key): value for key, value in row.items()} for row in rows]

    @staticmethod
    def normalize_import(row: Dict[str, Any]) -> Dict[str, Any]:
        character: Dict[str, Any] = {"name": (row.get("name") or "").strip()}
        for key in TEXT_FIELDS:
            character[key] = row.get(key) or None
        for key in LIST_FIELDS:
            character[key] = _parse_list(row.get(key))
        for key in FLAG_FIELDS:
            character[key] = _parse_bool(row.get(key, False))
        for key in JSON_FIELDS:
            character[key] = _parse_json(row.get(key))
        character["status"] = row.get("status") or "active"
        character["importance_level"] = _parse_int(row.get("importance_level"), 5)
        return character

    @staticmethod
    def valid_imports(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Rows without a usable name are skipped."""
        return [
            CharacterRules.normalize_import(row)
            for row in rows
            if isinstance(row.get("name"), str) and row["name"].strip()
        ]

    @staticmethod
    def merge_template(template: Dict[str, Any], customizations: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Customizations win, an empty list included; list fields otherwise fall back to the template, then to empty."""
        customizations = customizations or {}
        merged = {**template, **customizations}
        for key in LIST_FIELDS:
            merged[key] = customizations[key] if customizations.get(key) is not None else (template.get(key) or [])
        return merged
