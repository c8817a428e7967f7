import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.errors import ApiError, BadRequestError, NotFoundError
from domain.rules.character_rules import CharacterRules

logger = logging.getLogger(__name__)


class TemplateService:
    """Character presets read from a JSON file on disk."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or settings.CHARACTER_TEMPLATES_PATH)

    def load(self) -> Dict[str, Dict[str, Any]]:
        try:
            with self.path.open(encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error loading templates from {self.path}: {e}", exc_info=True)
            raise ApiError("Failed to load templates") from e

    def get_templates(self, template_type: Optional[str] = None) -> Dict[str, Any]:
        templates = self.load()
        if template_type and template_type in templates:
            return templates[template_type]
        return templates

    def instantiate(self, template_type: Optional[str], customizations: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if not template_type:
            raise BadRequestError("Template type is required")
        templates = self.load()
        if template_type not in templates:
            raise NotFoundError("Template type not found")
        return CharacterRules.merge_template(templates[template_type], customizations)
