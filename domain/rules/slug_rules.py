import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class SlugRules:
    @staticmethod
    def slugify(value: str) -> str:
        """
        "Hello, World!" -> "hello-world". Applying it to its own output is a no-op.
        """
        normalized = unicodedata.normalize("NFKD", value or "")
        ascii_text = "".join(ch for ch in normalized if not unicodedata.combining(ch))
        lowered = ascii_text.lower().replace("'", "").replace("’", "").replace("&", " and ")
        return _NON_ALNUM.sub("-", lowered).strip("-")
