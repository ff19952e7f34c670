from typing import Optional

class IdValidator:
    """Parses numeric identifiers typed at the prompt."""

    @staticmethod
    def parse_id(raw: Optional[str]) -> Optional[int]:
        if raw is None:
            return None
        s = raw.strip()
        # plain digits with an optional leading minus
        body = s[1:] if s.startswith("-") else s
        if not (body.isascii() and body.isdigit()):
            return None
        return int(s)

class TextValidator:
    """Basic checks for free-text fields."""

    @staticmethod
    def _is_non_blank(text: Optional[str]) -> bool:
        return text is not None and bool(text.strip())

    @staticmethod
    def validate_title(title: Optional[str]) -> bool:
        return TextValidator._is_non_blank(title)

    @staticmethod
    def validate_author(author: Optional[str]) -> bool:
        # must not be digits only
        if not TextValidator._is_non_blank(author):
            return False
        return not author.strip().isdigit()

    @staticmethod
    def validate_name(name: Optional[str]) -> bool:
        return TextValidator.validate_author(name)
