"""User settings model - no I/O dependencies."""

from dataclasses import dataclass, fields, replace

from .week import normalize_locale

# Stored key -> dataclass attribute
_KEYS = {
    "theme": "theme",
    "fontSize": "font_size",
    "showPreview": "show_preview",
    "buttonSize": "button_size",
    "language": "language",
    "autoSave": "auto_save",
}


@dataclass(frozen=True)
class Settings:
    """Appearance and behaviour preferences."""

    theme: str = "system"
    font_size: int = 14
    show_preview: bool = True
    button_size: str = "small"
    language: str = "pt"
    auto_save: bool = True

    def to_dict(self) -> dict:
        return {key: getattr(self, attr) for key, attr in _KEYS.items()}

    @classmethod
    def from_dict(cls, data: dict | None) -> "Settings":
        """Stored values merged over the defaults; unknown keys are ignored."""
        if not data:
            return cls()
        values = {attr: data[key] for key, attr in _KEYS.items() if key in data}
        settings = cls(**values)
        return replace(settings, language=normalize_locale(settings.language))

    def updated(self, **changes) -> "Settings":
        allowed = {f.name for f in fields(self)}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
        if "language" in changes:
            changes["language"] = normalize_locale(changes["language"])
        return replace(self, **changes)
