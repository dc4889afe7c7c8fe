"""Session configuration: color scheme and animation toggle.

Stored as gensuite.config.json in the working directory. Unknown keys are
ignored, missing keys take defaults, and a missing or corrupt file yields
the default config.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

CONFIG_FILENAME = "gensuite.config.json"


@dataclass(frozen=True)
class ColorScheme:
    """Rich styles for one named preset."""

    label: str
    gradient: tuple[str, str]
    primary: str
    secondary: str
    accent: str
    prime_a: str
    prime_b: str


COLOR_SCHEMES: dict[str, ColorScheme] = {
    "neon": ColorScheme(
        label="Neon",
        gradient=("#00e5ff", "#00c853"),
        primary="#00e5ff",
        secondary="#00c853",
        accent="#b2ff59",
        prime_a="#00e5ff",
        prime_b="#00c853",
    ),
    "sunset": ColorScheme(
        label="Sunset",
        gradient=("#ff8f00", "#ff1744"),
        primary="#ff8f00",
        secondary="#ff1744",
        accent="#ffd180",
        prime_a="#ff8f00",
        prime_b="#ff1744",
    ),
    "ocean": ColorScheme(
        label="Ocean",
        gradient=("#00b0ff", "#00e676"),
        primary="#00b0ff",
        secondary="#00e676",
        accent="#80d8ff",
        prime_a="#00b0ff",
        prime_b="#00e676",
    ),
}

DEFAULT_SCHEME = "neon"


def default_config_path() -> Path:
    return Path.cwd() / CONFIG_FILENAME


@dataclass(frozen=True)
class Config:
    """Immutable settings value; the settings flow swaps in a new one."""

    color_scheme: str = DEFAULT_SCHEME
    animations: bool = True

    @property
    def scheme(self) -> ColorScheme:
        return COLOR_SCHEMES.get(self.color_scheme, COLOR_SCHEMES[DEFAULT_SCHEME])

    def with_scheme(self, name: str) -> Config:
        if name not in COLOR_SCHEMES:
            raise ValueError(f"Unknown color scheme: {name}")
        return replace(self, color_scheme=name)

    def toggled_animations(self) -> Config:
        return replace(self, animations=not self.animations)

    def to_dict(self) -> dict:
        return {"colorScheme": self.color_scheme, "animations": self.animations}

    @classmethod
    def from_dict(cls, d: dict) -> Config:
        scheme = d.get("colorScheme", DEFAULT_SCHEME)
        if scheme not in COLOR_SCHEMES:
            scheme = DEFAULT_SCHEME
        animations = d.get("animations", True)
        if not isinstance(animations, bool):
            animations = True
        return cls(color_scheme=scheme, animations=animations)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Config:
        """Read the config file, falling back to defaults."""
        p = path or default_config_path()
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (FileNotFoundError, json.JSONDecodeError, OSError):
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls.from_dict(data)

    def save(self, path: Optional[Path] = None) -> None:
        p = path or default_config_path()
        p.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
