"""
PeWalk Configuration Management
================================

Centralized configuration for the PeWalk toolkit using Python dataclasses
and TOML-based persistence.

Two tables are recognised in the TOML file::

    [global]
    log_level = "DEBUG"
    log_file = "logs/pewalk.log"
    log_json = true

    [pewalk]
    show_data_directories = true
    output_format = "json"

References:
    - Wiggins, A. (2011). The Twelve-Factor App. https://12factor.net/
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"

_OUTPUT_FORMATS: tuple[str, ...] = ("table", "json")


# ========================== Tool-Specific Config ===========================


@dataclass(frozen=False, slots=True)
class PeWalkConfig:
    """Configuration for the PE header walker and its presentation layer.

    None of these settings alter what is decoded; they only control how
    the decoded records are shown.
    """

    show_data_directories: bool = False
    name_encoding: str = "utf-8"
    # Display cap only; the walker always decodes every declared section.
    max_display_sections: int = 256
    output_format: str = "table"

    def __post_init__(self) -> None:
        if self.output_format not in _OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {_OUTPUT_FORMATS}, "
                f"got {self.output_format!r}"
            )
        if self.max_display_sections < 0:
            raise ValueError("max_display_sections must be >= 0")


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Global logging and output settings."""

    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_json: bool = False
    output_dir: str = "output"


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class AppConfig:
    """Master configuration aggregating global and tool settings.

    Usage:
        >>> config = AppConfig.load()                  # from default path
        >>> config = AppConfig.load("custom.toml")     # from custom path
        >>> config.pewalk.output_format
        'table'
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    pewalk: PeWalkConfig = field(default_factory=PeWalkConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> AppConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``config.toml`` in the
        project root.  Missing keys fall back to dataclass defaults.

        Args:
            path: Filesystem path to a TOML configuration file.

        Returns:
            A fully-populated :class:`AppConfig` instance.

        Raises:
            FileNotFoundError: If *path* was given explicitly and does not exist.
            tomllib.TOMLDecodeError: If the file is not valid TOML.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            pewalk=cls._build_section(PeWalkConfig, raw.get("pewalk", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the configuration tree to a plain dictionary."""
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate dataclass *cls* using only the keys it declares.

        Unknown keys are ignored so newer config files keep loading.
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


# ========================= Module-level convenience ========================

def get_config(path: str | Path | None = None) -> AppConfig:
    """Module-level convenience wrapper around :meth:`AppConfig.load`.

    Caches the result so that repeated calls share one instance.
    """
    if not hasattr(get_config, "_cached") or path is not None:
        get_config._cached = AppConfig.load(path)  # type: ignore[attr-defined]
    return get_config._cached  # type: ignore[attr-defined]
