"""
Engine Settings

Typed view over the configuration file. Every key is optional:

    engine:
      working_dir: ~/src/project
      dry_run: false
      sandbox: false
    matching:
      tiers: [exact, dedent, whitespace, tokens, trim]
    grammars:
      extensions: {".gotmpl": go}
      disabled: [python]
    autogenerated:
      markers: {go: ["\\nfunc bindataRead("]}
      header_phrases: [generate, do not edit, export by]
    files:
      file_mode: "0600"
      dir_mode: "0700"
    logging:
      level: INFO
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from patchvision.core.autogen import DEFAULT_HEADER_PHRASES
from patchvision.core.match_ladder import MatchTier
from patchvision.services.config_service import ConfigService
from patchvision.services.file_service import DEFAULT_DIR_MODE, DEFAULT_FILE_MODE

logger = logging.getLogger(__name__)

# Global config service instance
_config_service: Optional[ConfigService] = None


def _get_config_service(config_path: Optional[Union[str, Path]] = None) -> ConfigService:
    """Get or create global config service instance."""
    global _config_service
    if _config_service is None or config_path is not None:
        _config_service = ConfigService(config_path=config_path)
    return _config_service


def parse_mode(value: Any, default: int) -> int:
    """Accept 0o600, 384 or "0600"/"600" and return the integer mode."""
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"invalid file mode: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text.startswith("0o"):
            text = text[2:]
        try:
            return int(text, 8)
        except ValueError:
            pass
    raise ValueError(f"invalid file mode: {value!r}")


@dataclass
class EngineSettings:
    working_dir: Optional[str] = None
    dry_run: bool = False
    sandbox: bool = False
    tiers: Tuple[MatchTier, ...] = tuple(MatchTier)
    grammar_extensions: Dict[str, str] = field(default_factory=dict)
    disabled_grammars: List[str] = field(default_factory=list)
    generated_markers: Dict[str, List[str]] = field(default_factory=dict)
    header_phrases: Tuple[str, ...] = DEFAULT_HEADER_PHRASES
    file_mode: int = DEFAULT_FILE_MODE
    dir_mode: int = DEFAULT_DIR_MODE
    log_level: str = "WARNING"

    @classmethod
    def from_config(cls, config: ConfigService) -> "EngineSettings":
        defaults = cls()

        raw_tiers = config.get("matching.tiers")
        if raw_tiers is None:
            tiers = defaults.tiers
        else:
            try:
                enabled = {MatchTier(str(t).lower()) for t in raw_tiers}
            except ValueError as e:
                raise ValueError(
                    f"matching.tiers: {e}; expected any of {[t.value for t in MatchTier]}"
                ) from e
            tiers = tuple(t for t in MatchTier if t in enabled)

        markers = {
            name: [str(m) for m in values]
            for name, values in (config.get("autogenerated.markers") or {}).items()
        }

        return cls(
            working_dir=config.get("engine.working_dir", defaults.working_dir),
            dry_run=bool(config.get("engine.dry_run", defaults.dry_run)),
            sandbox=bool(config.get("engine.sandbox", defaults.sandbox)),
            tiers=tiers,
            grammar_extensions=dict(config.get("grammars.extensions") or {}),
            disabled_grammars=list(config.get("grammars.disabled") or []),
            generated_markers=markers,
            header_phrases=tuple(config.get("autogenerated.header_phrases") or defaults.header_phrases),
            file_mode=parse_mode(config.get("files.file_mode"), DEFAULT_FILE_MODE),
            dir_mode=parse_mode(config.get("files.dir_mode"), DEFAULT_DIR_MODE),
            log_level=str(config.get("logging.level", defaults.log_level)).upper(),
        )


def load_settings(config_path: Optional[Union[str, Path]] = None) -> EngineSettings:
    """
    Load EngineSettings from the config file.

    Lookup order: config_path, $PATCHVISION_CONFIG, ~/.patchvision/config.json.
    A missing file yields the defaults.
    """
    service = _get_config_service(config_path)
    if config_path is not None and not service.config_path.exists():
        raise FileNotFoundError(f"Config file not found at: {service.config_path}")
    return EngineSettings.from_config(service)
