"""
Config loader for the hand pose gesture engine.
Loads YAML configuration with dataclass validation.
"""
from dataclasses import dataclass, field, fields
import logging
from pathlib import Path
from typing import List, Optional
import yaml

logger = logging.getLogger(__name__)


@dataclass
class ClassifierConfig:
    # Non-thumb curl ratio (tip-to-wrist / knuckle-to-wrist)
    extend_threshold: float = 1.15
    curl_threshold: float = 1.10
    # Thumb ratio (tip-to-palm / wrist-to-palm)
    thumb_extend_threshold: float = 0.95
    thumb_curl_threshold: float = 0.75
    pinch_distance: float = 0.025    # metres between thumb tip and fingertip
    spread_threshold: float = 0.04   # metres between index and middle tips (V sign)
    min_reference_distance: float = 0.001  # below this a ratio falls back to 1.0

    def __post_init__(self):
        if self.curl_threshold > self.extend_threshold:
            raise ValueError(
                f"curl_threshold ({self.curl_threshold}) must not exceed "
                f"extend_threshold ({self.extend_threshold})"
            )
        if self.thumb_curl_threshold > self.thumb_extend_threshold:
            raise ValueError(
                f"thumb_curl_threshold ({self.thumb_curl_threshold}) must not exceed "
                f"thumb_extend_threshold ({self.thumb_extend_threshold})"
            )


@dataclass
class ThrowConfig:
    buffer_size: int = 15
    min_samples: int = 5          # also the velocity window
    speed_threshold: float = 1.5  # m/s
    cooldown: float = 0.5         # seconds between throws of one hand
    min_time_delta: float = 0.001

    def __post_init__(self):
        if self.min_samples < 2:
            raise ValueError("min_samples must be at least 2")
        if self.min_samples > self.buffer_size:
            raise ValueError(
                f"min_samples ({self.min_samples}) must not exceed "
                f"buffer_size ({self.buffer_size})"
            )


@dataclass
class ProjectileConfig:
    launch_multiplier: float = 1.2
    gravity: List[float] = field(default_factory=lambda: [0.0, -4.0, 0.0])
    lifetime: float = 3.0
    shrink: float = 0.8       # fraction of size lost over the lifetime
    min_scale: float = 0.1
    orb_offset: float = 0.1   # metres from the palm, along the palm-inward normal

    def __post_init__(self):
        if self.lifetime <= 0:
            raise ValueError(f"lifetime must be positive, got {self.lifetime}")
        if len(self.gravity) != 3:
            raise ValueError(f"gravity must have 3 components, got {self.gravity}")


@dataclass
class EngineConfig:
    tick_rate_hz: float = 90.0


@dataclass
class DisplayConfig:
    show_joints: bool = True


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


@dataclass
class Config:
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    throw: ThrowConfig = field(default_factory=ThrowConfig)
    projectile: ProjectileConfig = field(default_factory=ProjectileConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _build_section(name: str, cls, data):
    """
    Build one config section from its YAML mapping.

    Keys the section does not define are logged and dropped, so an old
    config file keeps loading after a setting is renamed.
    """
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ValueError(f"Config section '{name}' must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown keys in config section '%s': %s", name, ", ".join(unknown))
    return cls(**{k: v for k, v in data.items() if k in known})


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses config.yaml in the
                    project root. A missing file yields the defaults.

    Returns:
        Config with every section filled in.

    Raises:
        ValueError: If the file is not a mapping of sections, or a section
                    holds inconsistent values.
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return Config()

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a mapping of config sections")

    sections = {
        section.name: _build_section(section.name, section.type, data.get(section.name))
        for section in fields(Config)
    }
    unknown = sorted(set(data) - set(sections))
    if unknown:
        logger.warning("Ignoring unknown config sections: %s", ", ".join(unknown))
    return Config(**sections)
