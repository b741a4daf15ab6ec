"""
Service configuration.

Values are resolved in three layers: dataclass defaults, an optional YAML
file named by ``JSX_PDF_CONFIG``, then ``JSX_PDF_<FIELD>`` environment
variables.
"""

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "JSX_PDF_"
CONFIG_PATH_ENV = "JSX_PDF_CONFIG"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ServiceConfig:
    """Configuration for the HTTP service and rendering pipeline."""

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 3000
    max_body_size: int = 10 * 1024 * 1024

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    log_file: Optional[str] = None

    # Stylesheet inlined into every document (None = bundled CSS)
    css_path: Optional[str] = None

    # Browser settings
    headless: bool = True
    browser_args: List[str] = field(default_factory=list)
    pool_size: int = 0  # 0 = one browser per request
    launch_timeout_ms: int = 30000
    navigation_timeout_ms: int = 30000
    pdf_timeout_ms: int = 30000

    # Dynamic template sandbox
    script_timeout_ms: int = 2000
    script_max_memory: int = 64 * 1024 * 1024
    max_template_size: int = 256 * 1024
    max_tree_depth: int = 256
    max_tree_nodes: int = 50_000

    # Render compile/render failures as a PDF page instead of an HTTP error
    dynamic_error_fallback: bool = False

    def __post_init__(self):
        if self.pool_size < 0:
            raise ValueError(f"pool_size must be >= 0, got {self.pool_size}")
        for name in ("launch_timeout_ms", "navigation_timeout_ms", "pdf_timeout_ms", "script_timeout_ms"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")


def _coerce(raw: str, current: Any, name: str) -> Any:
    """Convert an environment string to the type of the field's default."""
    if isinstance(current, bool):
        value = raw.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise ValueError(f"Invalid boolean for {ENV_PREFIX}{name.upper()}: {raw!r}")
    if isinstance(current, int):
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"Invalid integer for {ENV_PREFIX}{name.upper()}: {raw!r}")
    if isinstance(current, list):
        return [item.strip() for item in raw.split(",") if item.strip()]
    return raw


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in config {path}: {e}")
        raise ValueError(f"Invalid configuration file: {e}")

    if not isinstance(raw_config, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return raw_config


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServiceConfig:
    """
    Build a ServiceConfig from defaults, YAML and the environment.

    Args:
        config_path: YAML file; defaults to ``$JSX_PDF_CONFIG`` when set
        environ: Environment mapping; defaults to ``os.environ``

    Returns:
        Resolved configuration

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If a value is invalid or a key is unknown
    """
    environ = os.environ if environ is None else environ
    known = {f.name: f for f in dataclasses.fields(ServiceConfig)}
    defaults = ServiceConfig()
    values: Dict[str, Any] = {}

    path = config_path or environ.get(CONFIG_PATH_ENV)
    if path:
        file_values = _load_yaml(Path(path))
        unknown = sorted(set(file_values) - set(known))
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        values.update(file_values)
        logger.debug(f"Loaded configuration from {path}")

    for name in known:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None:
            values[name] = _coerce(raw, values.get(name, getattr(defaults, name)), name)

    return ServiceConfig(**values)


_config: Optional[ServiceConfig] = None


def get_config() -> ServiceConfig:
    """Process-wide configuration, loaded on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached configuration."""
    global _config
    _config = None
