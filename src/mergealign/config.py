"""
Configuration management for .mergealign.yaml files.

Simple read/write/validate operations; a missing file means defaults.
"""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import ValidationError

from .core import MergeAlignError
from .schema import MergeAlignConfig


class ConfigError(MergeAlignError):
    """Base exception for configuration operations."""

    pass


class ConfigNotFoundError(ConfigError):
    """Raised when the config file doesn't exist."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when config validation fails."""

    pass


class ConfigManager:
    """Manages .mergealign.yaml operations."""

    CONFIG_NAME = ".mergealign.yaml"

    def __init__(self, root: Path, config_path: Optional[Path] = None):
        """Initialize with a project root, or an explicit config file path."""
        self.root = Path(root).resolve()
        self.config_path = (
            Path(config_path).resolve() if config_path else self.root / self.CONFIG_NAME
        )

    def exists(self) -> bool:
        """Check if config file exists."""
        return self.config_path.exists()

    def read(self) -> MergeAlignConfig:
        """Read and parse config file."""
        if not self.exists():
            raise ConfigNotFoundError(f"Config not found at {self.config_path}")

        try:
            content = self.config_path.read_text(encoding="utf-8")
            data = yaml.safe_load(content) or {}
            return MergeAlignConfig.model_validate(data)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in config: {e}")
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid config schema: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to read config: {e}")

    def load(self) -> MergeAlignConfig:
        """Read the config file, or return defaults when there is none."""
        if not self.exists():
            return MergeAlignConfig()
        return self.read()

    def write(self, config: MergeAlignConfig) -> None:
        """Write config with atomic operation."""
        temp_path = self.config_path.with_suffix(".tmp")
        try:
            validation_errors = self.validate(config)
            if validation_errors:
                raise ConfigValidationError(f"Validation errors: {validation_errors}")

            data = config.model_dump(exclude_none=True)
            content = yaml.dump(data, default_flow_style=False, sort_keys=False)

            temp_path.write_text(content, encoding="utf-8")
            temp_path.rename(self.config_path)

        except ConfigError:
            raise
        except Exception as e:
            if temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to write config: {e}")

    def validate(self, config: MergeAlignConfig) -> List[str]:
        """Validate config and return list of error messages."""
        errors = []

        try:
            MergeAlignConfig.model_validate(config.model_dump())
        except ValidationError as e:
            for error in e.errors():
                errors.append(
                    f"{'.'.join(str(x) for x in error['loc'])}: {error['msg']}"
                )

        labels = config.labels
        names = [labels.incoming, labels.current, labels.base]
        if any(not n.strip() for n in names):
            errors.append("labels: names cannot be empty")
        elif len(set(names)) != len(names):
            errors.append(f"labels: names must be distinct: {names}")

        return errors
