"""
Recovery configuration.

Settings for field recovery can be given in code or loaded from YAML:

    recovery:
      method: global_l2       # greville | global_l2 | discrete_l2 | scr
      n_gauss: 4              # points per direction, continuous L2 projection
      max_gauss_points: 10    # largest Gauss rule available to the solver

The top-level `recovery` key is optional; a flat mapping with the same
keys is accepted as well. Unknown keys and invalid values raise
ConfigurationError.

n_gauss is not checked against max_gauss_points here. Asking for a rule
the table does not have is reported by the projection itself
(QuadratureUnavailable).
"""

import enum
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, Union

import yaml

from ..errors import ConfigurationError
from ..quadrature.gauss import GaussQuadratureTable


_LOGGER = logging.getLogger(__name__)


class ProjectionMethod(enum.Enum):
    """Available recovery methods."""
    GREVILLE = "greville"
    GLOBAL_L2 = "global_l2"
    DISCRETE_L2 = "discrete_l2"
    SCR = "scr"


@dataclass
class RecoveryConfig:
    """
    Settings for field recovery.

    Attributes:
        method: Recovery method used by recover()
        n_gauss: Gauss points per direction for continuous L2 projection
        max_gauss_points: Largest rule of the quadrature table
    """
    method: ProjectionMethod = ProjectionMethod.GLOBAL_L2
    n_gauss: int = 4
    max_gauss_points: int = 10

    def __post_init__(self):
        if not isinstance(self.method, ProjectionMethod):
            try:
                self.method = ProjectionMethod(str(self.method).lower())
            except ValueError:
                choices = ", ".join(m.value for m in ProjectionMethod)
                raise ConfigurationError(
                    f"Unknown recovery method '{self.method}' (choose from {choices})"
                )
        for name in ("n_gauss", "max_gauss_points"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecoveryConfig':
        """
        Create a configuration from a mapping.

        Parameters:
            data: Mapping with optional `recovery` section

        Returns:
            RecoveryConfig
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(data).__name__}")

        section = data.get("recovery", data)
        if not isinstance(section, dict):
            raise ConfigurationError("'recovery' section must be a mapping")

        known = {"method", "n_gauss", "max_gauss_points"}
        unknown = set(section) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")

        return cls(**section)

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping suitable for YAML output."""
        data = asdict(self)
        data["method"] = self.method.value
        return {"recovery": data}

    def quadrature_table(self) -> GaussQuadratureTable:
        """Gauss table limited to max_gauss_points."""
        return GaussQuadratureTable(max_points=self.max_gauss_points)


def load_config(filename: Union[str, Path]) -> RecoveryConfig:
    """
    Load recovery configuration from a YAML file.

    Parameters:
        filename: Path to the YAML file

    Returns:
        RecoveryConfig (defaults for an empty file)
    """
    path = Path(filename)
    try:
        with path.open("r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}")

    config = RecoveryConfig.from_dict(data)
    _LOGGER.debug("Loaded %s from %s", config, path)
    return config


def save_config(config: RecoveryConfig, filename: Union[str, Path]) -> None:
    """
    Write a configuration as YAML.

    Parameters:
        config: Configuration to write
        filename: Output path
    """
    with Path(filename).open("w") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False)
