"""YAML configuration loader for patient engine configurations."""

from pathlib import Path
from typing import Any, Union

import yaml

from graphene_trace.core.config import AlertConfig, ExposureConfig, ScoringConfig
from graphene_trace.core.errors import ConfigurationError
from graphene_trace.core.types import RegionDefinition
from graphene_trace.engine.config import PatientConfig
from graphene_trace.regions.layout import RegionLayout


def load_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """Load configuration dictionary from YAML file.

    Args:
        path: Path to YAML configuration file

    Returns:
        Parsed configuration dictionary
    """
    path = Path(path)
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} does not contain a configuration mapping")
    return data


def _require(config: dict, key: str, section: str) -> Any:
    if key not in config:
        raise ConfigurationError(f"missing '{key}' in '{section}' configuration")
    return config[key]


def _region_from_config(name: str, rows: int, cols: int, region: dict) -> RegionDefinition:
    """Create a region from one of its three YAML forms.

    - ``cells``: explicit [[row, col], ...] list
    - ``row_range``/``col_range``: fractional bands of the mat
    - ``rows``/``cols``: half-open index ranges
    """
    if "cells" in region:
        cells = tuple((int(r), int(c)) for r, c in region["cells"])
        return RegionDefinition(name, cells)

    if "row_range" in region:
        r0, r1 = region["row_range"]
        c0, c1 = region.get("col_range", (0.0, 1.0))
        band = RegionLayout.from_row_bands(rows, cols, {name: (r0, r1, c0, c1)})
        return band.regions[0]

    if "rows" in region:
        r0, r1 = region["rows"]
        c0, c1 = region.get("cols", (0, cols))
        cells = tuple((r, c) for r in range(int(r0), int(r1)) for c in range(int(c0), int(c1)))
        return RegionDefinition(name, cells)

    raise ConfigurationError(
        f"region '{name}' needs one of 'cells', 'row_range' or 'rows'"
    )


def layout_from_config(config: dict[str, Any]) -> RegionLayout:
    """Create region layout from configuration dictionary.

    Args:
        config: Layout section with rows, cols and regions (or ``preset: body``)

    Returns:
        Validated region layout
    """
    rows = int(_require(config, "rows", "layout"))
    cols = int(_require(config, "cols", "layout"))

    if config.get("preset") == "body":
        return RegionLayout.body_layout(rows, cols)

    regions_config = _require(config, "regions", "layout")
    if not isinstance(regions_config, dict):
        raise ConfigurationError("layout regions must be a mapping of name -> definition")

    regions = [
        _region_from_config(name, rows, cols, region or {})
        for name, region in regions_config.items()
    ]
    return RegionLayout(rows, cols, regions, name=config.get("name", ""))


def config_from_dict(config: dict[str, Any]) -> PatientConfig:
    """Create patient configuration from a configuration dictionary.

    Args:
        config: Dictionary with layout, exposure, scoring and alerts sections

    Returns:
        Validated patient configuration
    """
    try:
        return PatientConfig(
            layout=layout_from_config(_require(config, "layout", "root")),
            exposure=ExposureConfig(**_require(config, "exposure", "root")),
            scoring=ScoringConfig(**_require(config, "scoring", "root")),
            alerts=AlertConfig(**_require(config, "alerts", "root")),
            aggregation=_require(config, "aggregation", "root"),
            smooth_sigma=float(config.get("smooth_sigma", 0.0)),
        )
    except TypeError as e:
        raise ConfigurationError(f"invalid configuration: {e}") from e


def load_config(path: Union[str, Path]) -> PatientConfig:
    """Load patient configuration from YAML file.

    Args:
        path: Path to configuration file

    Returns:
        Validated patient configuration
    """
    return config_from_dict(load_config_file(path))


def _plain(value: Any) -> Any:
    """Convert tuples to lists so the YAML stays safe_load-able."""
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def save_config(config: PatientConfig, path: Union[str, Path]) -> None:
    """Save patient configuration to YAML file.

    Regions are written as explicit cell lists so any layout round-trips.

    Args:
        config: Patient configuration to save
        path: Output file path
    """
    layout = config.layout
    data = {
        "layout": {
            "name": layout.name,
            "rows": layout.rows,
            "cols": layout.cols,
            "regions": {
                region.name: {"cells": [list(cell) for cell in region.cells]}
                for region in layout
            },
        },
        "exposure": {
            "pressure_threshold": config.exposure.pressure_threshold,
            "relief_confirmation_seconds": config.exposure.relief_confirmation_seconds,
            "relief_rate": config.exposure.relief_rate,
            "max_gap_seconds": config.exposure.max_gap_seconds,
            "max_accumulated_seconds": config.exposure.max_accumulated_seconds,
        },
        "scoring": {
            "curve": config.scoring.curve,
            "saturation_seconds": config.scoring.saturation_seconds,
            "pressure_threshold": config.scoring.pressure_threshold,
            "pressure_gain": config.scoring.pressure_gain,
            "max_pressure_factor": config.scoring.max_pressure_factor,
            "curve_params": _plain(config.scoring.curve_params),
        },
        "alerts": {
            "warning_threshold": config.alerts.warning_threshold,
            "critical_threshold": config.alerts.critical_threshold,
            "hysteresis_margin": config.alerts.hysteresis_margin,
            "warning_dwell_seconds": config.alerts.warning_dwell_seconds,
            "critical_dwell_seconds": config.alerts.critical_dwell_seconds,
            "clearing_confirmation_seconds": config.alerts.clearing_confirmation_seconds,
        },
        "aggregation": config.aggregation,
        "smooth_sigma": config.smooth_sigma,
    }

    path = Path(path)
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
