"""Per-patient engine configuration."""

from dataclasses import dataclass, field

from graphene_trace.core import constants
from graphene_trace.core.config import AlertConfig, ExposureConfig, ScoringConfig
from graphene_trace.core.errors import ConfigurationError
from graphene_trace.regions.layout import RegionLayout
from graphene_trace.regions.mapper import get_aggregation
from graphene_trace.scoring.curves import create_curve


@dataclass(frozen=True)
class PatientConfig:
    """Complete configuration supplied once when a patient is admitted.

    Attributes:
        layout: Sensor region layout (fixes the grid resolution)
        exposure: Exposure tracking parameters
        scoring: Risk scoring parameters
        alerts: Alert state machine parameters
        aggregation: Region aggregation name
        smooth_sigma: Gaussian smoothing before aggregation (0 = off)
    """

    layout: RegionLayout
    exposure: ExposureConfig
    scoring: ScoringConfig
    alerts: AlertConfig
    aggregation: str
    smooth_sigma: float = field(default=0.0)

    def __post_init__(self) -> None:
        get_aggregation(self.aggregation)
        create_curve(self.scoring.curve, **dict(self.scoring.curve_params))
        if self.exposure.pressure_threshold != self.scoring.pressure_threshold:
            raise ConfigurationError(
                "exposure and scoring pressure thresholds must match, got "
                f"{self.exposure.pressure_threshold} and {self.scoring.pressure_threshold}"
            )
        if self.smooth_sigma < 0:
            raise ConfigurationError(f"smooth_sigma must be >= 0, got {self.smooth_sigma}")

    @property
    def grid_shape(self) -> tuple[int, int]:
        """Sensor grid resolution (rows, cols)."""
        return self.layout.shape


def reference_config(
    layout: RegionLayout,
    pressure_threshold: float = constants.CAPILLARY_CLOSING_PRESSURE_MMHG,
) -> PatientConfig:
    """Build a configuration from the clinical reference values.

    Reference values are placeholders pending authoritative clinical
    requirements; deployments should supply their own configuration.

    Args:
        layout: Sensor region layout
        pressure_threshold: Loading threshold in mmHg

    Returns:
        Patient configuration using ``graphene_trace.core.constants``
    """
    return PatientConfig(
        layout=layout,
        exposure=ExposureConfig(
            pressure_threshold=pressure_threshold,
            relief_confirmation_seconds=constants.RELIEF_CONFIRMATION_SECONDS,
            relief_rate=constants.RELIEF_RATE,
            max_gap_seconds=constants.MAX_SENSOR_GAP_SECONDS,
            max_accumulated_seconds=constants.MAX_ACCUMULATED_SECONDS,
        ),
        scoring=ScoringConfig(
            curve="saturating_exponential",
            saturation_seconds=constants.CLINICAL_SATURATION_SECONDS,
            pressure_threshold=pressure_threshold,
            pressure_gain=constants.PRESSURE_GAIN,
            max_pressure_factor=constants.MAX_PRESSURE_FACTOR,
            curve_params={"steepness": constants.SATURATION_STEEPNESS},
        ),
        alerts=AlertConfig(
            warning_threshold=constants.WARNING_THRESHOLD,
            critical_threshold=constants.CRITICAL_THRESHOLD,
            hysteresis_margin=constants.HYSTERESIS_MARGIN,
            warning_dwell_seconds=constants.WARNING_DWELL_SECONDS,
            critical_dwell_seconds=constants.CRITICAL_DWELL_SECONDS,
            clearing_confirmation_seconds=constants.CLEARING_CONFIRMATION_SECONDS,
        ),
        aggregation="max",
        smooth_sigma=0.0,
    )
