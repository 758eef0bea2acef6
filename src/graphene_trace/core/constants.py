"""Clinical reference values and unit conversions for the risk engine."""

# Unit conversion
MMHG_TO_PA = 133.322

# Pressure thresholds (medical reference values, mmHg)
# Capillary closing pressure ~32 mmHg = 4266 Pa
CAPILLARY_CLOSING_PRESSURE_MMHG = 32.0
# High risk threshold ~70 mmHg = 9333 Pa
HIGH_RISK_PRESSURE_MMHG = 70.0

# Exposure tracking (seconds)
CLINICAL_SATURATION_SECONDS = 2 * 60 * 60  # 2 hour repositioning interval
RELIEF_CONFIRMATION_SECONDS = 60.0
RELIEF_RATE = 1.0  # accumulated seconds removed per second of relief
MAX_SENSOR_GAP_SECONDS = 30.0
MAX_ACCUMULATED_SECONDS = 24 * 60 * 60

# Risk scoring
RISK_SCORE_MIN = 0.0
RISK_SCORE_MAX = 100.0
PRESSURE_GAIN = 1.0
MAX_PRESSURE_FACTOR = 4.0
SATURATION_STEEPNESS = 3.0

# Alert thresholds (risk score units)
WARNING_THRESHOLD = 40.0
CRITICAL_THRESHOLD = 75.0
HYSTERESIS_MARGIN = 5.0
WARNING_DWELL_SECONDS = 10.0
CRITICAL_DWELL_SECONDS = 10.0
CLEARING_CONFIRMATION_SECONDS = 120.0

# e-textile sensor mat resolution (rows along the body, cols across)
DEFAULT_GRID_ROWS = 64
DEFAULT_GRID_COLS = 27

# Body region row ranges (as fractions of sensor length, head=0)
BODY_REGION_ROWS = {
    "head": (0.0, 0.12),
    "shoulders": (0.12, 0.25),
    "upper_back": (0.25, 0.40),
    "lower_back": (0.40, 0.52),
    "sacrum": (0.52, 0.60),
    "hips": (0.60, 0.70),
    "thighs": (0.70, 0.85),
    "calves": (0.85, 0.95),
    "heels": (0.95, 1.0),
}
