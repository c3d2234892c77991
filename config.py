"""Global configuration for the power-quality signal core."""

# Sampling configuration
SAMPLING_RATE = 3000          # Hz, device ADC rate
SYSTEM_FREQUENCY = 50.0       # Hz
HARMONIC_ORDERS = 25          # H1..H25

# ADC quantization (decimal places)
VOLTAGE_DECIMALS = 2
CURRENT_DECIMALS = 3

# Nominal electrical values
NOMINAL_VOLTAGE_RMS = 230.0   # V

# Degenerate measurement thresholds
THD_V_MIN_FUNDAMENTAL = 10.0  # V peak
THD_I_MIN_FUNDAMENTAL = 0.15  # A peak
THD_MAX_PLAUSIBLE = 100.0     # %, above this THD is treated as a measurement error
PF_MIN_APPARENT_POWER = 0.05  # VA, power factor deadband

# Synthetic noise floor for harmonic orders beyond the scenario spectrum
VOLTAGE_NOISE_FLOOR = 0.3     # V, max residual amplitude
CURRENT_NOISE_FLOOR = 0.003   # A, max residual amplitude

# Frequency plausibility window for crossing-based estimation
FREQUENCY_MIN_PLAUSIBLE = 45.0  # Hz
FREQUENCY_MAX_PLAUSIBLE = 55.0  # Hz

# Period extraction
DEFAULT_DISPLAY_PERIODS = 2

# PN-EN 50160 compliance bands
VOLTAGE_DEVIATION_LIMIT_PERCENT = 10.0
FREQUENCY_DEVIATION_LIMIT_HZ = 0.5
VOLTAGE_THD_LIMIT = 8.0

# Measurement driver
PUBLISH_INTERVAL = 3.0        # seconds between ticks
SCENARIO_ROTATION_TICKS = 10  # ticks per scenario
LOG_LEVEL = "INFO"
