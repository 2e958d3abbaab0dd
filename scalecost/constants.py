"""Time and scaling constants shared by the cost engine."""

# ~24h x 30.4 days. Fixed-size runtimes are billed on this many hours.
HOURS_PER_MONTH = 730

DAYS_OF_WEEK = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
HOURS_PER_DAY = 24
HOURS_PER_WEEK = len(DAYS_OF_WEEK) * HOURS_PER_DAY  # 168

# Each schedule hour recurs this many times per month (~4.345).
WEEKS_PER_MONTH = HOURS_PER_MONTH / HOURS_PER_WEEK

# Load levels: 0 = baseline, 1..5 = scaling intensity
MAX_LOAD_LEVEL = 5
# From this level on, a scaling profile runs on its max flavor
MAX_FLAVOR_LOAD_LEVEL = 3

BASELINE_PROFILE_ID = "baseline"
DEFAULT_PROFILE_ID = "default"
