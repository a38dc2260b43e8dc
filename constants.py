"""Shared configuration values for the compounding machine screener."""

SNAPSHOT_SCHEMA_VERSION = 1

DEFAULT_MARKET = "us"
DEFAULT_TOP_N = 25
DEFAULT_CONCURRENCY = 4
DEFAULT_DB_PATH = "sec_cache.db"
DEFAULT_TTL_DAYS = 7.0

DEFAULT_MIN_ROIC = 15.0
DEFAULT_MIN_OPERATING_MARGIN = 20.0
DEFAULT_MIN_BUYBACK_PERCENT = 2.0

# Fetch transport
REQUEST_DELAY_SECONDS = 0.25
RETRY_JITTER_SECONDS = 0.25
MAX_RETRIES = 4
REQUEST_TIMEOUT_SECONDS = 30.0
HISTORY_YEARS = 8

# Series windows
GROWTH_WINDOW = 6
FCF_GROWTH_WINDOW = 4
DIVIDEND_YIELD_YEARS = 5
QUARTERS_3Y = 13
ANNUAL_POINTS_3Y = 4

# Filters
GROWTH_PASS_RATIO = 0.8
MIN_GROWTH_INTERVALS = 3

# DCF
DCF_DEFAULT_GROWTH = 0.04
DCF_MIN_GROWTH = -0.05
DCF_MAX_GROWTH = 0.20
DCF_DISCOUNT_RATE = 0.10
DCF_TERMINAL_GROWTH = 0.025
DCF_YEARS = 10
DCF_TRAILING_POINTS = 3

PROGRESS_EVERY = 25

SP500_CSV_URL = (
    "https://raw.githubusercontent.com/datasets/s-and-p-500-companies/main/data/constituents.csv"
)
SET_TICKER_FILE = "scripts/set.txt"
SET_TICKER_SUFFIX = ".BK"
MAX_SET_TICKER_LENGTH = 10
