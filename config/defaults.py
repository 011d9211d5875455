"""Named defaults shared by the retry and transport layers."""

INITIAL_INTERVAL_MILLIS = 500
DEFAULT_MAX_INTERVAL_MILLIS = 2 * 60 * 1000
DEFAULT_BACKOFF_MULTIPLIER = 2.0
DEFAULT_MAX_RETRIES = 0
DEFAULT_MAX_ELAPSED_TIME_MILLIS = 15 * 60 * 1000

# Backoff sequences are deterministic.
DEFAULT_RANDOMIZATION_FACTOR = 0.0

UNAUTHORIZED_STATUS_CODE = 401

# Retry behaviour of clients built without an explicit policy.
CLIENT_RETRY_STATUS_CODES = (500, 503)
CLIENT_MAX_RETRIES = 4
CLIENT_MAX_INTERVAL_MILLIS = 60 * 1000

LOG_FORMATS = ("json", "console")
