"""
Repsheet Configuration Constants
Centralized constants for key layout, retention defaults and logging
"""

# Connection defaults
DEFAULT_REDIS_HOST = 'localhost'
DEFAULT_REDIS_PORT = 6379
DEFAULT_REDIS_DB = 0
DEFAULT_CONNECT_TIMEOUT_MS = 10000  # used when a non-positive timeout is given
DEFAULT_CONNECT_RETRIES = 0
MAX_BACKOFF_SECONDS = 8

# Stored flag value; anything else reads as "not set"
FLAG_VALUE = 'true'

# Reasons longer than this are truncated before they are stored
MAX_REASON_LENGTH = 1024

# Placeholder for absent request-history fields
MISSING_FIELD = '-'
RECORD_SEPARATOR = ', '

# Retention defaults
DEFAULT_MAX_HISTORY_LENGTH = 100
DEFAULT_HISTORY_TTL = 0        # 0 = no time-based expiry
DEFAULT_BLACKLIST_TTL = 86400  # 24 hours

# Logging configuration
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_LEVEL = 'INFO'

# Third-party loggers to suppress
NOISY_LOGGERS = [
    'redis',
    'redis.connection',
]
