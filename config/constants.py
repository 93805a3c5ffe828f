"""
Centralized constants for Article Translator.
All timing and size defaults live here; Settings may override them.
"""

# ===========================================
# CHUNKING
# ===========================================
MAX_CHUNK_LENGTH = 10000              # characters per fragment
SPLIT_SEARCH_WINDOW = 100             # look-back for </p> and sentence ends
WHITESPACE_SEARCH_WINDOW = 50         # look-back for plain whitespace
BLOCK_TAGS = ("p", "h1", "h2", "h3", "h4", "h5", "h6", "div", "section", "article")

# ===========================================
# TRANSLATION
# ===========================================
DIRECT_TRANSLATION_THRESHOLD = 1000   # shorter inputs skip the job path
TRANSLATION_MODEL = "gpt-3.5-turbo"
TRANSLATION_MAX_TOKENS = 4000
TRANSLATION_TEMPERATURE = 0.3
TRANSLATION_TIMEOUT_SECONDS = 60
TRANSLATION_TARGET_LANGUAGE = "English"
CHUNK_DELAY_SECONDS = 0.5             # pause between chunks (rate limits)

# ===========================================
# JOB LIFECYCLE
# ===========================================
JOB_CLEANUP_DELAY_SECONDS = 30 * 60   # delete finished jobs after 30 minutes
JOB_MAX_AGE_SECONDS = 60 * 60         # sweep anything older than 1 hour
JOB_SWEEP_INTERVAL_SECONDS = 15 * 60  # sweep every 15 minutes

# ===========================================
# PUSH CHANNEL
# ===========================================
WEBSOCKET_HEARTBEAT = 30              # seconds between liveness pings
WS_ERROR_TRANSLATION_FAILED = "TRANSLATION_FAILED"

# ===========================================
# POLL CLIENT
# ===========================================
POLL_INTERVAL_SECONDS = 5.0
POLL_MAX_ATTEMPTS = 120               # ~10 minutes at the default interval
POLL_SLOWDOWN_AFTER = 20              # then poll on every third tick only

# ===========================================
# SCRAPING
# ===========================================
FETCH_TIMEOUT_SECONDS = 15
FETCH_MAX_REDIRECTS = 5

# ===========================================
# API / SERVER
# ===========================================
API_RATE_LIMIT = "60/minute"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5000
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

# ===========================================
# LOGGING
# ===========================================
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = ''                         # empty: console only
LOG_MAX_SIZE_MB = 10
LOG_BACKUP_COUNT = 5
