# fabexport/config.py

AGENT_VERSION                       = "2.1.0"
SCHEMA_VERSION                      = 2

GEM_ORIGIN                          = "https://gem.fabtcg.com"
HISTORY_PATH                        = "/profile/history/"
PLAYER_PATH                         = "/profile/player/"
REPORT_PATH_MARKER                  = "/profile/report/"

FABSTATS_IMPORT_URL                 = "https://fabstats.netlify.app/import"
FULL_EXPORT_HASH_KEY                = "ext"
QUICK_SYNC_HASH_KEY                 = "quickext"
MAX_ENCODED_URL_PAYLOAD             = 1_000_000     # Encoded payloads at or above this size fall back to file download

PAGE_BATCH_SIZE                     = 3             # History pages fetched concurrently per batch
REQUEST_TIMEOUT_MS                  = 30_000        # Playwright request timeout per fetch

# Quick Sync: each history page holds ~25 events, "All" (0 pages) means unlimited
SYNC_OPTIONS = (
    {"label": "25", "pages": 1},
    {"label": "50", "pages": 2},
    {"label": "100", "pages": 4},
    {"label": "All", "pages": 0},
)

DEFAULT_STORAGE_STATE_PATH          = "storage_state.json"
DEFAULT_PREFERENCES_PATH            = "data/preferences.json"
DEFAULT_DOWNLOAD_DIR                = "data/exports"

NO_EVENTS_MESSAGE                   = "No events with match results found on your history page."
NO_MATCHES_MESSAGE                  = "No matches found. Make sure you're on your GEM History page with events listed."
