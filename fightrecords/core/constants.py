"""Global constants for the fightrecords application."""

# Firestore limits
FIRESTORE_BATCH_LIMIT = 500
FIRESTORE_MAX_DOC_ID_LENGTH = 1500

# Pipeline defaults
EVENTS_PAGE_SIZE = 500
SKIPPED_SAMPLE_SIZE = 10
PROGRESS_CHANNEL_SIZE = 1000

# Collection names
EVENTS_COLLECTION = "events"
RESULTS_JSON_COLLECTION = "resultsJson"
RESULTS_JSON_DOCUMENT = "fighters"
LEGACY_RESULTS_COLLECTION = "results2"
FIGHTER_RECORDS_PREFIX = "records_pmt_"
GYM_RECORDS_PREFIX = "records_pmt_gyms_"

# Time window label that scans every event regardless of date
ALL_TIME_LABEL = "all"

# Bout types
BOUT_TYPE_TOURNAMENT = "tournament"
BOUT_TYPE_REGULAR = "regular"

# Skill categories recorded per fight
SKILL_FIELDS = (
    "bodykick",
    "boxing",
    "clinch",
    "defense",
    "footwork",
    "headkick",
    "kicks",
    "knees",
    "legkick",
    "ringawareness",
)

# Bracket constants
BOUT_NUMBER_UNKNOWN = "TBD"

# Which rollups a run rebuilds
RECORD_KIND_FIGHTERS = "fighters"
RECORD_KIND_GYMS = "gyms"
RECORD_KIND_ALL = "all"
RECORD_KINDS = (RECORD_KIND_FIGHTERS, RECORD_KIND_GYMS, RECORD_KIND_ALL)
