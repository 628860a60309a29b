"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SCAN_WINDOW_MINUTES_BEFORE = 15
DEFAULT_GRACE_MINUTES_AFTER = 60

TOKEN_DELIMITER = "-"
TAG_LENGTH = 12

ORGANIZATION_IDENTIFIER_LENGTH = 10
DEFAULT_ORGANIZATION_IDENTIFIER = "DEFAULT"

DEFAULT_LIST_LIMIT = 500
