"""
Application Configuration and Constants
=======================================

This module contains the global configuration values, constants, and defaults
used throughout the blog admin client. It is the single source of truth for:

- Backend endpoint locations
- Network and worker pool parameters
- Moderation defaults (ban reason and duration)
- Date encodings accepted from, and rendered for, the backend

Note:
    All constants use UPPER_SNAKE_CASE naming convention. Values that an
    operator may want to change per installation (URL, timeout, ban defaults)
    can also be overridden through ``blogadmin.utils.config_manager``.
"""

# ============================================================================
# APPLICATION SETTINGS
# ============================================================================

APP_NAME = "Blog Management System"

# ============================================================================
# BACKEND LOCATION
# ============================================================================
# The development backend listens on port 3000 and mounts its routes under /api.

DEFAULT_BASE_URL = "http://localhost:3000/api"

# Avatar shown for users who never uploaded one
DEFAULT_AVATAR_URL = "http://localhost:3000/uploads/avatars/default.png"

# ============================================================================
# NETWORK AND WORKER CONFIGURATION
# ============================================================================

# Connect/read timeout for every request; expiry surfaces as an Unreachable error
NETWORK_TIMEOUT_SECONDS = 30

# Number of daemon threads used for background loads and mutations.
# Four covers one concurrent load per resource kind.
MAX_WORKERS = 4

# ============================================================================
# MODERATION DEFAULTS
# ============================================================================

DEFAULT_BAN_REASON = "Delete by admin"
DEFAULT_BAN_DURATION_HOURS = 100

# Substring of the server's 400 message when deleting the only remaining admin
LAST_ADMIN_MARKER = "Cannot delete the last admin"

# ============================================================================
# DATE ENCODINGS
# ============================================================================
# The backend renders most timestamps with a zh-CN locale ("2025/1/1 13:38:34");
# others come through as ISO-8601. strptime accepts unpadded month/day for %m/%d.

LOCALE_DATETIME_FORMAT = "%Y/%m/%d %H:%M:%S"
ISO_DATE_FORMAT = "%Y-%m-%d"

# Rendering format used by the table helpers
DISPLAY_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
