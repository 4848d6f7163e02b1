"""Centralized constants for Skill Barter."""

# ---- Rate Limits ----
GLOBAL_RATE_LIMIT: str = "120/minute"
WRITE_RATE_LIMIT: str = "30/minute"

# ---- Field Limits ----
MAX_TITLE_LENGTH: int = 100
MAX_DESCRIPTION_LENGTH: int = 150
MAX_USERNAME_LENGTH: int = 100
MAX_EMAIL_LENGTH: int = 255
MAX_SKILL_NAME_LENGTH: int = 100
MIN_SKILL_RATING: int = 1
MAX_SKILL_RATING: int = 5
DEFAULT_SKILL_RATING: int = 3
MAX_SELECTED_SKILLS: int = 3

# ---- Barter lifecycle ----
BARTER_EXPIRY_DAYS: int = 30

# ---- Timeouts ----
STORAGE_TIMEOUT_SECONDS: float = 10.0
TRANSIENT_RETRY_AFTER_SECONDS: int = 2

# ---- Pagination ----
DEFAULT_PAGE_SIZE: int = 50
MAX_PAGE_SIZE: int = 100

# ---- Misc ----
APP_VERSION: str = "0.1.0"
ALL_CATEGORIES: str = "All"

# ---- Display fallbacks ----
UNKNOWN_SKILL: str = "Unknown Skill"
UNKNOWN_BARTER: str = "Unknown Barter"
ANONYMOUS_USER: str = "Anonymous User"
GRAVATAR_URL: str = "https://www.gravatar.com/avatar/{hash}?d=identicon&s=200"
DEFAULT_AVATAR_URL: str = "https://randomuser.me/api/portraits/lego/1.jpg"

# ---- Error Codes ----
ERR_VALIDATION: str = "VALIDATION_ERROR"
ERR_UNAUTHENTICATED: str = "UNAUTHENTICATED"
ERR_FORBIDDEN: str = "FORBIDDEN"
ERR_CONFLICT: str = "CONFLICT"
ERR_DUPLICATE_REQUEST: str = "DUPLICATE_REQUEST"
ERR_INVALID_STATUS: str = "INVALID_STATUS"
ERR_NOT_FOUND: str = "NOT_FOUND"
ERR_TRANSIENT: str = "STORAGE_UNAVAILABLE"
ERR_INTERNAL: str = "INTERNAL_ERROR"

# ---- Valid values ----
VALID_REQUEST_ROLES: set[str] = {"received", "sent", "pending"}

# ---- Messages ----
PROFILE_NOT_FOUND: str = "Profile not found. Please sign in again."
