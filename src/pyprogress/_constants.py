"""Internal constants shared across the library."""

STORAGE_KEY = "gameProgress"

# ------------------------------------------------------------------
# Leveling curve
# ------------------------------------------------------------------

EXPERIENCE_PER_LEVEL = 100
POINTS_PER_EXPERIENCE = 10
MIN_LEVEL = 1

# ------------------------------------------------------------------
# Star ratings
# ------------------------------------------------------------------

MIN_STARS = 0
MAX_STARS = 3

# Percentage score thresholds, highest first.
STAR_THRESHOLDS: tuple[tuple[int, int], ...] = ((80, 3), (60, 2), (40, 1))

# ------------------------------------------------------------------
# Reward badges
# ------------------------------------------------------------------

TIER_BADGE_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (90, "Expert"),
    (70, "Advanced"),
    (50, "Intermediate"),
)
ENTRY_TIER_BADGE = "Beginner"
FIRST_TIMER_BADGE = "First Timer"

# Number of activities shipped with the application.
DEFAULT_TOTAL_ACTIVITIES = 8
