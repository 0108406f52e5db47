"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Every value can be overridden through the TIMBRATURE settings dict.
"""

DEFAULT_TOLERANCE_MINUTES = 15
DEFAULT_AUTO_APPROVE_TOLERANCE_MINUTES = 15
DEFAULT_OVERTIME_THRESHOLD_MINUTES = 30
DEFAULT_SELF_RESOLUTION_HOURS = 24
DEFAULT_REVIEW_AFTER_HOURS = 48
DEFAULT_GEOFENCE_RADIUS_METERS = 200
DEFAULT_MAX_HOURS_PER_WEEK = 40
DEFAULT_WELLBEING_WARNING_FRACTION = 0.9
DEFAULT_WELLBEING_OVERTIME_ALERT_HOURS = 8
DEFAULT_LATE_SEVERITY_MINUTES = 30

SHORT_BREAK_MINUTES = 15
BREAK_SUGGESTION_MIN_SHIFT_HOURS = 6
LONG_STRETCH_WITHOUT_BREAK_MINUTES = 240

API_PREFIX = "/api/timbrature"
