import os

# Engine thresholds; each can be overridden with TIMBRATURE_<NAME>.
TIMBRATURE_DEFAULTS = {
    "TOLERANCE_MINUTES": 15,
    "AUTO_APPROVE_TOLERANCE_MINUTES": 15,
    "OVERTIME_THRESHOLD_MINUTES": 30,
    "SELF_RESOLUTION_HOURS": 24,
    "REVIEW_AFTER_HOURS": 48,
    "GEOFENCE_RADIUS_METERS": 200,
    "MAX_HOURS_PER_WEEK": 40,
    "WELLBEING_WARNING_FRACTION": 0.9,
    "WELLBEING_OVERTIME_ALERT_HOURS": 8,
    "LATE_SEVERITY_MINUTES": 30,
}


def get_settings_module() -> str:
    # APP_ENV decides the settings module; default is 'development'
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def timbrature_from_env() -> dict:
    """Raw values; parsed and validated by TimbratureSettings.from_mapping()."""

    return {key: os.getenv(f"TIMBRATURE_{key}", default) for key, default in TIMBRATURE_DEFAULTS.items()}
