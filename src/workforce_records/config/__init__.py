import os


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "workforce_records.config.production"

    if env in {"test", "testing"}:
        return "workforce_records.config.testing"

    return "workforce_records.config.development"
