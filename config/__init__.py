"""Settings module selection.

``APP_ENV`` picks one of ``config.development``, ``config.production`` or
``config.testing``. Short aliases (``dev``, ``prod``, ``test``) are accepted.
An unrecognised value is an error so a typo in a deployment never falls back
to the insecure development settings.
"""

import os

_MODULES = {
    "development": "config.development",
    "dev": "config.development",
    "local": "config.development",
    "production": "config.production",
    "prod": "config.production",
    "testing": "config.testing",
    "test": "config.testing",
}


def get_settings_module(env: str = None) -> str:
    name = (env if env is not None else os.getenv("APP_ENV") or "development").strip().lower()
    try:
        return _MODULES[name]
    except KeyError:
        raise RuntimeError(f"Unknown APP_ENV '{name}' (use development, production or testing)") from None
