from functools import wraps
import os
from typing import Any, Dict


SETTINGS_KEY = "configured"

# Settings that fall back to the environment when not configured explicitly.
ENVIRONMENT = {
    "url": "REDIS_URL",
    "ca_file": "REDIS_CA_FILE",
    "client_key_file": "REDIS_CLIENT_KEY_FILE",
    "client_cert_file": "REDIS_CLIENT_CERT_FILE",
}


def configure(f):
    """
    Force the API to set defaults if no user settings have been provided.
    """

    @wraps(f)
    def wrapper(self, *args, **kwargs):
        if not self.settings.get(SETTINGS_KEY, False):
            self.configure()

        return f(self, *args, **kwargs)

    return wrapper


class Settings:
    """
    Control the management and lifecycle of any Tephra API settings.
    """

    settings = {SETTINGS_KEY: False}

    def configure(self, **kwargs):
        """
        Configure default connection options such as the Redis URL.

        By doing so, the Tephra API allows users to obtain clients on demand
        without requiring the user to pass around settings. Anything not given
        here is read from the environment (`REDIS_URL`, `REDIS_CA_FILE`,
        `REDIS_CLIENT_KEY_FILE`, `REDIS_CLIENT_CERT_FILE`).
        """
        for key, env_var in ENVIRONMENT.items():
            value = kwargs.pop(key, None) or os.getenv(env_var)
            if value:
                Settings.settings[key] = value

        # Generic Settings.
        Settings.settings.update(kwargs)
        Settings.settings[SETTINGS_KEY] = True

    def reset(self):
        """Forget all configured settings."""
        Settings.settings.clear()
        Settings.settings[SETTINGS_KEY] = False

    def defaults(self) -> Dict[str, Any]:
        return {key: value for key, value in Settings.settings.items() if key != SETTINGS_KEY}
