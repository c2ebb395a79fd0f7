from __future__ import annotations

import os

from EXOCAL.client.common.constants import ENV_FILE_PATH


###############################################################################
class EnvironmentVariables:
    """Lookups against the process environment, falling back to the values
    declared in the settings .env file."""

    def __init__(self, env_path: str = ENV_FILE_PATH) -> None:
        self.env_path = env_path
        self.file_values = self.load_env_values(env_path)

    # -------------------------------------------------------------------------
    @staticmethod
    def load_env_values(path: str) -> dict[str, str]:
        values: dict[str, str] = {}
        if not os.path.exists(path):
            return values

        with open(path, "r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or line.startswith(";"):
                    continue
                key, separator, value = line.partition("=")
                if not separator:
                    continue
                cleaned_key = key.strip()
                cleaned_value = value.strip()
                if (
                    len(cleaned_value) >= 2
                    and cleaned_value[0] == cleaned_value[-1]
                    and cleaned_value[0] in {'"', "'"}
                ):
                    cleaned_value = cleaned_value[1:-1]
                values[cleaned_key] = cleaned_value
        return values

    # -------------------------------------------------------------------------
    def get(self, key: str, default: str | None = None) -> str | None:
        value = os.getenv(key)
        if value is not None:
            return value
        return self.file_values.get(key, default)


env_variables = EnvironmentVariables()
