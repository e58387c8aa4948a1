"""Connection settings for the SSC API.

Settings resolve as flag > environment > default. Before the environment is
read, ``.env`` and ``ssc_env.txt`` in the working directory are loaded with
python-dotenv; values already present in the real environment win.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv

from .errors import ConfigurationError

URL_ENV = "FORTIFY_SSC_URL"
TOKEN_ENV = "FORTIFY_SSC_TOKEN"
TIMEOUT_ENV = "FORTIFY_SSC_TIMEOUT"
INSECURE_ENV = "FORTIFY_SSC_INSECURE"

DEFAULT_ENV_FILES = (".env", "ssc_env.txt")
DEFAULT_TIMEOUT = 60.0

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SSCConfig:
    base_url: str
    token: str
    timeout: float = DEFAULT_TIMEOUT
    verify_tls: bool = True

    @property
    def api_root(self) -> str:
        return f"{self.base_url}/ssc/api/v1"


def _resolve_setting(flag_value, env_name: str, default_value):
    if flag_value not in (None, ""):
        return flag_value
    env_value = os.environ.get(env_name)
    if env_value not in (None, ""):
        return env_value
    return default_value


def load_config(
    url: str | None = None,
    token: str | None = None,
    *,
    timeout: float | None = None,
    insecure: bool | None = None,
    env_files: tuple[str, ...] = DEFAULT_ENV_FILES,
) -> SSCConfig:
    """Build an ``SSCConfig`` from CLI overrides, env files and the environment.

    Raises:
        ConfigurationError: base URL or token missing, or a setting out of range.
    """
    for env_file in env_files:
        load_dotenv(env_file, override=False)

    resolved_url = _resolve_setting(url, URL_ENV, None)
    resolved_token = _resolve_setting(token, TOKEN_ENV, None)

    if not resolved_url:
        raise ConfigurationError(f"SSC URL is required. Use --url flag or set {URL_ENV} environment variable")
    if not resolved_token:
        raise ConfigurationError(f"SSC Token is required. Use --token flag or set {TOKEN_ENV} environment variable")

    resolved_url = resolved_url.strip().rstrip("/")
    if not resolved_url.startswith(("http://", "https://")):
        raise ConfigurationError(f"SSC URL must start with http:// or https://, got: {resolved_url}")

    raw_timeout = _resolve_setting(timeout, TIMEOUT_ENV, DEFAULT_TIMEOUT)
    try:
        resolved_timeout = float(raw_timeout)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid timeout: {raw_timeout}") from exc
    if resolved_timeout <= 0 or resolved_timeout > 300:
        raise ConfigurationError("timeout must be > 0 and <= 300 seconds")

    if insecure is not None:
        resolved_insecure = insecure
    else:
        resolved_insecure = os.environ.get(INSECURE_ENV, "").lower() in _TRUTHY

    return SSCConfig(
        base_url=resolved_url,
        token=resolved_token,
        timeout=resolved_timeout,
        verify_tls=not resolved_insecure,
    )
