"""Command telemetry for az ideafy, posted straight to Application Insights.

One ``cli_command_executed`` event is sent per command.  Its ``outcome``
says how the session ended (``structured``, ``raw`` or ``cancelled``),
which is what tells us whether the normalizer keeps up with the upstream
format.

* The Azure CLI opt-out wins: ``AZURE_CORE_COLLECT_TELEMETRY`` first, then
  ``disable_telemetry`` / ``collect_telemetry`` in the az config file.
* Without a connection string (``APPINSIGHTS_CONNECTION_STRING`` or the
  release-time constant) nothing is sent.
* The idea description and research notes never leave the machine; only
  their lengths do.
* Telemetry problems are logged at DEBUG and never reach the user.
"""

import json
import logging
import os
from datetime import datetime, timezone
from functools import wraps

logger = logging.getLogger(__name__)

# Filled in by the release pipeline.
_BUILTIN_CONNECTION_STRING = ""

_EVENT_NAME = "cli_command_executed"
_CLOUD_ROLE = "az-ideafy"
_FALSY = ("no", "false", "0", "off")

# (endpoint, ikey) once resolved; ("", "") means telemetry is off.
_target: tuple[str, str] | None = None


# ---------------------------------------------------------------
# Opt-out and target resolution
# ---------------------------------------------------------------


def _az_config_allows_telemetry() -> bool:
    """Read the opt-out keys from the az config file (missing file: allowed)."""
    import configparser

    from azure.cli.core._environment import get_config_dir

    az_config = configparser.ConfigParser()
    az_config.read(os.path.join(get_config_dir(), "config"))
    if az_config.getboolean("core", "disable_telemetry", fallback=False):
        return False
    return az_config.getboolean("core", "collect_telemetry", fallback=True)


def _is_cli_telemetry_enabled() -> bool:
    setting = os.environ.get("AZURE_CORE_COLLECT_TELEMETRY")
    if setting is not None:
        return setting.lower() not in _FALSY
    try:
        return _az_config_allows_telemetry()
    except Exception:  # az not installed, unreadable config
        logger.debug("Could not read the az telemetry setting", exc_info=True)
        return True


def _parse_connection_string(cs: str) -> tuple[str, str]:
    """Return ``(track_url, instrumentation_key)``, or ``("", "")`` if unusable."""
    fields = dict(part.split("=", 1) for part in (cs or "").split(";") if "=" in part)
    ikey = fields.get("InstrumentationKey", "")
    endpoint = fields.get("IngestionEndpoint", "").rstrip("/")
    if not (ikey and endpoint):
        return "", ""
    return f"{endpoint}/v2/track", ikey


def _get_ingestion_config() -> tuple[str, str]:
    """Resolve where events go, once per process."""
    global _target
    if _target is None:
        if _is_cli_telemetry_enabled():
            cs = os.environ.get("APPINSIGHTS_CONNECTION_STRING", "") or _BUILTIN_CONNECTION_STRING
            _target = _parse_connection_string(cs)
        else:
            _target = ("", "")
    return _target


def is_enabled() -> bool:
    endpoint, ikey = _get_ingestion_config()
    return bool(endpoint and ikey)


def reset() -> None:
    """Forget the resolved target; tests change the environment between cases."""
    global _target
    _target = None


# ---------------------------------------------------------------
# Event construction and delivery
# ---------------------------------------------------------------


def _get_extension_version() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("ideafy")
    except PackageNotFoundError:
        return "unknown"


# User-authored text: only the length is reported.
_TEXT_PARAM_KEYS = frozenset({"prompt", "trends", "competitors"})

# Config values may hold anything, so they are never reported.
_SENSITIVE_PARAM_KEYS = frozenset({"token", "secret", "password", "key", "value", "connection_string"})


def _sanitize_parameters(params: dict) -> dict:
    """Make command kwargs safe to report.

    User text becomes ``<N chars>``, sensitive values ``***`` and
    anything that is not a scalar its type name.
    """
    clean: dict[str, object] = {}
    for name, value in params.items():
        if name.startswith("_"):
            continue
        if name in _TEXT_PARAM_KEYS and isinstance(value, str):
            clean[name] = f"<{len(value)} chars>"
        elif name in _SENSITIVE_PARAM_KEYS:
            clean[name] = "***"
        elif value is None or isinstance(value, (str, int, float, bool)):
            clean[name] = value
        else:
            clean[name] = type(value).__name__
    return clean


def _build_envelope(ikey: str, properties: dict[str, str]) -> dict:
    return {
        "name": "Microsoft.ApplicationInsights.Event",
        "time": datetime.now(timezone.utc).isoformat(),
        "iKey": ikey,
        "tags": {"ai.cloud.role": _CLOUD_ROLE},
        "data": {
            "baseType": "EventData",
            "baseData": {"ver": 2, "name": _EVENT_NAME, "properties": properties},
        },
    }


def _send_envelope(envelope: dict, endpoint: str) -> bool:
    """POST one envelope; returns whether ingestion accepted it."""
    import requests

    try:
        return requests.post(endpoint, json=[envelope], timeout=5).ok
    except requests.RequestException:
        logger.debug("Telemetry POST failed", exc_info=True)
        return False


def track_command(
    command_name: str,
    *,
    success: bool = True,
    error: str = "",
    parameters: dict | None = None,
    outcome: str = "",
) -> None:
    """Report one command execution, if telemetry is on."""
    if not is_enabled():
        return
    endpoint, ikey = _get_ingestion_config()

    properties = {
        "commandName": command_name,
        "outcome": outcome,
        "success": str(success).lower(),
        "extensionVersion": _get_extension_version(),
    }
    if parameters:
        properties["parameters"] = json.dumps(_sanitize_parameters(parameters))
    if error:
        properties["error"] = error[:1024]

    _send_envelope(_build_envelope(ikey, properties), endpoint)


def track(command_name: str):
    """Decorate a custom command so every run is reported.

    The event goes out after the command finishes, whether it returned or
    raised.  A returned dict's ``status`` becomes the outcome.

        @track("ideafy analyze")
        def ideafy_analyze(cmd, prompt=None, ...):
            ...
    """

    def decorator(func):
        @wraps(func)
        def wrapper(cmd, *args, **kwargs):
            result = None
            error = ""
            try:
                result = func(cmd, *args, **kwargs)
                return result
            except Exception as exc:
                error = f"{type(exc).__name__}: {exc}"
                raise
            finally:
                outcome = result.get("status", "") if isinstance(result, dict) else ""
                try:
                    track_command(
                        command_name,
                        success=not error,
                        error=error,
                        parameters=kwargs,
                        outcome=str(outcome),
                    )
                except Exception:
                    logger.debug("Telemetry for %s dropped", command_name, exc_info=True)

        return wrapper

    return decorator
