"""Custom command implementations for az ideafy.

These functions are the entry points called by the Azure CLI framework.
Each one maps to a registered command in commands.py.
"""

import json
import logging
from pathlib import Path

from knack.util import CLIError

from azext_ideafy.telemetry import track

logger = logging.getLogger(__name__)


# ======================================================================
# Helpers
# ======================================================================

def _get_config_dir() -> str:
    """Resolve the directory holding ideafy.yaml."""
    return str(Path.cwd().resolve())


def _load_config(config_dir: str | None = None):
    """Load configuration (defaults when no ideafy.yaml exists)."""
    from azext_ideafy.config import IdeafyConfig

    config = IdeafyConfig(config_dir or _get_config_dir())
    config.load()
    return config


def _run_wizard(console, file=None, trends=None, competitors=None):
    """Collect the analysis inputs interactively.

    Returns:
        (description, file, trends, competitors)
    """
    from azext_ideafy.ui.console import IdeaPrompt

    prompt_ui = IdeaPrompt(console)

    console.print_header("Describe your idea")
    description = prompt_ui.ask(
        "What are you building? Describe the problem, who it is for and how it works."
    )
    if not description:
        raise CLIError("An idea description is required to run an analysis.")

    if file is None:
        file = prompt_ui.ask("Optional: path to a PDF (pitch deck, one-pager). Press Enter to skip.") or None
    if trends is None:
        trends = prompt_ui.ask_mode("Market trends")
    if competitors is None:
        competitors = prompt_ui.ask_mode("Competitors")

    return description, file, trends, competitors


def _present(console, outcome, raw=False):
    """Render a finished session and return the command's result dict."""
    if outcome.cancelled:
        console.print_warning("Analysis cancelled. No results were kept.")
        return {"status": "cancelled"}

    if outcome.show_raw:
        console.print_warning("No structured analysis found in the stream; showing the raw output.")
        console.render_raw_stream(outcome.raw_log)
    elif raw:
        console.render_raw_stream(outcome.raw_log)
    else:
        console.render_result(outcome.result)

    return {
        "status": "raw" if outcome.show_raw else "structured",
        "envelopes": len(outcome.raw_log),
    }


def _outcome_from_capture(data: bytes, flush_trailing_fragment: bool = True):
    """Replay a saved stream capture (or an aggregate JSON object) offline."""
    from azext_ideafy.results.normalizer import normalize_results
    from azext_ideafy.session import SessionOutcome
    from azext_ideafy.stream.decoder import ChunkDecoder
    from azext_ideafy.stream.router import EnvelopeRouter

    try:
        aggregate = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError):
        aggregate = None

    if isinstance(aggregate, dict) and "step" not in aggregate:
        return SessionOutcome(result=normalize_results(aggregate))

    decoder = ChunkDecoder()
    router = EnvelopeRouter()
    router.route_lines(decoder.feed(data))
    fragment = decoder.finish()
    if fragment is not None and flush_trailing_fragment:
        router.route(fragment)
    return SessionOutcome(result=normalize_results(router.accumulated), raw_log=list(router.log))


# ======================================================================
# Analysis Commands
# ======================================================================

@track("ideafy analyze")
def ideafy_analyze(cmd, prompt=None, trends=None, competitors=None, file=None, raw=False, json_output=False):
    """Stream an idea analysis and display the normalized results.

    Without ``--prompt`` an interactive wizard asks for the description,
    an optional PDF and the research modes.  Ctrl+C cancels the session;
    nothing received so far is kept.
    """
    from azext_ideafy.client import AnalysisRequest, AnalyzeClient, resolve_action
    from azext_ideafy.parsers.attachment import read_attachment
    from azext_ideafy.session import AnalysisSession, SessionOutcome
    from azext_ideafy.ui.console import console

    config = _load_config()

    if not prompt:
        if json_output:
            raise CLIError("--prompt is required when using --json.")
        prompt, file, trends, competitors = _run_wizard(console, file, trends, competitors)

    prompt = prompt.strip()
    if not prompt:
        raise CLIError("An idea description is required to run an analysis.")

    actions = [
        resolve_action(trends if trends is not None else config.get("analysis.trends")),
        resolve_action(competitors if competitors is not None else config.get("analysis.competitors")),
    ]
    attachment = read_attachment(file) if file else None
    request = AnalysisRequest(prompt=prompt, actions=actions, attachment=attachment)

    show_live = bool(config.get("stream.show_live", True)) and not json_output
    session = AnalysisSession(
        AnalyzeClient.from_config(config),
        request,
        on_envelope=console.print_envelope if show_live else None,
        flush_trailing_fragment=bool(config.get("stream.flush_trailing_fragment", False)),
    )

    if not json_output:
        console.print_header("Analyzing your idea")
        if attachment:
            console.print_dim(f"Attached {attachment.filename} ({attachment.page_count} pages)")

    try:
        if json_output:
            outcome = session.run()
        else:
            with console.spinner("Analysis"):
                outcome = session.run()
    except KeyboardInterrupt:
        session.cancel()
        logger.debug("Analysis interrupted after %d envelopes", len(session.router.log))
        session.router.reset()
        outcome = SessionOutcome(cancelled=True)

    if json_output:
        return outcome.to_dict()
    return _present(console, outcome, raw=raw)


@track("ideafy normalize")
def ideafy_normalize(cmd, input=None, raw=False, json_output=False):
    """Normalize a saved stream capture or aggregate JSON file offline."""
    from azext_ideafy.ui.console import console

    if not input:
        raise CLIError(
            "An input file is required.\n"
            "  az ideafy normalize --input ./stream.jsonl\n"
            "  az ideafy normalize --input ./result.json"
        )

    path = Path(input)
    if not path.is_file():
        raise CLIError(f"Input file not found: {path}")

    outcome = _outcome_from_capture(path.read_bytes())

    if json_output:
        return outcome.to_dict()
    return _present(console, outcome, raw=raw)


# ======================================================================
# Config Commands
# ======================================================================

@track("ideafy config show")
def ideafy_config_show(cmd):
    """Display the effective configuration (file, defaults and env overrides)."""
    return _load_config().to_dict()


@track("ideafy config get")
def ideafy_config_get(cmd, key=None):
    """Get a single configuration value by dot-separated key."""
    if not key:
        raise CLIError("--key is required.")

    value = _load_config().get(key)
    if value is None:
        raise CLIError(f"Key '{key}' not found in configuration.")
    return {"key": key, "value": value}


@track("ideafy config set")
def ideafy_config_set(cmd, key=None, value=None):
    """Set a configuration value in ideafy.yaml."""
    if not key:
        raise CLIError("--key is required.")
    if value is None:
        raise CLIError("--value is required.")

    config = _load_config()
    config.set(key, value)
    return {"key": key, "value": config.get(key), "status": "updated"}


@track("ideafy config init")
def ideafy_config_init(cmd, api_url=None, timeout=None, force=False):
    """Write ideafy.yaml with the default settings."""
    from azext_ideafy.config import IdeafyConfig
    from azext_ideafy.ui.console import console

    config = IdeafyConfig(_get_config_dir())
    if config.exists() and not force:
        raise CLIError(
            f"{config.config_path} already exists.\n"
            "Use --force to overwrite it, or 'az ideafy config set' to change single values."
        )

    overrides: dict = {}
    if api_url:
        overrides.setdefault("api", {})["url"] = api_url
    if timeout is not None:
        overrides.setdefault("api", {})["timeout"] = timeout

    result = config.create_default(overrides)
    console.print_success(f"Configuration written to {config.config_path}")
    return result
