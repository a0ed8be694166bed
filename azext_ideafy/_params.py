"""CLI parameter definitions for az ideafy."""


def load_arguments(self, _):
    """Register CLI parameters for all commands."""

    # --- shared display flags for commands that render results ---
    for scope in ("ideafy analyze", "ideafy normalize"):
        with self.argument_context(scope) as c:
            c.argument(
                "json_output",
                options_list=["--json", "-j"],
                help="Output machine-readable JSON instead of result cards.",
                action="store_true",
                default=False,
            )
            c.argument(
                "raw",
                options_list=["--raw"],
                help="Show the raw step/content stream log instead of result cards.",
                action="store_true",
                default=False,
            )

    # --- az ideafy analyze ---
    with self.argument_context("ideafy analyze") as c:
        c.argument(
            "prompt",
            options_list=["--prompt", "-p"],
            help="Description of the idea to analyze. Omit to start the interactive wizard.",
        )
        c.argument(
            "trends",
            help="Market-trend research: 'auto' (default) or your own notes on trends.",
        )
        c.argument(
            "competitors",
            help="Competitor research: 'auto' (default) or your own notes on competitors.",
        )
        c.argument(
            "file",
            options_list=["--file", "-f"],
            help="Optional PDF (pitch deck, one-pager) sent along with the description.",
        )

    # --- az ideafy normalize ---
    with self.argument_context("ideafy normalize") as c:
        c.argument(
            "input",
            options_list=["--input", "-i"],
            help="Saved stream capture (newline-delimited JSON envelopes) or an aggregate JSON object.",
        )

    # --- az ideafy config init ---
    with self.argument_context("ideafy config init") as c:
        c.argument("api_url", help="Analysis endpoint URL to write into ideafy.yaml.")
        c.argument("timeout", type=int, help="Request timeout in seconds (0 disables the timeout).")
        c.argument(
            "force",
            help="Overwrite an existing ideafy.yaml.",
            action="store_true",
            default=False,
        )

    # --- az ideafy config get ---
    with self.argument_context("ideafy config get") as c:
        c.argument("key", help="Dot-separated config key (e.g., api.url).")

    # --- az ideafy config set ---
    with self.argument_context("ideafy config set") as c:
        c.argument("key", help="Dot-separated config key (e.g., api.timeout).")
        c.argument("value", help="Value to set.")
