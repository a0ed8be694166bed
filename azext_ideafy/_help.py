"""Help text for az ideafy commands."""

from knack.help_files import helps

helps["ideafy"] = """
type: group
short-summary: Analyze startup ideas and display the results in the terminal.
long-summary: |
    Sends an idea description (and optionally a PDF) to the analysis
    service, shows the stream of progress messages as it arrives, and
    renders the final idea validation, legal analysis, SWOT analysis and
    overall summary as result cards.

    When the service output cannot be turned into any structured result,
    the raw step/content log is shown instead.
"""

helps["ideafy analyze"] = """
type: command
short-summary: Run an idea analysis.
long-summary: |
    Opens a streaming request to the analysis service and prints every
    progress message as it arrives. Transport messages (init, http) are
    kept out of the display.

    Without --prompt an interactive wizard asks for the description, an
    optional PDF, and whether market trends and competitors should be
    researched automatically or from your own notes.

    Press Ctrl+C to cancel. A cancelled analysis keeps no partial results.
examples:
    - name: Analyze an idea with automatic research
      text: az ideafy analyze --prompt "A marketplace for renting camping gear between neighbours"
    - name: Provide your own competitor notes and attach a pitch deck
      text: az ideafy analyze -p "AI tutor for dyslexic kids" --competitors "Lexia, Nessy" --file ./deck.pdf
    - name: Start the interactive wizard
      text: az ideafy analyze
    - name: Print the normalized result as JSON
      text: az ideafy analyze -p "Subscription dog food" --json
"""

helps["ideafy normalize"] = """
type: command
short-summary: Normalize a saved analysis output offline.
long-summary: |
    Reads either a capture of the raw stream (one JSON envelope per line)
    or a single aggregate JSON object keyed by domain, and renders it the
    same way as a live analysis. No network access is needed.
examples:
    - name: Render a saved stream capture
      text: az ideafy normalize --input ./stream.jsonl
    - name: Convert an aggregate result to canonical JSON
      text: az ideafy normalize --input ./result.json --json
"""

helps["ideafy config"] = """
type: group
short-summary: Manage the ideafy.yaml configuration.
long-summary: |
    Settings are read from ideafy.yaml in the current directory, falling
    back to built-in defaults. IDEAFY_API_URL and IDEAFY_TIMEOUT override
    the file.
"""

helps["ideafy config init"] = """
type: command
short-summary: Write ideafy.yaml with default settings.
examples:
    - name: Create the default configuration
      text: az ideafy config init
    - name: Point the CLI at a self-hosted analysis service
      text: az ideafy config init --api-url https://ideas.example.com/analyze --timeout 120
"""

helps["ideafy config show"] = """
type: command
short-summary: Display the effective configuration.
examples:
    - name: Show all settings
      text: az ideafy config show
"""

helps["ideafy config get"] = """
type: command
short-summary: Get a single configuration value.
examples:
    - name: Show the analysis endpoint
      text: az ideafy config get --key api.url
"""

helps["ideafy config set"] = """
type: command
short-summary: Set a configuration value.
examples:
    - name: Raise the request timeout
      text: az ideafy config set --key api.timeout --value 600
    - name: Route the unterminated last line of a stream
      text: az ideafy config set --key stream.flush_trailing_fragment --value true
"""
