# =============================================================================
# src/cli/__init__.py - CLI Module Overview
# =============================================================================
#
# Command-line tools for the event search service.  Each submodule is a
# self-contained utility run via `python -m src.cli.<module>`:
#
#   SEARCH (search.py)
#      Runs one search through the same cache / retriever / normalizer /
#      filter pipeline the API uses and prints a text or JSON report.
#
# Architecture Notes:
#   - argparse for argument parsing, matching the rest of the tooling.
#   - src.main is imported inside the runner so argument errors are
#     reported before settings and config are loaded.
# =============================================================================

"""CLI tools for the event search service.

- ``python -m src.cli.search`` - run one event search.
"""
