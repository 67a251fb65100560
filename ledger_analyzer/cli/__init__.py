"""Command line entry point (``ledger-analyzer`` / ``python -m ledger_analyzer.cli``)."""
