"""Command-line interface for outlook-cli (the ``outlook`` command)."""
