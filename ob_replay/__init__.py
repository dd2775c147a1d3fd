"""File-based replay tooling around `ob_core`: loading, config, output, reports."""
