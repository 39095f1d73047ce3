"""Command-line interface for kernel-ci."""
