"""Command-line interface for computeforge."""
