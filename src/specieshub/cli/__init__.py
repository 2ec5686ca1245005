"""Command-line tools for Species Hub."""
