"""Command-line helpers for setting up OAuth access to the Google Tag Manager API."""
