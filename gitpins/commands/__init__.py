"""Command handlers for the gitpins CLI."""
