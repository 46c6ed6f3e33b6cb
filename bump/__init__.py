"""Bump the version in Cargo.toml, commit, and tag the release."""
