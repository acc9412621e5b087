"""HTTP API for the seasonbook engine."""
