"""HTTP API for route discovery and quoting."""
