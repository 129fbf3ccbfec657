"""Build and release steps for the exporter."""
