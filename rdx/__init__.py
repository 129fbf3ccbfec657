"""Release pipeline for prometheus-rds-exporter."""

__version__ = "0.1.0"
