"""Shared: evaluation scope binding and telemetry."""
