"""
Infrastructure layer: external processes and telemetry export.
"""
