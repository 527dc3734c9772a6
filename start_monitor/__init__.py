"""
Minikube start-time monitor.

Repeatedly times `minikube start` and reports the duration to a monitoring
backend through OpenTelemetry.
"""

__version__ = "1.0.0"
