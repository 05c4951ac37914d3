from .metrics import MetricsCollector, ProofMetrics

__all__ = ["MetricsCollector", "ProofMetrics"]
