from .metrics import PrometheusMetrics, get_metrics

__all__ = ["PrometheusMetrics", "get_metrics"]
