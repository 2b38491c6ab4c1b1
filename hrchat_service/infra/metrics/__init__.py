"""Metrics infrastructure backed by prometheus_client."""

from hrchat_service.infra.metrics.prometheus import REGISTRY

__all__ = ["REGISTRY"]
