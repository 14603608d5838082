from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import aioboto3
import structlog

logger = structlog.get_logger()

# PutMetricData accepts at most this many datums per call.
MAX_BATCH = 20
# Oldest datums are dropped past this while PutMetricData keeps failing.
MAX_BUFFERED = 1000


class MetricsCollector:
    """Buffered CloudWatch metrics for invocation processing."""

    def __init__(self, namespace: str = "ComputeForge", region: str = "us-east-1") -> None:
        self.namespace = namespace
        self.region = region
        self._metrics_buffer: list[dict[str, Any]] = []

    @asynccontextmanager
    async def timer(self, metric_name: str, **dimensions: str) -> AsyncIterator[None]:
        start = time.monotonic()
        try:
            yield
        finally:
            await self.emit(metric_name, time.monotonic() - start, unit="Seconds", **dimensions)

    async def emit(
        self,
        metric_name: str,
        value: float,
        *,
        unit: str = "Count",
        **dimensions: str,
    ) -> None:
        self._metrics_buffer.append(
            {
                "MetricName": metric_name,
                "Value": value,
                "Unit": unit,
                "Dimensions": [{"Name": k, "Value": v} for k, v in dimensions.items()],
                "Timestamp": time.time(),
            }
        )
        overflow = len(self._metrics_buffer) - MAX_BUFFERED
        if overflow > 0:
            del self._metrics_buffer[:overflow]
            logger.warning("metrics_dropped", dropped=overflow)
        if len(self._metrics_buffer) >= MAX_BATCH:
            await self.flush()

    async def flush(self) -> None:
        """Send one batch of buffered metrics; failures are logged and the batch kept."""
        if not self._metrics_buffer:
            return

        try:
            session = aioboto3.Session(region_name=self.region)
            async with session.client("cloudwatch") as client:
                await client.put_metric_data(
                    Namespace=self.namespace,
                    MetricData=self._metrics_buffer[:MAX_BATCH],
                )
            del self._metrics_buffer[:MAX_BATCH]
        except Exception as exc:
            logger.error("metrics_flush_failed", error=str(exc), buffered=len(self._metrics_buffer))

    async def close(self) -> None:
        await self.flush()


_metrics_collector: MetricsCollector | None = None


def get_metrics_collector(namespace: str = "ComputeForge", region: str = "us-east-1") -> MetricsCollector:
    """Process-wide collector, created on first use."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector(namespace, region)
    return _metrics_collector
