from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from computeforge.cloudwatch import MAX_BATCH, MAX_BUFFERED, MetricsCollector


def _session(client: MagicMock) -> MagicMock:
    session = MagicMock()
    session.client.return_value.__aenter__ = AsyncMock(return_value=client)
    session.client.return_value.__aexit__ = AsyncMock(return_value=False)
    return session


@pytest.mark.asyncio
async def test_full_batch_is_sent():
    client = MagicMock()
    client.put_metric_data = AsyncMock()
    collector = MetricsCollector("ComputeForge", "eu-west-1")

    with patch("computeforge.cloudwatch.aioboto3.Session", return_value=_session(client)):
        for _ in range(MAX_BATCH):
            await collector.emit("InvocationStarted", 1, Source="manual")

    kwargs = client.put_metric_data.await_args.kwargs
    assert kwargs["Namespace"] == "ComputeForge"
    assert len(kwargs["MetricData"]) == MAX_BATCH
    assert kwargs["MetricData"][0]["Dimensions"] == [{"Name": "Source", "Value": "manual"}]
    assert collector._metrics_buffer == []


@pytest.mark.asyncio
async def test_buffer_is_capped_while_flushes_fail():
    collector = MetricsCollector()

    with patch("computeforge.cloudwatch.aioboto3.Session", side_effect=RuntimeError("no credentials")):
        for i in range(MAX_BUFFERED + 50):
            await collector.emit("InvocationDuration", float(i), unit="Seconds")

    assert len(collector._metrics_buffer) == MAX_BUFFERED
    assert collector._metrics_buffer[-1]["Value"] == float(MAX_BUFFERED + 49)
    assert collector._metrics_buffer[0]["Value"] == 50.0


@pytest.mark.asyncio
async def test_timer_emits_elapsed_seconds():
    collector = MetricsCollector()

    async with collector.timer("InvocationDuration", JobType="compute.provision"):
        pass

    (datum,) = collector._metrics_buffer
    assert datum["MetricName"] == "InvocationDuration"
    assert datum["Unit"] == "Seconds"
    assert datum["Value"] >= 0
