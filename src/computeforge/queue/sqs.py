from __future__ import annotations

import aioboto3

from computeforge.config import Settings
from computeforge.core.errors import ConfigurationError
from computeforge.queue.models import JobMessage


class SQSJobEnqueuer:
    """Send provisioning jobs to SQS for the Lambda worker."""

    def __init__(self, settings: Settings) -> None:
        if not settings.sqs_queue_url:
            raise ConfigurationError("COMPUTEFORGE_SQS_QUEUE_URL is required for the sqs backend")
        self._settings = settings

    async def enqueue(self, message: JobMessage) -> str:
        queue_url = self._settings.sqs_queue_url or ""
        session = aioboto3.Session(region_name=self._settings.aws_region)
        async with session.client("sqs") as client:
            payload = {
                "QueueUrl": queue_url,
                "MessageBody": message.to_message_body(),
            }
            # Webhook redeliveries reuse the delivery id, so FIFO dedup drops them.
            if queue_url.endswith(".fifo"):
                payload["MessageGroupId"] = message.job_type
                payload["MessageDeduplicationId"] = message.job_id

            response = await client.send_message(**payload)
        return response["MessageId"]
