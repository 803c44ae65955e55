"""Push notification service HTTP client"""

import httpx
from typing import Any, Dict
from proximity_gateway.config import settings
from proximity_gateway.domain.exceptions import NotificationDispatchError
from proximity_gateway.infrastructure.observability.metrics import push_latency_histogram, push_failure_counter


class PushNotificationClient:
    """Client for the external push notification service"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.push_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def send(self, user_id: str, title: str, body: str, data: Dict[str, Any]) -> bool:
        """
        Deliver one push notification to all of a user's devices.

        Single attempt, no retry.

        Returns:
            False when the service accepted the request but reported no delivery

        Raises:
            NotificationDispatchError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with push_latency_histogram.time():
                    response = await client.post(
                        f"{self.base_url}/push/send",
                        json={
                            "user_id": user_id,
                            "title": title,
                            "body": body,
                            "data": data,
                            "priority": "high",
                        },
                    )
                    response.raise_for_status()

                payload = response.json() if response.content else {}
                if not isinstance(payload, dict):
                    raise ValueError("expected a JSON object")

                delivered = bool(payload.get("success", True))
                if not delivered:
                    push_failure_counter.inc()
                return delivered

            except httpx.TimeoutException as e:
                push_failure_counter.inc()
                raise NotificationDispatchError(f"Push service timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                push_failure_counter.inc()
                raise NotificationDispatchError(f"Push service error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                push_failure_counter.inc()
                raise NotificationDispatchError(f"Push service unreachable: {e}") from e
            except ValueError as e:
                push_failure_counter.inc()
                raise NotificationDispatchError(f"Invalid response from push service: {e}") from e
