"""Send a handful of events and watch the transport react to backpressure."""

from __future__ import annotations

import asyncio
import json
import os
import time
import uuid

from sentry_transport import HttpError, HttpTransport, NetworkError, RateLimitedError

DSN = os.getenv("SENTRY_TRANSPORT_DEMO_DSN", "http://public@localhost:9000/1")
EVENT_COUNT = int(os.getenv("SENTRY_TRANSPORT_DEMO_EVENTS", "5"))


def log_section(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


def build_event(index: int) -> bytes:
    event = {
        "event_id": uuid.uuid4().hex,
        "timestamp": time.time(),
        "level": "error",
        "message": f"demo event #{index}",
        "platform": "python",
    }
    return json.dumps(event).encode("utf-8")


async def main() -> None:
    log_section("Rate-aware transport demo")
    log_level = os.getenv("SENTRY_TRANSPORT_LOG", "info")
    async with HttpTransport(DSN, headers={"User-Agent": "send-events-demo"}, log_level=log_level) as transport:
        print(f"Target: {transport.dsn.store_url}")
        print(f"Proxy: {transport.agent.proxy.url if transport.agent.proxy else '(direct)'}")

        for index in range(EVENT_COUNT):
            try:
                await transport.send(build_event(index))
                print(f"→ event {index} delivered")
            except RateLimitedError as exc:
                print(f"→ event {index} dropped locally: {exc}")
            except HttpError as exc:
                print(f"→ event {index} rejected: {exc}")
            except NetworkError as exc:
                print(f"→ event {index} not sent: {exc}")


if __name__ == "__main__":
    asyncio.run(main())
