from __future__ import annotations

from fastapi import Request

from broker.services.broker import RequestBroker


def get_broker(request: Request) -> RequestBroker:
    """Return the broker created by the application lifespan."""
    return request.app.state.broker
