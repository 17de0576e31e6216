"""API test infrastructure: async httpx client against the ASGI app."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


@pytest_asyncio.fixture
async def app():
    from app.main import create_app

    return create_app()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------

@pytest.fixture
def three_bus_payload() -> dict:
    """3-bus chain: slack - PV - PQ."""
    return {
        "buses": [
            {"bus_id": 1, "bus_type": "Slack", "p_pu": 0.0, "q_pu": 0.0, "v_pu": 1.0, "theta_deg": 0.0},
            {"bus_id": 2, "bus_type": "PV", "p_pu": 0.5, "q_pu": 0.0, "v_pu": 1.0, "theta_deg": 0.0},
            {"bus_id": 3, "bus_type": "PQ", "p_pu": -0.8, "q_pu": -0.4, "v_pu": 1.0, "theta_deg": 0.0},
        ],
        "lines": [
            {"from_bus": 1, "to_bus": 2, "r_pu": 0.02, "x_pu": 0.06, "b_pu": 0.0},
            {"from_bus": 2, "to_bus": 3, "r_pu": 0.03, "x_pu": 0.08, "b_pu": 0.0},
        ],
    }
