"""Forum-facing flight API over ``FlightTrackerService``.

HTTP endpoints:
    GET /api/flightDetails?flightNumber=AA123[&date=YYYY-MM-DD]
    GET /api/searchFlights?origin=JFK&destination=LAX[&date=YYYY-MM-DD]

Missing query parameters answer 400. Failures the client could not recover
from answer 500 with a generic retry prompt; the underlying error is only
logged.

Example:
    >>> from flightforum.client import ClientConfig, McpClient
    >>> from flightforum.client.api import create_api_app
    >>> app = create_api_app(McpClient(ClientConfig(base_url="http://localhost:8000")))
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from flightforum.foundation.errors import PUBLIC_ERROR_MESSAGE, InvalidParamsError, ToolException
from flightforum.models import SoftMiss
from flightforum.observability import get_logger

from .client import ClientConfig, McpClient
from .services import FlightTrackerService

log = get_logger("flightforum.client.api")


def _failure(e: Exception) -> JSONResponse:
    message = e.error.public_message if isinstance(e, ToolException) else PUBLIC_ERROR_MESSAGE
    return JSONResponse({"error": message}, status_code=500)


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=400)


def _query(request: Request, name: str) -> str | None:
    return request.query_params.get(name) or None


def create_api_app(client: McpClient | None = None) -> Starlette:
    """Create the ASGI app; the client is closed on shutdown."""
    client = client or McpClient(ClientConfig())
    flights = FlightTrackerService(client)

    async def flight_details(request: Request) -> JSONResponse:
        route_log = log.bind(route="flightDetails")
        flight_number = _query(request, "flightNumber")
        if flight_number is None:
            return _bad_request("Flight number is required")

        try:
            record = await flights.get_flight_details(flight_number, _query(request, "date"))
        except InvalidParamsError as e:
            return _bad_request(e.message)
        except Exception as e:
            route_log.exception("flight lookup failed", flight_number=flight_number, error=str(e))
            return _failure(e)
        payload: Any = record.model_dump() if isinstance(record, SoftMiss) else record.to_payload()
        return JSONResponse(payload)

    async def search_flights(request: Request) -> JSONResponse:
        route_log = log.bind(route="searchFlights")
        origin, destination = _query(request, "origin"), _query(request, "destination")
        if origin is None or destination is None:
            return _bad_request("Origin and destination are required")

        try:
            records = await flights.search_flights(origin, destination, _query(request, "date"))
        except InvalidParamsError as e:
            return _bad_request(e.message)
        except Exception as e:
            route_log.exception("flight search failed", origin=origin, destination=destination, error=str(e))
            return _failure(e)
        return JSONResponse([r.to_payload() for r in records])

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        yield
        await client.aclose()

    routes = [
        Route("/api/flightDetails", flight_details, methods=["GET"]),
        Route("/api/searchFlights", search_flights, methods=["GET"]),
    ]
    return Starlette(routes=routes, lifespan=lifespan)


def serve_api(
    client: McpClient | None = None,
    *,
    host: str = "127.0.0.1",
    port: int = 3000,
) -> None:
    """Run the flight API under uvicorn (blocking)."""
    import uvicorn

    log.info("serving flight api", host=host, port=port)
    uvicorn.run(create_api_app(client), host=host, port=port)
