"""HTTP layer: FastAPI app exposing GET /weather."""
import logging

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from weather_data import records_to_payload
from weather_provider import WeatherProviderError
from weather_service import WeatherService

# http://localhost with any port or path suffix, or the literal "null" origin
# sent by sandboxed iframes and file:// pages.
DEFAULT_ORIGIN_REGEX = r"http://localhost.*|null"


def setup_cors(app: FastAPI, allowed_origin_regex: str = DEFAULT_ORIGIN_REGEX) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=allowed_origin_regex,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["Authorization", "Accept", "Content-Type"],
        max_age=3600,
    )


def create_app(service: WeatherService, allowed_origin_regex: str = DEFAULT_ORIGIN_REGEX) -> FastAPI:
    """
    Build the relay application around an already configured service.

    The route is a plain ``def`` so FastAPI runs each request in its worker
    thread pool. A client that disconnects mid-fetch does not stop the
    worker, so the fetch and its cache write still complete.
    """
    app = FastAPI(title="weather-relay")
    app.state.weather_service = service
    setup_cors(app, allowed_origin_regex)

    @app.get("/weather")
    def get_weather() -> Response:
        try:
            records = service.refresh()
        except WeatherProviderError as e:
            logging.error(f"GET /weather failed: {e}")
            return Response(status_code=500)
        return JSONResponse(content=records_to_payload(records))

    return app
