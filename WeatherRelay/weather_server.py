"""Weather relay server: serves the latest forecast on GET /weather."""
import argparse
import logging
import os
import sys
from typing import List, Optional, Tuple

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI

from openweather_provider import OpenWeatherProvider
from weather_app import create_app
from weather_cache import WeatherCache
from weather_service import WeatherService

DEFAULT_ZIP = "94040,us"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Weather relay server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--timeout", type=float, default=10.0, help="HTTP timeout in seconds")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )
    # urllib3 debug lines include the request query string, appid included
    logging.getLogger("urllib3").setLevel(logging.INFO)


def load_config() -> Tuple[str, str, Optional[str]]:
    load_dotenv()
    api_key = os.getenv("WEATHER_API_KEY")
    zip_code = os.getenv("WEATHER_ZIP", DEFAULT_ZIP)
    base_url = os.getenv("WEATHER_URL") or None

    if not api_key:
        raise SystemExit("Missing WEATHER_API_KEY in environment")
    if not zip_code.strip():
        raise SystemExit("WEATHER_ZIP must not be empty")

    logging.info("Configuration loaded: zip=%s url=%s", zip_code, base_url or OpenWeatherProvider.BASE_URL)
    return api_key, zip_code, base_url


def build_app(api_key: str, zip_code: str, base_url: Optional[str], args: argparse.Namespace) -> FastAPI:
    provider = OpenWeatherProvider(
        api_key=api_key,
        zip_code=zip_code,
        base_url=base_url,
        timeout=args.timeout,
    )
    service = WeatherService(provider=provider, cache=WeatherCache())
    logging.info("Weather service ready (provider=%r, timeout=%ss)", provider, args.timeout)
    return create_app(service)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    api_key, zip_code, base_url = load_config()

    app = build_app(api_key, zip_code, base_url, args)

    logging.info("Listening on %s:%s", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level="debug" if args.verbose else "info")
    logging.info("Server stopped")


if __name__ == "__main__":
    main()
