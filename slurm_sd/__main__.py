"""Prometheus Slurm SD entry point.

Usage:
    python -m slurm_sd [--config.file PATH] [--slurm.api-endpoint URL] ...
"""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn

from slurm_sd import __version__
from slurm_sd.config import Config, ConfigError, parse_listen_address
from slurm_sd.discovery import DiscoveryService
from slurm_sd.server import create_app
from slurm_sd.slurm import SlurmClient

logger = logging.getLogger(__name__)

SHUTDOWN_GRACE_SECONDS = 5

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

# CLI flag destination → Config attribute
_OVERRIDES = {
    "listen_address": "listen_address",
    "api_endpoint": "slurm_api_endpoint",
    "api_version": "slurm_api_version",
    "api_username": "slurm_api_username",
    "api_token": "slurm_api_token",
    "update_interval": "update_interval",
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="prometheus-slurm-sd",
        description="Prometheus service discovery for Slurm clusters",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config.file",
        dest="config_file",
        default="config.yaml",
        help="Config file path",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        default="info",
        choices=list(_LOG_LEVELS),
        help="Log level",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        help="Address to listen on for HTTP requests (overrides config)",
    )
    parser.add_argument("--slurm.api-endpoint", dest="api_endpoint", help="Slurm REST API endpoint")
    parser.add_argument("--slurm.api-version", dest="api_version", help="Slurm REST API version")
    parser.add_argument("--slurm.api-username", dest="api_username", help="Slurm REST API username")
    parser.add_argument("--slurm.api-token", dest="api_token", help="Slurm REST API token")
    parser.add_argument(
        "--update.interval",
        dest="update_interval",
        help="Update interval for fetching Slurm data, e.g. 30s or 5m",
    )
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Load the config file, apply CLI overrides and validate the result."""
    config = Config.load(args.config_file)
    for dest, attr in _OVERRIDES.items():
        value = getattr(args, dest)
        if value:
            setattr(config, attr, value)
    config.validate()
    return config


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    logging.basicConfig(
        level=_LOG_LEVELS[args.log_level],
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = load_config(args)
        host, port = parse_listen_address(config.listen_address)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(1)

    client = SlurmClient(
        config.slurm_api_endpoint,
        config.slurm_api_version,
        username=config.slurm_api_username,
        token=config.slurm_api_token,
    )
    service = DiscoveryService(client, config.jobs, config.interval_seconds)
    app = create_app(service, client)

    # uvicorn handles SIGINT/SIGTERM: stop accepting, drain, then run lifespan shutdown.
    server = uvicorn.Server(uvicorn.Config(
        app,
        host=host,
        port=port,
        log_config=None,
        timeout_graceful_shutdown=SHUTDOWN_GRACE_SECONDS,
    ))
    logger.info("Starting HTTP server on %s:%d", host, port)
    server.run()
    logger.info("Server stopped")


if __name__ == "__main__":
    main()
