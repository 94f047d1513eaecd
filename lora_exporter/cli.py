"""CLI entry point for the exporter."""

from __future__ import annotations

import argparse
import dataclasses
import logging
from typing import List, Optional

import uvicorn

from common.config import Settings, get_settings

from .main import create_app

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    fmt = "%(asctime)s - %(levelname)s - %(message)s"
    if debug:
        fmt = "%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=fmt,
        handlers=[logging.StreamHandler()],
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="LoRaWAN webhook exporter for Prometheus")
    p.add_argument("--listen", default=None, help="host:port to listen on (overrides LISTEN)")
    p.add_argument("--debug", action="store_true", help="debug logging and dump every payload")
    return p.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    changes = {}
    if args.listen:
        changes["listen"] = args.listen
    if args.debug:
        changes["debug"] = True
    return dataclasses.replace(settings, **changes) if changes else settings


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    settings = apply_overrides(get_settings(), args)
    configure_logging(settings.debug)

    logger.info(
        "LoRa exporter started version=%s build_time=%s branch=%s revision=%s",
        settings.build_version, settings.build_time, settings.build_branch, settings.build_revision,
    )
    logger.info("Config: interval=%ds dump_folder=%s geo=%s", settings.interval_seconds, settings.dump_folder, settings.metrics_geo)
    if settings.forward_urls:
        logger.info("Forwarding webhooks to %s", ",".join(settings.forward_urls))

    app = create_app(settings)
    logger.info("Listening on %s for http requests", settings.listen)
    uvicorn.run(
        app,
        host=settings.listen_host,
        port=settings.listen_port,
        log_level="debug" if settings.debug else "info",
    )
    logger.info("Shutdown completed")


if __name__ == "__main__":
    main()
