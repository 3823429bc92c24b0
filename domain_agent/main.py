import argparse
import logging
import os
import sys
from typing import Dict, List, Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain_agent import config, hypervisor
from domain_agent.exceptions import AgentError, internal_error
from domain_agent.models import InventoryResponse

logger = structlog.get_logger()

app = FastAPI(title="Domain Agent")

METHOD_NOT_ALLOWED_DETAIL = "Invalid request method"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


# ---------------------------------------------------------------------------
# Error rendering: every HTTP error leaves as plain text
# ---------------------------------------------------------------------------


@app.exception_handler(StarletteHTTPException)
async def plain_text_http_error(
    request: Request, exc: StarletteHTTPException
) -> PlainTextResponse:
    """Render HTTP errors (405, 500, ...) as a plain-text body."""
    detail = str(exc.detail)
    if exc.status_code == 405:
        detail = METHOD_NOT_ALLOWED_DETAIL
    return PlainTextResponse(detail, status_code=exc.status_code, headers=exc.headers)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/domainList", response_model=InventoryResponse)
def domain_list() -> InventoryResponse:
    """Return every libvirt domain on this host together with the agent name.

    Declared sync so FastAPI runs it in the worker threadpool; each request
    reads the config file and opens its own libvirt connection.

    Returns:
        InventoryResponse with 'domain_info' (dom_name/status pairs) and
        'agent_name'

    Raises:
        HTTPException: 500 if the config or the domain list cannot be loaded
    """
    try:
        agent_config = config.load_config(config.get_config_path())
    except AgentError as e:
        raise internal_error(f"Failed to load config: {e}")

    try:
        domains = hypervisor.list_domains(config.get_libvirt_uri())
    except AgentError as e:
        raise internal_error(f"Failed to fetch domains: {e}")

    return InventoryResponse(domain_info=domains, agent_name=agent_config.agent_name)


@app.get("/health")
async def health() -> Dict[str, str]:
    """Liveness probe; touches neither the config file nor libvirt."""
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _configure_logging(level: str) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            LOG_LEVELS.get(level.lower(), logging.INFO)
        )
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="domain-agent",
        description="Serve the local libvirt domain inventory over HTTP.",
    )
    parser.add_argument(
        "-c", "--config", default="", help="Path to the configuration file"
    )
    parser.add_argument("--host", default=config.HOST, help="Address to bind")
    parser.add_argument("--port", type=int, default=config.PORT, help="Port to bind")
    parser.add_argument(
        "--libvirt-uri", default=config.LIBVIRT_URI, help="libvirt connection URI"
    )
    parser.add_argument(
        "--log-level",
        type=str.lower,
        choices=sorted(LOG_LEVELS),
        default=config.LOG_LEVEL.lower(),
        help="Log verbosity",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Validate startup flags and run the HTTP server.

    Returns a non-zero exit code without starting the server when the
    config path is missing or does not exist.
    """
    args = _build_parser().parse_args(argv)
    _configure_logging(args.log_level)

    if not args.config:
        logger.critical("config_path_required", hint="use -c <path>")
        return 1
    if not os.path.exists(args.config):
        logger.critical("config_not_found", path=args.config)
        return 1

    config.set_config_path(args.config)
    config.set_libvirt_uri(args.libvirt_uri)

    logger.info(
        "server_starting",
        host=args.host,
        port=args.port,
        config=args.config,
        libvirt_uri=args.libvirt_uri,
    )
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
