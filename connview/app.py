"""Print connection projections for the configured connections as JSON."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import uuid
from pathlib import Path

from .config import LOG_LEVELS, AppConfig, load_config
from .fields import FIELD_NAMES, serialize_connection_info
from .loader import load_auth_models
from .models import UnknownDriverError, build_data_sources
from .session import ConnectionNotFoundError, WebSession

LOG = logging.getLogger(__name__)


def _load_app_config(path: Path | None) -> AppConfig:
    """Load configuration with a small wrapper for test overrides."""

    return load_config(path)


def build_session(config: AppConfig) -> WebSession:
    """Create a session holding every configured connection."""

    session = WebSession(
        uuid.uuid4().hex,
        auth_models=load_auth_models(config),
        default_auth_model=config.default_auth_model,
    )
    for container in build_data_sources(config):
        session.add_connection(container)
    return session


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", type=Path, default=None, help="Path to config.toml")
    parser.add_argument(
        "--connection",
        action="append",
        default=None,
        help="Connection id to print (repeatable; default: all)",
    )
    parser.add_argument(
        "--field",
        action="append",
        default=None,
        choices=FIELD_NAMES,
        help="Field to include (repeatable; default: all)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Override the configured log level",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    config = _load_app_config(args.config)
    logging.basicConfig(level=args.log_level or config.log_level)
    try:
        session = build_session(config)
    except UnknownDriverError as exc:
        LOG.error(str(exc))
        return 1
    try:
        if args.connection:
            infos = [session.get_connection(connection_id) for connection_id in args.connection]
        else:
            infos = list(session.connections)
    except ConnectionNotFoundError as exc:
        LOG.error(str(exc))
        return 1
    payload = [serialize_connection_info(info, args.field) for info in infos]
    print(json.dumps(payload, indent=2))
    return 0


__all__ = ["build_session", "main", "parse_args"]
