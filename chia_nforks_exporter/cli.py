#!/usr/bin/env python3
"""
chia-exporter-nforks CLI Interface
"""

import sys
import logging

import click
from prometheus_client import REGISTRY

from . import __version__
from .config import load_config
from .exceptions import ConfigError
from .exporter import ScrapeOrchestrator
from .registry import CoinRegistry
from .server import serve
from .utils import setup_logging

logger = logging.getLogger(__name__)


@click.command()
@click.option('--config', 'config_path', type=click.Path(), default='config.yaml', show_default=True,
              help='Path to the YAML config file')
@click.option('--no-probe', is_flag=True, help='Skip the startup get_network_info check')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--quiet', is_flag=True, help='Only log errors')
@click.version_option(__version__, prog_name='chia_exporter_nforks')
def cli(config_path, no_probe, debug, quiet):
    """Prometheus exporter for Chia and its forks"""

    if debug:
        setup_logging(logging.DEBUG)
    elif quiet:
        setup_logging(logging.ERROR)
    else:
        setup_logging(logging.INFO)

    logger.info(f"chia_exporter_nforks version {__version__}")

    try:
        config = load_config(config_path)
        registry = CoinRegistry.from_config(config, probe=not no_probe)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    REGISTRY.register(ScrapeOrchestrator(registry))

    try:
        serve(config.port, config.listen_address, REGISTRY)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        registry.close()


if __name__ == '__main__':
    cli()
