from .cli import cli, main
from .logging_setup import setup_logging

__all__ = ['cli', 'main', 'setup_logging']
