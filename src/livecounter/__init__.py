"""
LiveCounter - Resumable Server-Pushed Counters

Each session owns one durable counter that ticks once per second while any
browser is watching and streams every value to all of them. Share the
session URL to pick the count up from another browser.
"""

from .config import ApplicationConfig, CatchUpPolicy, Environment, get_config, set_config
from .errors import LiveCounterError, PersistenceError, DeliveryError
from .core import CounterSession, SessionRegistry, Subscriber, encode_update
from .persistence import ScalarStore, MemoryStore, SQLStore, create_store
from .web import create_app

__version__ = "0.1.0"

__all__ = [
    # Configuration
    'ApplicationConfig',
    'CatchUpPolicy',
    'Environment',
    'get_config',
    'set_config',

    # Errors
    'LiveCounterError',
    'PersistenceError',
    'DeliveryError',

    # Core
    'CounterSession',
    'SessionRegistry',
    'Subscriber',
    'encode_update',

    # Persistence
    'ScalarStore',
    'MemoryStore',
    'SQLStore',
    'create_store',

    # Web
    'create_app',
]
