from .connection import (
    DEFAULT_CONNECTION_NAME,
    connect,
    disconnect,
    get_connection_settings,
    init_connection_params,
    register_connections,
)
from .environment import ALL, SelectorContext, current_environment
from .exceptions import ConfigurationError, ConnectionNotRegistered, UsesConnectionError
from .mixins import DBMixin
from .models import Model
from .selector import select_connection, uses_connection

__version__ = '0.1.0'
