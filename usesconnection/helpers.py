import re

from pymongo.errors import AutoReconnect, PyMongoError
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

# CR_SERVER_GONE_ERROR, CR_SERVER_LOST
MYSQL_DISCONNECT_CODES = (2006, 2013)
DISCONNECT_PATTERN = re.compile(
    r'server has gone away|lost connection to mysql server', re.IGNORECASE
)

DATA_ACCESS_ERRORS = (SQLAlchemyError, PyMongoError)


def _driver_error_code(error: DBAPIError):
    args = getattr(error.orig, 'args', None)
    if args and isinstance(args[0], int):
        return args[0]
    return None


def is_transient_disconnect(error: BaseException) -> bool:
    """True when the server dropped the connection and a reconnect may help."""
    if isinstance(error, AutoReconnect):
        return True
    if isinstance(error, DBAPIError):
        if _driver_error_code(error) in MYSQL_DISCONNECT_CODES:
            return True
        return bool(DISCONNECT_PATTERN.search(str(error.orig)))
    return False


def is_data_access_error(error: BaseException) -> bool:
    return isinstance(error, DATA_ACCESS_ERRORS)
