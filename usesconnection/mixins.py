from typing import Optional

from pymongo.collection import Collection
from sqlalchemy.engine import Engine

from .connection import _DBConnection, DEFAULT_CONNECTION_NAME


class DBMixin(object):
    __connection__ = None

    @classmethod
    def establish_connection(cls, alias: str = DEFAULT_CONNECTION_NAME) -> _DBConnection:
        """Bind `alias` to this class; subclasses follow unless they bind their own."""
        connection = _DBConnection(alias)
        cls.__connection__ = connection
        return connection

    @classmethod
    def get_connection(cls) -> _DBConnection:
        if cls.__connection__ is None:
            return cls.establish_connection(DEFAULT_CONNECTION_NAME)
        return cls.__connection__

    @classmethod
    def connection_name(cls) -> str:
        if cls.__connection__ is None:
            return DEFAULT_CONNECTION_NAME
        return cls.__connection__.alias

    @classmethod
    def reconnect(cls) -> Optional[_DBConnection]:
        if cls.__connection__ is None:
            return None
        cls.__connection__ = cls.__connection__._reconnect()
        return cls.__connection__

    @classmethod
    def get_engine(cls) -> Engine:
        return cls.get_connection().engine

    @classmethod
    def get_collection(cls) -> Collection:
        return cls.get_connection().get_database().get_collection(cls.__name__)
