import os
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator
from pymongo import MongoClient
from pymongo.database import Database
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from .exceptions import ConfigurationError, ConnectionNotRegistered

DEFAULT_CONNECTION_NAME = 'default'
MONGO_SCHEMES = ('mongodb://', 'mongodb+srv://')

CONNECTION_STR_VARIABLE = 'USESCONNECTION_CONNECTION_STR'
DBNAME_VARIABLE = 'USESCONNECTION_DBNAME'


class ConnectionSettings(BaseModel):
    alias: str
    url: str
    dbname: Optional[str] = None
    verify: bool = True
    engine_options: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('alias', 'url')
    @classmethod
    def not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError('must not be empty')
        return value

    @property
    def is_mongo(self) -> bool:
        return self.url.startswith(MONGO_SCHEMES)


_connection_settings: Dict[str, ConnectionSettings] = {}


def connect(
    url: str,
    dbname: Optional[str] = None,
    alias: str = DEFAULT_CONNECTION_NAME,
    verify: bool = True,
    **engine_options,
) -> ConnectionSettings:
    """Register connection settings under `alias`, replacing any previous ones.

    Nothing is opened here, models open the connection when they
    establish it.
    """
    try:
        settings = ConnectionSettings(
            alias=alias,
            url=url,
            dbname=dbname,
            verify=verify,
            engine_options=engine_options,
        )
    except ValidationError as e:
        raise ConfigurationError(f"invalid settings for connection `{alias}`: {e}") from e
    _connection_settings[alias] = settings
    return settings


def register_connections(connections: Mapping[str, Union[str, Mapping[str, Any]]]) -> None:
    for alias, params in connections.items():
        if isinstance(params, str):
            connect(params, alias=alias)
            continue
        params = dict(params)
        if 'url' not in params:
            raise ConfigurationError(f"url is required for connection `{alias}`")
        params['alias'] = alias
        connect(**params)


def init_connection_params(url: str, dbname: Optional[str] = None) -> None:
    os.environ[CONNECTION_STR_VARIABLE] = url
    if dbname:
        os.environ[DBNAME_VARIABLE] = dbname
    else:
        os.environ.pop(DBNAME_VARIABLE, None)


def get_connection_settings(alias: str = DEFAULT_CONNECTION_NAME) -> ConnectionSettings:
    if alias in _connection_settings:
        return _connection_settings[alias]
    if alias == DEFAULT_CONNECTION_NAME and os.environ.get(CONNECTION_STR_VARIABLE):
        return ConnectionSettings(
            alias=alias,
            url=os.environ[CONNECTION_STR_VARIABLE],
            dbname=os.environ.get(DBNAME_VARIABLE),
        )
    raise ConnectionNotRegistered(alias, list(_connection_settings.keys()))


def disconnect(alias: Optional[str] = None) -> None:
    if alias is None:
        _connection_settings.clear()
    else:
        _connection_settings.pop(alias, None)


class _DBConnection(object):
    def __init__(self, alias: str = DEFAULT_CONNECTION_NAME):
        self.alias = alias
        self.settings = get_connection_settings(alias)
        self._handle = self._init_handle()
        if self.settings.verify:
            try:
                self.ping()
            except Exception:
                self.close()
                raise

    def __repr__(self):
        return f"<_DBConnection alias={self.alias!r}>"

    def _init_handle(self) -> Union[Engine, MongoClient]:
        options = self.settings.engine_options
        if self.settings.is_mongo:
            return MongoClient(self.settings.url, connect=False, **options)
        return create_engine(self.settings.url, **options)

    @property
    def handle(self) -> Union[Engine, MongoClient]:
        return self._handle

    @property
    def engine(self) -> Engine:
        if self.settings.is_mongo:
            raise TypeError(f"connection `{self.alias}` is a mongo connection")
        return self._handle

    def get_database(self) -> Database:
        if not self.settings.is_mongo:
            raise TypeError(f"connection `{self.alias}` is not a mongo connection")
        if self.settings.dbname:
            return self._handle.get_database(self.settings.dbname)
        return self._handle.get_default_database()

    def ping(self) -> None:
        if self.settings.is_mongo:
            self._handle.admin.command('ping')
            return
        with self._handle.connect() as conn:
            conn.execute(text('SELECT 1'))

    def close(self) -> None:
        if self.settings.is_mongo:
            self._handle.close()
        else:
            self._handle.dispose()

    def _reconnect(self) -> '_DBConnection':
        # the old handle stays usable until the new one has passed its ping
        connection = _DBConnection(self.alias)
        self.close()
        return connection
