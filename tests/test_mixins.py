from unittest import mock

import pytest
from pymongo.collection import Collection
from sqlalchemy import text
from sqlalchemy.engine import Engine

from usesconnection import Model, connect, disconnect
from usesconnection.connection import _DBConnection, DEFAULT_CONNECTION_NAME
from usesconnection.exceptions import ConnectionNotRegistered


class TestDBMixin:
    def setup_method(self):
        disconnect()
        connect("sqlite://")
        connect("sqlite://", alias="shared")

        class Book(Model):
            name: str
            rating: int = 1

        class Author(Model):
            name: str

        self.Book = Book
        self.Author = Author

    def teardown_method(self):
        disconnect()

    def test_default_connection_is_lazy(self):
        assert self.Book.__connection__ is None
        assert self.Book.connection_name() == DEFAULT_CONNECTION_NAME
        assert isinstance(self.Book.get_engine(), Engine)
        assert self.Book.__connection__.alias == DEFAULT_CONNECTION_NAME

    def test_establish_connection_is_class_scoped(self):
        self.Book.establish_connection("shared")
        assert self.Book.connection_name() == "shared"
        assert self.Author.connection_name() == DEFAULT_CONNECTION_NAME
        assert Model.__connection__ is None

    def test_subclass_inherits_binding(self):
        self.Book.establish_connection("shared")

        class Novel(self.Book):
            pages: int = 0

        assert Novel.connection_name() == "shared"
        Novel.establish_connection(DEFAULT_CONNECTION_NAME)
        assert Novel.connection_name() == DEFAULT_CONNECTION_NAME
        assert self.Book.connection_name() == "shared"

    def test_reconnect(self):
        assert self.Book.reconnect() is None

        connection = self.Book.establish_connection("shared")
        reconnected = self.Book.reconnect()
        assert reconnected is not connection
        assert self.Book.get_connection() is reconnected
        assert reconnected.alias == "shared"

    def test_disconnect_leaves_bound_handles_usable(self):
        connection = self.Book.establish_connection("shared")
        disconnect("shared")
        assert self.Book.get_connection() is connection
        with connection.engine.connect() as conn:
            assert conn.execute(text("SELECT 1")).scalar() == 1
        with pytest.raises(ConnectionNotRegistered):
            self.Book.reconnect()
        assert self.Book.get_connection() is connection


def test_mongo_collection():
    disconnect()
    connect("mongodb://127.0.0.1:27017", "library", alias="documents")

    class Review(Model):
        text: str

    with mock.patch.object(_DBConnection, "ping") as ping:
        Review.establish_connection("documents")
    ping.assert_called_once_with()

    collection = Review.get_collection()
    assert isinstance(collection, Collection)
    assert collection.name == "Review"
    assert collection.database.name == "library"
    Review.get_connection().close()
    disconnect()
