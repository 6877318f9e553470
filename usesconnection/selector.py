from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .environment import (
    EnvironmentSet,
    SelectorContext,
    environment_matches,
    normalize_environments,
)
from .exceptions import ConfigurationError
from .helpers import is_data_access_error, is_transient_disconnect

MAX_ATTEMPTS = 2


class ConnectionOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    in_: Any = Field(alias='in')
    except_: Any = Field(default=(), alias='except', validate_default=True)

    @field_validator('in_', mode='before')
    @classmethod
    def normalize_in(cls, value: Any) -> EnvironmentSet:
        environments = normalize_environments(value)
        if not environments:
            raise ValueError('environment for inclusion must be specified')
        return environments

    @field_validator('except_', mode='before')
    @classmethod
    def normalize_except(cls, value: Any) -> EnvironmentSet:
        return normalize_environments(value)

    def applies_to(self, environment: str) -> bool:
        if environment_matches(environment, self.except_):
            return False
        return environment_matches(environment, self.in_)


def _build_options(in_: Any, except_: Any) -> ConnectionOptions:
    try:
        return ConnectionOptions(in_=in_, except_=except_)
    except ValidationError as e:
        error = e.errors()[0].get('ctx', {}).get('error')
        raise ConfigurationError(str(error) if error else str(e)) from e


def select_connection(
    model,
    connection_name: Optional[str] = None,
    *,
    in_: Any = None,
    except_: Any = (),
    context: Optional[SelectorContext] = None,
) -> bool:
    """Point `model` at the `connection_name` connection when the current
    environment is included by `in_` and not excluded by `except_`.

    `in_` and `except_` take a single environment name, a collection of
    names or `"all"`. Returns True when the model was rebound.

    A dropped server ("MySQL server has gone away" and the like) during the
    first attempt triggers a reconnect of the model's current connection and
    one more attempt; any other database error is logged and re-raised.
    """
    options = _build_options(in_, except_)
    context = context or SelectorContext.from_env()
    logger = context.logger

    if not options.applies_to(context.environment):
        return False
    if not connection_name:
        raise ConfigurationError('connection name required')

    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            model.establish_connection(connection_name)
            return True
        except Exception as e:
            if not is_data_access_error(e):
                raise
            if not is_transient_disconnect(e):
                logger.error(
                    "uses_connection: %s caught on `%s`, but unsure what to do with it: %s",
                    type(e).__name__, connection_name, e,
                )
                raise
            if attempt == MAX_ATTEMPTS:
                raise
            logger.info(
                "uses_connection: %s caught on `%s`, trying to reconnect...",
                type(e).__name__, connection_name,
            )
            model.reconnect()


def uses_connection(
    connection_name: Optional[str] = None,
    *,
    in_: Any = None,
    except_: Any = (),
    context: Optional[SelectorContext] = None,
):
    """Class decorator form of `select_connection`.

        @uses_connection('shared', in_=['production', 'staging'], except_='test')
        class Book(Model):
            name: str
    """
    def decorator(model):
        select_connection(model, connection_name, in_=in_, except_=except_, context=context)
        return model

    return decorator
