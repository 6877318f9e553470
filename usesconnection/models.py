from pydantic import BaseModel as BasePydanticModel

from .mixins import DBMixin


class Model(DBMixin, BasePydanticModel):
    pass
