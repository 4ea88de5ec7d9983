from typing import Any, Generic, TypeVar

import sqlalchemy as sa
from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic.alias_generators import to_camel
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Dialect
from sqlalchemy.sql.type_api import TypeEngine
from sqlalchemy.types import TypeDecorator

T = TypeVar("T")


class PydanticJSONB(TypeDecorator, Generic[T]):
    """
    Column type that round-trips pydantic-validated values through JSON.

    JSONB on PostgreSQL, plain JSON on SQLite and everything else. Values are
    validated on the way in and on the way out, so a row written by an older
    release still comes back as the current model (or fails loudly).

    `pydantic_type` is anything `TypeAdapter` accepts, e.g. a model class or
    `list[UserCorrection]`.
    """

    impl = sa.JSON
    cache_ok: bool = True

    pydantic_type: Any
    _adapter: TypeAdapter[T]

    def __init__(self, pydantic_type: Any) -> None:
        super().__init__()
        self.pydantic_type = pydantic_type
        self._adapter = TypeAdapter(pydantic_type)

    def load_dialect_impl(self, dialect: Dialect) -> TypeEngine[Any]:
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(sa.JSON())

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any | None:
        if value is None:
            return None
        validated: T = self._adapter.validate_python(value)
        return self._adapter.dump_python(validated, mode="json", by_alias=True)

    def process_result_value(self, value: Any, dialect: Dialect) -> T | None:
        if value is None:
            return None
        return self._adapter.validate_python(value)


class CamelModel(BaseModel):
    """Base for API-facing schemas: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
