"""Registry of the record types declared at setup."""

from typing import Any, Dict, Iterable, List, Optional, Type, Union

from loguru import logger
from sqlalchemy import JSON, Boolean, DateTime, Double, Float, Integer, LargeBinary, MetaData, Text
from sqlalchemy.orm import DeclarativeBase, mapped_column
from sqlalchemy.types import TypeEngine

from schema_store.errors import SchemaNotFoundError
from schema_store.schemas import PropertySpec, SchemaDefinition

# Column used as identity for schemas declared without a primary key
ROWID_COLUMN = "_rowid"

RESERVED_PROPERTY_NAMES = frozenset({"metadata", "registry", "to_dict"})

COLUMN_TYPES: Dict[str, Type[TypeEngine]] = {
    "int": Integer,
    "bool": Boolean,
    "float": Float,
    "double": Double,
    "string": Text,
    "date": DateTime,
    "data": LargeBinary,
    "mixed": JSON,
}


class Record:
    """Mixin shared by every mapped record class.

    Subclasses carry their SchemaDefinition as ``__schema__``.
    """

    def to_dict(self) -> Dict[str, Any]:
        """Return the declared properties of this record as a plain dict."""
        return {key: getattr(self, key) for key in self.__schema__.properties}

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in self.to_dict().items())
        return f"{self.__class__.__name__}({fields})"


def _column_for(name: str, spec: PropertySpec, primary_key: bool):
    kwargs: Dict[str, Any] = {
        "primary_key": primary_key,
        "nullable": spec.optional and not primary_key,
        "index": spec.indexed and not primary_key,
    }
    if spec.default is not None:
        kwargs["default"] = spec.default
    if primary_key and spec.type == "string":
        kwargs["autoincrement"] = False
    return mapped_column(name, COLUMN_TYPES[spec.type], **kwargs)


def build_model(base: Type[DeclarativeBase], schema: SchemaDefinition) -> Type[Record]:
    """Create the ORM class for a schema on the given declarative base."""
    attrs: Dict[str, Any] = {
        "__tablename__": schema.name,
        "__schema__": schema,
    }
    if schema.primary_key is None:
        attrs[ROWID_COLUMN] = mapped_column(
            ROWID_COLUMN, Integer, primary_key=True, autoincrement=True
        )
    for name, spec in schema.properties.items():
        if name in RESERVED_PROPERTY_NAMES:
            raise ValueError(f"Property name {name!r} on {schema.name} is reserved")
        attrs[name] = _column_for(name, spec, primary_key=name == schema.primary_key)
    return type(schema.name, (Record, base), attrs)


class SchemaRegistry:
    """Holds the declared schemas, their primary keys and mapped classes.

    Each registry owns a private declarative base, so two stores never share
    table metadata.
    """

    def __init__(self, schemas: Iterable[Union[SchemaDefinition, Dict[str, Any]]]):
        self.schemas: List[SchemaDefinition] = [
            s if isinstance(s, SchemaDefinition) else SchemaDefinition.model_validate(s)
            for s in schemas
        ]
        self.schema_names: List[str] = [schema.name for schema in self.schemas]
        if len(set(self.schema_names)) != len(self.schema_names):
            raise ValueError(f"Duplicate schema names in {self.schema_names}")

        self.primary_keys: Dict[str, Optional[str]] = {
            schema.name: schema.primary_key for schema in self.schemas
        }

        self.base: Type[DeclarativeBase] = type("RecordBase", (DeclarativeBase,), {})
        self.models: Dict[str, Type[Record]] = {
            schema.name: build_model(self.base, schema) for schema in self.schemas
        }
        logger.debug(f"Registered schemas: {self.schema_names}")

    @property
    def metadata(self) -> MetaData:
        return self.base.metadata

    def check_schema(self, name: str) -> None:
        """Raise SchemaNotFoundError if ``name`` was not registered."""
        if name not in self.models:
            raise SchemaNotFoundError(name)

    def get_all_keys(self) -> List[str]:
        return list(self.schema_names)

    def model(self, name: str) -> Type[Record]:
        self.check_schema(name)
        return self.models[name]

    def primary_key(self, name: str) -> Optional[str]:
        self.check_schema(name)
        return self.primary_keys[name]

    def name_for(self, record: Any) -> str:
        """Get the schema name of a record, validating it belongs to this registry."""
        name = type(record).__name__
        if self.models.get(name) is not type(record):
            raise SchemaNotFoundError(name)
        return name

    def __contains__(self, name: object) -> bool:
        return name in self.models

    def __iter__(self):
        return iter(self.schema_names)

    def __len__(self) -> int:
        return len(self.schema_names)
