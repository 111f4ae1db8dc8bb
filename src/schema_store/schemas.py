"""Pydantic models describing the record types an ObjectStore manages.

A schema is declared the same way embedded object databases declare them:

    SchemaDefinition(
        name="User",
        primary_key="id",
        properties={"id": "int", "name": "string", "email": "string?"},
    )

Property types use short names. A trailing ``?`` marks the property as
optional. The long form ``PropertySpec(type="string", optional=True)`` or the
equivalent mapping is accepted anywhere the short form is.
"""

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PropertyType = Literal["int", "bool", "float", "double", "string", "date", "data", "mixed"]

PROPERTY_TYPES: tuple[str, ...] = (
    "int", "bool", "float", "double", "string", "date", "data", "mixed"
)


class PropertySpec(BaseModel):
    """A single property of a schema."""

    model_config = ConfigDict(frozen=True)

    type: PropertyType = Field(..., description="Storage type of the property")
    optional: bool = Field(default=False, description="Whether the property accepts None")
    default: Any = Field(default=None, description="Default value applied on create")
    indexed: bool = Field(default=False, description="Create an index on the property")

    @classmethod
    def parse(cls, value: Union["PropertySpec", str, Dict[str, Any]]) -> "PropertySpec":
        """Build a PropertySpec from the short string form or a mapping."""
        if isinstance(value, PropertySpec):
            return value
        if isinstance(value, str):
            optional = value.endswith("?")
            type_name = value[:-1] if optional else value
            if type_name not in PROPERTY_TYPES:
                raise ValueError(f"Unknown property type: {value}")
            return cls(type=type_name, optional=optional)
        return cls.model_validate(value)


class SchemaDefinition(BaseModel):
    """A named record type, declared once at setup."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique name of the record type")
    primary_key: Optional[str] = Field(
        default=None, description="Property used as the primary key, if any"
    )
    properties: Dict[str, PropertySpec] = Field(
        default_factory=dict, description="Properties keyed by name"
    )

    @field_validator("properties", mode="before")
    @classmethod
    def parse_properties(cls, value: Any) -> Dict[str, PropertySpec]:
        if not isinstance(value, dict):
            raise ValueError("properties must be a mapping of name to type")
        return {key: PropertySpec.parse(spec) for key, spec in value.items()}

    @field_validator("name")
    @classmethod
    def name_is_identifier(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"Schema name must be a valid identifier: {value!r}")
        # leading underscore is reserved for internal tables
        if value.startswith("_"):
            raise ValueError(f"Schema name cannot start with an underscore: {value!r}")
        return value

    @model_validator(mode="after")
    def check_primary_key(self) -> "SchemaDefinition":
        for key in self.properties:
            if not key.isidentifier() or key.startswith("_"):
                raise ValueError(f"Invalid property name on {self.name}: {key!r}")
        if self.primary_key is None:
            return self
        spec = self.properties.get(self.primary_key)
        if spec is None:
            raise ValueError(
                f"Primary key {self.primary_key!r} is not a property of {self.name}"
            )
        if spec.optional:
            raise ValueError(f"Primary key {self.primary_key!r} of {self.name} cannot be optional")
        if spec.type not in ("int", "string"):
            raise ValueError(
                f"Primary key {self.primary_key!r} of {self.name} must be int or string"
            )
        return self
