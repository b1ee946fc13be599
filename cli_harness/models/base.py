"""Base model configuration for unit definition structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model for data parsed from .test files.

    YAML scalars such as ``expected: 42`` arrive as numbers, so they are
    coerced to strings where a field expects one.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )
