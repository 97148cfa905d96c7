from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.exceptions import PreconditionError

# Default parameter values for a floating buoy run
DEFAULT_CAST_SIZE = 10000  # Samples consumed by each cast
DEFAULT_NUM_CAST = 3  # Number of casts, each followed by a prune
DEFAULT_RANGE = 1000000  # Samples lie in [0, range)
DEFAULT_NUM_GROUPS = 99  # One group per percentile 1..99
DEFAULT_NUM_TRACERS = 11  # Tracers per group


class CastConfig(BaseModel):
    """
    Parameters of a floating buoy cast.

    Accepts camelCase aliases (numGroups, castSize, ...) as well as the
    snake_case field names.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    num_groups: int = Field(default=DEFAULT_NUM_GROUPS, ge=1, le=99, alias="numGroups")
    num_tracers: int = Field(default=DEFAULT_NUM_TRACERS, ge=2, alias="numTracers")
    range: int = Field(default=DEFAULT_RANGE, ge=2)
    cast_size: int = Field(default=DEFAULT_CAST_SIZE, ge=1, alias="castSize")
    num_cast: int = Field(default=DEFAULT_NUM_CAST, ge=1, alias="numCast")
    clamp: bool = True

    @field_validator("num_groups")
    @classmethod
    def _groups_divide_percentiles(cls, value: int) -> int:
        if 100 % (value + 1) != 0:
            raise ValueError("100 must be divisible by num_groups + 1")
        return value

    @property
    def group_width(self) -> int:
        """Percentile spacing between directly estimated anchors."""
        return 100 // (self.num_groups + 1)

    @property
    def total_samples(self) -> int:
        return self.cast_size * self.num_cast

    @classmethod
    def build(cls, **params: Any) -> "CastConfig":
        """
        Validate parameters into a CastConfig.

        :raises PreconditionError: If any parameter is outside its domain
        """
        try:
            return cls(**params)
        except ValidationError as e:
            error = e.errors()[0]
            # Error locations may use the alias; report the field name
            field_names = {field.alias or name: name for name, field in cls.model_fields.items()}
            parameter = field_names.get(error["loc"][0], str(error["loc"][0])) if error["loc"] else None
            raise PreconditionError(
                f"Invalid cast parameters: {error['msg']}", parameter=parameter, value=error.get("input")
            ) from e

    def to_tags(self) -> Dict[str, str]:
        """Parameters keyed by their camelCase names, for log lines."""
        return {key: str(value) for key, value in self.model_dump(by_alias=True).items()}
