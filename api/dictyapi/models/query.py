from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ParameterBundle(BaseModel):
    """JSON-API query parameters parsed from a single request.

    Built once per request by the query middleware and never modified
    afterwards.
    """

    model_config = ConfigDict(frozen=True)

    includes: Tuple[str, ...] = Field(
        default=(), description="Relationship paths from ?include=a,b"
    )
    fields: Dict[str, Tuple[str, ...]] = Field(
        default_factory=dict,
        description="Sparse fieldsets keyed by resource type, from ?fields[type]=a,b",
    )
    filters: Dict[str, str] = Field(
        default_factory=dict, description="Filter values keyed by name, from ?filter[name]=v"
    )

    @computed_field
    @property
    def has_includes(self) -> bool:
        return len(self.includes) > 0

    @computed_field
    @property
    def has_fields(self) -> bool:
        return len(self.fields) > 0

    @computed_field
    @property
    def has_filters(self) -> bool:
        return len(self.filters) > 0

    @property
    def is_empty(self) -> bool:
        """True when the request carried no recognized parameter."""
        return not (self.has_includes or self.has_fields or self.has_filters)
