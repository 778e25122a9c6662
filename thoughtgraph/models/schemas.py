"""Pydantic models for thought records, graph elements and sync messages."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from thoughtgraph.utils.exceptions import RecordValidationError

PositiveInt = Annotated[StrictInt, Field(ge=1)]

NodeKind = Literal["main", "revision", "branch"]
EdgeKind = Literal["linear", "branch", "revision"]

MAIN_CONTEXT = "main"


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ── Input records ────────────────────────────────────────────────────


class ThoughtRecord(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    # Required fields first: validation errors are reported in declaration order.
    thought: StrictStr = Field(..., min_length=1)
    thought_number: PositiveInt
    total_thoughts: PositiveInt
    next_thought_needed: StrictBool

    is_revision: StrictBool | None = None
    revises_thought: PositiveInt | None = None
    branch_from_thought: PositiveInt | None = None
    branch_id: StrictStr | None = None
    needs_more_thoughts: StrictBool | None = None

    @model_validator(mode="after")
    def _check_relations(self) -> ThoughtRecord:
        if self.is_revision is True and self.revises_thought is None:
            raise ValueError(
                "`isRevision` is true, but `revisesThought` is missing or not a positive integer."
            )
        if self.is_revision is not True and self.revises_thought is not None:
            raise ValueError("`revisesThought` is provided, but `isRevision` is not true.")
        if self.branch_id is not None and self.branch_from_thought is None:
            raise ValueError(
                "`branchId` is provided, but `branchFromThought` is missing or not a positive integer."
            )
        # Branch node ids would collide with main-line ids.
        if self.branch_id == MAIN_CONTEXT:
            raise ValueError(f'`branchId` "{MAIN_CONTEXT}" is reserved for the main line.')
        return self

    @property
    def context(self) -> str:
        """Branch context used for node identity; an empty branch id counts as main."""
        return self.branch_id or MAIN_CONTEXT


_FIELD_RULES = {
    "thought": "must be a non-empty string",
    "thoughtNumber": "must be a positive integer",
    "totalThoughts": "must be a positive integer",
    "nextThoughtNeeded": "must be a boolean",
    "isRevision": "must be a boolean if provided",
    "revisesThought": "must be a positive integer if provided",
    "branchFromThought": "must be a positive integer if provided",
    "branchId": "must be a string if provided",
    "needsMoreThoughts": "must be a boolean if provided",
}


def validate_record(data: Any) -> ThoughtRecord:
    """Validate an untyped thought record and normalise it.

    Raises RecordValidationError with a human-readable message naming the
    first offending field. On success ``totalThoughts`` is raised to
    ``thoughtNumber`` when the estimate was too low.
    """
    try:
        record = ThoughtRecord.model_validate(data)
    except ValidationError as exc:
        err = exc.errors()[0]
        loc = err.get("loc") or ()
        if err["type"] == "value_error":
            raise RecordValidationError(f"Invalid input: {err['ctx']['error']}") from None
        if not loc:
            raise RecordValidationError(f"Invalid input: {err['msg']}") from None
        field = str(loc[0])
        rule = _FIELD_RULES.get(field, err["msg"])
        raise RecordValidationError(f"Invalid {field}: {rule}", field=field) from None

    if record.thought_number > record.total_thoughts:
        record = record.model_copy(update={"total_thoughts": record.thought_number})
    return record


# ── Graph elements ───────────────────────────────────────────────────


class GraphNode(WireModel):
    id: str
    thought_number: int
    kind: NodeKind
    label: str
    tooltip: str


class GraphEdge(WireModel):
    id: str
    source: str = Field(alias="from")
    target: str = Field(alias="to")
    kind: EdgeKind


# ── Sync messages ────────────────────────────────────────────────────


class InitMessage(WireModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_wire() for n in self.nodes],
            "edges": [e.to_wire() for e in self.edges],
        }


class DeltaMessage(WireModel):
    new_node: GraphNode | None = None
    new_edges: list[GraphEdge] = Field(default_factory=list)
    # Metadata refresh of an existing node; never set together with new_node.
    updated_node: GraphNode | None = None


# ── Ingestion results ────────────────────────────────────────────────


class ThoughtProcessed(WireModel):
    thought_number: int
    total_thoughts: int
    next_thought_needed: bool
    branches: list[str] = Field(default_factory=list)
    thought_history_length: int = 0


class ThoughtFailed(WireModel):
    error: str
    status: Literal["failed"] = "failed"
