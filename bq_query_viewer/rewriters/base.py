"""Normalized job metadata consumed by the rewrite engines."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class ParameterType(str, Enum):
    """Scalar parameter types that have a SQL literal rendering."""

    STRING = "STRING"
    DATE = "DATE"
    INT64 = "INT64"
    BOOL = "BOOL"


class ParameterKind(str, Enum):
    """Discriminator for the parameter union."""

    SCALAR = "scalar"
    ARRAY = "array"


@dataclass(frozen=True)
class ScalarParameter:
    """A named scalar query parameter.

    The value is always a string, whatever the type (BigQuery's wire format).
    None means no value was bound.
    """

    name: str
    type_tag: str
    value: Optional[str] = None
    kind: ParameterKind = field(default=ParameterKind.SCALAR, init=False)

    @property
    def is_bound(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class ArrayParameter:
    """A named array query parameter.

    values=None means the whole array is unbound, which is not the same
    thing as an empty array.
    """

    name: str
    element_type_tag: str
    values: Optional[tuple[Optional[str], ...]] = None
    kind: ParameterKind = field(default=ParameterKind.ARRAY, init=False)

    @property
    def is_bound(self) -> bool:
        return self.values is not None


Parameter = Union[ScalarParameter, ArrayParameter]


@dataclass(frozen=True)
class TableRef:
    """A fully qualified BigQuery table."""

    project_id: str
    dataset_id: str
    table_id: str

    @property
    def full_id(self) -> str:
        """Get the dot-joined project.dataset.table id."""
        return f"{self.project_id}.{self.dataset_id}.{self.table_id}"

    @property
    def is_transient(self) -> bool:
        """Tables in `_`-prefixed datasets hold temporary/anonymous results."""
        return self.dataset_id.startswith("_")


@dataclass(frozen=True)
class DefaultDataset:
    """Dataset that bare table names in a job's query resolve against."""

    project_id: str
    dataset_id: str

    @property
    def full_id(self) -> str:
        return f"{self.project_id}.{self.dataset_id}"


@dataclass(frozen=True)
class JobMetadata:
    """Everything needed to rebuild the SQL of one query job."""

    query_text: str
    default_dataset: Optional[DefaultDataset] = None
    parameters: tuple[Parameter, ...] = ()
    referenced_tables: tuple[TableRef, ...] = ()


@dataclass(frozen=True)
class JobLocator:
    """Identifies a job: project, location and job id."""

    project_id: str
    location: str
    job_id: str

    def __str__(self) -> str:
        return f"{self.project_id}.{self.location}.{self.job_id}"
