"""Dataset and example models.

Examples are immutable. Every mutation of a dataset produces a new
DatasetVersion snapshot, so a dataset is an ordered list of versions.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import Field

from pairwise_evaluator.models.base import BaseSchema, FrozenSchema

__all__ = ["Dataset", "DatasetVersion", "Example"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Example(FrozenSchema):
    """One input/expected-output record in a dataset.

    Attributes:
        id: Unique example identifier.
        dataset_id: Identifier of the owning dataset.
        inputs: Input mapping passed to the task.
        outputs: Reference (expected) outputs, if any.
        metadata: Free-form metadata used for filtering.
        splits: Named splits this example belongs to.
        created_at: Creation timestamp.

    """

    id: str = Field(..., min_length=1)
    dataset_id: str = Field(..., min_length=1)
    inputs: dict[str, Any] = Field(default_factory=dict)
    outputs: dict[str, Any] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    splits: list[str] = Field(default_factory=lambda: ["base"])
    created_at: datetime = Field(default_factory=_utcnow)

    def matches(
        self,
        metadata: dict[str, Any] | None = None,
        splits: list[str] | None = None,
    ) -> bool:
        """Check whether this example satisfies metadata and split filters.

        Metadata filters match when every given key is present with an
        equal value. Split filters match when any given split is present.
        """
        if metadata:
            for key, value in metadata.items():
                if self.metadata.get(key) != value:
                    return False
        if splits:
            if not set(splits) & set(self.splits):
                return False
        return True


class DatasetVersion(BaseSchema):
    """Snapshot of a dataset's examples at one point in time.

    Attributes:
        version: Monotonic version number, starting at 1.
        as_of: When the snapshot was taken.
        tags: Human-readable tags (e.g. "prod") pointing at this version.
        examples: Examples present in this snapshot.

    """

    version: int = Field(..., ge=1)
    as_of: datetime = Field(default_factory=_utcnow)
    tags: list[str] = Field(default_factory=list)
    examples: list[Example] = Field(default_factory=list)


class Dataset(BaseSchema):
    """A named, versioned collection of examples.

    Attributes:
        id: Unique dataset identifier.
        name: Human-readable dataset name.
        description: Optional description.
        versions: Snapshots ordered by version number.

    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str | None = None
    versions: list[DatasetVersion] = Field(default_factory=list)

    @property
    def latest_version(self) -> DatasetVersion | None:
        """Return the most recent snapshot, if any."""
        if not self.versions:
            return None
        return max(self.versions, key=lambda v: v.version)

    def version_as_of(
        self, as_of: int | str | datetime | None = None
    ) -> DatasetVersion | None:
        """Resolve a snapshot by version number, tag, or timestamp.

        Args:
            as_of: Version number, tag name, or datetime. None means latest.
                Naive datetimes are read as UTC.

        Returns:
            The matching snapshot, or None when nothing matches.

        """
        if as_of is None or as_of == "latest":
            return self.latest_version
        if isinstance(as_of, int):
            return next((v for v in self.versions if v.version == as_of), None)
        if isinstance(as_of, str):
            return next((v for v in self.versions if as_of in v.tags), None)

        cutoff = _as_utc(as_of)
        candidates = [v for v in self.versions if _as_utc(v.as_of) <= cutoff]
        if not candidates:
            return None
        return max(candidates, key=lambda v: v.version)
