"""
Evidence data model — Service entities, row schemas, citations, evidence tables
and reports.

An Evidence is a captioned table: an ordered list of SourceCitations (which
external calls produced the data) plus an ordered list of EvidenceRows that
all share one RowSchema. A Report is an append-only list of Evidence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


class SchemaError(ValueError):
    """Raised when a row schema or a row built from it is malformed."""
    pass


# ─── Service Entities ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class ServiceEntity:
    """One discovered unit of the monitored service."""
    service_name: str
    entity_type: str
    display_name: str
    identifier: str

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.service_name, self.entity_type, self.identifier)

    def to_dict(self) -> dict:
        return {
            "service_name": self.service_name,
            "entity_type": self.entity_type,
            "display_name": self.display_name,
            "identifier": self.identifier,
        }


class ServiceEntities:
    """Ordered, de-duplicated collection of discovered entities."""

    def __init__(self):
        self.entities: list[ServiceEntity] = []
        self._seen: set[tuple[str, str, str]] = set()

    def add_service(
        self,
        service_name: str,
        entity_type: str,
        display_name: str,
        identifier: str,
    ) -> bool:
        """Add an entity. Returns False if the triple was already present."""
        entity = ServiceEntity(service_name, entity_type, display_name, identifier)
        if entity.key in self._seen:
            return False
        self._seen.add(entity.key)
        self.entities.append(entity)
        return True

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self):
        return iter(self.entities)


# ─── Row Schema ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class IdField:
    """The row-key field of an evidence row."""
    name: str
    display: str = "id"


@dataclass(frozen=True)
class DisplayField:
    """A displayed column of an evidence row."""
    name: str
    display: str
    order: int


@dataclass(frozen=True)
class RowSchema:
    """
    Declarative description of an evidence row.

    Built once per evidence topic. Column order is the ascending `order` of
    the display fields; orders need not be contiguous but must be unique.
    """
    id_field: IdField
    fields: tuple[DisplayField, ...]

    def __post_init__(self):
        if not self.id_field.name:
            raise SchemaError("Row schema id field must have a name")
        names = [self.id_field.name] + [f.name for f in self.fields]
        if len(names) != len(set(names)):
            raise SchemaError(f"Duplicate field names in row schema: {names}")
        orders = []
        for f in self.fields:
            if not f.display:
                raise SchemaError(f"Field '{f.name}' has no display label")
            if not isinstance(f.order, int) or isinstance(f.order, bool):
                raise SchemaError(f"Field '{f.name}' order must be an int, got {f.order!r}")
            orders.append(f.order)
        if len(orders) != len(set(orders)):
            raise SchemaError(f"Duplicate column orders in row schema: {orders}")
        # Store columns pre-sorted so every consumer sees one order
        object.__setattr__(
            self, "fields", tuple(sorted(self.fields, key=lambda f: f.order))
        )

    @property
    def field_names(self) -> tuple[str, ...]:
        return (self.id_field.name,) + tuple(f.name for f in self.fields)

    @property
    def columns(self) -> list[str]:
        """Display labels in column order, id first."""
        return [self.id_field.display] + [f.display for f in self.fields]

    def row(self, **values: Any) -> "EvidenceRow":
        """Build a row, enforcing the schema's field set and a non-empty id."""
        expected = set(self.field_names)
        given = set(values)
        if given != expected:
            missing = sorted(expected - given)
            extra = sorted(given - expected)
            raise SchemaError(
                f"Row does not match schema (missing={missing}, unexpected={extra})"
            )
        identifier = values[self.id_field.name]
        if identifier is None or str(identifier) == "":
            raise SchemaError(f"Row identifier '{self.id_field.name}' must be non-empty")
        return EvidenceRow(
            schema=self,
            identifier=str(identifier),
            values=tuple(values[f.name] for f in self.fields),
        )

    def to_dict(self) -> dict:
        return {
            "id_field": {"name": self.id_field.name, "display": self.id_field.display},
            "fields": [
                {"name": f.name, "display": f.display, "order": f.order}
                for f in self.fields
            ],
        }


@dataclass(frozen=True)
class EvidenceRow:
    """A single typed record. Values are stored in schema column order."""
    schema: RowSchema
    identifier: str
    values: tuple[Any, ...]

    def get(self, name: str) -> Any:
        if name == self.schema.id_field.name:
            return self.identifier
        for f, value in zip(self.schema.fields, self.values):
            if f.name == name:
                return value
        raise KeyError(name)

    def cells(self) -> list[tuple[str, Any]]:
        """(label, value) pairs in column order, id first."""
        return [(self.schema.id_field.display, self.identifier)] + [
            (f.display, value) for f, value in zip(self.schema.fields, self.values)
        ]

    def to_dict(self) -> dict:
        return dict(self.cells())


# ─── Citations, Evidence, Report ────────────────────────────────────────────

@dataclass(frozen=True)
class SourceCitation:
    """Which external call produced which value."""
    reference: str
    observed_value: str

    def to_dict(self) -> dict:
        return {"reference": self.reference, "observed_value": self.observed_value}


class EvidenceSealedError(RuntimeError):
    """Raised when an Evidence is modified after being added to a Report."""
    pass


@dataclass
class Evidence:
    """
    A named, captioned, described and sourced table of facts.

    Sources and rows only grow through add_source/add_row and are exposed
    as tuples; once sealed the evidence cannot change at all.
    """
    service_name: str
    entity_type: str
    caption: str
    description: str
    schema: RowSchema
    _sources: list[SourceCitation] = field(default_factory=list, init=False, repr=False)
    _rows: list[EvidenceRow] = field(default_factory=list, init=False, repr=False)
    _sealed: bool = field(default=False, init=False, repr=False, compare=False)

    @property
    def sources(self) -> tuple[SourceCitation, ...]:
        return tuple(self._sources)

    @property
    def rows(self) -> tuple[EvidenceRow, ...]:
        return tuple(self._rows)

    def add_source(self, reference: str, observed_value: Any) -> SourceCitation:
        self._check_open()
        citation = SourceCitation(reference=reference, observed_value=str(observed_value))
        self._sources.append(citation)
        return citation

    def add_row(self, row: EvidenceRow) -> EvidenceRow:
        self._check_open()
        if row.schema != self.schema:
            raise SchemaError(
                f"Row schema does not match evidence '{self.caption}' schema"
            )
        self._rows.append(row)
        return row

    def seal(self):
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def _check_open(self):
        if self._sealed:
            raise EvidenceSealedError(
                f"Evidence '{self.caption}' is part of a report and can no longer change"
            )

    def to_dict(self) -> dict:
        return {
            "service_name": self.service_name,
            "entity_type": self.entity_type,
            "caption": self.caption,
            "description": self.description,
            "schema": self.schema.to_dict(),
            "sources": [s.to_dict() for s in self.sources],
            "rows": [r.to_dict() for r in self.rows],
        }


class Report:
    """Append-only, insertion-ordered collection of Evidence."""

    def __init__(self):
        self._evidences: list[Evidence] = []

    def add_evidence(self, evidence: Evidence):
        evidence.seal()
        self._evidences.append(evidence)

    @property
    def evidences(self) -> tuple[Evidence, ...]:
        return tuple(self._evidences)

    def find(self, entity_type: str) -> Optional[Evidence]:
        for evidence in self._evidences:
            if evidence.entity_type == entity_type:
                return evidence
        return None

    def __len__(self) -> int:
        return len(self._evidences)

    def __iter__(self):
        return iter(self._evidences)

    def to_dict(self) -> dict:
        return {"evidences": [e.to_dict() for e in self._evidences]}
