from __future__ import annotations


class SchemaError(ValueError):
    """A base relation or one of its required columns is missing."""

    def __init__(self, relation: str, missing: list[str] | None = None, detail: str | None = None):
        self.relation = relation
        self.missing = list(missing or [])
        if detail is None:
            detail = f"missing columns {self.missing}" if self.missing else "relation not found"
        super().__init__(f"{relation}: {detail}")
