from typing import ClassVar, Optional

from pydantic import BaseModel, model_validator


class PartialUpdate(BaseModel):
    """Base for PUT bodies: only fields the client sent are applied.

    Columns that cannot hold NULL are listed in ``non_nullable``; sending an
    explicit ``null`` for one of them is a validation error rather than a
    silent no-op.
    """

    non_nullable: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_nulls(self):
        for name in self.non_nullable:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} may not be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ErrorDetail(BaseModel):
    code: str
    message: str
    status: int
    fields: Optional[dict[str, list[str]]] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail
