"""Decision log Pydantic schemas for storage documents, API requests and responses.

Attribute names are snake_case in Python; the persisted document and HTTP
payloads use camelCase aliases (``gutFeeling``, ``keyFactors``, ``createdAt``).
"""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from resolve.core.exceptions import FormValidationError
from resolve.domain.decision_logs import DecisionStatus, KeyFactor, split_lines

TextLine = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
GutFeeling = Annotated[int, Field(ge=0, le=100)]
# Key factors form a set; duplicates collapse, first occurrence wins
KeyFactors = Annotated[list[KeyFactor], AfterValidator(lambda factors: list(dict.fromkeys(factors)))]


class CamelModel(BaseModel):
    """Base model that reads either field names or camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DecisionLog(CamelModel):
    """One stored decision record."""

    id: str
    title: TextLine
    pros: list[TextLine] = Field(default_factory=list)
    cons: list[TextLine] = Field(default_factory=list)
    gut_feeling: GutFeeling
    key_factors: KeyFactors
    status: DecisionStatus
    reflection: str | None = None
    outcome: str | None = None
    created_at: datetime
    updated_at: datetime


class DecisionLogCreate(CamelModel):
    """Validated input for creating a decision log."""

    title: TextLine
    pros: list[TextLine] = Field(default_factory=list)
    cons: list[TextLine] = Field(default_factory=list)
    gut_feeling: GutFeeling = 50
    key_factors: KeyFactors = Field(min_length=1)
    status: DecisionStatus = DecisionStatus.PENDING
    reflection: str | None = None
    outcome: str | None = None


class DecisionLogUpdate(CamelModel):
    """Partial update. Only fields explicitly set are merged.

    Identity and timestamp fields are not declared, so ``id``, ``createdAt``
    and ``updatedAt`` in a payload are ignored.
    """

    title: TextLine | None = None
    pros: list[TextLine] | None = None
    cons: list[TextLine] | None = None
    gut_feeling: GutFeeling | None = None
    key_factors: KeyFactors | None = None
    status: DecisionStatus | None = None
    reflection: str | None = None
    outcome: str | None = None


class DecisionLogForm(CamelModel):
    """Raw form input as typed by the user.

    Pros and cons arrive as newline-delimited text; reflection and outcome
    as possibly blank text.
    """

    title: str = ""
    pros: str = ""
    cons: str = ""
    gut_feeling: GutFeeling = 50
    key_factors: list[KeyFactor] = Field(default_factory=list)
    status: DecisionStatus = DecisionStatus.PENDING
    reflection: str = ""
    outcome: str = ""

    def validate_fields(self) -> dict[str, str]:
        """Return a map of field name to user-facing error message (empty when valid)."""
        errors: dict[str, str] = {}
        if not self.title.strip():
            errors["title"] = "Decision title is required"
        if not self.pros.strip() and not self.cons.strip():
            errors["proscons"] = "Please add at least one pro or con"
        if not self.key_factors:
            errors["keyFactors"] = "Please select at least one key factor"
        return errors

    def _cleaned(self) -> dict:
        errors = self.validate_fields()
        if errors:
            raise FormValidationError(errors)
        return {
            "title": self.title.strip(),
            "pros": split_lines(self.pros),
            "cons": split_lines(self.cons),
            "gut_feeling": self.gut_feeling,
            "key_factors": self.key_factors,
            "status": self.status,
            "reflection": self.reflection.strip() or None,
            "outcome": self.outcome.strip() or None,
        }

    def to_create(self) -> DecisionLogCreate:
        """Convert to store input.

        Raises:
            FormValidationError: Title, pros/cons or key factors are missing
        """
        return DecisionLogCreate(**self._cleaned())

    def to_update(self) -> DecisionLogUpdate:
        """Convert an edit form into a full-field partial update.

        Raises:
            FormValidationError: Title, pros/cons or key factors are missing
        """
        return DecisionLogUpdate(**self._cleaned())


class QuotaStatus(CamelModel):
    """Free-tier usage returned to the front end."""

    active_count: int
    free_tier_limit: int
    quota_reached: bool


class ReminderResponse(CamelModel):
    """Result of a reminder request. ``fire_at`` is None when nothing was scheduled."""

    scheduled: bool
    fire_at: datetime | None = None
