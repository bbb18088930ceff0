"""Error kinds raised while composing a reimbursement document.

Every failure is unrecoverable at the point of detection and propagates to
the caller. Only ``TaxMismatch`` has a soft path (see ``aggregate``).
"""

from __future__ import annotations


class ShinyPennyError(RuntimeError):
    """Base class for all shinypenny failures."""


class RecordError(ShinyPennyError):
    """A failure that can be located in the input records.

    Carries the offending record index (0-based, ``None`` when not known yet),
    the field name and the raw value so the bad input line can be found
    without re-running with extra verbosity.
    """

    def __init__(
        self,
        reason: str,
        *,
        field: str | None = None,
        value: object = None,
        index: int | None = None,
    ) -> None:
        self.reason = reason
        self.field = field
        self.value = value
        self.index = index
        super().__init__(self._render())

    def _render(self) -> str:
        location: list[str] = []
        if self.index is not None:
            location.append(f"record {self.index}")
        if self.field is not None:
            location.append(f"field '{self.field}'")
        if self.value is not None:
            location.append(f"value {self.value!r}")
        if not location:
            return self.reason
        return f"{', '.join(location)}: {self.reason}"

    def at_index(self, index: int) -> RecordError:
        """Attach the record index once the caller knows it."""
        self.index = index
        self.args = (self._render(),)
        return self


class ParseError(RecordError):
    """Malformed money, percentage, date or receipt path text."""


class RateMismatch(RecordError):
    """Netto and brutto carry conflicting explicit exchange rates."""


class RateUnavailable(RecordError):
    """The exchange rate source failed or lacks the currency."""


class InvertedAmounts(RecordError):
    """Brutto is smaller than netto."""


class TaxMismatch(RecordError):
    """The brutto/netto delta disagrees with the stated tax rate."""


class UnsupportedFileKind(ShinyPennyError):
    """A receipt file whose kind cannot be determined or handled."""


class NoPagesFound(ShinyPennyError):
    """No page tree root was found across the merged documents."""


class NoCatalogFound(ShinyPennyError):
    """No document catalog was found across the merged documents."""


class ImageDecodeError(ShinyPennyError):
    """An image (receipt or logo) could not be decoded."""


class FontLoadError(ShinyPennyError):
    """A TrueType font could not be loaded."""
