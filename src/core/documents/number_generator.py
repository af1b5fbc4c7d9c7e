from datetime import date
from enum import StrEnum

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.documents.models import DocumentSequence


class DocumentPrefix(StrEnum):
    """Numbered documents the school issues."""

    STUDENT = "STU"
    RECEIPT = "RCP"


def format_document_number(prefix: DocumentPrefix, year: int, number: int) -> str:
    """``STU-2024-000001``: prefix, calendar year, six-digit counter."""
    return f"{prefix.value}-{year}-{number:06d}"


class DocumentNumberGenerator:
    """
    Issues admission and receipt numbers.

    Counters restart every calendar year and never repeat within one. The
    sequence row is locked (SELECT FOR UPDATE) for the rest of the
    transaction, so concurrent payments queue for their receipt numbers.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _locked_sequence(self, prefix: DocumentPrefix, year: int) -> DocumentSequence:
        stmt = (
            select(DocumentSequence)
            .where(DocumentSequence.prefix == prefix.value, DocumentSequence.year == year)
            .with_for_update()
        )
        sequence = (await self.session.execute(stmt)).scalar_one_or_none()
        if sequence is None:
            self.session.add(DocumentSequence(prefix=prefix.value, year=year, last_number=0))
            await self.session.flush()
            sequence = (await self.session.execute(stmt)).scalar_one()
        return sequence

    async def generate(self, prefix: DocumentPrefix, on: date | None = None) -> str:
        """Next number for ``prefix`` in the year of ``on`` (default: today)."""
        year = (on or date.today()).year
        sequence = await self._locked_sequence(prefix, year)
        sequence.last_number += 1
        await self.session.flush()
        return format_document_number(prefix, year, sequence.last_number)
