"""Every ORM model, imported so that ``Base.metadata`` knows all tables."""

from src.core.audit.models import AuditLog
from src.core.auth.models import User
from src.core.database.base import Base
from src.core.documents.models import DocumentSequence
from src.modules.academics.models import Exam, ExamResult
from src.modules.fee_structures.models import FeeStructure, FeeStructureCategory
from src.modules.fees.models import Fee, FeeExpense, FeeInstallment
from src.modules.reminders.models import FeeReminder
from src.modules.students.models import Student

metadata = Base.metadata

__all__ = [
    "AuditLog",
    "DocumentSequence",
    "Exam",
    "ExamResult",
    "Fee",
    "FeeExpense",
    "FeeInstallment",
    "FeeReminder",
    "FeeStructure",
    "FeeStructureCategory",
    "Student",
    "User",
    "metadata",
]
