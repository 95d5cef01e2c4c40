"""Domain layer for ledgerkit.

Services live in their own modules (``ledgerkit.domain.account``,
``ledgerkit.domain.transaction``, ...) and are imported from there; this
package only re-exports the storage-independent entities and errors.
"""

from ledgerkit.domain.entities import (
    AccountPurpose,
    DocumentRef,
    DocumentType,
    EntryMode,
    GroupStatus,
    JournalLine,
    LedgerGroup,
    LedgerState,
    VoucherStatus,
    VoucherTo,
    VoucherType,
)
from ledgerkit.domain.errors import (
    ConflictError,
    ConsistencyError,
    DomainError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "AccountPurpose",
    "DocumentRef",
    "DocumentType",
    "EntryMode",
    "GroupStatus",
    "JournalLine",
    "LedgerGroup",
    "LedgerState",
    "VoucherStatus",
    "VoucherTo",
    "VoucherType",
    "ConflictError",
    "ConsistencyError",
    "DomainError",
    "NotFoundError",
    "ValidationError",
]
