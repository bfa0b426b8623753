"""
Accounting enumerations.
"""

import enum


class AccountType(str, enum.Enum):
    """Chart-of-accounts account type."""
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"


class MatchType(str, enum.Enum):
    """How a classification rule's match value is compared with a transaction description."""
    CONTAINS = "CONTAINS"  # Description contains the value
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"
    EQUALS = "EQUALS"
    REGEX = "REGEX"  # Regular expression, searched anywhere in the description


class ClassificationStatus(str, enum.Enum):
    """Transaction classification state."""
    UNCLASSIFIED = "UNCLASSIFIED"
    CLASSIFIED = "CLASSIFIED"


class ClassificationSource(str, enum.Enum):
    """What produced a transaction's current classification."""
    RULE = "RULE"  # Auto-classification; reset by a reclassify run
    MANUAL = "MANUAL"  # Direct assignment or debit/credit override


class JournalEntrySource(str, enum.Enum):
    """Journal entry origin."""
    AUTO = "AUTO"  # Derived from the classified account and the bank account
    MANUAL = "MANUAL"  # Explicit debit/credit override
