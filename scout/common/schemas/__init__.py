"""
Company Scout Schemas

Search result and company record contracts.
"""

from .company import (
    ChunkMatch,
    CompanyMatch,
    CompanyRecord,
    Contact,
    UNKNOWN_COMPANY,
)

__all__ = [
    "ChunkMatch",
    "CompanyMatch",
    "CompanyRecord",
    "Contact",
    "UNKNOWN_COMPANY",
]
