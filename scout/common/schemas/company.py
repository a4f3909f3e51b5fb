"""
Company Schemas

Data contracts between the Supabase collaborators and the search engine.

- ChunkMatch:    one similarity hit (one embedded text chunk)
- CompanyMatch:  chunks collapsed into one ranked company
- CompanyRecord: the full company row with its contacts
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import SearchServiceError

UNKNOWN_COMPANY = "Unknown Company"


# ============================================================================
# Search results
# ============================================================================

@dataclass
class ChunkMatch:
    """A single chunk returned by the similarity search RPC"""
    company_id: str
    company_name: str
    industry: Optional[str]
    content: str
    similarity: float

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ChunkMatch":
        """Parse one row of the match RPC response."""
        company_id = row.get("company_id")
        if company_id is None:
            raise SearchServiceError(f"Search row is missing company_id: {row}")

        return cls(
            company_id=str(company_id),
            company_name=row.get("company_name") or UNKNOWN_COMPANY,
            industry=row.get("industry") or None,
            content=row.get("content") or "",
            similarity=float(row.get("similarity") or 0.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"content": self.content, "similarity": self.similarity}


@dataclass
class CompanyMatch:
    """
    One company in a ranked result set.

    score is the similarity of the best chunk; chunks are kept in
    descending similarity order.
    """
    company_id: str
    company_name: str
    industry: Optional[str]
    rank: int = 0
    score: float = 0.0
    chunks: List[ChunkMatch] = field(default_factory=list)

    def add_chunk(self, chunk: ChunkMatch) -> None:
        if not self.chunks or chunk.similarity > self.score:
            self.score = chunk.similarity
        self.chunks.append(chunk)

    def top_chunks(self, n: int = 2) -> List[ChunkMatch]:
        return self.chunks[:n]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "company_id": self.company_id,
            "company_name": self.company_name,
            "industry": self.industry,
            "rank": self.rank,
            "score": self.score,
            "chunks": [c.to_dict() for c in self.chunks],
        }


# ============================================================================
# Records
# ============================================================================

def _stringify(value: Any) -> Any:
    """Numeric ids and phone numbers come back from Postgres as numbers."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class Contact(BaseModel):
    """A contact person attached to a company"""
    model_config = ConfigDict(extra="ignore")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    designation: Optional[str] = Field(default=None, description="Job title")
    email: Optional[str] = None
    phone_country_code: Optional[str] = None
    phone_number: Optional[str] = None

    @field_validator("phone_country_code", "phone_number", mode="before")
    @classmethod
    def _coerce_phone(cls, value: Any) -> Any:
        return _stringify(value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}"


class CompanyRecord(BaseModel):
    """Full company row joined with its contacts"""
    model_config = ConfigDict(extra="allow")

    id: str
    company_name: Optional[str] = None
    industry: Optional[str] = None
    website: Optional[str] = None
    business_model: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    contacts: List[Contact] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return _stringify(value)

    @field_validator("contacts", mode="before")
    @classmethod
    def _null_contacts(cls, value: Any) -> Any:
        return value or []
