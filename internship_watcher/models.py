"""Data model for parsed internship postings."""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class Record:
    """
    One posting row from the internship table.

    Attributes:
        company: Company cell text.
        role: Role cell text.
        location: Location cell text.
        link: Apply URL, or empty string when none could be recovered.
        date_posted: Date cell text, kept as an opaque display string.
    """
    company: str
    role: str
    location: str
    link: str
    date_posted: str

    @property
    def identity(self) -> str:
        """Deduplication key: company, role and location concatenated."""
        return self.company + self.role + self.location

    def to_dict(self) -> Dict[str, str]:
        return {
            "company": self.company,
            "role": self.role,
            "location": self.location,
            "link": self.link,
            "date_posted": self.date_posted,
        }
