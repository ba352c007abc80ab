"""History entry model for rollout file revisions."""

from pydantic import BaseModel

LOG_FORMAT = "%h, %an, %ad, %s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class HistoryEntry(BaseModel):
    """One line of ``git log`` output for a rollout file."""

    revision: str
    author: str = ""
    date: str = ""
    subject: str = ""
    raw: str

    @classmethod
    def parse(cls, line: str) -> "HistoryEntry":
        """Parse a ``"<hash>, <author>, <date>, <subject>"`` log line.

        The subject keeps any commas of its own. Missing trailing fields
        are left empty so partial lines still yield a revision.
        """
        raw = line.rstrip("\r\n")
        parts = raw.split(",", 3)
        fields = [part.strip() for part in parts] + [""] * (4 - len(parts))
        return cls(
            revision=fields[0],
            author=fields[1],
            date=fields[2],
            subject=fields[3],
            raw=raw,
        )
