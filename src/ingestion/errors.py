"""Error values passed between ingestion stages."""

from pydantic import BaseModel


class FetchError(BaseModel):
    """A document that could not be retrieved within the retry budget."""

    url: str
    reason: str
    status_code: int | None = None
    attempts: int = 0

    def __str__(self) -> str:
        return f"{self.reason} after {self.attempts} attempt(s): {self.url}"


class RegistrationError(BaseModel):
    """A category or work write rejected while registering a work."""

    slug: str
    stage: str  # "lookup", "category", "work"
    reason: str
    path: str | None = None

    def __str__(self) -> str:
        where = f" ({self.path})" if self.path else ""
        return f"{self.stage} registration failed for {self.slug}{where}: {self.reason}"
