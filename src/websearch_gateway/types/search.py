"""Search-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

RESULT_SOURCE = "DuckDuckGo"
RESULT_TYPE = "web_result"


class SearchResult(BaseModel):
    """One organic hit scraped from the upstream results page."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str = Field(..., min_length=1, description="Decoded result title")
    url: str = Field(
        ...,
        min_length=1,
        pattern=r"^https?://",
        description="Absolute destination URL, unwrapped from the redirect wrapper",
    )
    snippet: str = Field(..., min_length=1, description="Decoded, tag-free preview text")
    display_url: str = Field(
        default="",
        alias="displayUrl",
        description="Display string for the URL (host without 'www.' when not given)",
    )
    source: str = Field(default=RESULT_SOURCE, description="Provider that produced the result")
    type: str = Field(default=RESULT_TYPE, description="Kind of result")


class SearchOutcome(BaseModel):
    """Result of one gateway search, fresh or served from cache."""

    query: str = Field(..., description="The trimmed query that was searched")
    results: list[SearchResult] = Field(default_factory=list)
    cached: bool = Field(default=False, description="True when served from the result cache")

    @property
    def result_count(self) -> int:
        return len(self.results)
