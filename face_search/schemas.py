"""Pydantic models for the search API responses.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from face_search.interfaces import MatchResult, SearchOutcome
from face_search.utils import encode_payload


class MatchItem(BaseModel):
    """Schema for a single matching image"""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="fileName", description="Stored image file name")
    similarity: int = Field(..., ge=0, le=100, description="Similarity percentage (higher is better)")
    file_buffer: str = Field(..., alias="fileBuffer", description="Base64-encoded image bytes")

    @classmethod
    def from_match(cls, match: MatchResult) -> MatchItem:
        return cls(
            file_name=match.candidate_id,
            similarity=match.similarity,
            file_buffer=encode_payload(match.payload),
        )


class SearchDebug(BaseModel):
    """Schema for search diagnostic counters"""

    model_config = ConfigDict(populate_by_name=True)

    detected_faces: int = Field(..., alias="detectedFaces", description="Faces found in the uploaded image")
    compared_files: int = Field(..., alias="comparedFiles", description="Stored images enumerated")
    successful_comparisons: int = Field(..., alias="successfulComparisons", description="Stored images that matched")
    failed_files: List[str] = Field(default_factory=list, alias="failedFiles", description="Stored images that could not be processed")


class SearchResponse(BaseModel):
    """Schema for search API response"""

    matches: List[MatchItem] = Field(..., description="Matches sorted by similarity, highest first")
    debug: Optional[SearchDebug] = Field(default=None, description="Diagnostic counters")
    error: Optional[str] = Field(default=None, description="Set when no face was found in the upload")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "matches": [
                    {"fileName": "party.jpg", "similarity": 70, "fileBuffer": "/9j/4AAQSkZJRg..."}
                ],
                "debug": {
                    "detectedFaces": 1,
                    "comparedFiles": 3,
                    "successfulComparisons": 1,
                    "failedFiles": [],
                },
            }
        }
    )

    @classmethod
    def from_outcome(cls, outcome: SearchOutcome) -> SearchResponse:
        if not outcome.found_faces:
            return cls(matches=[], error=outcome.error)

        return cls(
            matches=[MatchItem.from_match(m) for m in outcome.matches],
            debug=SearchDebug(
                detected_faces=outcome.detected_faces,
                compared_files=outcome.compared_files,
                successful_comparisons=outcome.successful_comparisons,
                failed_files=outcome.failed_files,
            ),
        )

    def to_payload(self) -> dict:
        """JSON-ready dict with camelCase keys and unset sections omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ErrorResponse(BaseModel):
    """Schema for error responses"""

    error: str = Field(..., description="Error message")
    details: Optional[str] = Field(default=None, description="Underlying error details")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Face matching failed",
                "details": "Corpus directory not found: images",
            }
        }
    )
