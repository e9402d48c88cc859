"""Pydantic schemas for generated artifacts and generation reports."""
from typing import Optional
from pydantic import BaseModel, Field


class GeneratedArtifact(BaseModel):
    name: str
    path: str
    content: str
    regenerate_always: bool = False


class GenerationResult(BaseModel):
    table_name: str
    status: str                    # "success" | "error"
    files: list[str] = Field(default_factory=list)       # paths actually written
    dependencies: list[str] = Field(default_factory=list)  # referred tables
    error: Optional[str] = None


class BatchReport(BaseModel):
    database: str
    processed: int = 0
    errored: int = 0
    total: int = 0
    duration_seconds: float = 0.0
    results: list[GenerationResult] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
