from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Issue(BaseModel):
    line: int
    column: int
    check: str
    severity: Severity
    message: str
    suggestion: str | None = None


class SectionAnalysis(BaseModel):
    name: str
    line_start: int
    line_end: int
    word_count: int
    readability_grade: float
    issues: list[Issue] = []


class AnalysisResult(BaseModel):
    overall_score: int
    total_issues: int
    sections: list[SectionAnalysis] = []
    issues: list[Issue] = []
    summary: str
