from .resume import (
    AnalysisResult,
    Education,
    ImprovementSuggestion,
    ParsedResume,
    PersonalInfo,
    Project,
    ResumeAnalysis,
    ResumeLink,
    SkillSet,
    WorkExperience,
)

__all__ = [
    "AnalysisResult",
    "Education",
    "ImprovementSuggestion",
    "ParsedResume",
    "PersonalInfo",
    "Project",
    "ResumeAnalysis",
    "ResumeLink",
    "SkillSet",
    "WorkExperience",
]
