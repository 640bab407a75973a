# Workers package - in-process generation jobs

from app.workers.base import (
    WorkerException,
    ModelInvocationError,
    ResultParseError,
    PromptBuildError,
)
from app.workers.executor import JobExecutor
from app.workers.profiles import GenerationProfile, build_profiles
from app.workers.generator import GenerationRunner, parse_result

__all__ = [
    # Errors
    "WorkerException",
    "ModelInvocationError",
    "ResultParseError",
    "PromptBuildError",
    # Execution
    "JobExecutor",
    "GenerationProfile",
    "build_profiles",
    "GenerationRunner",
    "parse_result",
]
