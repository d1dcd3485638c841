from __future__ import annotations


class PipelineError(RuntimeError):
    """Base for every failure that terminates a single article job."""


class ResearchFailure(PipelineError):
    pass


class GenerationStartFailure(PipelineError):
    pass


class GenerationTaskFailure(PipelineError):
    prefix = "Agent failed"

    def __init__(self, reason: str) -> None:
        super().__init__(f"{self.prefix}: {reason}")
        self.reason = reason


class GenerationPollFailure(GenerationTaskFailure):
    prefix = "Agent poll failed"


class GenerationTimeout(PipelineError):
    def __init__(self, waited_seconds: float, max_wait_seconds: float) -> None:
        super().__init__(
            f"Agent timeout after {waited_seconds:.0f}s (max {max_wait_seconds:.0f}s)"
        )
        self.waited_seconds = waited_seconds
        self.max_wait_seconds = max_wait_seconds


class EmptyGenerationResult(PipelineError):
    pass


class SchemaViolation(PipelineError):
    pass


class PersistenceFailure(PipelineError):
    pass
