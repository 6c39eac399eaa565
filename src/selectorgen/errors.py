from __future__ import annotations


class SelectorGenerationError(RuntimeError):
    pass


class InvalidInputError(SelectorGenerationError):
    pass


class UnresolvableSelectorError(SelectorGenerationError):
    def __init__(self, message: str, selector: str | None = None) -> None:
        super().__init__(message)
        self.selector = selector


class GenerationTimeoutError(SelectorGenerationError):
    def __init__(self, timeout_ms: int, stage: str) -> None:
        super().__init__(f"Timeout: unable to generate selector within {timeout_ms}ms ({stage}).")
        self.timeout_ms = timeout_ms
        self.stage = stage
