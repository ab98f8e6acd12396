from __future__ import annotations


class ResearchError(RuntimeError):
    """Fatal failure of a research run; the dataset is left untouched."""


class GenerationError(ResearchError):
    """The generative-text call failed or returned nothing usable."""


class MalformedResponseError(ResearchError):
    """The model reply is not JSON of the expected shape."""
