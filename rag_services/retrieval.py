"""
Context selection for a query
"""
from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class ContextSelector(Protocol):
    """Picks the document text that grounds the answer to a query.

    Implementations can rank segments by similarity to the query; callers
    only rely on getting a string back, possibly empty.
    """

    def select_context(self, segments: Sequence[str], query: str) -> str:
        ...


class FirstChunkSelector:
    """Always uses the first chunk, whatever the query.

    Content past the first chunk is never shown to the model.
    """

    def select_context(self, segments: Sequence[str], query: str) -> str:
        if not segments:
            return ""
        return segments[0]


default_selector = FirstChunkSelector()


def select_context(segments: Sequence[str], query: str) -> str:
    return default_selector.select_context(segments, query)
