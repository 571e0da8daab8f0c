from rag_services.retrieval import ContextSelector, FirstChunkSelector, select_context


def test_first_chunk_is_selected_regardless_of_query():
    segments = ["first part", "second part mentions cats"]

    assert select_context(segments, "cats") == "first part"
    assert select_context(segments, "") == "first part"


def test_empty_segments_give_empty_context():
    assert select_context([], "anything") == ""
    assert FirstChunkSelector().select_context((), "anything") == ""


def test_selectors_satisfy_protocol():
    class LastChunkSelector:
        def select_context(self, segments, query):
            return segments[-1] if segments else ""

    assert isinstance(FirstChunkSelector(), ContextSelector)
    assert isinstance(LastChunkSelector(), ContextSelector)
