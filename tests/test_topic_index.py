"""Tests for TopicIndex."""

import threading

from rolling_context.core.topic_index import TopicIndex


class TestTopicIndex:
    def test_merge_creates_and_extends(self):
        index = TopicIndex()
        assert index.merge({"billing": ["a", "b"]}) == 2
        assert index.merge({"billing": ["c"], "shipping": ["d"]}) == 2
        assert index.as_dict() == {"billing": ["a", "b", "c"], "shipping": ["d"]}

    def test_duplicates_are_kept(self):
        index = TopicIndex()
        index.merge({"billing": ["same"]})
        index.merge({"billing": ["same"]})
        assert index.excerpts_for("billing") == ["same", "same"]

    def test_topic_names_in_insertion_order(self):
        index = TopicIndex()
        index.merge({"b": ["1"], "a": ["2"]})
        index.merge({"c": ["3"]})
        assert index.topic_names() == ["b", "a", "c"]

    def test_gather_follows_requested_order_and_skips_unknown(self):
        index = TopicIndex()
        index.merge({"billing": ["b1", "b2"], "shipping": ["s1"]})
        assert index.gather(["shipping", "unknown", "billing"]) == ["s1", "b1", "b2"]
        assert index.gather([]) == []

    def test_excerpt_count_never_decreases(self):
        index = TopicIndex()
        counts = []
        for batch in ({"a": ["1"]}, {}, {"a": ["2"], "b": []}, {"c": ["3", "4"]}):
            index.merge(batch)
            counts.append(index.excerpt_count)
        assert counts == sorted(counts)
        assert counts[-1] == 4

    def test_returned_lists_are_copies(self):
        index = TopicIndex()
        index.merge({"a": ["1"]})
        index.excerpts_for("a").append("mutated")
        index.as_dict()["a"].append("mutated")
        assert index.excerpts_for("a") == ["1"]

    def test_concurrent_merges_keep_each_call_contiguous(self):
        index = TopicIndex()

        def merge(tag: str):
            for i in range(50):
                index.merge({"shared": [f"{tag}-{i}-0", f"{tag}-{i}-1"]})

        threads = [threading.Thread(target=merge, args=(t,)) for t in ("x", "y", "z")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        excerpts = index.excerpts_for("shared")
        assert len(excerpts) == 300
        for i in range(0, len(excerpts), 2):
            first, second = excerpts[i], excerpts[i + 1]
            assert first.endswith("-0")
            assert second == first[:-2] + "-1"
