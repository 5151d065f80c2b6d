"""Tests for soundcue2graph.graph module."""

import pytest

from soundcue2graph import (
    CycleError,
    Edge,
    InputError,
    load_records,
    parse_ref_index,
    resolve_references,
)


def ref(index):
    return {"ObjectName": "SoundNode'TestCue:Node'", "ObjectPath": f"/Game/Audio/TestCue.{index}"}


def graph_of(*items):
    return resolve_references(load_records(list(items)))


def chain(length):
    """Records 0..length-1, each the only child of the record before it."""
    items = [
        {"Type": "SoundNodeDelay", "Properties": {"ChildNodes": [ref(i + 1)]}}
        for i in range(length - 1)
    ]
    items.append({"Type": "SoundNodeWavePlayer"})
    return items


class TestParseRefIndex:
    """Tests for parse_ref_index."""

    def test_string_suffix(self):
        assert parse_ref_index("/Game/Audio/TestCue.3") == 3

    def test_multi_digit(self):
        assert parse_ref_index("/Game/Audio/TestCue.127") == 127

    def test_quoted_reference(self):
        assert parse_ref_index("SoundNodeMixer'/Game/Audio/TestCue.4'") == 4

    def test_object_path(self):
        assert parse_ref_index({"ObjectPath": "/Game/Audio/TestCue.2"}) == 2

    def test_object_name_fallback(self):
        assert parse_ref_index({"ObjectName": "Node.5"}) == 5

    def test_object_path_preferred(self):
        assert parse_ref_index({"ObjectName": "Node.5", "ObjectPath": "Cue.6"}) == 6

    def test_no_suffix(self):
        assert parse_ref_index("/Game/Audio/TestCue") is None
        assert parse_ref_index("Node.abc") is None

    def test_none_and_empty_object(self):
        assert parse_ref_index(None) is None
        assert parse_ref_index({}) is None


class TestResolveReferences:
    """Tests for resolve_references."""

    def test_children_in_slot_order(self):
        graph = graph_of(
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(2), ref(1)]}},
            {"Type": "SoundNodeWavePlayer"},
            {"Type": "SoundNodeWavePlayer"},
        )
        assert graph.children[0] == [2, 1]
        assert graph.children[1] == []
        assert graph.roots == [0]

    def test_only_containers_raises(self):
        with pytest.raises(InputError, match="no graph nodes"):
            graph_of({"Type": "SoundCue"}, {"Type": "SoundCue"})

    def test_unresolved_slots(self):
        graph = graph_of(
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(1), "garbage", ref(99)]}},
            {"Type": "SoundNodeWavePlayer"},
        )
        assert graph.children[0] == [1, None, None]
        assert graph.slot_count(0) == 3

    def test_multiple_roots(self):
        graph = graph_of({"Type": "SoundNodeWavePlayer"}, {"Type": "SoundNodeWavePlayer"})
        assert graph.roots == [0, 1]

    def test_fan_out_child_not_a_root(self):
        graph = graph_of(
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(1), ref(2)]}},
            {"Type": "SoundNodeRandom", "Properties": {"ChildNodes": [ref(3)]}},
            {"Type": "SoundNodeDelay", "Properties": {"ChildNodes": [ref(3)]}},
            {"Type": "SoundNodeWavePlayer"},
        )
        assert graph.roots == [0]
        assert [e.parent for e in graph.parents_of(3)] == [1, 2]

    def test_all_referenced_falls_back_to_first(self):
        graph = graph_of(
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(1)]}},
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(0)]}},
        )
        assert graph.roots == [0]

    def test_container_excluded(self):
        graph = graph_of(
            {"Type": "SoundCue", "Properties": {"FirstNode": ref(1)}},
            {"Type": "SoundNodeWavePlayer"},
        )
        assert graph.roots == [1]
        assert graph.live == [1]
        assert graph.is_dead(0)

    def test_reference_to_container_is_unresolved(self):
        graph = graph_of(
            {"Type": "SoundCue"},
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(0)]}},
        )
        assert graph.children[1] == [None]

    def test_empty_raises(self):
        with pytest.raises(InputError):
            resolve_references([])


class TestEdges:
    """Tests for SoundGraph.edges."""

    def test_edges_skip_unresolved(self):
        graph = graph_of(
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(1), "x", ref(2)]}},
            {"Type": "SoundNodeWavePlayer"},
            {"Type": "SoundNodeWavePlayer"},
        )
        assert list(graph.edges()) == [Edge(0, 0, 1), Edge(0, 2, 2)]

    def test_duplicate_child_in_two_slots(self):
        graph = graph_of(
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(1), ref(1)]}},
            {"Type": "SoundNodeWavePlayer"},
        )
        assert list(graph.edges()) == [Edge(0, 0, 1), Edge(0, 1, 1)]


class TestCycleDetection:
    """Tests for cycle detection."""

    def test_no_cycles(self):
        graph = graph_of(
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(1)]}},
            {"Type": "SoundNodeWavePlayer"},
        )
        assert graph.detect_cycles() == []
        graph.check_acyclic()

    def test_two_node_cycle(self):
        graph = graph_of(
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(1)]}},
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(0)]}},
        )
        cycles = graph.detect_cycles()
        assert len(cycles) >= 1
        assert {0, 1} <= set(cycles[0])

    def test_self_loop(self):
        graph = graph_of({"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(0)]}})
        assert graph.detect_cycles() == [[0, 0]]

    def test_check_acyclic_raises(self):
        graph = graph_of({"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(0)]}})
        with pytest.raises(CycleError, match="0 -> 0"):
            graph.check_acyclic()

    def test_cycle_error_is_input_error(self):
        assert issubclass(CycleError, InputError)

    def test_diamond_is_not_a_cycle(self):
        graph = graph_of(
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(1), ref(2)]}},
            {"Type": "SoundNodeRandom", "Properties": {"ChildNodes": [ref(3)]}},
            {"Type": "SoundNodeDelay", "Properties": {"ChildNodes": [ref(3)]}},
            {"Type": "SoundNodeWavePlayer"},
        )
        assert graph.detect_cycles() == []

    def test_deep_chain_has_no_cycles(self):
        graph = graph_of(*chain(2000))
        assert graph.roots == [0]
        assert graph.detect_cycles() == []
        graph.check_acyclic()

    def test_deep_cycle_found(self):
        items = chain(2000)
        items[-1] = {"Type": "SoundNodeDelay", "Properties": {"ChildNodes": [ref(0)]}}
        graph = graph_of(*items)
        cycles = graph.detect_cycles()
        assert cycles == [list(range(2000)) + [0]]
        with pytest.raises(CycleError):
            graph.check_acyclic()

    def test_cycle_found_after_first_slot(self):
        graph = graph_of(
            {"Type": "SoundNodeMixer", "Properties": {"ChildNodes": [ref(1), ref(2)]}},
            {"Type": "SoundNodeWavePlayer"},
            {"Type": "SoundNodeDelay", "Properties": {"ChildNodes": [ref(0)]}},
        )
        assert graph.detect_cycles() == [[0, 2, 0]]
