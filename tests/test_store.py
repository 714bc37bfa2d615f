import pytest

from project_graph.core import (
    ConflictError,
    DuplicateNameError,
    DuplicateRelationError,
    InvalidRelationTypeError,
    InvalidTypeError,
    NotFoundError,
    UnknownEntityError,
    ValidationError,
)


def entity(name, entity_type="task", *observations):
    return {"name": name, "entityType": entity_type, "observations": list(observations)}


def relation(frm, to, relation_type="part_of"):
    return {"from": frm, "to": to, "relationType": relation_type}


class TestCreateEntities:

    def test_created_entity_loads_exactly_once(self, store):
        store.create_entities([entity("P1", "project", "Status: active")])

        matches = [e for e in store.load()["entities"] if e["name"] == "P1"]
        assert len(matches) == 1
        assert matches[0]["observations"] == ["Status: active"]

    def test_duplicate_name_is_rejected_and_graph_unchanged(self, store):
        store.create_entities([entity("P1", "project")])
        before = store.read_graph()

        with pytest.raises(ConflictError):
            store.create_entities([entity("P2", "project"), entity("P1", "task")])

        assert store.read_graph() == before

    def test_duplicate_within_batch(self, store):
        with pytest.raises(DuplicateNameError):
            store.create_entities([entity("T1"), entity("T1")])
        assert store.read_graph()["entities"] == []

    def test_invalid_type_rejects_batch(self, store):
        with pytest.raises(InvalidTypeError) as exc_info:
            store.create_entities([entity("T1"), entity("X", "spaceship")])

        assert isinstance(exc_info.value, ValidationError)
        assert "spaceship" in str(exc_info.value)
        assert store.read_graph()["entities"] == []

    def test_missing_observations_default_to_empty(self, store):
        created = store.create_entities([{"name": "N1", "entityType": "note"}])
        assert created[0]["observations"] == []


class TestCreateRelations:

    @pytest.fixture(autouse=True)
    def _entities(self, store):
        store.create_entities([entity("P1", "project"), entity("T1"), entity("T2")])

    def test_missing_target_rejects_whole_batch(self, store):
        with pytest.raises(NotFoundError):
            store.create_relations([
                relation("T1", "P1"),
                relation("T2", "Nowhere"),
            ])
        assert store.read_graph()["relations"] == []

    def test_missing_source(self, store):
        with pytest.raises(UnknownEntityError):
            store.create_relations([relation("Ghost", "P1")])

    def test_invalid_relation_type(self, store):
        with pytest.raises(InvalidRelationTypeError):
            store.create_relations([relation("T1", "P1", "owns")])

    def test_duplicate_relation(self, store):
        store.create_relations([relation("T1", "P1")])

        with pytest.raises(DuplicateRelationError):
            store.create_relations([relation("T2", "P1"), relation("T1", "P1")])
        assert len(store.read_graph()["relations"]) == 1

    def test_same_endpoints_with_other_type_is_allowed(self, store):
        store.create_relations([relation("T1", "T2", "depends_on"), relation("T1", "T2", "blocks")])
        assert len(store.read_graph()["relations"]) == 2


class TestObservations:

    def test_add_observations_appends(self, store):
        store.create_entities([entity("T1", "task", "Status: active")])

        updated = store.add_observations("T1", ["Progress: half"])

        assert updated["observations"] == ["Status: active", "Progress: half"]
        assert store.open_nodes(["T1"])["entities"][0]["observations"] == updated["observations"]

    def test_add_observations_unknown_entity(self, store):
        with pytest.raises(UnknownEntityError):
            store.add_observations("Ghost", ["x"])

    def test_delete_observations_by_exact_match(self, store):
        store.create_entities([entity("T1", "task", "a", "b", "c")])

        removed = store.delete_observations([
            {"entityName": "T1", "observations": ["b", "zzz"]},
            {"entityName": "Ghost", "observations": ["a"]},
        ])

        assert removed == 1
        assert store.open_nodes(["T1"])["entities"][0]["observations"] == ["a", "c"]


class TestDelete:

    def test_delete_entity_cascades_relations(self, store):
        store.create_entities([entity("E"), entity("F"), entity("G")])
        store.create_relations([
            relation("E", "F", "depends_on"),
            relation("G", "E", "blocks"),
            relation("F", "G", "depends_on"),
        ])

        result = store.delete_entities(["E"])

        graph = store.read_graph()
        assert result == {"deletedEntities": 1, "deletedRelations": 2}
        assert [e["name"] for e in graph["entities"]] == ["F", "G"]
        assert graph["relations"] == [relation("F", "G", "depends_on")]

    def test_delete_unknown_entity_is_ignored(self, store):
        store.create_entities([entity("E")])
        assert store.delete_entities(["Ghost"]) == {"deletedEntities": 0, "deletedRelations": 0}

    def test_delete_relations_exact_triples(self, store):
        store.create_entities([entity("A"), entity("B")])
        store.create_relations([relation("A", "B", "depends_on"), relation("A", "B", "blocks")])

        removed = store.delete_relations([relation("A", "B", "blocks"), relation("B", "A", "blocks")])

        assert removed == 1
        assert store.read_graph()["relations"] == [relation("A", "B", "depends_on")]


class TestQueries:

    @pytest.fixture(autouse=True)
    def _graph(self, store):
        store.create_entities([
            entity("Apollo", "project", "Goal: reach the moon"),
            entity("Rocket", "component"),
            entity("Fuel", "resource", "Type: liquid"),
            entity("Unrelated", "note"),
        ])
        store.create_relations([
            relation("Rocket", "Apollo"),
            relation("Fuel", "Rocket", "required_for"),
        ])

    def test_search_is_case_insensitive_over_observations(self, store):
        result = store.search_nodes("MOON")
        assert [e["name"] for e in result["entities"]] == ["Apollo"]
        assert result["relations"] == []

    def test_search_keeps_relations_between_matches(self, store):
        result = store.search_nodes("o")
        names = {e["name"] for e in result["entities"]}
        assert {"Apollo", "Rocket"} <= names
        assert relation("Rocket", "Apollo") in result["relations"]

    def test_search_by_relation_type_pulls_in_endpoints(self, store):
        result = store.search_nodes("required_for")
        assert {e["name"] for e in result["entities"]} == {"Fuel", "Rocket"}
        assert result["relations"] == [relation("Fuel", "Rocket", "required_for")]

    def test_open_nodes_returns_relations_among_names(self, store):
        result = store.open_nodes(["Apollo", "Rocket", "Missing"])
        assert [e["name"] for e in result["entities"]] == ["Apollo", "Rocket"]
        assert result["relations"] == [relation("Rocket", "Apollo")]
