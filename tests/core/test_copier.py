"""Tests for the chain copy engine."""

from chaincatalog.graph.descriptors import ELEMENT_ID_PROPERTY
from chaincatalog.graph.model import Chain, ChainLabel
from chaincatalog.graph.relations import new_id
from tests.helpers import add_element, link, make_chain, make_folder


def _by_type(chain, element_type):
    return [e for e in chain.iter_elements() if e.type == element_type]


class TestCopyNaming:
    def test_free_name_is_kept(self, catalog, chain):
        folder = make_folder(catalog, "Target")

        copy = catalog.chains.copy(chain.id, folder.id)

        assert copy.name == "Orders"
        assert copy.parent_folder_id == folder.id

    def test_name_collisions_are_numbered(self, catalog):
        folder = make_folder(catalog, "Shared")
        original = make_chain(catalog, "Foo", folder.id)

        first = catalog.chains.copy(original.id, folder.id)
        second = catalog.chains.copy(original.id, folder.id)

        assert first.name == "Foo (1)"
        assert second.name == "Foo (2)"

    def test_duplicate_lands_next_to_original(self, catalog, chain):
        copy = catalog.chains.duplicate(chain.id)

        assert copy.parent_folder_id is None
        assert copy.name == "Orders (1)"

    def test_copy_name_uses_smallest_free_number(self, catalog):
        make_chain(catalog, "Foo")
        make_chain(catalog, "Foo (2)")

        assert catalog.chains.copier.generate_copy_name("Foo", None) == "Foo (1)"


class TestCopyStructure:
    def test_elements_get_new_ids_and_parents_are_remapped(self, catalog, chain):
        switch = add_element(catalog, chain.id, "test-switch")
        original_ids = set(catalog.chains.find_by_id(chain.id).elements)

        copy = catalog.chains.copy(chain.id, None)

        assert len(copy.elements) == 3
        assert not original_ids & set(copy.elements)
        (switch_copy,) = _by_type(copy, "test-switch")
        assert switch_copy.id != switch.id
        for child in copy.children_of(switch_copy):
            assert child.parent_id == switch_copy.id
            assert child.chain_id == copy.id
        assert len(switch_copy.children) == 2

    def test_properties_are_deep_copied(self, catalog, chain):
        sender = add_element(catalog, chain.id, "test-sender")
        sender.set_property("headers", {"x": "1"})

        copy = catalog.chains.copy(chain.id, None)

        (sender_copy,) = _by_type(copy, "test-sender")
        sender_copy.properties["headers"]["x"] = "2"
        assert sender.properties["headers"] == {"x": "1"}

    def test_copy_is_persisted(self, catalog, chain):
        add_element(catalog, chain.id, "test-switch")

        copy = catalog.chains.copy(chain.id, None)

        assert catalog.chains.find_by_id(copy.id) is copy
        for element in copy.iter_elements():
            assert catalog.elements.find_by_id(element.id) is element

    def test_element_id_property_points_to_clone(self, catalog, chain):
        trigger = add_element(catalog, chain.id, "test-chain-trigger")
        trigger.set_property(ELEMENT_ID_PROPERTY, trigger.id)

        copy = catalog.chains.copy(chain.id, None)

        (trigger_copy,) = _by_type(copy, "test-chain-trigger")
        assert trigger_copy.get_property(ELEMENT_ID_PROPERTY) == trigger_copy.id
        assert trigger.get_property(ELEMENT_ID_PROPERTY) == trigger.id


class TestCopyDependencies:
    def test_sequence_is_rebuilt(self, catalog, chain):
        a = add_element(catalog, chain.id, "test-sender")
        b = add_element(catalog, chain.id, "test-sender")
        c = add_element(catalog, chain.id, "test-sender")
        link(catalog, chain.id, a, b)
        link(catalog, chain.id, b, c)

        copy = catalog.chains.copy(chain.id, None)

        a2, b2, c2 = list(copy.iter_elements())
        edges = {(d.element_from, d.element_to) for d in copy.iter_dependencies()}
        assert edges == {(a2.id, b2.id), (b2.id, c2.id)}
        assert len(catalog.store.dependencies) == 4

    def test_fan_in_is_rebuilt(self, catalog, chain):
        a = add_element(catalog, chain.id, "test-sender")
        b = add_element(catalog, chain.id, "test-sender")
        c = add_element(catalog, chain.id, "test-sender")
        link(catalog, chain.id, a, c)
        link(catalog, chain.id, b, c)

        copy = catalog.chains.copy(chain.id, None)

        a2, b2, c2 = list(copy.iter_elements())
        edges = {(d.element_from, d.element_to) for d in copy.iter_dependencies()}
        assert edges == {(a2.id, c2.id), (b2.id, c2.id)}
        assert sorted(c2.input_dependencies) == sorted(copy.dependencies)

    def test_edge_between_already_linked_copies_is_not_rebuilt(self, catalog, chain):
        z = add_element(catalog, chain.id, "test-sender")
        x = add_element(catalog, chain.id, "test-sender")
        y = add_element(catalog, chain.id, "test-sender")
        w = add_element(catalog, chain.id, "test-sender")
        link(catalog, chain.id, z, y)
        link(catalog, chain.id, x, y)
        link(catalog, chain.id, x, w)

        copy = catalog.chains.copy(chain.id, None)

        z2, x2, y2, w2 = list(copy.iter_elements())
        edges = {(d.element_from, d.element_to) for d in copy.iter_dependencies()}
        assert edges == {(z2.id, y2.id), (x2.id, w2.id)}

    def test_edges_leaving_the_copied_set_are_dropped(self, catalog, chain):
        a = add_element(catalog, chain.id, "test-sender")
        b = add_element(catalog, chain.id, "test-sender")
        c = add_element(catalog, chain.id, "test-sender")
        link(catalog, chain.id, a, b)
        link(catalog, chain.id, b, c)
        target = Chain(id=new_id(), name="Partial")

        clones = catalog.chains.copier.copy_elements(
            catalog.chains.find_by_id(chain.id), target, [a, b]
        )

        assert [clone.type for clone in clones] == ["test-sender", "test-sender"]
        assert len(target.dependencies) == 1
        (edge,) = target.iter_dependencies()
        assert (edge.element_from, edge.element_to) == (clones[0].id, clones[1].id)
        assert clones[1].output_dependencies == []


class TestCopyMetadata:
    def test_timestamps(self, catalog, chain):
        sender = add_element(catalog, chain.id, "test-sender")
        group = add_element(catalog, chain.id, "container")
        add_element(catalog, chain.id, "test-sender", group.id)
        assert not sender.is_modified
        assert group.is_modified

        copy = catalog.chains.copy(chain.id, None)

        sender_copy, group_copy, _ = copy.iter_elements()
        assert sender_copy.created_when == sender_copy.modified_when
        assert sender_copy.created_when > sender.created_when
        assert group_copy.created_when == group.created_when
        assert group_copy.modified_when > group.modified_when

    def test_only_user_labels_are_copied(self, catalog):
        original = make_chain(catalog, "Labeled", labels=["billing"])
        original.labels.append(ChainLabel(name="Overrides", technical=True))

        copy = catalog.chains.copy(original.id, None)

        assert [(label.name, label.technical) for label in copy.labels] == [("billing", False)]
        assert copy.labels[0].chain_id == copy.id
        assert copy.labels[0] is not original.labels[0]

    def test_copy_has_no_runtime_state_or_override_links(self, catalog, chain):
        other = make_chain(catalog, "Base")
        catalog.chains.link_override(chain.id, other.id)
        stored = catalog.chains.find_by_id(chain.id)
        stored.snapshots.append("snapshot-1")
        stored.current_snapshot_id = "snapshot-1"
        stored.deployments.append("deployment-1")

        copy = catalog.chains.copy(chain.id, None)

        assert copy.snapshots == []
        assert copy.current_snapshot_id is None
        assert copy.deployments == []
        assert copy.overrides_chain_id is None
        assert copy.overridden_by_chain_id is None
        assert copy.labels == []
