"""Tests for label reconciliation."""

from dataclasses import replace

from chaincatalog.graph.labels import reconcile_labels
from chaincatalog.graph.model import ChainLabel, Label, SystemModelLabel


def _names(labels):
    return [(label.name, label.technical) for label in labels]


class TestReconcileLabels:
    def test_removes_unwanted_and_adds_missing(self):
        current = [Label("a"), Label("b")]

        removed = reconcile_labels(current, [Label("b"), Label("c")])

        assert _names(current) == [("b", False), ("c", False)]
        assert _names(removed) == [("a", False)]

    def test_keeps_existing_label_objects(self):
        kept = Label("b")
        current = [kept]

        reconcile_labels(current, [Label("b")])

        assert current[0] is kept

    def test_technical_labels_are_never_removed(self):
        current = [Label("Overrides", technical=True), Label("a")]

        reconcile_labels(current, [])

        assert _names(current) == [("Overrides", True)]

    def test_technical_desired_labels_are_ignored(self):
        current = [Label("a")]

        reconcile_labels(current, [Label("a"), Label("Overridden", technical=True)])

        assert _names(current) == [("a", False)]

    def test_user_label_named_like_technical_one_is_added(self):
        current = [Label("shared", technical=True)]

        reconcile_labels(current, [Label("shared")])

        assert _names(current) == [("shared", True), ("shared", False)]

    def test_duplicates_in_desired_are_collapsed(self):
        current = []

        reconcile_labels(current, [Label("a"), Label("a")])

        assert _names(current) == [("a", False)]

    def test_idempotent(self):
        desired = [Label("x"), Label("y")]
        current = [Label("sys", technical=True), Label("old")]

        reconcile_labels(current, desired)
        first = _names(current)
        reconcile_labels(current, desired)

        assert _names(current) == first == [("sys", True), ("x", False), ("y", False)]

    def test_bind_attaches_owner(self):
        current = [ChainLabel("a", chain_id="c1")]

        reconcile_labels(
            current,
            [ChainLabel("a"), ChainLabel("b")],
            bind=lambda label: replace(label, chain_id="c1"),
        )

        assert [label.chain_id for label in current] == ["c1", "c1"]

    def test_custom_accessors(self):
        current = [{"name": "a", "system": False}, {"name": "s", "system": True}]

        reconcile_labels(
            current,
            [{"name": "b", "system": False}],
            is_technical=lambda label: label["system"],
            name_of=lambda label: label["name"],
        )

        assert [label["name"] for label in current] == ["s", "b"]

    def test_works_for_system_model_labels(self, catalog):
        from chaincatalog.graph.model import SystemModel

        model = catalog.system_models.save(
            SystemModel(id="m1", name="model", labels=[SystemModelLabel("v1")])
        )
        assert model.labels[0].system_model_id == "m1"

        updated = catalog.system_models.update(
            "m1", labels=[SystemModelLabel("v2")], description="desc"
        )

        assert [label.name for label in updated.labels] == ["v2"]
        assert updated.labels[0].system_model_id == "m1"
        assert updated.description == "desc"
