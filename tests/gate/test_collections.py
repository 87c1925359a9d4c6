"""Tests for the ReadOnlyCollection facade."""

import pytest

from seedgate.core.errors import ReadOnlyViolation
from seedgate.core.protocols import BackedCollection, ReadOnlyEntity
from seedgate.gate.collections import ReadOnlyCollection, as_read_only


@pytest.fixture
def seeded(gate, companies, store, make_company):
    with gate.enter_suppression_scope():
        companies.add_many(
            [
                make_company("Acme", code="ACM"),
                make_company("Globex", code="GLX"),
                make_company("Initech", code="INI", is_active=False),
            ]
        )
    store.save()
    return companies


class TestReads:
    def test_iterate_and_len(self, seeded):
        assert [c.name for c in seeded] == ["Acme", "Globex", "Initech"]
        assert len(seeded) == 3

    def test_query(self, seeded):
        assert [c.code for c in seeded.query(lambda c: c.is_active)] == ["ACM", "GLX"]
        assert len(seeded.query()) == 3

    def test_first(self, seeded):
        assert seeded.first(lambda c: c.code == "GLX").name == "Globex"
        assert seeded.first(lambda c: c.code == "XXX") is None

    def test_find_by_key(self, seeded):
        assert seeded.find(1).name == "Acme"
        assert seeded.find(99) is None

    def test_custom_key(self, seeded, store, gate):
        by_code = ReadOnlyCollection(store, gate, key=lambda c: c.code)
        assert by_code.find("INI").name == "Initech"

    def test_contains(self, seeded, make_company):
        acme = seeded.find(1)
        assert acme in seeded
        assert make_company("Nobody", id=42) not in seeded

    def test_reads_need_no_scope(self, production_gate, store, make_company):
        store.add(make_company("Acme"))
        store.save()
        collection = ReadOnlyCollection(store, production_gate)
        assert [c.name for c in collection] == ["Acme"]


class TestGuardedWrites:
    @pytest.mark.parametrize(
        ("operation", "args"),
        [
            ("add", lambda make: (make("Acme"),)),
            ("add_many", lambda make: ([make("Acme")],)),
            ("update", lambda make: (make("Acme"),)),
            ("remove", lambda make: (make("Acme"),)),
            ("remove_many", lambda make: ([make("Acme")],)),
        ],
    )
    def test_rejected_without_scope(self, companies, store, make_company, operation, args):
        with pytest.raises(ReadOnlyViolation) as exc_info:
            getattr(companies, operation)(*args(make_company))
        assert exc_info.value.description == f"{operation}(companies)"
        assert store.pending == 0

    def test_update_and_remove_inside_scope(self, seeded, gate, store):
        acme = seeded.find(1)
        initech = seeded.find(3)
        acme.code = "ACME"
        with gate.enter_suppression_scope():
            seeded.update(acme)
            seeded.remove(initech)
        assert store.save() == 2
        assert [c.code for c in seeded] == ["ACME", "GLX"]

    def test_remove_many(self, seeded, gate, store):
        with gate.enter_suppression_scope():
            seeded.remove_many(seeded.query(lambda c: c.id != 2))
        store.save()
        assert [c.name for c in seeded] == ["Globex"]

    def test_production_rejected_in_scope(self, production_gate, store, make_company):
        collection = ReadOnlyCollection(store, production_gate)
        with production_gate.enter_suppression_scope():
            with pytest.raises(ReadOnlyViolation):
                collection.add(make_company("Acme"))
        assert store.pending == 0


class TestFacade:
    def test_backing_accessor(self, companies, store):
        assert companies.backing is store
        assert isinstance(companies, BackedCollection)

    def test_name_defaults(self, store, gate):
        assert ReadOnlyCollection(store, gate).name == "companies"
        assert ReadOnlyCollection(store, gate, name="ref_companies").name == "ref_companies"

    def test_as_read_only(self, store, gate):
        collection = as_read_only(store, gate, "countries")
        assert isinstance(collection, ReadOnlyCollection)
        assert repr(collection) == "ReadOnlyCollection('countries')"

    def test_entities_satisfy_read_only_entity(self, seeded):
        assert all(isinstance(company, ReadOnlyEntity) for company in seeded)
        assert not isinstance(object(), ReadOnlyEntity)
