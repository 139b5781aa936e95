from __future__ import annotations

import pytest

from employee_import.db.store import Catalog, EmployeeStore, StoreError
from employee_import.models.assignment import AssignableKind, AssignableRef
from employee_import.models.employee import EmployeeRecord


def test_memory_store_satisfies_the_protocol(store):
    assert isinstance(store, EmployeeStore)


def test_transaction_restores_state_on_error(store):
    store.add_employee(EmployeeRecord(employee_number="E1"))
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.insert_employee(EmployeeRecord(employee_number="E2"))
            raise RuntimeError("boom")
    assert [e.employee_number for e in store.employees] == ["E1"]


def test_nested_transaction_joins_the_outer_one(store):
    with pytest.raises(RuntimeError):
        with store.transaction():
            with store.transaction():
                store.insert_employee(EmployeeRecord(employee_number="E2"))
            raise RuntimeError("boom")
    assert store.employees == []


def test_employee_number_is_unique_including_soft_deleted(store):
    emp_id = store.add_employee(EmployeeRecord(employee_number="E1"))
    store.soft_delete_employee(emp_id)
    with pytest.raises(StoreError):
        store.insert_employee(EmployeeRecord(employee_number="E1"))
    assert store.find_employee_by_number("E1").trashed


def test_returned_records_are_copies(store):
    emp_id = store.add_employee(EmployeeRecord(employee_number="E1", name="Ana"))
    record = store.get_employee(emp_id)
    record.name = "Otra"
    assert store.get_employee(emp_id).name == "Ana"


def test_load_catalog_returns_active_entries_only(store, catalogs):
    names = [e.name for e in store.load_catalog(Catalog.SEDE)]
    assert names == ["Monterrey"]
    all_names = [e.name for e in store.load_catalog(Catalog.SEDE, include_inactive=True)]
    assert all_names == ["Monterrey", "Puebla"]


def test_list_employees_splits_active_and_soft_deleted(store):
    first = store.add_employee(EmployeeRecord(employee_number="E1"))
    gone = store.add_employee(EmployeeRecord(employee_number="E2"))
    store.add_employee(EmployeeRecord(employee_number="E3"))
    store.soft_delete_employee(gone)
    assert [e.employee_number for e in store.list_employees()] == ["E1", "E3"]
    assert [e.id for e in store.list_employees(trashed=True)] == [gone]
    assert store.list_employees()[0].id == first


def test_entity_exists(store, catalogs):
    emp_id = store.add_employee(EmployeeRecord(employee_number="E1"))
    assert store.entity_exists(AssignableRef(AssignableKind.USER, emp_id))
    assert store.entity_exists(AssignableRef(AssignableKind.AREA, catalogs.area))
    assert store.entity_exists(AssignableRef(AssignableKind.CAMPAIGN, catalogs.campaign))
    assert not store.entity_exists(AssignableRef(AssignableKind.CAMPAIGN, catalogs.area))
    store.soft_delete_employee(emp_id)
    assert not store.entity_exists(AssignableRef(AssignableKind.USER, emp_id))
