"""Shared BDD fixtures and step definitions for the fulfillment engine."""

import pytest
from fulfillment.errors import ErrorKind
from pytest_bdd import given, parsers, then


@pytest.fixture()
def result():
    """Container for the outcome of the last engine call."""
    return {"outcome": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('SKU "{sku}" "{name}" at "{location}" with {on_hand:d} on hand'))
def registered_sku(engine, sku, name, location, on_hand):
    assert engine.register_sku(sku, name, location, on_hand=on_hand, reorder_point=20).ok


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the operation succeeds")
def operation_succeeds(result):
    outcome = result["outcome"]
    assert outcome is not None
    assert outcome.ok, f"Expected success, got {outcome.error} {outcome.reasons}"


@then(parsers.cfparse('the operation fails with "{kind}"'))
def operation_fails_with(result, kind):
    outcome = result["outcome"]
    assert outcome is not None
    assert not outcome.ok
    assert outcome.error == ErrorKind(kind)


@then(parsers.cfparse('"{sku}" has {allocated:d} allocated and {available:d} available'))
def sku_levels(engine, sku, allocated, available):
    level = engine.stock_level(sku).value
    assert level["allocated"] == allocated
    assert level["available"] == available


@then(parsers.cfparse('"{sku}" has {on_hand:d} on hand'))
def sku_on_hand(engine, sku, on_hand):
    assert engine.stock_level(sku).value["on_hand"] == on_hand
