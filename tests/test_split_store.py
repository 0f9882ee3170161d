from datetime import date
from decimal import Decimal

import pytest

from mortgage_split.preview import WARNING_ESCROW_INFERRED, SplitPreview, preview_manual_split
from mortgage_split_web.split_store import SplitStore, create_store


def auto_preview(nickname="Maple St", total="2148.65"):
    return SplitPreview(
        deal_nickname=nickname,
        total=Decimal(total),
        principal=Decimal("298.65"),
        interest=Decimal("1500.00"),
        escrow_taxes=Decimal("350.00"),
        escrow_insurance=Decimal("0"),
        is_auto_calculated=True,
        warnings=[WARNING_ESCROW_INFERRED],
        payment_number=1,
        escrow_inferred=True,
        frequency="monthly",
    )


@pytest.fixture
def store(tmp_path):
    return SplitStore(f"sqlite:///{tmp_path / 'splits.sqlite3'}", max_per_user=3)


def test_saved_preview_keeps_split_columns(store):
    split_id = store.save_preview("user-a", auto_preview(), date(2024, 1, 1))
    saved = store.saved_previews("user-a")
    assert len(saved) == 1
    row = saved[0]
    assert row["id"] == split_id
    assert row["deal_nickname"] == "Maple St"
    assert row["payment_date"] == "2024-01-01"
    assert row["total"] == Decimal("2148.65")
    assert row["principal"] == Decimal("298.65")
    assert row["interest"] == Decimal("1500.00")
    assert row["escrow"] == Decimal("350.00")
    assert row["payment_number"] == 1
    assert row["frequency"] == "monthly"
    assert row["is_auto_calculated"] is True
    assert row["escrow_inferred"] is True
    assert row["warnings"] == [WARNING_ESCROW_INFERRED]


def test_manual_preview_saved_without_date(store):
    store.save_preview("user-a", preview_manual_split(Decimal("1000"), Decimal("600"), Decimal("100.01"), ""))
    row = store.saved_previews("user-a")[0]
    assert row["deal_nickname"] == "Unknown"
    assert row["payment_date"] is None
    assert row["payment_number"] is None
    assert row["is_auto_calculated"] is False
    assert row["escrow_taxes"] == Decimal("50.00")
    assert row["escrow_insurance"] == Decimal("50.01")
    assert row["warnings"] == []


def test_nothing_saved_without_token(store):
    assert store.save_preview("", auto_preview()) is None
    assert store.saved_previews("") == []
    assert store.saved_previews(None) == []


def test_previews_are_per_user(store):
    first = store.save_preview("user-a", auto_preview())
    second = store.save_preview("user-b", auto_preview("Oak Ave"))
    assert [s["id"] for s in store.saved_previews("user-a")] == [first]
    assert [s["id"] for s in store.saved_previews("user-b")] == [second]


def test_remove_only_touches_owner(store):
    split_id = store.save_preview("user-a", auto_preview())
    store.remove_preview("user-b", split_id)
    assert len(store.saved_previews("user-a")) == 1
    store.remove_preview("user-a", split_id)
    assert store.saved_previews("user-a") == []


def test_clear(store):
    store.save_preview("user-a", auto_preview())
    store.save_preview("user-a", auto_preview())
    store.save_preview("user-b", auto_preview())
    store.clear_previews("user-a")
    assert store.saved_previews("user-a") == []
    assert len(store.saved_previews("user-b")) == 1


def test_oldest_previews_dropped(store):
    for n in range(5):
        store.save_preview("user-a", auto_preview(total=str(1000 + n)))
    assert len(store.saved_previews("user-a")) == 3


def test_create_store(tmp_path):
    store = create_store(f"sqlite:///{tmp_path / 'other.sqlite3'}", max_per_user=1)
    store.save_preview("user-a", auto_preview())
    store.save_preview("user-a", auto_preview())
    assert len(store.saved_previews("user-a")) == 1
