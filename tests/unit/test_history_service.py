"""
Unit tests for HistoryRepairReader and HistoryEditor.

Run: pytest tests/unit/test_history_service.py -v
"""

import pytest

from models.draft import OrderUnit
from models.history import HistoryItemInput
from models.product import ProductResponse
from services.history_service import HistoryEditor, HistoryRepairReader, repair_line_item
from exceptions import (
    DatabaseError,
    HistoryItemNotFoundError,
    HistorySessionNotFoundError,
    RemoteWriteError,
    ValidationError,
)

from tests.factories import HistoryFactory, ProductFactory


@pytest.fixture
def live_product() -> ProductResponse:
    return ProductResponse(**ProductFactory.create(
        id="prod-1",
        name="Fish Ball",
        company_name="Xinya",
        image_url="data:image/png;base64,LIVE",
    ))


class TestRepairLineItem:
    """Tests for repair_line_item()"""

    def test_stored_values_win(self, live_product):
        row = HistoryFactory.item("s1", product_id="prod-1", product_name="Old Name",
                                  company_name="Old Co", image_url="data:old")

        view = repair_line_item(row, live_product)

        assert view.product_name == "Old Name"
        assert view.company_name == "Old Co"
        assert view.image_url == "data:old"

    @pytest.mark.parametrize("stored", [None, "", "Unknown"])
    def test_missing_or_unknown_filled_from_live_product(self, live_product, stored):
        row = HistoryFactory.item("s1", product_id="prod-1", product_name=stored,
                                  company_name=stored)

        view = repair_line_item(row, live_product)

        assert view.product_name == "Fish Ball"
        assert view.company_name == "Xinya"
        assert view.image_url == "data:image/png;base64,LIVE"

    def test_product_gone_keeps_stored_value(self):
        row = HistoryFactory.item("s1", product_id="gone", product_name="Unknown",
                                  company_name="Old Co")

        view = repair_line_item(row, None)

        assert view.product_name == "Unknown"
        assert view.company_name == "Old Co"
        assert view.image_url is None

    def test_product_gone_and_nothing_stored(self):
        row = HistoryFactory.item("s1", product_name=None, company_name=None)

        view = repair_line_item(row, None)

        assert view.product_name == "Unknown"
        assert view.company_name == "Unknown"


class TestHistoryRepairReader:
    """Tests for HistoryRepairReader"""

    def test_sessions_newest_first_with_items(self, mock_db, mock_supabase):
        # Arrange
        old = HistoryFactory.session(id="s-old", created_at="2026-01-01T08:00:00+00:00")
        new = HistoryFactory.session(id="s-new", created_at="2026-03-01T09:30:15+00:00")
        mock_supabase.set_table_data("order_sessions", [old, new])
        mock_supabase.set_table_data("order_items", [
            HistoryFactory.item("s-old"),
            HistoryFactory.item("s-new"),
            HistoryFactory.item("s-new"),
        ])

        # Act
        history = HistoryRepairReader().get_history()

        # Assert
        assert [s.id for s in history] == ["s-new", "s-old"]
        assert len(history[0].items) == 2
        assert len(history[1].items) == 1
        assert history[0].timestamp == "2026-03-01 09:30:15"

    def test_repair_uses_live_catalog(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("products", [
            ProductFactory.create(id="prod-1", name="Fish Ball", company_name="Xinya"),
        ])
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        mock_supabase.set_table_data("order_items", [
            HistoryFactory.item("s1", product_id="prod-1", product_name="Unknown",
                                company_name=None),
        ])

        item = HistoryRepairReader().get_history()[0].items[0]

        assert item.product_name == "Fish Ball"
        assert item.company_name == "Xinya"

    def test_repair_never_writes(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("products", [ProductFactory.create(id="prod-1")])
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        mock_supabase.set_table_data("order_items", [
            HistoryFactory.item("s1", product_id="prod-1", product_name="Unknown"),
        ])

        HistoryRepairReader().get_history()

        assert mock_supabase.writes() == []
        assert mock_supabase.rows("order_items")[0]["product_name"] == "Unknown"

    def test_catalog_failure_degrades_to_stored_values(self, mock_db, mock_supabase):
        """If the catalog can't be read, stored snapshot values are shown."""
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        mock_supabase.set_table_data("order_items", [
            HistoryFactory.item("s1", product_id="prod-1", product_name="Unknown",
                                company_name="Xinya"),
        ])
        mock_supabase.fail_on("products", "select")

        item = HistoryRepairReader().get_history()[0].items[0]

        assert item.product_name == "Unknown"
        assert item.company_name == "Xinya"

    def test_session_read_failure_raises(self, mock_db, mock_supabase):
        mock_supabase.fail_on("order_sessions", "select")

        with pytest.raises(DatabaseError):
            HistoryRepairReader().get_history()

    def test_unrecognised_stored_unit_reads_as_case(self, mock_db, mock_supabase):
        """A bad stored unit should not break the history list."""
        # Arrange
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        mock_supabase.set_table_data("order_items", [
            HistoryFactory.item("s1", id="i1", unit="box"),
            HistoryFactory.item("s1", id="i2", unit="piece"),
        ])

        # Act
        items = {i.id: i for i in HistoryRepairReader().get_history()[0].items}

        # Assert
        assert items["i1"].unit == OrderUnit.CASE
        assert items["i2"].unit == OrderUnit.PIECE

    def test_unreadable_stored_quantity_reads_as_zero(self):
        row = HistoryFactory.item("s1", quantity="lots")

        view = repair_line_item(row, None)

        assert view.quantity == 0

    def test_unreadable_session_items_skip_that_session(self, mock_db, mock_supabase):
        # Arrange
        mock_supabase.set_table_data("order_sessions", [
            HistoryFactory.session(id="s-old", created_at="2026-01-01T08:00:00+00:00"),
            HistoryFactory.session(id="s-new", created_at="2026-03-01T08:00:00+00:00"),
        ])
        mock_supabase.set_table_data("order_items", [
            HistoryFactory.item("s-old"),
            HistoryFactory.item("s-new"),
        ])
        mock_supabase.fail_on("order_items", "select", after=1)

        # Act
        history = HistoryRepairReader().get_history()

        # Assert
        assert [s.id for s in history] == ["s-new"]

    def test_single_session_items_failure_raises(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        mock_supabase.fail_on("order_items", "select")

        with pytest.raises(DatabaseError):
            HistoryRepairReader().get_session("s1")

    def test_get_session(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1", name="Monday")])
        mock_supabase.set_table_data("order_items", [HistoryFactory.item("s1")])

        session = HistoryRepairReader().get_session("s1")

        assert session.name == "Monday"
        assert len(session.items) == 1

    def test_get_missing_session(self, mock_db, mock_supabase):
        with pytest.raises(HistorySessionNotFoundError):
            HistoryRepairReader().get_session("missing")


class TestHistoryEditorItems:
    """Tests for HistoryEditor line item edits"""

    def test_update_quantity_and_stock(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_items", [HistoryFactory.item("s1", id="i1", quantity=1)])

        updated = HistoryEditor().update_item("i1", quantity=4, stock="low")

        assert updated["quantity"] == 4
        assert updated["stock"] == "low"

    def test_update_needs_a_field(self, mock_db, mock_supabase):
        with pytest.raises(ValidationError):
            HistoryEditor().update_item("i1")

    def test_update_rejects_zero_quantity(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_items", [HistoryFactory.item("s1", id="i1")])

        with pytest.raises(ValidationError):
            HistoryEditor().update_item("i1", quantity=0)

        assert mock_supabase.writes() == []

    def test_update_missing_item(self, mock_db, mock_supabase):
        with pytest.raises(HistoryItemNotFoundError):
            HistoryEditor().update_item("missing", quantity=1)

    def test_delete_item_keeps_session(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        mock_supabase.set_table_data("order_items", [HistoryFactory.item("s1", id="i1")])

        HistoryEditor().delete_item("i1")

        assert mock_supabase.rows("order_items") == []
        assert len(mock_supabase.rows("order_sessions")) == 1

    def test_delete_missing_item(self, mock_db, mock_supabase):
        with pytest.raises(HistoryItemNotFoundError):
            HistoryEditor().delete_item("missing")

    def test_append_manual_item_has_no_product(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        entry = HistoryItemInput(
            product_id="prod-1", product_name="Rice Cake", company_name="Golden",
            stock="none", quantity=2, unit="piece",
        )

        HistoryEditor().append_manual_item("s1", entry)

        row = mock_supabase.rows("order_items")[0]
        assert row["product_id"] is None
        assert row["product_name"] == "Rice Cake"
        assert row["unit"] == "piece"

    def test_append_to_missing_session(self, mock_db, mock_supabase):
        entry = HistoryItemInput(product_name="Rice Cake", quantity=1)

        with pytest.raises(HistorySessionNotFoundError):
            HistoryEditor().append_manual_item("missing", entry)

        assert mock_supabase.writes() == []


class TestHistoryEditorSessions:
    """Tests for HistoryEditor session edits"""

    def test_delete_session_removes_items_then_session(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_sessions", [
            HistoryFactory.session(id="s1"),
            HistoryFactory.session(id="s2"),
        ])
        mock_supabase.set_table_data("order_items", [
            HistoryFactory.item("s1"),
            HistoryFactory.item("s1"),
            HistoryFactory.item("s2"),
        ])

        HistoryEditor().delete_session("s1")

        assert [s["id"] for s in mock_supabase.rows("order_sessions")] == ["s2"]
        assert [i["session_id"] for i in mock_supabase.rows("order_items")] == ["s2"]
        assert [(t, op) for t, op, _ in mock_supabase.writes()] == [
            ("order_items", "delete"),
            ("order_sessions", "delete"),
        ]

    def test_delete_session_failure_names_step(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        mock_supabase.set_table_data("order_items", [HistoryFactory.item("s1")])
        mock_supabase.fail_on("order_sessions", "delete")

        with pytest.raises(RemoteWriteError) as exc_info:
            HistoryEditor().delete_session("s1")

        assert exc_info.value.details["step"] == "delete_session"
        assert mock_supabase.rows("order_items") == []

    def test_delete_missing_session(self, mock_db, mock_supabase):
        with pytest.raises(HistorySessionNotFoundError):
            HistoryEditor().delete_session("missing")

    def test_rename_session(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])

        HistoryEditor().rename_session("s1", "  Weekly order ")

        assert mock_supabase.rows("order_sessions")[0]["name"] == "Weekly order"

    def test_rename_missing_session(self, mock_db, mock_supabase):
        with pytest.raises(HistorySessionNotFoundError):
            HistoryEditor().rename_session("missing", "x")


class TestReplaceItems:
    """Tests for HistoryEditor.replace_items()"""

    def test_replaces_whole_set(self, mock_db, mock_supabase):
        """Items left out of the replacement set are gone."""
        # Arrange
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        mock_supabase.set_table_data("order_items", [
            HistoryFactory.item("s1", product_name="Keep Me?"),
            HistoryFactory.item("s1", product_name="Also Old"),
        ])
        replacement = [
            HistoryItemInput(product_id="prod-1", product_name="Fish Ball",
                             company_name="Xinya", quantity=3),
        ]

        # Act
        count = HistoryEditor().replace_items("s1", replacement)

        # Assert
        rows = mock_supabase.rows("order_items")
        assert count == 1
        assert [r["product_name"] for r in rows] == ["Fish Ball"]
        assert rows[0]["product_id"] == "prod-1"

    def test_empty_list_empties_session(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        mock_supabase.set_table_data("order_items", [HistoryFactory.item("s1")])

        assert HistoryEditor().replace_items("s1", []) == 0
        assert mock_supabase.rows("order_items") == []

    def test_invalid_item_deletes_nothing(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        mock_supabase.set_table_data("order_items", [HistoryFactory.item("s1")])
        bad = HistoryItemInput.model_construct(
            product_id=None, product_name="Fish Ball", company_name="",
            image_url=None, stock="", quantity=-1, unit="case",
        )

        with pytest.raises(ValidationError):
            HistoryEditor().replace_items("s1", [bad])

        assert len(mock_supabase.rows("order_items")) == 1

    def test_insert_failure_after_delete(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        mock_supabase.set_table_data("order_items", [HistoryFactory.item("s1")])
        mock_supabase.fail_on("order_items", "insert")

        with pytest.raises(RemoteWriteError) as exc_info:
            HistoryEditor().replace_items(
                "s1", [HistoryItemInput(product_name="Fish Ball", quantity=1)]
            )

        assert exc_info.value.details["step"] == "insert_items"
        assert mock_supabase.rows("order_items") == []


class TestBeginCatalogSelection:
    """Tests for HistoryEditor.begin_catalog_selection()"""

    def test_returns_current_lines_keyed_by_product(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("order_sessions", [HistoryFactory.session(id="s1")])
        mock_supabase.set_table_data("order_items", [
            HistoryFactory.item("s1", product_id="prod-1", quantity=2, unit="piece"),
            HistoryFactory.item("s1", product_id=None, product_name="Manual Line"),
        ])

        selection = HistoryEditor().begin_catalog_selection("s1")

        assert selection.session_id == "s1"
        assert set(selection.items) == {"prod-1"}
        assert selection.items["prod-1"].quantity == 2
        assert [m.product_name for m in selection.manual_items] == ["Manual Line"]

    def test_missing_session(self, mock_db, mock_supabase):
        with pytest.raises(HistorySessionNotFoundError):
            HistoryEditor().begin_catalog_selection("missing")
