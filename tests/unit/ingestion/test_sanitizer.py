"""
Unit tests for the sanitizer module.

Tests PII column removal and email masking.
"""

from src.ingestion.sanitizer import PII_COLUMNS, mask_email, sanitize_pii


class TestMaskEmail:
    """Tests for mask_email."""

    def test_masks_local_part(self):
        """Keeps the first character and the domain."""
        assert mask_email("jane.doe@example.com") == "j****@example.com"

    def test_custom_mask_token(self):
        """The mask token is configurable."""
        assert mask_email("jane@example.com", mask="##") == "j##@example.com"

    def test_empty_value_becomes_none(self):
        """Empty or missing values have nothing to mask."""
        assert mask_email("") is None
        assert mask_email(None) is None

    def test_non_address_unchanged(self):
        """Values without an @ are left as they are."""
        assert mask_email("not-an-email") == "not-an-email"


class TestSanitizePII:
    """Tests for sanitize_pii."""

    def test_drops_identity_and_address_columns(self):
        """Every configured PII column is removed."""
        row = {column: "x" for column in PII_COLUMNS}
        row["order-id"] = "408-4870009-9733125"

        clean = sanitize_pii(row)

        assert clean == {"order-id": "408-4870009-9733125"}

    def test_masks_any_email_column_case_insensitive(self):
        """Columns whose name contains 'email' in any case are masked."""
        row = {"Buyer-Email": "jane@example.com", "sku": "SKU-1"}

        clean = sanitize_pii(row)

        assert clean["Buyer-Email"] == "j****@example.com"
        assert clean["sku"] == "SKU-1"

    def test_does_not_mutate_input(self):
        """A new dict is returned; the input row is left untouched."""
        row = {"buyer-name": "Jane", "buyer-email": "jane@example.com"}

        sanitize_pii(row)

        assert row == {"buyer-name": "Jane", "buyer-email": "jane@example.com"}

    def test_absent_fields_are_noops(self):
        """Rows without PII pass through unchanged."""
        row = {"order-id": "1", "sku": "A"}
        assert sanitize_pii(row) == row

    def test_preserves_column_order(self):
        """Surviving columns keep their original order."""
        row = {"sku": "A", "name": "Jane", "order-id": "1", "email": "a@b.co"}
        assert list(sanitize_pii(row)) == ["sku", "order-id", "email"]
