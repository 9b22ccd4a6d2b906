"""Tests for catalog record normalization."""

import pytest

from billboard_kernel.domain.normalize import normalize_billboard, normalize_billboards
from billboard_kernel.domain.values import BillboardLineItem
from billboard_kernel.exceptions import InvalidPricingInputError


class TestNormalizeBillboard:
    """Key-casing variants resolve to one BillboardLineItem shape."""

    def test_upper_case_catalog_keys(self):
        item = normalize_billboard({
            "ID": 42, "Size": "12x4", "Faces_Count": "2", "Level": "A", "Size_ID": 9,
        })
        assert item == BillboardLineItem("42", "12x4", 2, "A", 9)

    def test_lower_case_keys(self):
        item = normalize_billboard({"id": "7", "size": "8x3", "faces": 1, "level": "B"})
        assert item.billboard_id == "7"
        assert item.size_label == "8x3"
        assert item.level == "B"

    def test_canonical_keys_win(self):
        item = normalize_billboard({"billboard_id": "canon", "ID": "legacy", "size_label": "3x4"})
        assert item.billboard_id == "canon"

    @pytest.mark.parametrize("faces", [None, "", "two", 0, -3])
    def test_bad_face_count_defaults_to_one(self, faces):
        item = normalize_billboard({"ID": 1, "Size": "12x4", "Faces_Count": faces})
        assert item.face_count == 1

    def test_missing_size_becomes_empty_label(self):
        assert normalize_billboard({"ID": 1}).size_label == ""

    def test_missing_id_raises(self):
        with pytest.raises(InvalidPricingInputError):
            normalize_billboard({"Size": "12x4"})

    def test_line_item_passes_through(self):
        item = BillboardLineItem("1", "12x4")
        assert normalize_billboard(item) is item

    def test_selection_preserves_order(self):
        items = normalize_billboards([{"ID": 2, "Size": "a"}, {"ID": 1, "Size": "b"}])
        assert [i.billboard_id for i in items] == ["2", "1"]
        assert isinstance(items, tuple)
