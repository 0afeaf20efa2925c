"""
Tests for the stored shape of ingredients and instructions.
"""

import pytest

from recipeshare.errors import ValidationError
from recipeshare.recipes.models import decode_items, encode_items, split_lines


class TestSplitLines:

    def test_blank_lines_dropped_and_items_trimmed(self):
        assert split_lines(' 2 eggs \n\n\r\n1 cup milk\n   ') == ['2 eggs', '1 cup milk']

    def test_none_is_empty(self):
        assert split_lines(None) == []


class TestEncodeDecode:

    def test_order_preserved(self):
        steps = ['Preheat oven', 'Mix', 'Bake 20 minutes']
        assert decode_items(encode_items(steps)) == steps

    def test_unicode_kept(self):
        assert decode_items(encode_items(['Crème fraîche'])) == ['Crème fraîche']

    @pytest.mark.parametrize('items', ['a string', ['ok', ''], ['ok', 3], None])
    def test_encode_rejects_other_shapes(self, items):
        with pytest.raises(ValidationError):
            encode_items(items)

    @pytest.mark.parametrize('raw', ['"a json string"', 'not json', '{"a": 1}', '[1, 2]', None])
    def test_decode_rejects_other_shapes(self, raw):
        with pytest.raises(ValidationError):
            decode_items(raw)
