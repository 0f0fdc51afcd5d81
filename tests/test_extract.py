import pytest

from hostcall.hostcall_extract import by_value, by_ref
from hostcall.hostcall_datatypes import UNIT, Dynamic, ImmutableString
from hostcall.hostcall_errors import ErrorMismatchDataType


def test_by_value_moves_value_out_and_leaves_unit():
    slot = Dynamic({"k": 1})
    v = by_value(slot, dict)
    assert v == {"k": 1}
    assert slot.is_unit()

def test_by_value_owned_text_takes_backing_storage():
    slot = Dynamic("hello")
    stored = slot.value
    text = by_value(slot, str)
    assert text is stored
    assert slot.value is UNIT

def test_by_value_owned_text_flattens_shared_text():
    slot = Dynamic("shared").into_shared()
    assert by_value(slot, str) == "shared"
    assert slot.is_unit()

def test_by_value_borrowed_text_keeps_slot():
    slot = Dynamic("view")
    stored = slot.value
    text = by_value(slot, ImmutableString)
    assert text is stored
    assert slot.value == "view"

def test_by_value_borrowed_text_flattens_shared_cell():
    slot = Dynamic("cell").into_shared()
    text = by_value(slot, ImmutableString)
    assert text == "cell"
    assert not slot.is_shared()

def test_by_value_type_mismatch_raises_typed_error():
    slot = Dynamic(1.5)
    with pytest.raises(ErrorMismatchDataType):
        by_value(slot, int)

def test_by_value_text_mismatch_raises_typed_error():
    with pytest.raises(ErrorMismatchDataType):
        by_value(Dynamic(1), str)

def test_by_ref_exposes_prior_value_without_reset():
    slot = Dynamic([1, 2, 3])
    with by_ref(slot, list) as handle:
        assert handle.value == [1, 2, 3]
        handle.value.append(4)
    assert slot.value == [1, 2, 3, 4]

def test_by_ref_rebinding_is_visible_in_same_slot():
    slot = Dynamic(7)
    handle = by_ref(slot, int)
    handle.value = handle.value * 2
    assert handle.value == 14
    handle.release()
    assert slot.value == 14
