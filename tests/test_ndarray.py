"""Tests for the NdArray codec."""

import struct

import pytest

from pinecone_sdk.core.exceptions import ValidationError
from pinecone_sdk.core.models import NdArray
from pinecone_sdk.utils.ndarray import (
    float_arr_to_ndarray,
    float_ndarray_to_arr,
    string_arr_to_ndarray,
    string_ndarray_to_arr,
)


class TestFloatCodec:
    """Test float32 packing and unpacking."""

    def test_single_row_uses_one_dimensional_shape(self):
        array = float_arr_to_ndarray([[1.0, 2.0, 3.0]])

        assert array.shape == [3]
        assert array.dtype == "float32"
        assert array.buffer == struct.pack("<3f", 1.0, 2.0, 3.0)

    def test_multiple_rows_are_row_major(self):
        array = float_arr_to_ndarray([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])

        assert array.shape == [3, 2]
        assert array.buffer == struct.pack("<6f", 1.0, 2.0, 3.0, 4.0, 5.0, 6.0)
        assert array.rows == 3
        assert array.cols == 2

    def test_decode_inverts_encode(self):
        rows = [[0.5, -1.25, 8.0], [0.0, 3.5, -2.0]]
        assert float_ndarray_to_arr(float_arr_to_ndarray(rows)) == rows

    def test_decode_one_dimensional_shape(self):
        array = NdArray(buffer=struct.pack("<2f", 0.25, 0.75), shape=[2], dtype="float32")
        assert float_ndarray_to_arr(array) == [[0.25, 0.75]]

    def test_empty_input_rejected(self):
        with pytest.raises(ValidationError, match="nonempty"):
            float_arr_to_ndarray([])

    def test_ragged_rows_rejected(self):
        with pytest.raises(ValidationError, match="same length"):
            float_arr_to_ndarray([[1.0, 2.0], [3.0]])

    def test_wrong_dtype_rejected(self):
        array = NdArray(buffer=b"\x00" * 8, shape=[1], dtype="float64")
        with pytest.raises(ValidationError, match="unexpected dtype: float64"):
            float_ndarray_to_arr(array)

    def test_buffer_shape_mismatch_rejected(self):
        array = NdArray(buffer=struct.pack("<3f", 1.0, 2.0, 3.0), shape=[2, 2], dtype="float32")
        with pytest.raises(ValidationError, match="needs 16"):
            float_ndarray_to_arr(array)

    def test_three_dimensional_shape_rejected(self):
        array = NdArray(buffer=b"\x00" * 32, shape=[2, 2, 2], dtype="float32")
        with pytest.raises(ValidationError, match="unsupported shape"):
            float_ndarray_to_arr(array)


class TestStringCodec:
    """Test fixed-width byte string packing."""

    def test_pack_pads_to_longest_cell(self):
        array = string_arr_to_ndarray([["a", "bcd"]])

        assert array.dtype == "|S3"
        assert array.shape == [2]
        assert array.buffer == b"a\x00\x00bcd"

    def test_unpack_strips_padding(self):
        array = NdArray(buffer=b"ab\x00cd\x00ef\x00gh\x00", shape=[2, 2], dtype="|S3")
        assert string_ndarray_to_arr(array) == [["ab", "cd"], ["ef", "gh"]]

    def test_utf8_round_trip(self):
        rows = [["héllo", "wörld"], ["x", "ÿ"]]
        assert string_ndarray_to_arr(string_arr_to_ndarray(rows)) == rows

    def test_empty_strings_use_item_size_one(self):
        array = string_arr_to_ndarray([["", ""]])
        assert array.dtype == "|S1"
        assert string_ndarray_to_arr(array) == [["", ""]]

    def test_non_string_dtype_rejected(self):
        array = NdArray(buffer=b"abc", shape=[1], dtype="<U3")
        with pytest.raises(ValidationError, match="unexpected dtype: <U"):
            string_ndarray_to_arr(array)

    def test_non_numeric_item_size_rejected(self):
        array = NdArray(buffer=b"abc", shape=[1], dtype="|Sx")
        with pytest.raises(ValidationError, match="item size"):
            string_ndarray_to_arr(array)

    def test_invalid_utf8_cell_rejected(self):
        array = NdArray(buffer=b"ok\xff\xfe", shape=[1, 2], dtype="|S2")
        with pytest.raises(ValidationError, match="not valid UTF-8") as exc_info:
            string_ndarray_to_arr(array)
        assert exc_info.value.details == {"row": 0, "col": 1}


class TestNdArrayModel:
    """Test the NdArray JSON form."""

    def test_buffer_serializes_as_base64(self):
        array = NdArray(buffer=b"\x00\x01", shape=[2], dtype="|S1")
        assert '"AAE="' in array.model_dump_json()

    def test_json_round_trip(self):
        array = float_arr_to_ndarray([[1.0, 2.0]])
        assert NdArray.model_validate_json(array.model_dump_json()) == array
