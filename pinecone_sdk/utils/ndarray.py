"""
Conversions between 2-D arrays and the NdArray wire buffer.

Floats are packed as little-endian float32 in row-major order. Strings use
numpy's fixed-width byte dtype (``|S<itemsize>``), NUL padded.
"""

from typing import List, Sequence, Tuple

import numpy as np

from pinecone_sdk.core.exceptions import ValidationError
from pinecone_sdk.core.models import NdArray

FLOAT_DTYPE = "float32"
_WIRE_FLOAT = np.dtype("<f4")


def _shape_for(rows: int, cols: int) -> List[int]:
    if rows == 1:
        return [cols]
    return [rows, cols]


def _rows_and_cols(array: NdArray) -> Tuple[int, int]:
    if len(array.shape) == 1:
        return 1, array.shape[0]
    if len(array.shape) == 2:
        return array.shape[0], array.shape[1]
    raise ValidationError(
        f"unsupported shape: {array.shape}", details={"shape": list(array.shape)}
    )


def _check_rectangular(arr: Sequence[Sequence]) -> int:
    if len(arr) == 0:
        raise ValidationError("arr must be nonempty")
    cols = len(arr[0])
    for i, row in enumerate(arr):
        if len(row) != cols:
            raise ValidationError(
                f"all rows must have the same length: row {i} has {len(row)}, expected {cols}",
                details={"row": i},
            )
    return cols


def float_arr_to_ndarray(arr: Sequence[Sequence[float]]) -> NdArray:
    """
    Pack a non-empty list of equal-length float rows into an NdArray.

    Raises:
        ValidationError: when ``arr`` is empty or ragged
    """
    cols = _check_rectangular(arr)
    packed = np.asarray(arr, dtype=_WIRE_FLOAT).reshape(len(arr), cols)
    return NdArray(buffer=packed.tobytes(order="C"), shape=_shape_for(len(arr), cols), dtype=FLOAT_DTYPE)


def float_ndarray_to_arr(array: NdArray) -> List[List[float]]:
    """
    Unpack a float32 NdArray into a list of rows.

    Raises:
        ValidationError: on a non-float32 dtype or a buffer that does not match the shape
    """
    if array.dtype != FLOAT_DTYPE:
        raise ValidationError(f"unexpected dtype: {array.dtype}")

    rows, cols = _rows_and_cols(array)
    expected = rows * cols * _WIRE_FLOAT.itemsize
    if len(array.buffer) != expected:
        raise ValidationError(
            f"buffer holds {len(array.buffer)} bytes, shape {array.shape} needs {expected}"
        )

    values = np.frombuffer(array.buffer, dtype=_WIRE_FLOAT).reshape(rows, cols)
    return values.astype(float).tolist()


def _string_itemsize(dtype: str) -> int:
    if not dtype.startswith("|S"):
        raise ValidationError(f"unexpected dtype: {dtype[:2]}")
    try:
        itemsize = int(dtype[2:])
    except ValueError:
        raise ValidationError(f"invalid string item size in dtype: {dtype}")
    if itemsize <= 0:
        raise ValidationError(f"invalid string item size in dtype: {dtype}")
    return itemsize


def string_ndarray_to_arr(array: NdArray) -> List[List[str]]:
    """Unpack a ``|S<n>`` NdArray into a list of string rows."""
    itemsize = _string_itemsize(array.dtype)
    rows, cols = _rows_and_cols(array)
    expected = rows * cols * itemsize
    if len(array.buffer) != expected:
        raise ValidationError(
            f"buffer holds {len(array.buffer)} bytes, shape {array.shape} needs {expected}"
        )

    result = []
    for r in range(rows):
        row = []
        for c in range(cols):
            start = (r * cols + c) * itemsize
            cell = array.buffer[start : start + itemsize]
            try:
                row.append(cell.strip(b"\x00").decode("utf-8"))
            except UnicodeDecodeError as e:
                raise ValidationError(
                    f"cell ({r}, {c}) is not valid UTF-8: {e}", details={"row": r, "col": c}
                ) from e
        result.append(row)
    return result


def string_arr_to_ndarray(arr: Sequence[Sequence[str]]) -> NdArray:
    """Pack equal-length string rows into a ``|S<n>`` NdArray."""
    cols = _check_rectangular(arr)
    encoded = [[cell.encode("utf-8") for cell in row] for row in arr]
    itemsize = max([1] + [len(cell) for row in encoded for cell in row])

    packed = np.array(encoded, dtype=f"S{itemsize}").reshape(len(arr), cols)
    return NdArray(
        buffer=packed.tobytes(order="C"),
        shape=_shape_for(len(arr), cols),
        dtype=f"|S{itemsize}",
    )
