"""UPC normalisation: the natural key joining vendor feeds to the master catalog."""

from __future__ import annotations

from typing import Final

from vendorsync.domain.errors import RowValidationError

UPC_LENGTH: Final[int] = 12


def normalize_upc(raw: object) -> str:
    """Return ``raw`` as a 12-digit UPC or raise ``RowValidationError``.

    Digit-only values shorter than twelve digits are left-padded with zeros so
    the same product reported with different zero-padding resolves to one key.
    """

    if raw is None:
        raise RowValidationError("missing UPC", field="upc")
    if isinstance(raw, bool) or not isinstance(raw, str | int):
        raise RowValidationError(f"unsupported UPC value {raw!r}", field="upc")
    value = str(raw).strip()
    if not value:
        raise RowValidationError("missing UPC", field="upc")
    if not value.isdigit():
        raise RowValidationError(f"UPC {value!r} is not numeric", field="upc")
    if len(value) > UPC_LENGTH:
        raise RowValidationError(f"UPC {value!r} is longer than {UPC_LENGTH} digits", field="upc")
    if int(value) == 0:
        raise RowValidationError("UPC is zero", field="upc")
    return value.zfill(UPC_LENGTH)


def try_normalize_upc(raw: object) -> str | None:
    """Like ``normalize_upc`` but return ``None`` for invalid values."""

    try:
        return normalize_upc(raw)
    except RowValidationError:
        return None
