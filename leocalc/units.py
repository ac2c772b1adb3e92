from .calculators.base import to_number

# Length conversion constants — the units the freight screen offers

# Metres per unit
TO_METERS = {
    "m": 1.0,
    "ft": 0.3048,
    "cm": 0.01,
    "in": 0.0254,
    "mm": 0.001,
}

# Centimetres per unit — used to normalize every freight dimension
TO_CENTIMETERS = {
    "m": 100.0,
    "ft": 30.48,
    "cm": 1.0,
    "in": 2.54,
    "mm": 0.1,
}

SUPPORTED_UNITS = tuple(TO_METERS.keys())


def _check_unit(unit: str) -> None:
    if unit not in TO_METERS:
        raise ValueError(f"Unsupported length unit: {unit}. Available: {list(SUPPORTED_UNITS)}")


def convert_length(value, from_unit: str, to_unit: str) -> float:
    """
    Convert a length between two supported units.
    Result is rounded to 4 decimals. Unparseable values convert to 0.
    """
    _check_unit(from_unit)
    _check_unit(to_unit)
    v = to_number(value)
    if from_unit == to_unit:
        return v
    in_meters = v * TO_METERS[from_unit]
    return round(in_meters / TO_METERS[to_unit], 4)


def to_centimeters(value, unit: str) -> float:
    """Normalize a length to centimetres (unrounded)."""
    _check_unit(unit)
    return to_number(value) * TO_CENTIMETERS[unit]


def length_unit(unit, default: str = "m") -> str:
    """A supported unit name, or `default` for anything missing or unknown."""
    if isinstance(unit, str) and unit in TO_CENTIMETERS:
        return unit
    return default
