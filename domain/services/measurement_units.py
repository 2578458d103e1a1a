"""
Height and weight unit conversion.

Storage units are centimeters for height and kilograms for weight.
Unit names are matched case-insensitively.
"""

import re
from typing import Optional, Tuple

CM_PER_FOOT = 30.48
CM_PER_INCH = 2.54
KG_PER_POUND = 0.453592

HEIGHT_UNITS = frozenset({"cm", "ft", "in"})
WEIGHT_UNITS = frozenset({"kg", "lbs", "lb"})

_FEET_INCHES = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(?:'|ft)\s*(\d+(?:\.\d+)?)\s*(?:\"|in)?\s*$", re.I)


def _normalize(unit: str) -> str:
    return (unit or "").strip().lower()


class MeasurementUnitConverter:
    """
    Converts user-entered measurements to and from storage units.

    Examples:
        >>> MeasurementUnitConverter.height_to_cm(6, "ft")
        182.88
        >>> MeasurementUnitConverter.weight_to_kg(100, "lbs")
        45.3592
    """

    @staticmethod
    def is_valid_height_unit(unit: str) -> bool:
        return _normalize(unit) in HEIGHT_UNITS

    @staticmethod
    def is_valid_weight_unit(unit: str) -> bool:
        return _normalize(unit) in WEIGHT_UNITS

    @staticmethod
    def height_to_cm(value: float, unit: str) -> float:
        """
        Raises:
            ValueError: unit is not cm, ft or in
        """
        normalized = _normalize(unit)
        if normalized == "cm":
            return value
        if normalized == "ft":
            return round(value * CM_PER_FOOT, 4)
        if normalized == "in":
            return round(value * CM_PER_INCH, 4)
        raise ValueError(f"Unsupported height unit: {unit}")

    @staticmethod
    def height_from_cm(centimeters: float, unit: str) -> float:
        normalized = _normalize(unit)
        if normalized == "cm":
            return centimeters
        if normalized == "ft":
            return round(centimeters / CM_PER_FOOT, 2)
        if normalized == "in":
            return round(centimeters / CM_PER_INCH, 1)
        raise ValueError(f"Unsupported height unit: {unit}")

    @staticmethod
    def weight_to_kg(value: float, unit: str) -> float:
        """
        Raises:
            ValueError: unit is not kg, lb or lbs
        """
        normalized = _normalize(unit)
        if normalized == "kg":
            return value
        if normalized in ("lb", "lbs"):
            return round(value * KG_PER_POUND, 4)
        raise ValueError(f"Unsupported weight unit: {unit}")

    @staticmethod
    def weight_from_kg(kilograms: float, unit: str) -> float:
        normalized = _normalize(unit)
        if normalized == "kg":
            return kilograms
        if normalized in ("lb", "lbs"):
            return round(kilograms / KG_PER_POUND, 1)
        raise ValueError(f"Unsupported weight unit: {unit}")

    @staticmethod
    def parse_height(text: str) -> Tuple[float, str]:
        """
        Parse free-form height input.

        Accepts "5'10\"", "5ft 10in", "180cm", "70in" or a bare number
        (taken as cm). Feet-and-inches input is returned in inches.

        Raises:
            ValueError: text is not a recognizable height
        """
        cleaned = text.strip()

        match = _FEET_INCHES.match(cleaned)
        if match:
            feet, inches = float(match.group(1)), float(match.group(2))
            return feet * 12 + inches, "in"

        lowered = cleaned.lower()
        for suffix in ("cm", "in"):
            if lowered.endswith(suffix):
                return float(cleaned[: -len(suffix)].strip()), suffix

        return float(cleaned), "cm"

    @staticmethod
    def default_units(locale: Optional[str] = None) -> Tuple[str, str]:
        """(height_unit, weight_unit) for a locale; imperial only for en-US."""
        if locale and locale.lower().startswith("en-us"):
            return "ft", "lbs"
        return "cm", "kg"
