import re
from datetime import timedelta


class TimeParser:
    """Parses interval strings such as "1s", "2m" or "1m30s" into seconds."""

    _units = {
        "s": "seconds",
        "m": "minutes",
        "h": "hours",
        "d": "days",
        "w": "weeks",
    }

    def __init__(self, time_amount: str) -> None:
        matches = list(
            re.finditer(
                r"(?P<val>\d+(\.\d+)?)(?P<unit>[smhdw]?)",
                time_amount,
                flags=re.I,
            )
        )

        if len(matches) == 0:
            raise ValueError(f"Invalid time amount '{time_amount}'")

        durations: dict[str, float] = {}
        for match in matches:
            unit = self._units.get(match.group("unit").lower(), "seconds")
            durations[unit] = durations.get(unit, 0.0) + float(match.group("val"))

        self.time = float(timedelta(**durations).total_seconds())
