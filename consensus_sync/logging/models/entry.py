from typing import Any, Dict

import msgspec

from .log_level import LogLevel


class Entry(msgspec.Struct, kw_only=True):
    message: str | None = None
    tags: set[str] = msgspec.field(
        default_factory=set,
    )
    level: LogLevel

    def to_template(
        self,
        template: str,
        context: Dict[str, Any] | None = None,
    ):
        fields: Dict[str, Any] = msgspec.structs.asdict(self)
        fields["level"] = self.level.value
        fields.update(context or {})

        return template.format(**fields)
