from dataclasses import dataclass
import json
from typing import Any


@dataclass
class StreamEvent:
    event_type: str
    content: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.event_type,
            **self.content,
        }

    def format_ndjson(self) -> str:
        return json.dumps(self.to_dict()) + "\n"
