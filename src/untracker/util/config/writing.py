# Output naming/formatting
from dataclasses import dataclass

@dataclass(frozen=True)
class WritingConfig:
    number_width: int = 3               # 1 → "001"; wider indices keep the last digits
    placeholder: str = "unknown"        # sanitized name for empty input
    manifest_name: str = "stems.json"   # written into the module dir with --manifest
