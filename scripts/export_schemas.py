"""Export JSON schemas for TripAnalysis and SharedSnapshot."""

import json
from pathlib import Path

from lastmile.models import SCHEMA_VERSION, SharedSnapshot, TripAnalysis


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for model in (TripAnalysis, SharedSnapshot):
        schema = model.model_json_schema(by_alias=True)
        schema["$comment"] = f"schema version {SCHEMA_VERSION}"
        path = schemas_dir / f"{model.__name__}.v{SCHEMA_VERSION}.schema.json"
        with open(path, "w") as f:
            json.dump(schema, f, indent=2)
        print(f"Exported {model.__name__} schema to {path}")


if __name__ == "__main__":
    main()
