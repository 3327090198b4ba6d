#!/usr/bin/env python3
"""
Score examples/sample_records.json in memory (no DB/API needed) and write
examples/sample_scores.json.
Usage: python scripts/score_sample_records.py [RULES_JSON]
"""

import json
import sys
from pathlib import Path

# Add project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from cams.engine.calculator import compute_score
from cams.engine.rules import get_rule_table
from cams.schemas.assessment import AssessmentRecord


def main():
    examples_dir = Path(__file__).resolve().parent.parent / "examples"
    records_path = examples_dir / "sample_records.json"
    scores_path = examples_dir / "sample_scores.json"

    if not records_path.exists():
        print(f"Error: {records_path} not found")
        sys.exit(1)

    rules = get_rule_table(sys.argv[1] if len(sys.argv) > 1 else None)

    with open(records_path, encoding="utf-8") as f:
        raw_records = json.load(f)

    results = []
    for raw in raw_records:
        record = AssessmentRecord.model_validate(raw)
        score = compute_score(record, rules)
        results.append(
            {
                "technician_id": record.technician_id,
                "rules": {"version": rules.version, "table_hash": rules.table_hash},
                "score": score.model_dump(),
            }
        )

    with open(scores_path, "w", encoding="utf-8") as f:
        json.dump(results, f, indent=2)

    print(f"Scored {len(results)} records -> {scores_path}")


if __name__ == "__main__":
    main()
