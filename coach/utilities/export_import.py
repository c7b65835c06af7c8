"""
Export and Import of plan entries (JSON and CSV).
"""
import csv
import io
import json
from datetime import datetime
from typing import Any, Dict, Iterable, List
import logging

from coach.domain.PlanEntry import PlanEntry
from coach.domain.errors import ValidationError
from coach.utilities.constants import NUTRITION_FIELDS, WORKOUT

logger = logging.getLogger(__name__)

EXPORT_VERSION = '1.0'

CSV_FIELDS = [
    'date', 'kind', 'name', 'status', 'notes',
    'duration_minutes', 'exercises', 'calories', 'protein', 'carbs', 'fats'
]

# fields the importer keeps; ids, status and timestamps are reassigned
_IMPORT_FIELDS = ('scheduled_date', 'kind', 'name', 'notes', 'order', 'payload')


def entries_to_json(entries: Iterable[PlanEntry], owner_id: str = None) -> str:
    """Export entries as a JSON document with metadata."""
    entries = list(entries)
    document = {
        'export_date': datetime.now().isoformat(),
        'version': EXPORT_VERSION,
        'owner_id': owner_id,
        'entries': [e.to_dict() for e in entries],
    }
    logger.info(f"Exported {len(entries)} entries to JSON")
    return json.dumps(document, indent=2, ensure_ascii=False)


def _csv_row(entry: PlanEntry) -> Dict[str, Any]:
    row = {
        'date': entry.scheduled_date,
        'kind': entry.kind,
        'name': entry.name,
        'status': entry.status,
        'notes': entry.notes,
    }
    if entry.family == WORKOUT:
        row['duration_minutes'] = entry.payload.duration_minutes
        row['exercises'] = ', '.join(e.name for e in entry.payload.exercises)
    else:
        for field in NUTRITION_FIELDS:
            row[field] = entry.payload.get(field)
    return row


def entries_to_csv(entries: Iterable[PlanEntry]) -> str:
    """Export entries to CSV format for Excel compatibility."""
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=CSV_FIELDS, restval='')
    writer.writeheader()
    count = 0
    for entry in entries:
        writer.writerow(_csv_row(entry))
        count += 1
    logger.info(f"Exported {count} entries to CSV")
    return buf.getvalue()


def parse_import(data) -> List[Dict[str, Any]]:
    """Accept a JSON export document, a bare list of records or their JSON text."""
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Import file is not valid JSON: {e.msg}") from e
    if isinstance(data, dict):
        data = data.get('entries')
    if not isinstance(data, list):
        raise ValidationError("Import must contain a list of entries")
    records = []
    for record in data:
        if not isinstance(record, dict):
            raise ValidationError("Every imported entry must be an object")
        records.append({k: record[k] for k in _IMPORT_FIELDS if k in record})
    return records


async def import_entries(mutator, owner_id: str, data) -> Dict[str, Any]:
    """
    Create the exported entries for ``owner_id`` as new planned entries.

    Records that fail validation are skipped and reported; storage errors
    stop the import and propagate.
    """
    imported, errors = [], []
    for position, record in enumerate(parse_import(data)):
        fields = dict(record)
        date = fields.pop('scheduled_date', None)
        kind = fields.pop('kind', None)
        try:
            imported.append(await mutator.create(owner_id, date, kind, fields))
        except ValidationError as e:
            logger.warning(f"Skipping imported entry #{position}: {e.message}")
            errors.append({'index': position, 'detail': e.message})
    logger.info(f"Imported {len(imported)} entries for {owner_id} ({len(errors)} skipped)")
    return {'imported': imported, 'errors': errors}


# CLI interface
if __name__ == "__main__":
    import argparse
    import asyncio
    from pathlib import Path
    from coach.infra.Json_Store import JsonEntryStore
    from coach.logic.planner.mutator import EntryMutator

    parser = argparse.ArgumentParser(description='Export/Import plan entries')
    parser.add_argument('action', choices=['export', 'import'], help='Action to perform')
    parser.add_argument('--owner', required=True, help='Client id')
    parser.add_argument('--start', default='0001-01-01', help='First day to export (YYYY-MM-DD)')
    parser.add_argument('--end', default='9999-12-31', help='Last day to export (YYYY-MM-DD)')
    parser.add_argument('--format', choices=['json', 'csv'], default='json', help='Export format')
    parser.add_argument('--file', help='Input/output file path')

    args = parser.parse_args()
    store = JsonEntryStore()

    if args.action == 'export':
        entries = asyncio.run(store.fetch_entries(args.owner, args.start, args.end))
        text = entries_to_csv(entries) if args.format == 'csv' else entries_to_json(entries, args.owner)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = Path(args.file or f"plan_export_{timestamp}.{args.format}")
        output_path.write_text(text, encoding='utf-8')
        print(f"✓ Exported to: {output_path}")

    elif args.action == 'import':
        if not args.file:
            print("Error: --file is required for import")
            exit(1)
        text = Path(args.file).read_text(encoding='utf-8')
        result = asyncio.run(import_entries(EntryMutator(store), args.owner, text))
        print(f"✓ Imported {len(result['imported'])} entries, skipped {len(result['errors'])}")
