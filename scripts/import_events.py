"""
CSV Import Script for Events

Usage:
    python scripts/import_events.py <api-key> <category> <path-to-csv>

CSV Format:
    created_at,fields_json

Imported events are stored as PENDING and are not sent to the webhook.
They do count against the monthly quota of the month they were created in.
"""

import sys
import csv
import json
from pathlib import Path
from datetime import datetime, timezone

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker
from pingpanel.core.database import sync_engine
from pingpanel.models import DeliveryStatus, Event, EventCategory, User
from pingpanel.services.ingestion import format_event_message
from pingpanel.services.quota import quota_upsert


def _parse_created_at(value: str) -> datetime:
    created_at = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.astimezone(timezone.utc)


def _add_to_quota(session, user_id, monthly_counts: dict[tuple[int, int], int]):
    now = datetime.now(timezone.utc)
    for (year, month), count in monthly_counts.items():
        session.execute(quota_upsert(sync_engine.dialect.name, user_id, year, month, count, now))


def import_csv(api_key: str, category_name: str, file_path: str, batch_size: int = 1000):
    """
    Import events from CSV file

    Args:
        api_key: API key of the user owning the category
        category_name: Name of an existing category
        file_path: Path to CSV file
        batch_size: Number of events to process per batch
    """
    file_path = Path(file_path)

    if not file_path.exists():
        print(f"Error: File not found: {file_path}")
        sys.exit(1)

    print(f"Starting import from: {file_path}")

    Session = sessionmaker(bind=sync_engine)

    total_processed = 0
    total_skipped = 0

    with Session() as session:
        user = session.execute(select(User).where(User.api_key == api_key)).scalar_one_or_none()
        if user is None:
            print("Error: Invalid API key")
            sys.exit(1)

        category = session.execute(
            select(EventCategory).where(
                EventCategory.user_id == user.id,
                EventCategory.name == category_name.lower()
            )
        ).scalar_one_or_none()
        if category is None:
            print(f'Error: Category "{category_name}" not found')
            sys.exit(1)

        with open(file_path, 'r', encoding='utf-8') as f:
            reader = csv.DictReader(f)

            # Validate headers
            required_headers = {'created_at', 'fields_json'}
            if not required_headers.issubset(reader.fieldnames or []):
                print(f"Error: CSV must have headers: {required_headers}")
                print(f"Found headers: {reader.fieldnames}")
                sys.exit(1)

            batch = []
            monthly_counts: dict[tuple[int, int], int] = {}

            for i, row in enumerate(reader, 1):
                try:
                    fields = {}
                    if row['fields_json'] and row['fields_json'].strip():
                        fields = json.loads(row['fields_json'])
                    if not isinstance(fields, dict):
                        raise ValueError("fields_json must be a JSON object")

                    created_at = _parse_created_at(row['created_at'])

                    batch.append(Event(
                        name=category.name,
                        formatted_message=format_event_message(category, None, fields),
                        fields=fields,
                        delivery_status=DeliveryStatus.PENDING,
                        user_id=user.id,
                        event_category_id=category.id,
                        created_at=created_at,
                        updated_at=created_at
                    ))
                    key = (created_at.year, created_at.month)
                    monthly_counts[key] = monthly_counts.get(key, 0) + 1

                except (ValueError, json.JSONDecodeError) as e:
                    print(f"Error on row {i}: {e}")
                    print(f"Row data: {row}")
                    total_skipped += 1
                    continue

                # Process batch
                if len(batch) >= batch_size:
                    session.add_all(batch)
                    _add_to_quota(session, user.id, monthly_counts)
                    session.commit()

                    total_processed += len(batch)
                    print(f"Processed {total_processed} events | Skipped: {total_skipped}")

                    batch = []
                    monthly_counts = {}

            # Process remaining events
            if batch:
                session.add_all(batch)
                _add_to_quota(session, user.id, monthly_counts)
                session.commit()
                total_processed += len(batch)

    print("\n" + "=" * 50)
    print("Import completed!")
    print(f"Total imported: {total_processed}")
    print(f"Total skipped: {total_skipped}")
    print("=" * 50)


def main():
    if len(sys.argv) != 4:
        print("Usage: python scripts/import_events.py <api-key> <category> <path-to-csv>")
        sys.exit(1)

    api_key, category_name, file_path = sys.argv[1:4]
    import_csv(api_key, category_name, file_path)


if __name__ == "__main__":
    main()
