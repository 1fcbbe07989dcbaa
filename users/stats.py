"""Garden statistics and fade-settings payload parsing for the users API."""

import math

from journal.errors import ValidationError
from journal.models import SETTINGS_COLUMNS, DiaryEntry, utcnow
from garden.repository import GardenPlantStore

# camelCase payload key -> column
SETTINGS_KEYS = {key: column for column, key in SETTINGS_COLUMNS.values()}
IGNORED_SETTINGS_KEYS = {'userId'}


def parse_settings_payload(data):
    """Validate a settings update and map it to column values.

    Every provided rate must be a positive, finite number; unknown keys are
    rejected so typos do not silently do nothing.
    """
    if not isinstance(data, dict):
        raise ValidationError('Settings payload must be a JSON object')

    rates = {}
    for key, value in data.items():
        if key in IGNORED_SETTINGS_KEYS:
            continue
        if key not in SETTINGS_KEYS:
            raise ValidationError(f'Unknown setting: {key}')
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f'{key} must be a number')
        if not math.isfinite(value) or value <= 0:
            raise ValidationError(f'{key} must be a positive number')
        rates[SETTINGS_KEYS[key]] = float(value)
    return rates


def garden_stats(user_id, now=None):
    """Entry and plant counts, days active and overall garden beauty."""
    now = now or utcnow()
    total_entries = DiaryEntry.query.filter_by(user_id=user_id).count()
    fading_entries = DiaryEntry.query.filter_by(user_id=user_id, is_fully_faded=False).count()
    total_plants = GardenPlantStore().count_for_user(user_id)

    first_entry = DiaryEntry.query.filter_by(user_id=user_id).order_by(DiaryEntry.created_at.asc()).first()
    days_active = (now - first_entry.created_at).days + 1 if first_entry else 0

    garden_beauty = 0
    if total_plants > 0 and total_entries > 0:
        garden_beauty = min(100, math.floor(total_plants / total_entries * 100))

    return {
        'totalEntries': total_entries,
        'totalPlants': total_plants,
        'fadingEntries': fading_entries,
        'daysActive': days_active,
        'gardenBeauty': garden_beauty,
    }
