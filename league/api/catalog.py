from fastapi import APIRouter

from league.engine.catalog import EVENT_LABELS, EVENT_POINTS, category_for, event_types_by_category
from league.engine.derivation import GAME_EVENT_LABELS

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


@router.get("")
async def get_catalog():
    """Event types with their points, labels and categories."""
    return {
        "event_types": [
            {
                "type": event_type.value,
                "points": EVENT_POINTS[event_type],
                "label": EVENT_LABELS[event_type],
                "category": category_for(event_type),
            }
            for event_type in EVENT_POINTS
        ],
        "categories": {
            name: [t.value for t in types] for name, types in event_types_by_category().items()
        },
        "game_event_types": [
            {"type": t.value, "label": label} for t, label in GAME_EVENT_LABELS.items()
        ],
    }
