"""
Catalog endpoints - cohorts, creatures and sync status
"""
from fastapi import APIRouter, HTTPException, Request
from typing import List, Optional


router = APIRouter(prefix="/catalog", tags=["catalog"])


def parse_cohort_keys(raw: Optional[str]) -> List[int]:
    """Parse a comma-separated cohort list such as "1,2,9" """
    if not raw:
        return []
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid cohort list: {raw}")


@router.get("/cohorts")
async def list_cohorts(request: Request):
    """All cohorts with their pool sizes"""
    catalog = request.app.state.catalog
    sizes = catalog.pool_sizes()
    cohorts = []
    for key, info in sorted(catalog.cohorts.items()):
        entry = info.model_dump()
        entry["pool_size"] = sizes.get(key, 0)
        cohorts.append(entry)
    return {"cohorts": cohorts}


@router.get("/creatures")
async def list_creatures(request: Request, cohorts: Optional[str] = None):
    """
    Creatures in id order, optionally filtered by cohort

    Query:
        cohorts: comma-separated cohort keys, e.g. "1,2"
    """
    catalog = request.app.state.catalog
    keys = set(parse_cohort_keys(cohorts))
    creatures = [c for c in catalog.creatures if not keys or c.cohort in keys]
    return {
        "total": len(creatures),
        "creatures": [
            {**c.model_dump(), "sprite": c.sprite_url, "icon": c.icon_url}
            for c in creatures
        ],
    }


@router.get("/sync")
async def sync_status(request: Request):
    """Startup sync progress"""
    return request.app.state.sync_status.as_dict()
