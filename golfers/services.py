from typing import Dict, Iterable, Optional

import structlog
from django.db import transaction

from .datagolf import DataGolfClient
from .models import Golfer, TournamentGolfer
from .utils import GROUP_COUNT, chunked, group_index, normalize_country, normalize_player_name

logger = structlog.get_logger(__name__)

SYNC_BATCH_SIZE = 200


def sync_golfers(players: Iterable[Dict], dry_run: bool = False) -> Dict:
    """
    Upsert a DataGolf player list by api id.

    Args:
        players: Player dictionaries with dg_id, player_name and country
        dry_run: Count the inserts and updates without writing

    Returns:
        Dictionary with fetched, total, inserted, updated and dry_run
    """
    players = list(players)
    payload = [{
        "api_id": int(player["dg_id"]),
        "player_name": normalize_player_name(player["player_name"]),
        "country": normalize_country(player.get("country")),
    } for player in players if player.get("dg_id") is not None and player.get("player_name")]

    inserted = updated = 0
    for batch in chunked(payload, SYNC_BATCH_SIZE):
        existing = Golfer.objects.in_bulk([item["api_id"] for item in batch], field_name="api_id")
        with transaction.atomic():
            for item in batch:
                golfer = existing.get(item["api_id"])
                if golfer is None:
                    inserted += 1
                    if not dry_run:
                        Golfer.objects.create(**item)
                    continue
                if golfer.player_name == item["player_name"] and golfer.country == item["country"]:
                    continue
                updated += 1
                if not dry_run:
                    golfer.player_name = item["player_name"]
                    golfer.country = item["country"]
                    golfer.save(update_fields=["player_name", "country", "updated_at"])

    result = {
        "fetched": len(players),
        "total": len(payload),
        "inserted": inserted,
        "updated": updated,
        "dry_run": dry_run,
    }
    logger.info("Golfer sync completed", **result)
    return result


def sync_golfers_from_datagolf(dry_run: bool = False, limit: Optional[int] = None,
                               client: Optional[DataGolfClient] = None) -> Dict:
    client = client or DataGolfClient()
    players = client.get_player_list()
    if limit:
        players = players[:limit]
    return sync_golfers(players, dry_run=dry_run)


def normalize_golfer_names(dry_run: bool = False) -> Dict:
    changed = []
    for golfer in Golfer.objects.all():
        player_name = normalize_player_name(golfer.player_name)
        country = normalize_country(golfer.country)
        if player_name == golfer.player_name and country == golfer.country:
            continue
        changed.append({"id": golfer.id, "before": golfer.player_name, "after": player_name})
        if not dry_run:
            golfer.player_name = player_name
            golfer.country = country
            golfer.save(update_fields=["player_name", "country", "updated_at"])

    logger.info("Golfer names normalized", changed=len(changed), dry_run=dry_run)
    return {"changed": len(changed), "dry_run": dry_run, "samples": changed[:50]}


def create_groups(tournament, dry_run: bool = False) -> Dict:
    """
    Split a tournament field into five pick groups, best rated first (world rank breaks
    ties). Golfers without a rating sort last.
    """
    field = sorted(
        TournamentGolfer.objects.filter(tournament=tournament).select_related("golfer"),
        key=lambda row: (row.rating is None, -(row.rating or 0), row.world_rank or 501, row.golfer.player_name),
    )

    sizes = [0] * GROUP_COUNT
    changed = 0
    with transaction.atomic():
        for index, row in enumerate(field):
            slot = group_index(index, len(field), sizes)
            sizes[slot] += 1
            if row.group == slot + 1:
                continue
            changed += 1
            if not dry_run:
                row.group = slot + 1
                row.save(update_fields=["group", "updated_at"])

    result = {
        "tournament": tournament.id,
        "golfers": len(field),
        "changed": changed,
        "groups": {str(number + 1): size for number, size in enumerate(sizes)},
        "dry_run": dry_run,
    }
    logger.info("Tournament groups created", **result)
    return result
