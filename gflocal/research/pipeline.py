from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from pydantic import ValidationError

from ..store.data_store import DatasetError, DatasetStore, existing_names, next_id
from ..store.models import Restaurant, RestaurantCandidate
from .config import DEFAULT_RESEARCH_CONFIG, ResearchConfig, ResearchRequest
from .errors import MalformedResponseError, ResearchError
from .groq_client import generate_text
from .prompts import build_prompt

logger = logging.getLogger(__name__)

Generator = Callable[..., str]


class ResearchStatus(str, Enum):
    skipped = "skipped"
    no_match = "no_match"
    duplicate = "duplicate"
    not_a_list = "not_a_list"
    nothing_added = "nothing_added"
    added = "added"


@dataclass
class MergeResult:
    added: list[Restaurant] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class ResearchOutcome:
    status: ResearchStatus
    added: list[Restaurant] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)
    total: int = 0


def parse_response(text: str) -> Any:
    """Parse the model reply, which must be nothing but JSON."""
    try:
        return json.loads(text.strip())
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Model output is not valid JSON: {exc}") from exc


def _label(item: Any, index: int) -> str:
    if isinstance(item, dict) and isinstance(item.get("name"), str) and item["name"].strip():
        return item["name"]
    return f"#{index}"


def merge_candidates(
    restaurants: list[Restaurant],
    candidates: list[Any],
) -> MergeResult:
    """
    Append valid, previously unseen candidates to ``restaurants`` in place.

    Names are compared case-insensitively against the dataset and against
    candidates accepted earlier in the same call. Ids continue from the
    current maximum.
    """
    result = MergeResult()
    seen = existing_names(restaurants)
    new_id = next_id(restaurants)

    for index, item in enumerate(candidates):
        label = _label(item, index)
        if not isinstance(item, dict):
            result.skipped.append((label, "not an object"))
            continue
        if not item.get("name") or not item.get("city"):
            result.skipped.append((label, "missing name or city"))
            continue
        try:
            candidate = RestaurantCandidate.model_validate(item)
        except ValidationError as exc:
            result.skipped.append((label, f"invalid record: {exc.error_count()} error(s)"))
            continue
        key = candidate.name.lower()
        if key in seen:
            result.skipped.append((label, "already exists"))
            continue

        restaurant = Restaurant.from_candidate(new_id, candidate)
        restaurants.append(restaurant)
        result.added.append(restaurant)
        seen.add(key)
        new_id += 1

    for label, reason in result.skipped:
        logger.info("Skipping %s: %s", label, reason)
    return result


def run_research(
    request: ResearchRequest,
    *,
    count: int = 1,
    config: ResearchConfig | None = None,
    store: DatasetStore | None = None,
    generate: Generator | None = None,
) -> ResearchOutcome:
    """
    Research ``count`` restaurants for ``request`` and append them to the dataset.

    Steps:
    - Load the dataset and build the prompt from a capped sample of names.
    - Ask the LLM once and parse its reply as JSON.
    - Drop invalid and duplicate records.
    - Rewrite the dataset once, only if something was added.

    Raises ``ResearchError`` subclasses on API failure, malformed output or an
    unreadable dataset;
    the dataset file is not touched in that case.
    """
    if count < 1:
        raise ValueError("count must be at least 1")
    config = config or DEFAULT_RESEARCH_CONFIG
    store = store or DatasetStore(config.dataset_path)
    generate = generate or generate_text

    if not request.request_value:
        logger.info("No request value provided, skipping.")
        return ResearchOutcome(status=ResearchStatus.skipped)

    try:
        restaurants = store.load()
    except DatasetError as exc:
        raise ResearchError(str(exc)) from exc
    logger.info("Researching: %s - %s", request.request_type, request.request_value)
    if request.request_details:
        logger.info("Details: %s", request.request_details)

    prompt = build_prompt(
        request,
        [r.name for r in restaurants],
        count=count,
        name_sample=config.name_sample_for(count),
        min_exact_location=config.min_exact_location,
    )
    text = generate(prompt, max_tokens=config.max_tokens_for(count), config=config)
    parsed = parse_response(text)

    if count == 1:
        if not isinstance(parsed, dict):
            raise MalformedResponseError("Expected a JSON object for a single restaurant")
        if parsed.get("error"):
            logger.info("Could not find a suitable restaurant: %s", parsed["error"])
            return ResearchOutcome(status=ResearchStatus.no_match, total=len(restaurants))
        try:
            RestaurantCandidate.model_validate(parsed)
        except ValidationError as exc:
            raise MalformedResponseError(f"Restaurant does not match the schema: {exc}") from exc
        merged = merge_candidates(restaurants, [parsed])
        if not merged.added:
            logger.info('Restaurant "%s" already exists, skipping.', parsed["name"])
            return ResearchOutcome(
                status=ResearchStatus.duplicate,
                skipped=merged.skipped,
                total=len(restaurants),
            )
    else:
        if not isinstance(parsed, list):
            logger.warning("Expected a JSON array of restaurants, got %s", type(parsed).__name__)
            return ResearchOutcome(status=ResearchStatus.not_a_list, total=len(restaurants))
        merged = merge_candidates(restaurants, parsed)
        if not merged.added:
            logger.info("No new restaurants to add.")
            return ResearchOutcome(
                status=ResearchStatus.nothing_added,
                skipped=merged.skipped,
                total=len(restaurants),
            )

    store.save(restaurants)
    for r in merged.added:
        logger.info("Successfully added: %s (id %d)", r.name, r.id)
    logger.info("Added %d restaurant(s). Total restaurants: %d", len(merged.added), len(restaurants))
    return ResearchOutcome(
        status=ResearchStatus.added,
        added=merged.added,
        skipped=merged.skipped,
        total=len(restaurants),
    )
