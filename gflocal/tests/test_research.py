from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from gflocal.research.config import ResearchConfig, ResearchRequest
from gflocal.research.errors import GenerationError, MalformedResponseError, ResearchError
from gflocal.research.pipeline import (
    ResearchStatus,
    merge_candidates,
    parse_response,
    run_research,
)
from gflocal.research.prompts import build_prompt
from gflocal.store.data_store import DatasetStore
from gflocal.store.models import Restaurant

EXISTING = [
    {"id": 4, "name": "Trattoria Verde", "city": "Cary", "lat": 35.76, "lng": -78.78},
    {"id": 9, "name": "Bull City Tacos", "city": "Durham", "lat": 35.99, "lng": -78.89},
]

NEW_RESTAURANT = {
    "name": "Jasmine Thai Garden",
    "cuisine": "Thai",
    "address": "500 Glenwood Ave, Raleigh, NC 27603",
    "city": "Raleigh",
    "lat": 35.7872,
    "lng": -78.6471,
    "gfOptions": "GF Menu Available",
    "menuItems": [
        {"name": "Pad Thai (GF)", "price": 14.5},
        {"name": "Green Curry", "price": 15.0},
        {"name": "Mango Sticky Rice", "price": 7.0},
    ],
    "doordash": True,
    "notes": "Uses GF tamari on request.",
    "website": "https://example.com/jasmine",
    "doordashUrl": "https://www.doordash.com/store/jasmine-thai-garden",
}

REQUEST = ResearchRequest(request_type="cuisine", request_value="Thai", request_details="near downtown")


def _store(tmp_path: Path) -> DatasetStore:
    path = tmp_path / "restaurants.json"
    path.write_text(json.dumps(EXISTING, indent=2), encoding="utf-8")
    return DatasetStore(path)


def _config(tmp_path: Path) -> ResearchConfig:
    return ResearchConfig(api_key="test-key", dataset_path=tmp_path / "restaurants.json")


def _generator(reply) -> MagicMock:
    text = reply if isinstance(reply, str) else json.dumps(reply)
    return MagicMock(return_value=f"\n  {text}\n")


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


def test_single_prompt_mentions_request_and_error_escape():
    prompt = build_prompt(REQUEST, ["Trattoria Verde"], count=1)

    assert 'A user has requested: "Thai"' in prompt
    assert "Additional details: near downtown" in prompt
    assert "ONE real restaurant" in prompt
    assert '{"error": "No suitable restaurant found"}' in prompt
    assert "Trattoria Verde" in prompt


def test_prompt_caps_existing_names():
    names = [f"Place {i}" for i in range(40)]

    prompt = build_prompt(REQUEST, names, count=1, name_sample=30)

    assert "Place 29" in prompt
    assert "Place 30" not in prompt


def test_batch_prompt_requires_exact_location_share():
    request = ResearchRequest(request_type="city", request_value="Apex")

    prompt = build_prompt(request, [], count=10, min_exact_location=5)

    assert "exactly 10 real restaurants" in prompt
    assert "At least 5 of the 10" in prompt
    assert "JSON array of exactly 10 objects" in prompt
    assert "Additional details: None" in prompt


# ---------------------------------------------------------------------------
# Parsing and merging
# ---------------------------------------------------------------------------


def test_parse_response_rejects_prose():
    with pytest.raises(MalformedResponseError):
        parse_response("Sure! Here is a great restaurant for you.")


def test_parse_response_trims_whitespace():
    assert parse_response('  {"name": "X"}\n') == {"name": "X"}


def test_merge_assigns_increasing_ids_and_skips_bad_items():
    restaurants = [Restaurant.from_json(r) for r in EXISTING]
    candidates = [
        dict(NEW_RESTAURANT),
        {"name": "BULL CITY TACOS", "city": "Durham"},          # existing, other case
        {"name": "No City"},                                     # missing city
        {"city": "Raleigh"},                                     # missing name
        dict(NEW_RESTAURANT, name="jasmine thai garden"),        # added earlier this run
        {"name": "Bad Coords", "city": "Cary", "lat": "north"},  # schema failure
        "not an object",
        {"name": "Pho Corner", "city": "Morrisville"},
    ]

    result = merge_candidates(restaurants, candidates)

    assert [r.name for r in result.added] == ["Jasmine Thai Garden", "Pho Corner"]
    assert [r.id for r in result.added] == [10, 11]
    assert len(result.skipped) == 6
    assert len(restaurants) == len(EXISTING) + 2


# ---------------------------------------------------------------------------
# Single-record runs
# ---------------------------------------------------------------------------


def test_single_run_appends_with_next_id(tmp_path: Path):
    store = _store(tmp_path)
    generate = _generator(NEW_RESTAURANT)

    outcome = run_research(REQUEST, config=_config(tmp_path), store=store, generate=generate)

    assert outcome.status == ResearchStatus.added
    saved = json.loads(store.path.read_text(encoding="utf-8"))
    assert len(saved) == len(EXISTING) + 1
    assert saved[-1]["id"] == 10
    assert saved[-1]["name"] == "Jasmine Thai Garden"
    assert saved[-1]["menuItems"][0] == {"name": "Pad Thai (GF)", "price": 14.5}
    assert saved[:2] == EXISTING
    assert generate.call_args.kwargs["max_tokens"] == 1024


def test_single_run_duplicate_is_noop(tmp_path: Path):
    store = _store(tmp_path)
    before = store.path.read_bytes()
    generate = _generator(dict(NEW_RESTAURANT, name="trattoria VERDE"))

    outcome = run_research(REQUEST, config=_config(tmp_path), store=store, generate=generate)

    assert outcome.status == ResearchStatus.duplicate
    assert store.path.read_bytes() == before


def test_single_run_error_reply_is_noop(tmp_path: Path):
    store = _store(tmp_path)
    before = store.path.read_bytes()

    outcome = run_research(
        REQUEST,
        config=_config(tmp_path),
        store=store,
        generate=_generator({"error": "No suitable restaurant found"}),
    )

    assert outcome.status == ResearchStatus.no_match
    assert store.path.read_bytes() == before


def test_single_run_malformed_reply_leaves_file_untouched(tmp_path: Path):
    store = _store(tmp_path)
    before = store.path.read_bytes()

    with pytest.raises(MalformedResponseError):
        run_research(
            REQUEST,
            config=_config(tmp_path),
            store=store,
            generate=_generator("I found a lovely Thai place on Glenwood Ave."),
        )

    assert store.path.read_bytes() == before


def test_single_run_schema_failure_is_fatal(tmp_path: Path):
    store = _store(tmp_path)
    before = store.path.read_bytes()

    with pytest.raises(MalformedResponseError):
        run_research(
            REQUEST,
            config=_config(tmp_path),
            store=store,
            generate=_generator({"cuisine": "Thai"}),
        )

    assert store.path.read_bytes() == before


def test_run_without_request_value_skips_api(tmp_path: Path):
    store = _store(tmp_path)
    generate = _generator(NEW_RESTAURANT)

    outcome = run_research(
        ResearchRequest(request_value=""), config=_config(tmp_path), store=store, generate=generate
    )

    assert outcome.status == ResearchStatus.skipped
    generate.assert_not_called()


def test_generation_error_propagates(tmp_path: Path):
    store = _store(tmp_path)
    before = store.path.read_bytes()
    generate = MagicMock(side_effect=GenerationError("rate limited"))

    with pytest.raises(GenerationError):
        run_research(REQUEST, config=_config(tmp_path), store=store, generate=generate)

    assert store.path.read_bytes() == before


# ---------------------------------------------------------------------------
# Batch runs
# ---------------------------------------------------------------------------


def test_batch_run_adds_valid_unique_records(tmp_path: Path):
    store = _store(tmp_path)
    candidates = [{"name": f"Spot {i}", "city": "Apex"} for i in range(7)]
    candidates += [
        {"name": "Trattoria Verde", "city": "Cary"},
        {"name": "Spot 3", "city": "Cary"},
        {"name": "", "city": "Cary"},
    ]

    outcome = run_research(
        ResearchRequest(request_type="city", request_value="Apex"),
        count=10,
        config=_config(tmp_path),
        store=store,
        generate=_generator(candidates),
    )

    assert outcome.status == ResearchStatus.added
    assert len(outcome.added) == 7
    assert len(outcome.skipped) == 3
    saved = json.loads(store.path.read_text(encoding="utf-8"))
    assert [r["id"] for r in saved[len(EXISTING):]] == list(range(10, 17))


def test_batch_run_uses_batch_token_budget(tmp_path: Path):
    generate = _generator([])

    outcome = run_research(REQUEST, count=10, config=_config(tmp_path), store=_store(tmp_path), generate=generate)

    assert outcome.status == ResearchStatus.nothing_added
    assert generate.call_args.kwargs["max_tokens"] == 8192


def test_batch_run_non_list_is_noop(tmp_path: Path):
    store = _store(tmp_path)
    before = store.path.read_bytes()

    outcome = run_research(
        REQUEST, count=10, config=_config(tmp_path), store=store, generate=_generator(NEW_RESTAURANT)
    )

    assert outcome.status == ResearchStatus.not_a_list
    assert store.path.read_bytes() == before


def test_request_from_env(monkeypatch):
    monkeypatch.setenv("REQUEST_TYPE", "")
    monkeypatch.setenv("REQUEST_VALUE", "  Chapel Hill ")
    monkeypatch.delenv("REQUEST_DETAILS", raising=False)

    request = ResearchRequest.from_env()

    assert request == ResearchRequest(request_type="cuisine", request_value="Chapel Hill", request_details="")


def test_single_run_leaves_existing_records_untouched(tmp_path: Path):
    sparse = [{"id": 1, "name": "Old Place", "city": "Cary", "menuItems": [{"name": "Soup", "price": 8}]}]
    path = tmp_path / "restaurants.json"
    path.write_text(json.dumps(sparse, indent=2), encoding="utf-8")

    outcome = run_research(
        REQUEST,
        config=_config(tmp_path),
        store=DatasetStore(path),
        generate=_generator({"name": "New Spot", "city": "Cary"}),
    )

    assert outcome.status == ResearchStatus.added
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved[0] == sparse[0]
    assert saved[1]["id"] == 2


def test_run_with_lenient_existing_values_still_adds(tmp_path: Path):
    odd = [{"id": 5, "name": "X", "city": "Cary", "lat": None, "menuItems": [{"name": "Soup", "price": "market"}]}]
    path = tmp_path / "restaurants.json"
    path.write_text(json.dumps(odd, indent=2), encoding="utf-8")

    outcome = run_research(
        REQUEST, config=_config(tmp_path), store=DatasetStore(path), generate=_generator(NEW_RESTAURANT)
    )

    assert [r.id for r in outcome.added] == [6]
    assert json.loads(path.read_text(encoding="utf-8"))[0] == odd[0]


def test_unreadable_dataset_is_a_research_error(tmp_path: Path):
    path = tmp_path / "restaurants.json"
    path.write_text(json.dumps([{"name": "No Id", "city": "Cary"}]), encoding="utf-8")
    generate = _generator(NEW_RESTAURANT)

    with pytest.raises(ResearchError):
        run_research(REQUEST, config=_config(tmp_path), store=DatasetStore(path), generate=generate)

    generate.assert_not_called()
