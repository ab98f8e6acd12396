from __future__ import annotations

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from .intake.dispatch import relay_submission
from .intake.models import SubmissionRequest
from .listing.export import CSV_FILENAME, GEOJSON_FILENAME, geojson_text, to_csv
from .listing.search import ALL_CITIES, filter_restaurants, has_active_filters, list_cities
from .store.data_store import get_restaurants
from .store.models import Restaurant

app = FastAPI(title="GF Local", version="1.0.0")


def _select(query: str, city: str, doordash: bool) -> list[Restaurant]:
    return filter_restaurants(get_restaurants(), query=query, city=city, doordash_only=doordash)


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


# ── Listing endpoints ────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    restaurants = get_restaurants()
    return {"cities": list_cities(restaurants), "total": len(restaurants)}


@app.get("/restaurants")
def restaurants(
    q: str = Query(default="", max_length=200),
    city: str = ALL_CITIES,
    doordash: bool = False,
) -> dict:
    selected = _select(q, city, doordash)
    return {
        "restaurants": [r.to_json() for r in selected],
        "count": len(selected),
        "total": len(get_restaurants()),
        "filtered": has_active_filters(q, city, doordash),
    }


# ── Export endpoints ─────────────────────────────────────────────────────


@app.get("/export/csv")
def export_csv(q: str = "", city: str = ALL_CITIES, doordash: bool = False) -> Response:
    return Response(
        content=to_csv(_select(q, city, doordash)),
        media_type="text/csv",
        headers=_attachment(CSV_FILENAME),
    )


@app.get("/export/geojson")
def export_geojson(q: str = "", city: str = ALL_CITIES, doordash: bool = False) -> Response:
    return Response(
        content=geojson_text(_select(q, city, doordash)),
        media_type="application/geo+json",
        headers=_attachment(GEOJSON_FILENAME),
    )


# ── Request intake ───────────────────────────────────────────────────────


@app.post("/requests")
async def submit_request(body: SubmissionRequest) -> JSONResponse:
    result = await run_in_threadpool(relay_submission, {"data": body.to_form_data()})
    return JSONResponse(
        status_code=result.status_code,
        content={"status": "submitted" if result.status_code == 200 else "failed", "message": result.message},
    )


@app.post("/submission-created")
async def submission_created(request: Request) -> PlainTextResponse:
    raw = await request.body()
    result = await run_in_threadpool(relay_submission, raw)
    return PlainTextResponse(result.message, status_code=result.status_code)
