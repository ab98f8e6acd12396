from __future__ import annotations

from .config import ResearchRequest

REGION = "the Raleigh/Cary/Durham, NC area"
LAT_RANGE = (35.7, 36.1)
LNG_RANGE = (-78.5, -79.0)
FALLBACK_CITIES = ["Raleigh", "Cary", "Durham", "Apex", "Morrisville", "Chapel Hill", "Wake Forest"]

RESTAURANT_SCHEMA = """\
{
  "name": "Restaurant Name",
  "cuisine": "Cuisine Type (e.g., Italian, Thai, American)",
  "address": "Full street address with city, state, zip",
  "city": "City name only (Raleigh, Cary, Durham, etc.)",
  "lat": 35.xxxx,
  "lng": -78.xxxx,
  "gfOptions": "Brief GF description (e.g., 'GF Menu Available', 'Dedicated GF Kitchen', '100% GF')",
  "menuItems": [
    {"name": "GF Menu Item 1", "price": 12.99},
    {"name": "GF Menu Item 2", "price": 14.99},
    {"name": "GF Menu Item 3", "price": 10.99}
  ],
  "doordash": true,
  "notes": "Brief notes about GF safety, staff knowledge, or special accommodations",
  "website": "https://restaurant-website.com",
  "doordashUrl": "https://www.doordash.com/store/..." or null if not on DoorDash
}"""


def _request_block(request: ResearchRequest) -> str:
    return (
        f'A user has requested: "{request.request_value}"\n'
        f"Request type: {request.request_type}\n"
        f"Additional details: {request.request_details or 'None'}"
    )


def build_prompt(
    request: ResearchRequest,
    existing_names: list[str],
    *,
    count: int = 1,
    name_sample: int = 30,
    min_exact_location: int = 5,
) -> str:
    """
    Build the research prompt for one restaurant (``count == 1``) or a batch.

    Only the first ``name_sample`` existing names are listed; the caller still
    has to drop duplicates the model returns anyway.
    """
    lat_lo, lat_hi = LAT_RANGE
    lng_hi, lng_lo = LNG_RANGE
    sample = ", ".join(existing_names[:name_sample])

    lines = [
        f"You are helping find gluten-free friendly restaurants in {REGION}.",
        "",
        _request_block(request),
        "",
    ]

    if count == 1:
        lines += [
            "Please research and find ONE real restaurant that matches this request. The restaurant must:",
        ]
    else:
        lines += [
            f"Please research and find exactly {count} real restaurants that match this request. Each restaurant must:",
        ]
    lines += [
        "1. Be a real, currently operating restaurant",
        "2. Have genuine gluten-free options",
        "3. Be in the Raleigh, Cary, Durham, or nearby NC area",
        "",
    ]

    if count > 1:
        lines += [
            f"At least {min_exact_location} of the {count} restaurants must be located exactly in "
            f'"{request.request_value}" if it names a place. Fill the rest from nearby locations: '
            f"{', '.join(FALLBACK_CITIES)}.",
            "",
        ]

    lines += [
        f"Already in our database (do NOT suggest these): {sample}",
        "",
    ]

    if count == 1:
        lines += [
            "Respond with ONLY a JSON object in this exact format (no markdown, no explanation):",
            RESTAURANT_SCHEMA,
        ]
    else:
        lines += [
            f"Respond with ONLY a JSON array of exactly {count} objects, each in this exact format "
            "(no markdown, no explanation):",
            RESTAURANT_SCHEMA,
        ]

    lines += [
        "",
        "Important:",
        f"- Use realistic coordinates for the NC Triangle area (lat ~{lat_lo}-{lat_hi}, lng ~{lng_hi} to {lng_lo})",
        "- Include 3-5 actual GF menu items with realistic prices",
        "- Be accurate about whether they're on DoorDash",
    ]
    if count == 1:
        lines.append(
            '- If you cannot find a suitable real restaurant, respond with: {"error": "No suitable restaurant found"}'
        )
    else:
        lines.append("- Every object must include at least \"name\" and \"city\"")

    return "\n".join(lines)
