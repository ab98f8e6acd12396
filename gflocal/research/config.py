from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from ..store.data_store import default_dataset_path

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class ResearchRequest:
    request_type: str = "cuisine"
    request_value: str = ""
    request_details: str = ""

    @classmethod
    def from_env(cls) -> "ResearchRequest":
        return cls(
            request_type=os.getenv("REQUEST_TYPE", "").strip() or "cuisine",
            request_value=os.getenv("REQUEST_VALUE", "").strip(),
            request_details=os.getenv("REQUEST_DETAILS", "").strip(),
        )


@dataclass(frozen=True)
class ResearchConfig:
    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    single_max_tokens: int = 1024
    batch_max_tokens: int = 8192
    single_name_sample: int = 30
    batch_name_sample: int = 50
    batch_size: int = 10
    min_exact_location: int = 5
    dataset_path: Path = field(default_factory=default_dataset_path)

    def max_tokens_for(self, count: int) -> int:
        return self.single_max_tokens if count == 1 else self.batch_max_tokens

    def name_sample_for(self, count: int) -> int:
        return self.single_name_sample if count == 1 else self.batch_name_sample


DEFAULT_RESEARCH_CONFIG = ResearchConfig()
