from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class IntakeConfig:
    github_token: str = ""
    github_repo: str = ""  # "owner/repo"
    github_api_url: str = "https://api.github.com"
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "IntakeConfig":
        return cls(
            github_token=os.getenv("GITHUB_TOKEN", ""),
            github_repo=os.getenv("GITHUB_REPO", ""),
            github_api_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.github_token and self.github_repo)

    @property
    def dispatch_url(self) -> str:
        return f"{self.github_api_url.rstrip('/')}/repos/{self.github_repo}/dispatches"
