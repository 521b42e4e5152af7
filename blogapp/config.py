import os
from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet

from dotenv import load_dotenv

load_dotenv()

DEFAULT_PROHIBITED_TERMS = "badword1,badword2,badword3"


def parse_terms(raw: str | None) -> FrozenSet[str]:
    """Split a comma separated term list into a lower-cased set."""
    if not raw:
        return frozenset()
    return frozenset(term.strip().lower() for term in raw.split(",") if term.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str
    page_size: int
    prohibited_terms: FrozenSet[str]
    upload_dir: str
    upload_url_prefix: str
    env: str

    @property
    def is_prod(self) -> bool:
        return self.env == "prod"


@lru_cache
def get_settings() -> Settings:
    page_size = int(os.getenv("PAGE_SIZE", "10"))
    if page_size < 1:
        page_size = 10

    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./blog.db"),
        page_size=page_size,
        prohibited_terms=parse_terms(os.getenv("PROHIBITED_TERMS", DEFAULT_PROHIBITED_TERMS)),
        upload_dir=os.getenv("UPLOAD_DIR", "./uploads"),
        upload_url_prefix=os.getenv("UPLOAD_URL_PREFIX", "/uploads").rstrip("/"),
        env=os.getenv("ENV", "dev"),
    )
