# umrah_core/models.py
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field, model_validator

# Ritual modes used in rounds.json and the progress sets rounds feed
RITUAL_MODES = ("umrah", "nafil")
PROGRESS_KINDS = ("tawaf", "sai", "nafil_tawaf")


class Citation(BaseModel):
    type: Optional[str] = None    # "quran", "hadith", "athar" or "general"


class DuaEntry(BaseModel):
    id: str = ""
    category: List[str] = Field(default_factory=list)
    type: str = "full"            # "full", "short", "info" or "excerpt"
    arabic: str = ""
    transliteration: str = ""
    translation: str = ""         # may carry an inline source citation
    source: str = ""
    ref_url: Optional[str] = None
    citation: Optional[Citation] = None
    tags: List[str] = Field(default_factory=list)
    label: Optional[str] = None   # e.g. marks a high-value dua


class ThemeDuas(BaseModel):
    required: List[str] = Field(default_factory=list)
    pool: List[str] = Field(default_factory=list)
    count: int = 0


class Theme(BaseModel):
    id: str = ""
    title: str = ""
    description: str = ""
    suggestions: List[str] = Field(default_factory=list)
    duas: ThemeDuas = Field(default_factory=ThemeDuas)
    tags: List[str] = Field(default_factory=list)


class Round(BaseModel):
    kind: str
    mode: str
    number: int
    theme: str

    @property
    def key(self) -> str:
        return round_key(self.kind, self.mode, self.number)


# kind -> mode -> rounds, in document order
RoundTable = Dict[str, Dict[str, List[Round]]]


class ContentTables(BaseModel):
    duas: Dict[str, DuaEntry] = Field(default_factory=dict)
    themes: Dict[str, Theme] = Field(default_factory=dict)
    rounds: RoundTable = Field(default_factory=dict)

    def find_round(self, kind: str, mode: str, number: int) -> Optional[Round]:
        for entry in self.rounds.get(kind, {}).get(mode, []):
            if entry.number == number:
                return entry
        return None


class UserConfig(BaseModel):
    ritual_type: str = "umrah"            # "umrah" or "nafil"
    theme_mode: str = "default"           # "default" or "custom"
    custom_themes: Dict[str, str] = Field(default_factory=dict)  # round key -> theme id
    randomize: bool = True


class Progress(BaseModel):
    tawaf: Set[int] = Field(default_factory=set)
    sai: Set[int] = Field(default_factory=set)
    nafil_tawaf: Set[int] = Field(default_factory=set)


class UserState(BaseModel):
    config: UserConfig = Field(default_factory=UserConfig)
    progress: Progress = Field(default_factory=Progress)
    selected_duas: Dict[str, List[str]] = Field(default_factory=dict)


class Violation(BaseModel):
    path: str           # JSON pointer into the document, "/" for the root
    message: str


class WriteResult(BaseModel):
    ok: bool
    violations: List[Violation] = Field(default_factory=list)


class IntegrityWarning(BaseModel):
    source: str         # e.g. "themes/tawaf-1/duas/pool"
    target: str         # table the reference points into: "duas" or "themes"
    missing_id: str
    message: str = ""

    @model_validator(mode="after")
    def _default_message(self):
        if not self.message:
            self.message = f"{self.source} references unknown {self.target} id '{self.missing_id}'"
        return self


def round_key(kind: str, mode: str, number: int) -> str:
    """Cache/override key for one numbered round, e.g. 'tawaf-umrah-3'."""
    return f"{kind}-{mode}-{number}"


def progress_kind(kind: str, mode: str) -> str:
    """Progress set a (kind, mode) round counts towards."""
    if kind == "tawaf" and mode == "nafil":
        return "nafil_tawaf"
    return kind
