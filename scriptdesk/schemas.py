from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field


class SchemaGeneration(str, Enum):
    TITLED = "titled"
    UNTITLED = "untitled"

    @property
    def has_title(self) -> bool:
        return self is SchemaGeneration.TITLED


class SearchScope(str, Enum):
    ALL = "all"
    TITLE = "title"


# --- Requests ---
# Text fields stay optional: a missing english/japanese text is rejected by
# the repository, not by the request parser.

class ScriptFields(BaseModel):
    title: Optional[str] = None
    english_text: Optional[str] = None
    japanese_text: Optional[str] = None


class SearchRequest(BaseModel):
    query: Optional[str] = None
    scope: Optional[SearchScope] = SearchScope.ALL


class ExportRequest(BaseModel):
    title: Optional[str] = None
    english_text: Optional[str] = Field(default=None, alias="englishText")
    japanese_text: Optional[str] = Field(default=None, alias="japaneseText")
    file_path: Optional[str] = Field(default=None, alias="filePath")

    class Config:
        populate_by_name = True


class ImportRequest(BaseModel):
    english_path: Optional[str] = Field(default=None, alias="englishPath")
    japanese_path: Optional[str] = Field(default=None, alias="japanesePath")

    class Config:
        populate_by_name = True


# --- Stored records ---

class _ScriptBase(BaseModel):
    id: int
    english_text: str
    japanese_text: str

    class Config:
        from_attributes = True


class UntitledScript(_ScriptBase):
    generation: Literal["untitled"] = "untitled"


class TitledScript(_ScriptBase):
    generation: Literal["titled"] = "titled"
    title: str


Script = Annotated[Union[TitledScript, UntitledScript], Field(discriminator="generation")]


# --- Export / import outcomes ---

class ExportOutcome(BaseModel):
    success: bool
    file_path: Optional[str] = Field(default=None, alias="filePath")
    cancelled: Optional[bool] = None
    error: Optional[str] = None

    class Config:
        populate_by_name = True

    @classmethod
    def ok(cls, file_path: str) -> "ExportOutcome":
        return cls(success=True, file_path=file_path)

    @classmethod
    def declined(cls) -> "ExportOutcome":
        return cls(success=False, cancelled=True)

    @classmethod
    def failure(cls, message: str) -> "ExportOutcome":
        return cls(success=False, error=message)


class ImportOutcome(BaseModel):
    success: bool
    id: Optional[int] = None
    english_text: Optional[str] = Field(default=None, alias="englishText")
    japanese_text: Optional[str] = Field(default=None, alias="japaneseText")
    cancelled: Optional[bool] = None
    error: Optional[str] = None

    class Config:
        populate_by_name = True

    @classmethod
    def ok(cls, script_id: int, english_text: str, japanese_text: str) -> "ImportOutcome":
        return cls(success=True, id=script_id, english_text=english_text, japanese_text=japanese_text)

    @classmethod
    def declined(cls) -> "ImportOutcome":
        return cls(success=False, cancelled=True)

    @classmethod
    def failure(cls, message: str) -> "ImportOutcome":
        return cls(success=False, error=message)
