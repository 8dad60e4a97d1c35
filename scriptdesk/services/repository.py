import logging
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel
from sqlalchemy import Integer, Text, delete, func, insert, or_, select, update

from scriptdesk.database import StorageEngine
from scriptdesk.errors import ValidationFailure
from scriptdesk.models import Script
from scriptdesk.schemas import SchemaGeneration, SearchScope, TitledScript, UntitledScript

logger = logging.getLogger(__name__)

_REQUIRED_TEXT = ("english_text", "japanese_text")

Fields = Union[Mapping[str, Any], BaseModel]


class ScriptRepository:
    """
    All reads and writes of the scripts table.

    Each public method issues exactly one statement. ``update`` and ``delete``
    report the number of rows they touched; an unknown id gives 0, not an error.
    """

    def __init__(self, storage: StorageEngine, case_sensitive: bool = True):
        if storage.generation is None:
            raise RuntimeError("StorageEngine must be opened before building a repository")
        self.storage = storage
        self.generation: SchemaGeneration = storage.generation
        self.case_sensitive = case_sensitive

        if self.generation.has_title:
            self._columns = [Script.id, Script.title, Script.english_text, Script.japanese_text]
            self._searchable = [Script.title, Script.english_text, Script.japanese_text]
            self._variant = TitledScript
        else:
            self._columns = [Script.id, Script.english_text, Script.japanese_text]
            self._searchable = [Script.english_text, Script.japanese_text]
            self._variant = UntitledScript

    async def create(self, fields: Fields) -> int:
        values = self._values(fields)
        outcome = await self.storage.execute(insert(Script).values(**values))
        logger.info(f"Inserted script {outcome.inserted_id}")
        return outcome.inserted_id

    async def get_all(self) -> list:
        rows = await self.storage.query(select(*self._columns))
        return [self._to_script(row) for row in rows]

    async def search(self, term: Optional[str], scope: Union[SearchScope, str, None] = SearchScope.ALL) -> list:
        if scope is None:
            scope = SearchScope.ALL
        try:
            scope = SearchScope(scope)
        except ValueError:
            raise ValidationFailure(f"unknown search scope: {scope!r}") from None

        if not term:
            return await self.get_all()

        if scope is SearchScope.TITLE:
            if not self.generation.has_title:
                raise ValidationFailure("title search is not available: scripts have no title column")
            condition = self._contains(Script.title, term)
        else:
            condition = or_(*(self._contains(column, term) for column in self._searchable))

        rows = await self.storage.query(select(*self._columns).where(condition))
        return [self._to_script(row) for row in rows]

    async def update(self, script_id: int, fields: Fields) -> int:
        _check_id(script_id)
        values = self._values(fields)
        outcome = await self.storage.execute(
            update(Script).where(Script.id == script_id).values(**values)
        )
        logger.info(f"Updated script {script_id} ({outcome.rows_affected} row(s))")
        return outcome.rows_affected

    async def delete(self, script_id: int) -> int:
        _check_id(script_id)
        outcome = await self.storage.execute(delete(Script).where(Script.id == script_id))
        logger.info(f"Deleted script {script_id} ({outcome.rows_affected} row(s))")
        return outcome.rows_affected

    # ── Internal helpers ──────────────────────────────────────────────────

    def _values(self, fields: Fields) -> dict:
        if isinstance(fields, BaseModel):
            fields = fields.model_dump()

        missing = [name for name in _REQUIRED_TEXT if fields.get(name) is None]
        if missing:
            raise ValidationFailure(f"missing required field(s): {', '.join(missing)}")
        for name in _REQUIRED_TEXT:
            if not isinstance(fields[name], str):
                raise ValidationFailure(f"{name} must be text")

        values = {name: fields[name] for name in _REQUIRED_TEXT}
        title = fields.get("title")
        if self.generation.has_title:
            if title is not None and not isinstance(title, str):
                raise ValidationFailure("title must be text")
            values["title"] = title or ""
        elif title:
            logger.debug("Ignoring title: scripts table has no title column")
        return values

    def _contains(self, column, term: str):
        if self.case_sensitive:
            # instr(): literal, case-sensitive match (no LIKE wildcards)
            return func.instr(column, term, type_=Integer) > 0
        # lower() on both sides so column and term fold the same way
        return func.instr(func.lower(column, type_=Text), func.lower(term, type_=Text), type_=Integer) > 0

    def _to_script(self, row: Mapping[str, Any]):
        # Legacy rows may hold NULL text
        data = {name: (value if value is not None else "") for name, value in row.items()}
        return self._variant(**data)


def _check_id(script_id) -> None:
    if isinstance(script_id, bool) or not isinstance(script_id, int):
        raise ValidationFailure(f"script id must be an integer, got {script_id!r}")
