"""Document storage for modules, guirlande settings and projects.

Two backends share the same `Collection` interface: an in-memory store (tests,
ephemeral deployments) and a JSON file store that keeps one file per
collection under the configured data directory.
"""

import asyncio
import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

import pydantic

from ..common.exceptions import NotFoundError, ValidationError
from .config import StorageConfig
from .documents import (
    Document,
    GuirlandeDocument,
    ModuleDocument,
    ProjectDocument,
    utcnow,
)

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=Document)


def translate_validation_error(error: pydantic.ValidationError) -> ValidationError:
    """Convert a pydantic error into a field error list"""
    return ValidationError(
        [
            {
                "error": "invalid_request",
                "error_description": err["msg"],
                "field": ".".join(str(part) for part in err["loc"]),
            }
            for err in error.errors()
        ]
    )


class Collection(ABC, Generic[D]):
    """A named set of documents of one model type"""

    def __init__(self, name: str, model: Type[D]):
        self.name = name
        self.model = model

    @abstractmethod
    async def find_all(self) -> List[D]:
        pass

    @abstractmethod
    async def find_by_id(self, doc_id: str) -> Optional[D]:
        pass

    @abstractmethod
    async def find_one(self, **filters: Any) -> Optional[D]:
        pass

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> D:
        pass

    @abstractmethod
    async def save(self, doc: D) -> D:
        """Persist changes to an existing document.

        Raises NotFoundError when the document was deleted in the meantime.
        """
        pass

    @abstractmethod
    async def delete_by_id(self, doc_id: str) -> bool:
        """Delete a document, returning False when it did not exist"""
        pass

    @abstractmethod
    async def count(self) -> int:
        pass

    def _build(self, data: Dict[str, Any]) -> D:
        try:
            return self.model(**data)
        except pydantic.ValidationError as e:
            raise translate_validation_error(e)

    def _revalidate(self, doc: D) -> D:
        try:
            return self.model.model_validate(doc.model_dump())
        except pydantic.ValidationError as e:
            raise translate_validation_error(e)

    @staticmethod
    def _matches(doc: Document, filters: Dict[str, Any]) -> bool:
        return all(getattr(doc, key, None) == value for key, value in filters.items())


class MemoryCollection(Collection[D]):
    """Collection kept in process memory.

    Documents are copied in and out so callers only see changes they save.
    """

    def __init__(self, name: str, model: Type[D]):
        super().__init__(name, model)
        self._docs: Dict[str, D] = {}

    async def find_all(self) -> List[D]:
        return [doc.model_copy(deep=True) for doc in self._docs.values()]

    async def find_by_id(self, doc_id: str) -> Optional[D]:
        doc = self._docs.get(doc_id)
        return doc.model_copy(deep=True) if doc is not None else None

    async def find_one(self, **filters: Any) -> Optional[D]:
        for doc in self._docs.values():
            if self._matches(doc, filters):
                return doc.model_copy(deep=True)
        return None

    async def create(self, data: Dict[str, Any]) -> D:
        doc = self._build(data)
        doc.id = uuid.uuid4().hex
        self._docs[doc.id] = doc.model_copy(deep=True)
        await self._changed()
        logger.debug(f"Created {self.name} document {doc.id}")
        return doc

    async def save(self, doc: D) -> D:
        if doc.id is None:
            raise ValueError(f"Cannot save unsaved {self.name} document")
        if doc.id not in self._docs:
            raise NotFoundError(f"{self.name} document {doc.id} no longer exists")
        validated = self._revalidate(doc)
        doc.updated_at = validated.updated_at = utcnow()
        self._docs[doc.id] = validated
        await self._changed()
        return doc

    async def delete_by_id(self, doc_id: str) -> bool:
        existed = self._docs.pop(doc_id, None) is not None
        if existed:
            await self._changed()
            logger.debug(f"Deleted {self.name} document {doc_id}")
        return existed

    async def count(self) -> int:
        return len(self._docs)

    async def _changed(self) -> None:
        """Hook called after every write"""
        pass


class JsonFileCollection(MemoryCollection[D]):
    """Memory collection mirrored to `<data_dir>/<name>.json`"""

    def __init__(self, name: str, model: Type[D], data_dir: Path):
        super().__init__(name, model)
        self.path = data_dir / f"{name}.json"
        self._write_lock = asyncio.Lock()
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        with open(self.path, "r", encoding="utf-8") as f:
            records = json.load(f)
        for record in records:
            doc = self._build(record)
            self._docs[doc.id] = doc
        logger.info(f"Loaded {len(self._docs)} {self.name} documents from {self.path}")

    async def _changed(self) -> None:
        records = [doc.model_dump(mode="json") for doc in self._docs.values()]
        async with self._write_lock:
            await asyncio.to_thread(self._write, records)

    def _write(self, records: List[Dict[str, Any]]) -> None:
        tmp_path = self.path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2)
        os.replace(tmp_path, self.path)


class DocumentStore:
    """Collections used by the server"""

    def __init__(
        self,
        modules: Collection[ModuleDocument],
        guirlande: Collection[GuirlandeDocument],
        projects: Collection[ProjectDocument],
    ):
        self.modules = modules
        self.guirlande = guirlande
        self.projects = projects

    @classmethod
    def in_memory(cls) -> "DocumentStore":
        return cls(
            MemoryCollection("modules", ModuleDocument),
            MemoryCollection("guirlande", GuirlandeDocument),
            MemoryCollection("projects", ProjectDocument),
        )

    @classmethod
    def json_files(cls, data_dir: Path) -> "DocumentStore":
        data_dir.mkdir(parents=True, exist_ok=True)
        return cls(
            JsonFileCollection("modules", ModuleDocument, data_dir),
            JsonFileCollection("guirlande", GuirlandeDocument, data_dir),
            JsonFileCollection("projects", ProjectDocument, data_dir),
        )

    @classmethod
    def from_config(cls, config: StorageConfig) -> "DocumentStore":
        if config.backend == "json":
            logger.info(f"Using JSON document storage in {config.data_dir}")
            return cls.json_files(Path(config.data_dir))
        logger.info("Using in-memory document storage")
        return cls.in_memory()
