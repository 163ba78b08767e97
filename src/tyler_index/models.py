# SPDX-License-Identifier: MIT
"""Pydantic models for entries of the Typst package index."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class IndexTemplate(BaseModel):
    """Template metadata of a published template package."""

    model_config = ConfigDict(extra="allow", frozen=True)

    path: Optional[str] = None
    entrypoint: Optional[str] = None
    thumbnail: Optional[str] = None


class IndexPackage(BaseModel):
    """One published version of a package as listed in ``index.json``.

    Fields the index adds over time are kept rather than rejected.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    name: str
    version: str
    entrypoint: Optional[str] = None
    authors: list[str] = Field(default_factory=list)
    license: Optional[str] = None
    description: Optional[str] = None
    repository: Optional[str] = None
    homepage: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    disciplines: list[str] = Field(default_factory=list)
    compiler: Optional[str] = None
    exclude: list[str] = Field(default_factory=list)
    template: Optional[IndexTemplate] = None

    @property
    def extras(self) -> dict[str, Any]:
        return dict(self.model_extra or {})
