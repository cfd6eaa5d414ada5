"""Tool response envelope."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


class ToolContent(BaseModel):
    type: Literal["text"] = "text"
    text: str

    model_config = ConfigDict(extra="forbid")


class ToolResponse(BaseModel):
    content: List[ToolContent] = Field(default_factory=list)
    is_error: bool = Field(default=False, serialization_alias="isError")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @classmethod
    def text(cls, text: str, *, is_error: bool = False) -> "ToolResponse":
        return cls(content=[ToolContent(text=text)], is_error=is_error)

    @classmethod
    def error(cls, text: str) -> "ToolResponse":
        return cls.text(text, is_error=True)

    @property
    def joined_text(self) -> str:
        return "\n\n".join(item.text for item in self.content)


__all__ = ["ToolContent", "ToolResponse"]
