from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PromptRequest(BaseModel):
    prompt: Optional[str] = Field(None, description="Text prompt forwarded to the model")


class GenerationResponse(BaseModel):
    output: str = Field(..., description="Text generated by the model")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human readable failure description")


class InlinePart(BaseModel):
    """Base64-encoded binary content sent alongside the prompt."""

    data: str = Field(..., description="Base64-encoded bytes")
    mime_type: str = Field(..., description="Content type of the decoded bytes")

    def to_wire(self) -> Dict[str, Any]:
        return {"inlineData": {"mimeType": self.mime_type, "data": self.data}}


class GenerationRequest(BaseModel):
    """A prompt plus at most one inline binary part."""

    prompt: str
    part: Optional[InlinePart] = None

    def to_parts(self) -> List[Dict[str, Any]]:
        parts: List[Dict[str, Any]] = [{"text": self.prompt}]
        if self.part is not None:
            parts.append(self.part.to_wire())
        return parts
