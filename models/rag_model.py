"""
Request and response models for the generateContent endpoint
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ModelRequest(BaseModel):
    system_instruction: str
    user_question: str

    model_config = {"frozen": True}

    def to_payload(self) -> Dict[str, Any]:
        """Render the JSON body expected by the model endpoint."""
        return {
            "contents": [{"parts": [{"text": self.user_question}]}],
            "systemInstruction": {"parts": [{"text": self.system_instruction}]},
        }


class ModelResponse(BaseModel):
    answer_text: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not self.answer_text

    @classmethod
    def from_payload(cls, body: Dict[str, Any]) -> "ModelResponse":
        """Pull candidates[0].content.parts[0].text out of a response body.

        Any missing step yields an empty response rather than an error.
        """
        try:
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return cls(answer_text=None)
        if not isinstance(text, str) or not text:
            return cls(answer_text=None)
        return cls(answer_text=text)
