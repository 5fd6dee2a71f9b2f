from enum import Enum
from pydantic import BaseModel

class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"

class Notice(BaseModel):
    """Transient, dismissible message shown to the operator"""
    level: NoticeLevel
    text: str

    @classmethod
    def success(cls, text: str) -> "Notice":
        return cls(level=NoticeLevel.SUCCESS, text=text)

    @classmethod
    def error(cls, text: str) -> "Notice":
        return cls(level=NoticeLevel.ERROR, text=text)

    @property
    def is_error(self) -> bool:
        return self.level == NoticeLevel.ERROR
