"""Session credentials."""

from pydantic import BaseModel, ConfigDict


class SavedTokens(BaseModel):
    """Tokens for resuming an authenticated session."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str
    user_id: str
    is_premium_user: bool = False

    def to_json(self) -> str:
        """Serialize the tokens for storage."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, raw: str | bytes) -> "SavedTokens":
        """Load tokens previously produced by ``to_json``."""
        return cls.model_validate_json(raw)
