"""Schemas describing the closed vocabularies served to clients."""

from pydantic import BaseModel, ConfigDict


class MoodOptionResponse(BaseModel):
    id: str
    label: str
    description: str

    model_config = ConfigDict(from_attributes=True)


class ReactionOptionResponse(BaseModel):
    id: str
    label: str
    emoji: str

    model_config = ConfigDict(from_attributes=True)


class ChallengeResponse(BaseModel):
    id: str
    prompt: str
    date: str


class VocabularyResponse(BaseModel):
    moods: list[MoodOptionResponse]
    reactions: list[ReactionOptionResponse]
    challenge: ChallengeResponse
    max_text_length: int
    daily_post_limit: int
