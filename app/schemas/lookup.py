from pydantic import BaseModel, ConfigDict, Field


class ExtractedPhoneNumbers(BaseModel):
    """Shape the extraction model is instructed to reply with."""

    phone_numbers: list[str]


class PhoneLookupRequest(BaseModel):
    query: str


class PhoneLookupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone_numbers: list[str] = Field(default_factory=list, alias="phoneNumbers")
    source: str = ""
