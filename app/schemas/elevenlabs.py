from pydantic import BaseModel


class AgentPromptOverride(BaseModel):
    prompt: str | None = None


class AgentOverride(BaseModel):
    prompt: AgentPromptOverride | None = None
    first_message: str | None = None
    language: str | None = None


class ConversationConfigOverride(BaseModel):
    agent: AgentOverride | None = None


class ConversationInitiationClientData(BaseModel):
    conversation_config_override: ConversationConfigOverride | None = None
    dynamic_variables: dict = {}


class BatchCallRecipient(BaseModel):
    phone_number: str
    conversation_initiation_client_data: ConversationInitiationClientData | None = None


class BatchCallRequest(BaseModel):
    call_name: str
    agent_id: str
    agent_phone_number_id: str
    recipients: list[BatchCallRecipient]
    scheduled_time_unix: int | None = None


class BatchCallResponse(BaseModel):
    id: str
    name: str | None = None
    agent_id: str | None = None
    status: str | None = None
    created_at_unix: int | None = None
    scheduled_time_unix: int | None = None
    total_calls_dispatched: int = 0
    total_calls_scheduled: int = 0


class ConversationTranscriptEntry(BaseModel):
    role: str | None = None  # "agent" | "user"
    message: str | None = ""


class ConversationAnalysis(BaseModel):
    call_successful: str | None = None  # "success" | "failure" | "unknown"
    transcript_summary: str | None = ""
    data_collection_results: dict = {}


class PostCallTranscriptionData(BaseModel):
    agent_id: str | None = None
    conversation_id: str | None = None
    status: str | None = None
    transcript: list[ConversationTranscriptEntry] = []
    analysis: ConversationAnalysis | None = None
    metadata: dict | None = None
    conversation_initiation_client_data: ConversationInitiationClientData | None = None


class WebhookEvent(BaseModel):
    type: str
    event_timestamp: int | None = None
    data: dict = {}
