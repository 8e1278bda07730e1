from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: str
    content: str


class ChatRequest(BaseModel):
    messages: list[ChatMessage]
    model: str | None = None


class ChoiceMessage(BaseModel):
    role: str = "assistant"
    # 空の応答は失敗扱い（履歴に追加しない）
    content: str = Field(..., min_length=1)


class Choice(BaseModel):
    message: ChoiceMessage


class Usage(BaseModel):
    prompt_tokens: int = Field(0, ge=0)
    completion_tokens: int = Field(0, ge=0)


class ChatResponse(BaseModel):
    choices: list[Choice] = Field(..., min_length=1)
    usage: Usage | None = None
