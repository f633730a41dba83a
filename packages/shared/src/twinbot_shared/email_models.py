"""Email models: IMAP messages and mailbox metadata fetched through the backend."""

from pydantic import BaseModel, ConfigDict, Field

from twinbot_shared.models import ApiResult


class EmailCredentials(BaseModel):
    """IMAP connection overrides. Omitted fields are filled in server-side
    from the user's saved email configuration and OAuth grant."""

    host: str | None = None
    port: int | None = None
    secure: bool | None = None
    user: str | None = None
    password: str | None = None
    provider: str | None = None


class FetchOptions(BaseModel):
    limit: int = 20
    mailbox: str = "INBOX"
    unseen: bool = False


class EmailAttachment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    filename: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")
    size: int = 0


class EmailMessage(BaseModel):
    """A parsed message. ``id`` is the IMAP UID inside its mailbox."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int | None = None
    message_id: str | None = Field(default=None, alias="messageId")
    subject: str | None = None
    from_address: str | None = Field(default=None, alias="from")
    to_address: str | None = Field(default=None, alias="to")
    date: str | None = None
    received_date: str | None = Field(default=None, alias="receivedDate")
    text: str | None = None
    html: str | bool | None = None
    attachments: list[EmailAttachment] = []
    flags: list[str] = []


class Mailbox(BaseModel):
    name: str
    path: str = ""
    children: list["Mailbox"] = []


class EmailsResult(ApiResult):
    emails: list[EmailMessage] = []


class MailboxesResult(ApiResult):
    mailboxes: list[Mailbox] = []


class MailboxStats(ApiResult):
    total: int = 0
    unseen: int = 0


class EmailConfigResult(ApiResult):
    """Returned by EmailService.config."""

    configured: bool = False
    has_valid_tokens: bool = False
    use_oauth: bool = False
    config: dict = {}  # type: ignore[type-arg]
