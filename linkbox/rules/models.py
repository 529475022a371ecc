from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class StorageRules(BaseModel):
    key: str = "linkbox-store"
    data_dir: str = "./data"
    data_dir_env: str = "LINKBOX_DATA_DIR"
    seed_on_missing: bool = True

class MailRules(BaseModel):
    alias_domain: str = "archinvestorservices.com"
    ops_display_name: str = "Arch"
    fallback_firm_email: str = "admin@example.com"
    default_subject: str = "Investor Request for Portal Access"
    preview_length: int = Field(default=100, ge=1)
    alias_token_length: int = Field(default=5, ge=1)

class ConversationRules(BaseModel):
    id_token_length: int = Field(default=8, ge=1)
    message_overrides_closed: bool = True
    enforce_client_affinity: bool = False

class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)
    log_level: str = "INFO"

class Rules(BaseModel):
    project: ProjectRules
    storage: StorageRules = Field(default_factory=StorageRules)
    mail: MailRules = Field(default_factory=MailRules)
    conversations: ConversationRules = Field(default_factory=ConversationRules)
    ops: OpsRules = Field(default_factory=OpsRules)
