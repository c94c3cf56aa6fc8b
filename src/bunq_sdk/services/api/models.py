# services/api/models.py
from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, Optional


class BunqModel(BaseModel):
    """Base for entities found in a ``Response`` envelope."""
    model_config = ConfigDict(extra="allow")


class Id(BunqModel):
    id: int


class Token(BunqModel):
    id: Optional[int] = None
    created: Optional[str] = None
    updated: Optional[str] = None
    token: str


class ServerPublicKey(BunqModel):
    server_public_key: str


class Amount(BunqModel):
    value: str
    currency: str

    def __str__(self) -> str:
        return f"{self.value} {self.currency}"


class User(BunqModel):
    id: int
    display_name: Optional[str] = None
    public_nick_name: Optional[str] = None
    status: Optional[str] = None


class UserCompany(User):
    name: Optional[str] = None


class UserPerson(User):
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserApiKey(User):
    pass


class MonetaryAccountBank(BunqModel):
    id: int
    description: Optional[str] = None
    currency: Optional[str] = None
    status: Optional[str] = None
    balance: Optional[Amount] = None


class CredentialPasswordIp(BunqModel):
    id: int
    status: Optional[str] = None
    permitted_device: Optional[Dict[str, Any]] = None


class DeviceServer(BunqModel):
    id: int
    description: Optional[str] = None
    ip: Optional[str] = None
    status: Optional[str] = None


class UnknownEntity(BunqModel):
    """Entity kind this SDK has no model for; the raw payload is kept."""
    kind: str
    payload: Dict[str, Any]


ENTITY_TYPES: Dict[str, type[BunqModel]] = {
    "Id": Id,
    "Token": Token,
    "ServerPublicKey": ServerPublicKey,
    "UserCompany": UserCompany,
    "UserPerson": UserPerson,
    "UserApiKey": UserApiKey,
    "MonetaryAccountBank": MonetaryAccountBank,
    "CredentialPasswordIp": CredentialPasswordIp,
    "DeviceServer": DeviceServer,
}

USER_TYPES = (UserCompany, UserPerson, UserApiKey)
