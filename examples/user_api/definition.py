"""Operations exposed by the user service."""

from pydantic import BaseModel, EmailStr

from apicontract import define_api, define_catalog
from apicontract.transport import HttpMetadata


class User(BaseModel):
    id: int
    name: str
    email: EmailStr


class GetUserRequest(BaseModel):
    id: int


class CreateUserRequest(BaseModel):
    name: str
    email: EmailStr


api = define_api(HttpMetadata)

catalog = define_catalog(
    {
        "getUser": api.define_operation(
            request=GetUserRequest,
            response=User | None,
            metadata={"method": "POST", "path": "/user/getUser"},
        ),
        "createUser": api.define_operation(
            request=CreateUserRequest,
            response=User,
            metadata={"method": "POST", "path": "/user/createUser"},
        ),
    }
)
