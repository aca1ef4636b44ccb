from pydantic import BaseModel, Field


class OUCreate(BaseModel):
    distinguished_name: str = Field(
        ..., min_length=1, description="Distinguished Name of the new OU"
    )
    create_parents: bool = Field(
        False, description="Create missing ancestor OUs below the search base"
    )


class OUResponse(BaseModel):
    distinguished_name: str = Field(..., description="Distinguished Name")
    ou: str = Field(..., description="OU Name")
