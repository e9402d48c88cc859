"""Pydantic schemas for database connection requests."""
from typing import Optional, Literal
from pydantic import BaseModel, Field


class ConnectionRequest(BaseModel):
    db_type: Literal["mysql", "sqlite", "postgresql"] = Field("mysql", description="Database engine type")
    database: str = Field(..., description="Database (schema) whose tables are generated")

    # SQLite only
    file_path: Optional[str] = Field(None, description="Absolute path to .db file (SQLite only)")

    # MySQL / PostgreSQL
    host: Optional[str] = Field(None, description="Database host")
    port: Optional[int] = Field(None, description="Database port (3306 / 5432 when omitted)")
    username: Optional[str] = Field(None, description="Username")
    password: Optional[str] = Field(None, description="Password")

    def get_sqlalchemy_url(self) -> str:
        if self.db_type == "sqlite":
            return f"sqlite:///{self.file_path}"
        if self.db_type == "postgresql":
            return (
                f"postgresql+psycopg2://{self.username}:{self.password}"
                f"@{self.host}:{self.port or 5432}/{self.database}"
            )
        return (
            f"mysql+pymysql://{self.username}:{self.password or ''}"
            f"@{self.host}:{self.port or 3306}/{self.database}"
        )
