from dataclasses import dataclass
from typing import Optional


@dataclass
class AppConfig:
    name: str
    secret_key: str
    default_locale: str


@dataclass
class DatabaseConfig:
    uri: str
    host: str
    port: Optional[int]
    name: str
    user: Optional[str]
    password: Optional[str]
