"""Custom SQLAlchemy types and identifier helpers shared by the models"""
from sqlalchemy import TypeDecorator, String
import secrets
import string
import uuid


def generate_uuid():
    """Generate a UUID string"""
    return str(uuid.uuid4())


def generate_reference(prefix: str, length: int = 6) -> str:
    """Human-facing reference such as TRK4G7Q2Z or RCP0A9X1B"""
    alphabet = string.ascii_uppercase + string.digits
    return prefix + "".join(secrets.choice(alphabet) for _ in range(length))


class GUID(TypeDecorator):
    """Platform-independent GUID type that stores UUIDs as VARCHAR(36)"""
    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return str(value)
        return value
