import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, delete, select

from chatrelay.exceptions import StorageError
from chatrelay.models import Message, Role

logger = logging.getLogger(__name__)


class HistoryStore:
    """Append-only, globally ordered log of chat messages.

    Every operation runs in its own session and commits a single statement,
    so concurrent requests rely on the database for atomicity.
    """

    def __init__(self, engine):
        self.engine = engine

    def append(self, role, content):
        """Insert one message and return it with its id and timestamp set."""
        if isinstance(role, Role):
            role = role.value
        msg = Message(role=role, content=content)
        try:
            with Session(self.engine) as session:
                session.add(msg)
                session.commit()
                session.refresh(msg)
        except SQLAlchemyError as e:
            logger.error(f"Failed to append {role} message: {e}")
            raise StorageError("Failed to save message") from e
        logger.info(f"Message stored: id={msg.id} role={msg.role}")
        return msg

    def list_all(self):
        try:
            with Session(self.engine) as session:
                return list(session.exec(
                    select(Message).order_by(Message.timestamp, Message.id)
                ).all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to read history: {e}")
            raise StorageError("Failed to fetch chat history") from e

    def clear_all(self):
        """Delete every message. Returns the number of rows removed."""
        try:
            with Session(self.engine) as session:
                result = session.execute(delete(Message))
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to clear history: {e}")
            raise StorageError("Failed to clear history") from e
        logger.info(f"History cleared: {result.rowcount} messages deleted")
        return result.rowcount

    def count(self):
        try:
            with Session(self.engine) as session:
                return session.exec(select(func.count()).select_from(Message)).one()
        except SQLAlchemyError as e:
            logger.error(f"Failed to count messages: {e}")
            raise StorageError("Failed to count messages") from e
