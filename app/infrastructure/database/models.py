import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "user"

    id = Column(String(36), primary_key=True, default=_new_id)
    username = Column(String, nullable=False, unique=True, index=True)  # stored lower-cased
    create_time = Column(DateTime(timezone=True), default=_now)


class Collection(Base):
    __tablename__ = "collection"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    user_id = Column(String(36), ForeignKey("user.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # per-user creation sequence, 1-based
    create_time = Column(DateTime(timezone=True), default=_now)

    frames = relationship(
        "Frame",
        back_populates="collection",
        order_by=lambda: [Frame.create_time, Frame.id],
        cascade="all, delete-orphan",
    )


class Frame(Base):
    __tablename__ = "frame"

    id = Column(String(36), primary_key=True, default=_new_id)
    collection_id = Column(String(36), ForeignKey("collection.id"), nullable=False, index=True)
    x = Column(Integer, nullable=False, default=0)
    y = Column(Integer, nullable=False, default=0)
    width = Column(Integer, nullable=False, default=1)
    height = Column(Integer, nullable=False, default=1)
    title = Column(String)
    url = Column(String)  # content reference shown inside the frame
    create_time = Column(DateTime(timezone=True), default=_now)

    collection = relationship("Collection", back_populates="frames")
