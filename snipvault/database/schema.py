from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class SnippetRow(Base):
    __tablename__ = "snippets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime, nullable=False)
    expiry_date = Column(DateTime, nullable=True)  # non-null = in recycle bin
    is_public = Column(Boolean, nullable=False, default=False)
    is_pinned = Column(Boolean, nullable=False, default=False)
    is_favorite = Column(Boolean, nullable=False, default=False)

    fragments = relationship(
        "FragmentRow",
        back_populates="snippet",
        cascade="all, delete-orphan",
        order_by="FragmentRow.position",
    )
    categories = relationship(
        "CategoryRow",
        back_populates="snippet",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_snippets_user_expiry", "user_id", "expiry_date"),
        Index("idx_snippets_user_favorite", "user_id", "is_favorite"),
        Index("idx_snippets_user_pinned", "user_id", "is_pinned"),
        Index("idx_snippets_user_updated", "user_id", "updated_at"),
    )


class FragmentRow(Base):
    __tablename__ = "fragments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    snippet_id = Column(Integer, ForeignKey("snippets.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String, nullable=False, default="")
    code = Column(Text, nullable=False, default="")
    language = Column(String, nullable=False, default="", index=True)
    position = Column(Integer, nullable=False, default=0)

    snippet = relationship("SnippetRow", back_populates="fragments")


class CategoryRow(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    snippet_id = Column(Integer, ForeignKey("snippets.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False, index=True)  # always lower-case

    snippet = relationship("SnippetRow", back_populates="categories")


def create_all(engine) -> None:
    Base.metadata.create_all(engine)
