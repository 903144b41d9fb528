from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..schemas.enums import PromptStatus, VariableType
from .base import Base, new_id, utcnow


class Prompt(Base):
    __tablename__ = "prompts"

    id = Column(String(64), primary_key=True, default=new_id)
    name = Column(String, index=True, nullable=False)
    description = Column(Text, nullable=True)
    owner_team = Column(String, nullable=True)
    status = Column(Enum(PromptStatus, name="prompt_status"), default=PromptStatus.ACTIVE, nullable=False)
    deleted_at = Column(DateTime, nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    versions = relationship(
        "PromptVersion",
        back_populates="prompt",
        order_by="PromptVersion.version",
        cascade="all, delete-orphan",
    )
    tag_links = relationship("PromptTag", back_populates="prompt", cascade="all, delete-orphan")
    publications = relationship(
        "Publication",
        back_populates="prompt",
        order_by="Publication.id",
        cascade="all, delete-orphan",
    )

    @property
    def tag_names(self):
        return sorted(link.tag.name for link in self.tag_links)

    def __repr__(self) -> str:
        return f"<Prompt(id='{self.id}', name='{self.name}')>"


class PromptVersion(Base):
    """Immutable snapshot of a prompt's template and generation parameters."""
    __tablename__ = "prompt_versions"

    id = Column(String(64), primary_key=True, default=new_id)
    prompt_id = Column(String(64), ForeignKey("prompts.id", ondelete="CASCADE"), nullable=False, index=True)
    version = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    model_name = Column(String, nullable=True)
    temperature = Column(Float, nullable=True)
    max_tokens = Column(Integer, nullable=True)
    top_p = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    prompt = relationship("Prompt", back_populates="versions")
    variables = relationship(
        "PromptVariable",
        back_populates="prompt_version",
        order_by="PromptVariable.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("prompt_id", "version", name="uq_prompt_versions_prompt_version"),
    )

    def __repr__(self) -> str:
        return f"<PromptVersion(prompt_id='{self.prompt_id}', version={self.version})>"


class PromptVariable(Base):
    __tablename__ = "prompt_variables"

    id = Column(Integer, primary_key=True, autoincrement=True)
    prompt_version_id = Column(
        String(64), ForeignKey("prompt_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False, default=0)
    name = Column(String, nullable=False)
    type = Column(Enum(VariableType, name="variable_type"), default=VariableType.STRING, nullable=False)
    required = Column(Boolean, default=False, nullable=False)
    default_value = Column(Text, nullable=True)

    prompt_version = relationship("PromptVersion", back_populates="variables")

    __table_args__ = (
        UniqueConstraint("prompt_version_id", "name", name="uq_prompt_variables_version_name"),
    )


class Environment(Base):
    __tablename__ = "environments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)


class Publication(Base):
    """Append-only record that a version was released to an environment.

    The autoincrement id doubles as the insertion order used to break ties
    between publications sharing a timestamp.
    """
    __tablename__ = "prompt_publications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    prompt_id = Column(String(64), ForeignKey("prompts.id", ondelete="CASCADE"), nullable=False, index=True)
    environment_id = Column(Integer, ForeignKey("environments.id"), nullable=False, index=True)
    prompt_version_id = Column(String(64), ForeignKey("prompt_versions.id"), nullable=False)
    published_by = Column(String, nullable=False)
    published_at = Column(DateTime, default=utcnow, nullable=False)
    notes = Column(Text, nullable=True)

    prompt = relationship("Prompt", back_populates="publications")
    environment = relationship("Environment")
    prompt_version = relationship("PromptVersion")


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, unique=True, nullable=False)


class PromptTag(Base):
    __tablename__ = "prompt_tags"

    prompt_id = Column(String(64), ForeignKey("prompts.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)

    prompt = relationship("Prompt", back_populates="tag_links")
    tag = relationship("Tag")
