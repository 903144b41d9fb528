from datetime import datetime
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..models import (
    Environment,
    Prompt,
    PromptTag,
    PromptVariable,
    PromptVersion,
    Publication,
    Tag,
)
from ..schemas.enums import SortField, SortOrder, VariableType

# Initialize logger
logger = logging.getLogger(__name__)


# Helper functions
def normalize_tag_name(name: str) -> str:
    return name.strip().lower()


def normalize_tag_names(names: Iterable[str]) -> List[str]:
    """Trim, lower-case and de-duplicate tag names, keeping first-seen order and dropping blanks"""
    seen: Dict[str, None] = {}
    for name in names or []:
        normalized = normalize_tag_name(str(name))
        if normalized:
            seen.setdefault(normalized, None)
    return list(seen)


# Prompts
def get_prompt(
    db: Session,
    prompt_id: str,
    include_deleted: bool = False,
    for_update: bool = False,
) -> Optional[Prompt]:
    """
    Get a prompt by ID.

    Soft-deleted prompts are only returned when include_deleted is set.
    With for_update the row is locked until the surrounding transaction ends.
    """
    query = db.query(Prompt).filter(Prompt.id == prompt_id)
    if not include_deleted:
        query = query.filter(Prompt.deleted_at.is_(None))
    if for_update:
        query = query.with_for_update()
    return query.first()


def search_prompts(
    db: Session,
    query: str = "",
    tag: Optional[str] = None,
    env: Optional[str] = None,
    sort: SortField = SortField.UPDATED_AT,
    order: SortOrder = SortOrder.DESC,
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[Prompt], int]:
    """
    Search live prompts with filters
    Returns: (list_of_prompts, total_count)
    """
    base_query = db.query(Prompt).filter(Prompt.deleted_at.is_(None))

    query = (query or "").strip()
    if query:
        search = f"%{query}%"
        base_query = base_query.filter(
            or_(
                Prompt.name.ilike(search),
                Prompt.description.ilike(search),
                Prompt.versions.any(PromptVersion.content.ilike(search)),
            )
        )

    if tag:
        base_query = base_query.filter(
            Prompt.tag_links.any(PromptTag.tag.has(Tag.name == normalize_tag_name(tag)))
        )

    if env:
        base_query = base_query.filter(
            Prompt.publications.any(Publication.environment.has(Environment.key == env))
        )

    total = base_query.count()

    column = Prompt.created_at if sort == SortField.CREATED_AT else Prompt.updated_at
    ordering = column.asc() if order == SortOrder.ASC else column.desc()

    prompts = (
        base_query.options(
            selectinload(Prompt.tag_links).selectinload(PromptTag.tag),
            selectinload(Prompt.publications).selectinload(Publication.environment),
        )
        .order_by(ordering, Prompt.id)
        .offset(skip)
        .limit(limit)
        .all()
    )

    return prompts, total


# Versions
def get_version(db: Session, prompt_id: str, version_id: str) -> Optional[PromptVersion]:
    """Get a version by ID, only if it belongs to the given prompt"""
    return db.query(PromptVersion).filter(
        PromptVersion.id == version_id,
        PromptVersion.prompt_id == prompt_id,
    ).first()


def get_versions(db: Session, prompt_id: str) -> List[PromptVersion]:
    """All versions of a prompt, newest first"""
    return (
        db.query(PromptVersion)
        .options(selectinload(PromptVersion.variables))
        .filter(PromptVersion.prompt_id == prompt_id)
        .order_by(PromptVersion.version.desc())
        .all()
    )


def get_max_version_number(db: Session, prompt_id: str) -> int:
    current = db.query(func.max(PromptVersion.version)).filter(
        PromptVersion.prompt_id == prompt_id
    ).scalar()
    return current or 0


def get_version_numbers(db: Session, prompt_id: str) -> Set[int]:
    rows = db.query(PromptVersion.version).filter(PromptVersion.prompt_id == prompt_id).all()
    return {row[0] for row in rows}


def add_version(
    db: Session,
    prompt: Prompt,
    number: int,
    content: str,
    created_by: str,
    variables: Sequence[Dict] = (),
    model_name: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    top_p: Optional[float] = None,
    notes: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> PromptVersion:
    """
    Stage a version row and its variable rows in the current transaction.

    Args:
        db: Database session
        prompt: Owning prompt
        number: Version number, already reserved by the caller
        variables: Dicts with name, type, required and default_value keys

    Returns:
        The pending version, flushed so its id is assigned
    """
    db_version = PromptVersion(
        prompt=prompt,
        version=number,
        content=content,
        model_name=model_name,
        temperature=temperature,
        max_tokens=max_tokens,
        top_p=top_p,
        notes=notes,
        created_by=created_by,
    )
    if created_at is not None:
        db_version.created_at = created_at

    for position, variable in enumerate(variables):
        db_version.variables.append(
            PromptVariable(
                position=position,
                name=variable["name"],
                type=VariableType(variable.get("type") or VariableType.STRING),
                required=bool(variable.get("required", False)),
                default_value=variable.get("default_value"),
            )
        )

    db.add(db_version)
    db.flush()
    return db_version


# Environments
def get_environment(db: Session, key: str) -> Optional[Environment]:
    return db.query(Environment).filter(Environment.key == key).first()


def get_environments(db: Session) -> List[Environment]:
    return db.query(Environment).order_by(Environment.id).all()


def ensure_environment(db: Session, key: str, name: str) -> Environment:
    """Find an environment by key, else create it. The display name is refreshed either way."""
    environment = get_environment(db, key)
    if environment is None:
        environment = Environment(key=key, name=name)
        db.add(environment)
        logger.info(f"Created environment '{key}'")
    else:
        environment.name = name
    db.flush()
    return environment


# Tags
def get_or_create_tag(db: Session, name: str) -> Tag:
    """
    Find a tag by its normalized name, else create it.

    The insert runs in a SAVEPOINT so a concurrent insert of the same name,
    rejected by the unique constraint, falls back to reading the winner's row.
    """
    tag = db.query(Tag).filter(Tag.name == name).first()
    if tag is not None:
        return tag

    try:
        with db.begin_nested():
            tag = Tag(name=name)
            db.add(tag)
            db.flush()
    except IntegrityError:
        logger.info(f"Tag '{name}' was created concurrently, reusing it")
        tag = db.query(Tag).filter(Tag.name == name).one()
    return tag


def replace_prompt_tags(db: Session, prompt: Prompt, names: Iterable[str]) -> List[str]:
    """Replace every tag association of the prompt with the given (normalized) set"""
    tag_names = normalize_tag_names(names)

    prompt.tag_links.clear()
    db.flush()

    for name in tag_names:
        prompt.tag_links.append(PromptTag(tag=get_or_create_tag(db, name)))
    db.flush()

    return tag_names


# Publications
def add_publication(
    db: Session,
    prompt: Prompt,
    environment: Environment,
    version: PromptVersion,
    published_by: str,
    notes: Optional[str] = None,
) -> Publication:
    publication = Publication(
        prompt=prompt,
        environment=environment,
        prompt_version=version,
        published_by=published_by,
        notes=notes,
    )
    db.add(publication)
    db.flush()
    return publication


def get_latest_publication(db: Session, prompt_id: str, environment_id: int) -> Optional[Publication]:
    """Most recent publication for (prompt, environment); equal timestamps resolve to the latest insert"""
    return (
        db.query(Publication)
        .filter(
            Publication.prompt_id == prompt_id,
            Publication.environment_id == environment_id,
        )
        .order_by(Publication.published_at.desc(), Publication.id.desc())
        .first()
    )


def get_publications(
    db: Session,
    prompt_id: str,
    environment_id: Optional[int] = None,
) -> List[Publication]:
    """Publish history for a prompt, newest first"""
    query = db.query(Publication).filter(Publication.prompt_id == prompt_id)
    if environment_id is not None:
        query = query.filter(Publication.environment_id == environment_id)
    return query.order_by(Publication.published_at.desc(), Publication.id.desc()).all()
