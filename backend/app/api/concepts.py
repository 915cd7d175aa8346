"""Concept store administration API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, status

from app.api.deps import SyncDbSession
from app.schemas.concept import (
    AliasCreate,
    Concept,
    ConceptAlias,
    ConceptCreate,
    ConceptDefinitionVersion,
    ConceptRelationship,
    DefinitionCreate,
    RelationshipCreate,
)
from app.services.concept_store import (
    ConceptAlreadyExistsError,
    ConceptNotFoundError,
    ConceptStoreService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/concepts", tags=["Concepts"])


def _not_found(e: ConceptNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "",
    response_model=Concept,
    status_code=status.HTTP_201_CREATED,
    summary="Create a concept",
)
def create_concept(data: ConceptCreate, db: SyncDbSession) -> Concept:
    store = ConceptStoreService(db)
    try:
        concept = store.create_concept(data)
    except ConceptAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    db.commit()
    return Concept.model_validate(store.require_concept(concept.key))


@router.get(
    "/{key}",
    response_model=Concept,
    summary="Get a concept with its aliases and definition history",
)
def get_concept(key: str, db: SyncDbSession) -> Concept:
    concept = ConceptStoreService(db).get_concept_by_key(key)
    if concept is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Concept {key.upper()} not found",
        )
    return Concept.model_validate(concept)


@router.post(
    "/{key}/aliases",
    response_model=ConceptAlias,
    status_code=status.HTTP_201_CREATED,
    summary="Attach an alias to a concept",
)
def add_alias(key: str, data: AliasCreate, db: SyncDbSession) -> ConceptAlias:
    try:
        alias = ConceptStoreService(db).add_alias(key, data)
    except ConceptNotFoundError as e:
        raise _not_found(e) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    db.commit()
    return ConceptAlias.model_validate(alias)


@router.post(
    "/{key}/definitions",
    response_model=ConceptDefinitionVersion,
    status_code=status.HTTP_201_CREATED,
    summary="Add the next definition version to a concept",
)
def add_definition(key: str, data: DefinitionCreate, db: SyncDbSession) -> ConceptDefinitionVersion:
    try:
        definition = ConceptStoreService(db).add_definition_version(key, data)
    except ConceptNotFoundError as e:
        raise _not_found(e) from e
    db.commit()
    return ConceptDefinitionVersion.model_validate(definition)


@router.post(
    "/relationships",
    response_model=ConceptRelationship,
    status_code=status.HTTP_201_CREATED,
    summary="Create a directed relationship between two concepts",
)
def add_relationship(data: RelationshipCreate, db: SyncDbSession) -> ConceptRelationship:
    try:
        relationship = ConceptStoreService(db).add_relationship(data)
    except ConceptNotFoundError as e:
        raise _not_found(e) from e
    db.commit()
    return ConceptRelationship.model_validate(relationship)
