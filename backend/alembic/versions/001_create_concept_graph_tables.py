"""Create concept graph and term review tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

SCOPE_DIMENSIONS = ["team", "product", "region", "process", "role"]


def _scope_columns() -> list[sa.Column]:
    return [sa.Column(dim, sa.String(128), nullable=True) for dim in SCOPE_DIMENSIONS]


def _validity_columns() -> list[sa.Column]:
    return [
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("valid_to", sa.DateTime(timezone=True), nullable=True),
    ]


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("defined_by", sa.String(255), nullable=True),
        sa.Column("approved_by", sa.String(255), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "concepts",
        *_base_columns(),
        sa.Column("key", sa.String(128), nullable=False),
        sa.Column("label", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="draft"),
        sa.Column("criticality", sa.String(32), nullable=False, server_default="normal"),
        *_audit_columns(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_concepts_key", "concepts", ["key"], unique=True)
    op.create_index("ix_concepts_status", "concepts", ["status"])

    op.create_table(
        "concept_aliases",
        *_base_columns(),
        sa.Column(
            "concept_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("concepts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("alias", sa.String(256), nullable=False),
        sa.Column("alias_normalized", sa.String(256), nullable=False),
        sa.Column("language", sa.String(16), nullable=False, server_default="cs"),
        sa.Column("status", sa.String(32), nullable=False, server_default="active"),
        sa.Column("confidence", sa.Float(), nullable=False, server_default="1.0"),
        *_audit_columns(),
        *_scope_columns(),
        *_validity_columns(),
    )
    op.create_index("ix_concept_aliases_concept_id", "concept_aliases", ["concept_id"])
    op.create_index("ix_concept_aliases_lookup", "concept_aliases", ["alias_normalized", "status"])
    op.create_index("ix_concept_aliases_validity", "concept_aliases", ["valid_from", "valid_to"])
    op.create_index(
        "uq_concept_aliases_scope",
        "concept_aliases",
        ["concept_id", "alias_normalized", *SCOPE_DIMENSIONS],
        unique=True,
        postgresql_nulls_not_distinct=True,
    )

    op.create_table(
        "concept_definition_versions",
        *_base_columns(),
        sa.Column(
            "concept_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("concepts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("definition", sa.Text(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="draft"),
        sa.Column("confidence", sa.Float(), nullable=False, server_default="0.7"),
        sa.Column("source_of_truth_doc_id", sa.String(255), nullable=True),
        *_audit_columns(),
        *_scope_columns(),
        *_validity_columns(),
    )
    op.create_index(
        "ix_concept_definition_versions_concept_id", "concept_definition_versions", ["concept_id"]
    )
    op.create_index("ix_concept_definition_versions_status", "concept_definition_versions", ["status"])
    op.create_index(
        "uq_concept_definition_version",
        "concept_definition_versions",
        ["concept_id", "version"],
        unique=True,
    )
    op.create_index(
        "ix_concept_definition_validity", "concept_definition_versions", ["valid_from", "valid_to"]
    )

    op.create_table(
        "concept_relationships",
        *_base_columns(),
        sa.Column(
            "from_concept_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("concepts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "to_concept_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("concepts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("relation_type", sa.String(32), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False, server_default="1.0"),
        sa.Column("status", sa.String(32), nullable=False, server_default="draft"),
        sa.Column("confidence", sa.Float(), nullable=False, server_default="0.7"),
        *_audit_columns(),
        *_scope_columns(),
        *_validity_columns(),
    )
    op.create_index("ix_concept_relationships_from_concept_id", "concept_relationships", ["from_concept_id"])
    op.create_index("ix_concept_relationships_to_concept_id", "concept_relationships", ["to_concept_id"])
    op.create_index("ix_concept_relationships_status", "concept_relationships", ["status"])
    op.create_index(
        "ix_concept_relationship_validity", "concept_relationships", ["valid_from", "valid_to"]
    )
    op.create_index(
        "uq_concept_relationships_scope",
        "concept_relationships",
        ["from_concept_id", "to_concept_id", "relation_type", *SCOPE_DIMENSIONS],
        unique=True,
        postgresql_nulls_not_distinct=True,
    )

    op.create_table(
        "concept_evidence",
        *_base_columns(),
        sa.Column(
            "concept_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("concepts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "definition_version_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("concept_definition_versions.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "alias_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("concept_aliases.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("document_id", sa.String(255), nullable=True),
        sa.Column("source_type", sa.String(64), nullable=False, server_default="document"),
        sa.Column("source_url", sa.String(2048), nullable=True),
        sa.Column("excerpt", sa.Text(), nullable=False),
        sa.Column("author", sa.String(256), nullable=True),
        *_scope_columns(),
    )
    op.create_index("ix_concept_evidence_concept_id", "concept_evidence", ["concept_id"])
    op.create_index(
        "ix_concept_evidence_definition_version_id", "concept_evidence", ["definition_version_id"]
    )
    op.create_index("ix_concept_evidence_document_id", "concept_evidence", ["document_id"])

    op.create_table(
        "term_candidates",
        *_base_columns(),
        sa.Column("term_original", sa.String(256), nullable=False),
        sa.Column("term_normalized", sa.String(256), nullable=False),
        sa.Column("contexts", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("frequency", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("source_type", sa.String(64), nullable=False, server_default="document"),
        sa.Column("document_id", sa.String(255), nullable=True),
        sa.Column("author", sa.String(256), nullable=True),
        sa.Column("candidate_concept_key", sa.String(128), nullable=True),
        sa.Column("suggested_definition", sa.Text(), nullable=True),
        sa.Column("confidence", sa.Float(), nullable=False, server_default="0.3"),
        sa.Column("status", sa.String(32), nullable=False, server_default="pending"),
        sa.Column("detected_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(255), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_scope_columns(),
    )
    op.create_index("ix_term_candidates_term_normalized", "term_candidates", ["term_normalized"])
    op.create_index("ix_term_candidates_status", "term_candidates", ["status"])
    op.create_index(
        "uq_term_candidates_term_document",
        "term_candidates",
        ["term_normalized", "document_id"],
        unique=True,
    )

    op.create_table(
        "definition_reviews",
        *_base_columns(),
        sa.Column(
            "candidate_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("term_candidates.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "concept_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("concepts.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "definition_version_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("concept_definition_versions.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("reviewer_id", sa.String(255), nullable=True),
        sa.Column("decision", sa.String(32), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_definition_reviews_candidate_id", "definition_reviews", ["candidate_id"])
    op.create_index("ix_definition_reviews_concept_id", "definition_reviews", ["concept_id"])


def downgrade() -> None:
    op.drop_table("definition_reviews")
    op.drop_table("term_candidates")
    op.drop_table("concept_evidence")
    op.drop_table("concept_relationships")
    op.drop_table("concept_definition_versions")
    op.drop_table("concept_aliases")
    op.drop_table("concepts")
