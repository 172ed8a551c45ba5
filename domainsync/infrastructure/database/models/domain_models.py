"""SQLAlchemy ORM models for the registrar domain cache."""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from domainsync.infrastructure.database.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DomainModel(Base):
    """ORM model — maps to the 'sw_domains' table."""

    __tablename__ = "sw_domains"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    domain_name: Mapped[str] = mapped_column(String(253), nullable=False, unique=True)
    domain_roid: Mapped[str | None] = mapped_column(String(100), nullable=True)
    registry_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    domain_status: Mapped[str | None] = mapped_column(String(255), nullable=True)
    lifecycle_status: Mapped[str] = mapped_column(String(30), nullable=False, default="active")
    domain_expiry: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    domain_registered: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    registration_period_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    registrant: Mapped[str | None] = mapped_column(String(255), nullable=True)
    domain_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    nameservers: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    ds_data: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    dns_config_type: Mapped[int | None] = mapped_column(Integer, nullable=True)
    categories: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    dns_management_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_forwarding_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    id_protection_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    auto_renew: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    do_not_renew: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    bulk_in_progress: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    icann_verification_date_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    icann_status: Mapped[str | None] = mapped_column(String(100), nullable=True)
    contacts: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    raw_response: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_synced: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    customer_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    glue_records: Mapped[list["GlueRecordModel"]] = relationship(
        back_populates="domain",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="GlueRecordModel.hostname",
    )
    metadata_entries: Mapped[list["DomainMetadataModel"]] = relationship(
        back_populates="domain",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="DomainMetadataModel.key",
    )

    __table_args__ = (
        Index("ix_sw_domains_lifecycle", "lifecycle_status"),
        Index("ix_sw_domains_expiry", "domain_expiry"),
        Index("ix_sw_domains_customer", "customer_id"),
    )

    def __repr__(self) -> str:
        return f"<DomainModel(id={self.id}, name='{self.domain_name}', lifecycle='{self.lifecycle_status}')>"


class GlueRecordModel(Base):
    """ORM model — maps to the 'glue_records' table."""

    __tablename__ = "glue_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sw_domain_id: Mapped[int] = mapped_column(
        ForeignKey("sw_domains.id", ondelete="CASCADE"), nullable=False, index=True
    )
    hostname: Mapped[str] = mapped_column(String(253), nullable=False)
    ip_addresses: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_synced: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_stale: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sync_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    domain: Mapped[DomainModel] = relationship(back_populates="glue_records")

    __table_args__ = (
        UniqueConstraint("sw_domain_id", "hostname", name="uq_glue_records_domain_host"),
    )


class DomainMetadataModel(Base):
    """ORM model — maps to the 'domain_metadata' table (operator key/value pairs)."""

    __tablename__ = "domain_metadata"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sw_domain_id: Mapped[int] = mapped_column(
        ForeignKey("sw_domains.id", ondelete="CASCADE"), nullable=False, index=True
    )
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)

    domain: Mapped[DomainModel] = relationship(back_populates="metadata_entries")

    __table_args__ = (
        UniqueConstraint("sw_domain_id", "key", name="uq_domain_metadata_domain_key"),
    )
