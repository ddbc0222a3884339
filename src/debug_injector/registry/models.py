from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import Column, DateTime, String, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.utcnow()


class Environment(Base):
    """Where a project's environment is deployed."""

    __tablename__ = "environments"
    __table_args__ = (UniqueConstraint("project_name", "env_name", name="uq_environments_project_env"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_name = Column(String(128), nullable=False, index=True)
    env_name = Column(String(128), nullable=False)

    cluster_id = Column(String(128), nullable=False, default="")
    namespace = Column(String(253), nullable=False)

    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "project_name": self.project_name,
            "env_name": self.env_name,
            "cluster_id": self.cluster_id,
            "namespace": self.namespace,
            "created_at": self.created_at.isoformat() + "Z" if self.created_at else None,
            "updated_at": self.updated_at.isoformat() + "Z" if self.updated_at else None,
        }
