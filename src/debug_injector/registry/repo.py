from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import select

from .db import get_engine, get_sessionmaker
from .models import Base, Environment


def init_db(database_url: str) -> None:
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)


def _find(session: Any, project_name: str, env_name: str) -> Optional[Environment]:
    q = (
        select(Environment)
        .where(Environment.project_name == project_name)
        .where(Environment.env_name == env_name)
    )
    return session.execute(q).scalars().first()


def get_environment(database_url: str, project_name: str, env_name: str) -> Optional[Dict[str, Any]]:
    sm = get_sessionmaker(database_url)
    with sm() as s:
        env = _find(s, project_name, env_name)
        return env.to_dict() if env else None


def upsert_environment(
    database_url: str,
    *,
    project_name: str,
    env_name: str,
    namespace: str,
    cluster_id: str = "",
) -> Dict[str, Any]:
    sm = get_sessionmaker(database_url)
    with sm() as s:
        env = _find(s, project_name, env_name)
        if env is None:
            env = Environment(project_name=project_name, env_name=env_name)
            s.add(env)

        env.cluster_id = str(cluster_id or "")
        env.namespace = str(namespace)
        s.commit()
        return env.to_dict()
