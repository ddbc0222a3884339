"""Environment registry: (project, env) -> (cluster id, namespace)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from sqlalchemy.exc import SQLAlchemyError

from ..errors import EnvironmentLookupError
from ..models import EnvironmentLocation
from .repo import get_environment, init_db


class EnvironmentRegistry(ABC):
    @abstractmethod
    def lookup(self, project: str, env: str) -> EnvironmentLocation:
        """Resolve an environment.

        Raises:
            EnvironmentLookupError: If the environment is unknown or the
                registry cannot be queried
        """
        ...


class SqlEnvironmentRegistry(EnvironmentRegistry):
    """Registry backed by the `environments` table."""

    def __init__(self, database_url: str, *, create_tables: bool = True) -> None:
        self._database_url = database_url
        if create_tables:
            init_db(database_url)

    @property
    def database_url(self) -> str:
        return self._database_url

    def lookup(self, project: str, env: str) -> EnvironmentLocation:
        try:
            row = get_environment(self._database_url, project, env)
        except SQLAlchemyError as exc:
            raise EnvironmentLookupError(project, env, str(exc)) from exc

        if row is None:
            raise EnvironmentLookupError(project, env, "not found")
        if not row["namespace"]:
            raise EnvironmentLookupError(project, env, "environment has no namespace")
        return EnvironmentLocation(cluster_id=row["cluster_id"] or "", namespace=row["namespace"])


__all__ = ["EnvironmentRegistry", "SqlEnvironmentRegistry"]
