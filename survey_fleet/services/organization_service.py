"""Organizations (tenant context) and their survey sites."""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from survey_fleet.domain.constraints import NoFlyZone, Site
from survey_fleet.domain.organization import Organization, OrganizationSettings
from survey_fleet.errors import NotFoundError, PersistenceError, ValidationError
from survey_fleet.persistence.repositories import OrganizationRepository, SiteRepository

logger = logging.getLogger(__name__)


class OrganizationService:
    """Resolves the explicit organization context and manages sites."""

    def __init__(self, db: Session):
        self.db = db
        self.organizations = OrganizationRepository(db)
        self.sites = SiteRepository(db)

    def create_organization(self, name: str, settings: Optional[dict] = None) -> Organization:
        organization = Organization(name=name, settings=OrganizationSettings.from_dict(settings))
        try:
            return self.organizations.create(organization)
        except SQLAlchemyError as e:
            logger.exception("Error creating organization")
            raise PersistenceError("Failed to create organization") from e

    def list_organizations(self) -> List[Organization]:
        try:
            return self.organizations.list_all()
        except SQLAlchemyError:
            logger.exception("Error fetching organizations")
            return []

    def resolve(self, organization_id: Optional[str]) -> Organization:
        """Look up the organization every tenant-scoped operation runs under.

        Raises:
            ValidationError: no organization id given
            NotFoundError: unknown organization id
        """
        if not organization_id:
            raise ValidationError("Organization context is required (X-Organization-ID or ORGANIZATION_ID)")
        organization = self.organizations.get(organization_id)
        if organization is None:
            raise NotFoundError(f"Organization {organization_id} not found")
        return organization

    def create_site(self, organization_id: str, data: dict) -> Site:
        site = Site(
            name=data.get("name", ""),
            organization_id=organization_id,
            location=dict(data.get("location") or {}),
            boundaries=list(data.get("boundaries") or []),
            no_fly_zones=[NoFlyZone.from_dict(z) for z in data.get("no_fly_zones") or []],
        )
        try:
            self.sites.create(site)
        except SQLAlchemyError as e:
            logger.exception("Error adding site")
            raise PersistenceError("Failed to add site") from e
        logger.info("Site %s (%s) added", site.id, site.name)
        return site

    def list_sites(self, organization_id: str) -> List[Site]:
        try:
            return self.sites.list_all(organization_id)
        except SQLAlchemyError:
            logger.exception("Error fetching sites")
            return []

    def get_site(self, site_id: str, organization_id: str) -> Site:
        site = self.sites.get(site_id)
        if site is None or site.organization_id != organization_id:
            raise NotFoundError(f"Site {site_id} not found")
        return site
