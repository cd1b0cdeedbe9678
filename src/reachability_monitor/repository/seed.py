"""
Default applications probed by the scheduler.

Seeding is idempotent: applications are upserted by name, and endpoints are
only inserted for an application that has none yet, so edits made to the
endpoints of a default application survive restarts.
"""

import logging
from typing import List, NamedTuple, Optional, Tuple

from asyncpg import Pool

from reachability_monitor.domain import AppCategory, EndpointKind

# Module logger
logger = logging.getLogger(__name__)

UPSERT_APPLICATION_SQL = """
    INSERT INTO applications (name, description, category, is_default)
    VALUES ($1, $2, $3, TRUE)
    ON CONFLICT (name) DO UPDATE
        SET description = EXCLUDED.description,
            category    = EXCLUDED.category,
            is_default  = TRUE
    RETURNING id;
"""

COUNT_ENDPOINTS_SQL = "SELECT COUNT(*) FROM application_endpoints WHERE application_id = $1"

INSERT_ENDPOINT_SQL = """
    INSERT INTO application_endpoints (application_id, label, url, kind, method, notes)
    VALUES ($1, $2, $3, $4, $5, $6);
"""


class DefaultEndpoint(NamedTuple):
    label: str
    url: str
    kind: EndpointKind
    method: Optional[str] = None
    notes: Optional[str] = None


class DefaultApplication(NamedTuple):
    name: str
    description: str
    category: AppCategory
    endpoints: Tuple[DefaultEndpoint, ...]


DEFAULT_APPLICATIONS: List[DefaultApplication] = [
    DefaultApplication(
        name="Dropbox",
        description="Consumer cloud storage",
        category=AppCategory.CLOUD_STORAGE,
        endpoints=(
            DefaultEndpoint("Web", "https://dropbox.com", EndpointKind.WEB),
            DefaultEndpoint(
                "API v2",
                "https://api.dropboxapi.com/2/files/list_folder",
                EndpointKind.API,
                method="POST",
                notes="list_folder API call",
            ),
        ),
    ),
    DefaultApplication(
        name="Google Drive",
        description="Google Workspace storage",
        category=AppCategory.CLOUD_STORAGE,
        endpoints=(
            DefaultEndpoint("Web", "https://drive.google.com", EndpointKind.WEB),
            DefaultEndpoint(
                "Drive API", "https://www.googleapis.com/drive/v3/files", EndpointKind.API, "GET"
            ),
        ),
    ),
    DefaultApplication(
        name="WeTransfer",
        description="Large file transfer",
        category=AppCategory.FILE_TRANSFER,
        endpoints=(
            DefaultEndpoint("Web", "https://wetransfer.com", EndpointKind.WEB),
            DefaultEndpoint("Assets CDN", "https://cdn.wetransfer.net", EndpointKind.FILE),
        ),
    ),
    DefaultApplication(
        name="Twitter",
        description="Social network / X",
        category=AppCategory.SOCIAL_MEDIA,
        endpoints=(
            DefaultEndpoint("Web", "https://twitter.com", EndpointKind.WEB),
            DefaultEndpoint("API v2", "https://api.twitter.com/2/tweets", EndpointKind.API, "GET"),
        ),
    ),
    DefaultApplication(
        name="Salesforce",
        description="SaaS CRM",
        category=AppCategory.SAAS,
        endpoints=(
            DefaultEndpoint("Login", "https://login.salesforce.com", EndpointKind.WEB),
            DefaultEndpoint(
                "REST API",
                "https://your-domain.salesforce.com/services/data/v59.0",
                EndpointKind.API,
                "GET",
            ),
        ),
    ),
]


async def ensure_default_applications(
    pool: Pool, applications: Optional[List[DefaultApplication]] = None
) -> None:
    """
    Upsert the default applications and give each one its endpoints.

    Args:
        pool: The asyncpg connection pool.
        applications: Applications to seed. Defaults to DEFAULT_APPLICATIONS.
    """
    applications = DEFAULT_APPLICATIONS if applications is None else applications

    async with pool.acquire() as conn:
        async with conn.transaction():
            for application in applications:
                application_id = await conn.fetchval(
                    UPSERT_APPLICATION_SQL,
                    application.name,
                    application.description,
                    application.category.value,
                )
                endpoint_count = await conn.fetchval(COUNT_ENDPOINTS_SQL, application_id)
                if endpoint_count or not application.endpoints:
                    continue

                await conn.executemany(
                    INSERT_ENDPOINT_SQL,
                    [
                        (
                            application_id,
                            endpoint.label,
                            endpoint.url,
                            endpoint.kind.value,
                            endpoint.method,
                            endpoint.notes,
                        )
                        for endpoint in application.endpoints
                    ],
                )
                logger.info(
                    f"Seeded {len(application.endpoints)} endpoints for application '{application.name}'."
                )

    logger.info(f"{len(applications)} default applications are in place.")
