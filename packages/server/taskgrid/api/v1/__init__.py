"""
API v1 Router
"""

from fastapi import APIRouter
from . import access, members, organizations, projects, setup, workspaces

router = APIRouter()

router.include_router(setup.router, prefix="/setup", tags=["Setup"])
router.include_router(access.router, prefix="/access", tags=["Access"])
router.include_router(organizations.router, prefix="/orgs", tags=["Organizations"])
router.include_router(workspaces.router, prefix="/workspaces", tags=["Workspaces"])
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(members.router, prefix="/members", tags=["Members"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/setup",
            "/access/{kind}/{entityId}",
            "/orgs",
            "/orgs/{orgId}/workspaces",
            "/orgs/{orgId}/tasks",
            "/workspaces/{workspaceId}/projects",
            "/projects/{projectId}/tasks",
            "/members/{level}/{entityId}",
        ],
    }
