# healthcomm/router/routers.py

from fastapi import FastAPI
from healthcomm.modules.care_team.care_team_controller import router as care_team_router
from healthcomm.modules.invitations.invitations_controller import router as invitations_router
from healthcomm.modules.vitals.vitals_controller import router as vitals_router
from healthcomm.modules.alerts.alerts_controller import router as alerts_router
from healthcomm.modules.notifications.notifications_controller import router as notifications_router
from healthcomm.modules.audit.audit_controller import router as audit_router
from healthcomm.modules.reports.reports_controller import router as reports_router
from healthcomm.modules.profile.profile_controller import router as profile_router

def include_routers(app: FastAPI) -> None:
    """Include all API routers in the FastAPI application."""
    app.include_router(care_team_router)
    app.include_router(invitations_router)
    app.include_router(vitals_router)
    app.include_router(alerts_router)
    app.include_router(notifications_router)
    app.include_router(audit_router)
    app.include_router(reports_router)
    app.include_router(profile_router)
