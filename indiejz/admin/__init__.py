"""Área admin: jogos, cupons, relatório de vendas e fila de e-mails, tudo sob /admin."""
from fastapi import APIRouter, Depends

from indiejz.admin.deps import require_admin
from indiejz.admin.routers import coupons, games, notifications, reports

admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

admin_router.include_router(games.router, prefix="/games", tags=["admin-games"])
admin_router.include_router(coupons.router, prefix="/coupons", tags=["admin-coupons"])
admin_router.include_router(reports.router, prefix="/reports", tags=["admin-reports"])
admin_router.include_router(notifications.router, prefix="/notifications", tags=["admin-notifications"])
