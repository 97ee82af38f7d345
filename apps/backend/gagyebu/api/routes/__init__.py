"""Router aggregation: one APIRouter per resource, all mounted under ``/api``."""

from fastapi import FastAPI

from . import auth, budgets, categories, daily_balance, health, holidays, savings, stats, transactions

_ROUTERS = (
    health.router,
    auth.router,
    categories.router,
    budgets.router,
    transactions.router,
    stats.router,
    savings.router,
    daily_balance.router,
    holidays.router,
)


def register_routers(app: FastAPI, prefix: str = "/api") -> None:
    """Attach all API routes to the FastAPI application."""
    for router in _ROUTERS:
        app.include_router(router, prefix=prefix)
