import logging

from fastapi import FastAPI

from core.config import settings
from core.exceptions import register_exception_handlers
from core.tenant_context import TenantContextMiddleware
from modules.payroll.exceptions import PayrollException, handle_payroll_exception

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


def configure_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def create_app() -> FastAPI:
    """Assemble the HRMS application: tenant middleware and error handlers."""
    configure_logging()

    app = FastAPI(
        title="HRMS Backend",
        description="Multi-tenant HR and payroll services",
        version="1.0.0",
        debug=settings.debug,
    )

    app.add_middleware(TenantContextMiddleware)

    register_exception_handlers(app)
    app.add_exception_handler(PayrollException, handle_payroll_exception)

    logger.info("Application configured for %s environment", settings.environment)
    return app


app = create_app()
