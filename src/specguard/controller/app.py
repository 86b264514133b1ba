"""FastAPI application factory for the specguard controller."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from specguard.config.bootstrap import load_bootstrap_config
from specguard.db.engine import create_engine, create_session_factory, init_db
from specguard.models.config import BootstrapConfig
from specguard.storage.spec_store import SqlSpecStore
from specguard.verification.factory import build_verifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage the DB engine, plan store and verifier across app lifecycle."""
    cfg: BootstrapConfig = getattr(app.state, "config", None) or load_bootstrap_config()

    engine = create_engine(cfg.database_url)
    await init_db(engine)
    session_factory = create_session_factory(engine)
    store = SqlSpecStore(session_factory)

    app.state.config = cfg
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.store = store
    app.state.verifier = build_verifier(cfg, store)
    logger.info("Controller ready (repo=%s, db=%s)", cfg.repo_dir, engine.url.render_as_string())

    yield

    await engine.dispose()


def create_app(config: BootstrapConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``config`` overrides the environment-derived configuration.
    """
    app = FastAPI(
        title="specguard",
        description="Plan storage and change verification",
        version="0.1.0",
        lifespan=lifespan,
    )
    if config is not None:
        app.state.config = config

    from specguard.controller.routes.health import router as health_router
    from specguard.controller.routes.plans import router as plans_router
    from specguard.controller.routes.audit import router as audit_router
    from specguard.controller.routes.config import router as config_router

    app.include_router(health_router)
    app.include_router(plans_router, prefix="/api")
    app.include_router(audit_router, prefix="/api")
    app.include_router(config_router, prefix="/api")

    return app


def main() -> None:
    """Run the controller with uvicorn."""
    import uvicorn

    cfg = load_bootstrap_config()
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    uvicorn.run(create_app(cfg), host=cfg.controller_host, port=cfg.controller_port)


if __name__ == "__main__":
    main()
