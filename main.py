from fastapi import FastAPI
from infra.log_config import setup_logging
from apns_push.adapters.driver.controllers.push_controller import router as push_router

def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="APNs Push Service")
    app.include_router(push_router, tags=["push"])
    return app

app = create_app()
