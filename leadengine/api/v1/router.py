from fastapi import APIRouter
from leadengine.api.v1.endpoints import leads, linkedin, meta, social_inbound, tiktok, web_form, worker

api_router = APIRouter()
api_router.include_router(social_inbound.router, prefix="/webhooks", tags=["webhooks"])
api_router.include_router(meta.router, prefix="/webhooks", tags=["webhooks"])
api_router.include_router(tiktok.router, prefix="/webhooks", tags=["webhooks"])
api_router.include_router(web_form.router, prefix="/webhooks", tags=["webhooks"])
api_router.include_router(worker.router, prefix="/worker", tags=["worker"])
api_router.include_router(linkedin.router, prefix="/linkedin", tags=["linkedin"])
api_router.include_router(leads.router, prefix="/leads", tags=["leads"])
