from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.logging_config import setup_logging
from app.routers import chatbot_webhook

setup_logging()

app = FastAPI(
    title="Chatbot Webhook API",
    description="Rule-based WhatsApp auto-responder for Evolution API instances",
    version="0.1.0",
)

cors_origins = [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
if not cors_origins:
    cors_origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chatbot_webhook.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
